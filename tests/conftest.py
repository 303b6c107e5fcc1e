# tests/conftest.py
from __future__ import annotations

import os
import sys
import tempfile

import pytest

# --- Пути: корень репо (calstore) и Django-проект (webapp) ---
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))  # корень репо
WEBAPP_DIR = os.path.join(REPO_ROOT, "webapp")
for p in (REPO_ROOT, WEBAPP_DIR):
    if p not in sys.path:
        sys.path.insert(0, p)

# Хранилище, которое соберёт CalendarappConfig.ready(): CSV во временной папке,
# чтобы django.setup() не трогал реальные файлы/БД разработчика.
_BOOT_DIR = tempfile.mkdtemp(prefix="calendar-tests-")
os.environ["CALENDAR_BACKEND"] = "csv"
os.environ["CALENDAR_CSV_PATH"] = os.path.join(_BOOT_DIR, "events.csv")
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "webapp.settings")

import django  # noqa: E402
django.setup()  # noqa: E402

from django.apps import apps  # noqa: E402
from django.contrib.auth.hashers import make_password  # noqa: E402

from calstore import EventDraft  # noqa: E402
from calstore.csv_store import CsvEventStore  # noqa: E402
from calstore.sqlite_store import SqliteEventStore  # noqa: E402

ADMIN_PASSWORD = "ChangeMe123!"
PG_DSN_ENV = "CALENDAR_TEST_PG_DSN"


# --- Хранилища ---

def _postgres_store():
    dsn = os.environ.get(PG_DSN_ENV)
    if not dsn:
        pytest.skip(f"{PG_DSN_ENV} не задан — PostgreSQL-тесты пропущены")
    from calstore.pg_store import PostgresEventStore, get_connection

    store = PostgresEventStore({"dsn": dsn})
    store.init_schema()
    conn = get_connection({"dsn": dsn})
    try:
        with conn.cursor() as cur:
            cur.execute("TRUNCATE events RESTART IDENTITY;")
    finally:
        conn.close()
    return store


@pytest.fixture
def sqlite_store(tmp_path) -> SqliteEventStore:
    store = SqliteEventStore(str(tmp_path / "calendar.sqlite3"))
    store.init_schema()
    return store


@pytest.fixture
def csv_store(tmp_path) -> CsvEventStore:
    store = CsvEventStore(str(tmp_path / "events.csv"))
    store.init_schema()
    return store


@pytest.fixture(params=["sqlite", "csv", "postgres"])
def store(request, tmp_path):
    """Одно и то же поведение контракта для каждого бэкенда."""
    if request.param == "sqlite":
        return request.getfixturevalue("sqlite_store")
    if request.param == "csv":
        return request.getfixturevalue("csv_store")
    return _postgres_store()


@pytest.fixture
def make_draft():
    """
    Фабрика черновиков событий.
    """
    def _create(
        title: str = "Test",
        date: str = "2025-03-14",
        description: str = "",
        start_time: str = "",
        end_time: str = "",
        all_day: bool = False,
    ) -> EventDraft:
        return EventDraft(
            title=title,
            date=date,
            description=description,
            start_time=start_time,
            end_time=end_time,
            all_day=all_day,
        )
    return _create


# --- Django: хранилище приложения и админ-клиент ---

@pytest.fixture
def app_store(csv_store, monkeypatch):
    """Подменить хранилище приложения на чистый CSV-файл теста."""
    monkeypatch.setattr(apps.get_app_config("calendarapp"), "store", csv_store)
    return csv_store


@pytest.fixture
def admin_settings(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
    settings.CALENDAR_ADMIN_PASSWORD_HASH = make_password(ADMIN_PASSWORD)
    return settings


@pytest.fixture
def admin_client(client, admin_settings, app_store):
    resp = client.post("/login/", {"password": ADMIN_PASSWORD})
    assert resp.status_code == 302
    return client


@pytest.fixture
def form_token(admin_client) -> str:
    """Токен формы, выданный сессии администратора при открытии страницы."""
    resp = admin_client.get("/")
    return resp.context["csrf"]
