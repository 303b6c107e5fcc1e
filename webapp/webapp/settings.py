"""
settings.py
============

Глобальные настройки Django-проекта **Family Calendar**.

Назначение:
- определяет конфигурацию Django (middleware, приложения, шаблоны, логи);
- задаёт выбор хранилища событий (CALENDAR_STORAGE) и его параметры;
- используется при запуске как через `manage.py`, так и при WSGI-развёртывании.

Хранилище событий выбирается переменной окружения CALENDAR_BACKEND:
    sqlite   — файл SQLite (CALENDAR_SQLITE_PATH);
    csv      — CSV-файл (CALENDAR_CSV_PATH);
    postgres — PostgreSQL (CALENDAR_PG_HOST / _PORT / _DB / _USER / _PASSWORD).
Неизвестное значение — приложение не стартует (см. calendarapp.apps).

Пароль администратора хранится только в виде хеша Django:
    python manage.py shell -c "from django.contrib.auth.hashers import make_password; print(make_password('...'))"
Результат положите в CALENDAR_ADMIN_PASSWORD_HASH.

Примечание:
Значения по умолчанию рассчитаны на разработку (DEBUG=True).
Для продакшена задайте ключи и пароли через переменные окружения.
"""

import os
from pathlib import Path


# ---------------------------------------------------------------------------
# Базовая конфигурация проекта
# ---------------------------------------------------------------------------

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-secret-key-change-this")  # заменить для продакшена
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = ["127.0.0.1", "localhost", "testserver"]


# ---------------------------------------------------------------------------
# Приложения (Django apps)
# ---------------------------------------------------------------------------

INSTALLED_APPS = [
    # --- системные приложения Django ---
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # --- кастомные приложения проекта ---
    "calendarapp",   # календарь, события, выгрузка

    # --- сторонние библиотеки ---
    "rest_framework",  # JSON-лента месяца
]


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------
# CsrfViewMiddleware не подключён: изменяющие формы проверяют собственный
# токен сессии (calendarapp.auth.AdminSession.verify_token).

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]


# ---------------------------------------------------------------------------
# URL / Templates / WSGI
# ---------------------------------------------------------------------------

ROOT_URLCONF = "webapp.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "webapp.wsgi.application"


# ---------------------------------------------------------------------------
# База данных / сессии
# ---------------------------------------------------------------------------
# ORM Django не используется: события живут в calstore. Сессии — в
# подписанных cookie, поэтому отдельная БД для Django не нужна.

DATABASES = {}

SESSION_ENGINE = "django.contrib.sessions.backends.signed_cookies"
SESSION_COOKIE_HTTPONLY = True
MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"


# ---------------------------------------------------------------------------
# Локализация и время
# ---------------------------------------------------------------------------

LANGUAGE_CODE = "ru-ru"
TIME_ZONE = os.getenv("CALENDAR_TIME_ZONE", "America/Chicago")

USE_I18N = True
USE_TZ = True


# ---------------------------------------------------------------------------
# Статика
# ---------------------------------------------------------------------------

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"


# ---------------------------------------------------------------------------
# DRF
# ---------------------------------------------------------------------------
# Аутентификация DRF отключена: админ-сессия проверяется AdminSession,
# django.contrib.auth в проекте нет.

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "UNAUTHENTICATED_USER": None,
}


# ---------------------------------------------------------------------------
# Логирование
# ---------------------------------------------------------------------------

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "default"},
    },
    "root": {"handlers": ["console"], "level": os.getenv("CALENDAR_LOG_LEVEL", "INFO")},
}


# ---------------------------------------------------------------------------
# Семейный календарь
# ---------------------------------------------------------------------------

CALENDAR_APP_NAME = "Family Calendar"

CALENDAR_STORAGE = {
    "BACKEND": os.getenv("CALENDAR_BACKEND", "sqlite"),
    "SQLITE_PATH": os.getenv("CALENDAR_SQLITE_PATH", str(BASE_DIR / "calendar.sqlite3")),
    "CSV_PATH": os.getenv("CALENDAR_CSV_PATH", str(BASE_DIR / "events.csv")),
    "POSTGRES": {
        "host": os.getenv("CALENDAR_PG_HOST", "localhost"),
        "port": int(os.getenv("CALENDAR_PG_PORT", "5432")),
        "dbname": os.getenv("CALENDAR_PG_DB", "family_calendar"),
        "user": os.getenv("CALENDAR_PG_USER", "calendar_user"),
        "password": os.getenv("CALENDAR_PG_PASSWORD", "calendar_password"),
    },
    "TIME_ZONE": TIME_ZONE,
}

# хеш общего пароля администратора; пустое значение — вход невозможен
CALENDAR_ADMIN_PASSWORD_HASH = os.getenv("CALENDAR_ADMIN_PASSWORD_HASH", "")
