import re
from datetime import datetime

import pytest
from django.apps import apps
from django.test import Client

from calstore import UnsupportedBackendError
from calendarapp.utils import export_filename, group_by_date, parse_year_month

EVENT_FORM = {
    "title": "Dentist",
    "date": "2025-03-14",
    "start_time": "09:00",
    "end_time": "10:00",
    "description": "bring card",
}


# ---------------------------------------------------------------------------
# Просмотр и вход
# ---------------------------------------------------------------------------

def test_healthcheck(client: Client):
    resp = client.get("/health/")
    assert resp.status_code == 200
    assert resp.content.decode() == "Family Calendar is running."


def test_month_page_for_visitor(client: Client, app_store, make_draft):
    app_store.create(make_draft(title="Piano lesson", date="2025-03-14", start_time="16:00"))
    app_store.create(make_draft(title="Other month", date="2025-04-01"))

    resp = client.get("/?y=2025&m=3")
    assert resp.status_code == 200
    html = resp.content.decode()

    assert "March 2025" in html
    assert "Piano lesson" in html
    assert "Other month" not in html
    assert "Admin password" in html
    assert "Add event" not in html
    assert resp.context["is_admin"] is False
    assert resp.context["prev_url"] == "/?y=2025&m=2"
    assert resp.context["next_url"] == "/?y=2025&m=4"

    weeks = resp.context["weeks"]
    assert len(weeks) == 6 and all(len(w) == 7 for w in weeks)
    cell_items = [item for w in weeks for item in w if item["cell"].iso == "2025-03-14"]
    assert [e.title for e in cell_items[0]["events"]] == ["Piano lesson"]


def test_month_page_navigation_wraps_year(client: Client, app_store):
    resp = client.get("/?y=2025&m=1")
    assert resp.context["prev_url"] == "/?y=2024&m=12"
    assert resp.context["prev_title"] == "December 2024"


def test_month_page_clamps_bad_params(client: Client, app_store):
    resp = client.get("/?y=2025&m=13")
    assert (resp.context["year"], resp.context["month"]) == (2025, 12)


def test_wrong_password_is_flashed(client: Client, admin_settings, app_store):
    resp = client.post("/login/", {"password": "nope"}, follow=True)
    assert resp.status_code == 200
    assert "Неверный пароль." in resp.content.decode()
    assert resp.context["is_admin"] is False


def test_admin_sees_forms_and_can_log_out(admin_client: Client):
    resp = admin_client.get("/?y=2025&m=3")
    html = resp.content.decode()
    assert resp.context["is_admin"] is True
    assert "Add event" in html
    assert "Backup (CSV)" in html

    admin_client.get("/logout/")
    assert admin_client.get("/").context["is_admin"] is False


# ---------------------------------------------------------------------------
# Изменения
# ---------------------------------------------------------------------------

def test_mutations_require_admin(client: Client, app_store):
    assert client.post("/events/create/", EVENT_FORM).status_code == 403
    assert client.post("/events/1/update/", EVENT_FORM).status_code == 403
    assert client.post("/events/1/delete/").status_code == 403
    assert app_store.export_csv().count("\r\n") == 1


def test_mutations_are_post_only(admin_client: Client):
    assert admin_client.get("/events/create/").status_code == 405


def test_bad_form_token_is_rejected(admin_client: Client, form_token, app_store):
    resp = admin_client.post("/events/create/", {**EVENT_FORM, "csrf": "forged"})
    assert resp.status_code == 400
    resp = admin_client.post("/events/create/", EVENT_FORM)
    assert resp.status_code == 400
    assert app_store.all_for_month(2025, 3) == []


def test_create_event(admin_client: Client, form_token, app_store):
    resp = admin_client.post("/events/create/?y=2025&m=3", {**EVENT_FORM, "csrf": form_token})
    assert resp.status_code == 302
    assert resp["Location"] == "/?y=2025&m=3"

    events = app_store.all_for_month(2025, 3)
    assert [(e.title, e.start_time, e.end_time) for e in events] == [("Dentist", "09:00", "10:00")]

    page = admin_client.get(resp["Location"]).content.decode()
    assert f"Событие #{events[0].id} создано." in page
    assert "09:00–10:00" in page


def test_create_with_invalid_date_flashes_error(admin_client: Client, form_token, app_store):
    resp = admin_client.post(
        "/events/create/?y=2025&m=3",
        {**EVENT_FORM, "date": "14.03.2025", "csrf": form_token},
        follow=True,
    )
    assert "Дата должна быть в формате ГГГГ-ММ-ДД." in resp.content.decode()
    assert app_store.export_csv().count("\r\n") == 1


def test_update_event(admin_client: Client, form_token, app_store, make_draft):
    event_id = app_store.create(make_draft(title="Old"))

    resp = admin_client.post(
        f"/events/{event_id}/update/?y=2025&m=3",
        {**EVENT_FORM, "title": "New", "all_day": "1", "csrf": form_token},
        follow=True,
    )
    assert f"Событие #{event_id} обновлено." in resp.content.decode()

    event = app_store.get_by_id(event_id)
    assert event.title == "New"
    assert event.all_day is True
    assert event.start_time == ""


def test_update_missing_event(admin_client: Client, form_token, app_store):
    resp = admin_client.post("/events/999/update/", {**EVENT_FORM, "csrf": form_token}, follow=True)
    assert "Событие #999 не найдено." in resp.content.decode()


def test_delete_event(admin_client: Client, form_token, app_store, make_draft):
    event_id = app_store.create(make_draft())

    resp = admin_client.post(f"/events/{event_id}/delete/", {"csrf": form_token}, follow=True)
    assert f"Событие #{event_id} удалено." in resp.content.decode()
    assert app_store.get_by_id(event_id) is None

    resp = admin_client.post(f"/events/{event_id}/delete/", {"csrf": form_token}, follow=True)
    assert f"Событие #{event_id} не найдено." in resp.content.decode()


# ---------------------------------------------------------------------------
# Экспорт и API
# ---------------------------------------------------------------------------

def test_export_requires_admin(client: Client, app_store):
    assert client.get("/export/csv/").status_code == 403


def test_export_csv_download(admin_client: Client, app_store, make_draft):
    app_store.create(make_draft(title="Кружок, танцы", date="2025-03-02"))
    app_store.create(make_draft(title="Trip", date="2025-02-28", all_day=True))

    resp = admin_client.get("/export/csv/")
    assert resp.status_code == 200
    assert resp["Content-Type"] == "text/csv; charset=utf-8"
    assert re.fullmatch(
        r'attachment; filename="calendar_export_\d{8}_\d{6}\.csv"',
        resp["Content-Disposition"],
    )
    body = resp.content.decode("utf-8")
    assert body == app_store.export_csv()
    lines = body.splitlines()
    assert lines[0].startswith("id,title,description,date,start_time,end_time,all_day")
    assert lines[1].startswith("2,Trip,")
    assert '"Кружок, танцы"' in lines[2]


def test_api_month(client: Client, app_store, make_draft):
    app_store.create(make_draft(title="Picnic", date="2025-06-07", start_time="12:00"))

    resp = client.get("/api/month/?y=2025&m=6")
    assert resp.status_code == 200
    data = resp.json()
    assert (data["year"], data["month"], data["title"]) == (2025, 6, "June 2025")
    assert len(data["weeks"]) == 6
    assert data["weeks"][0][0] == {"year": 2025, "month": 6, "day": 1, "in_month": True}
    assert [e["title"] for e in data["events"]] == ["Picnic"]
    assert data["events"][0]["start_time"] == "12:00"
    assert data["events"][0]["all_day"] is False


# ---------------------------------------------------------------------------
# Старт приложения и утилиты
# ---------------------------------------------------------------------------

def test_unsupported_backend_fails_startup(settings):
    settings.CALENDAR_STORAGE = {"BACKEND": "mysql"}
    with pytest.raises(UnsupportedBackendError):
        apps.get_app_config("calendarapp").ready()


def test_parse_year_month_defaults_to_today(settings):
    from django.utils import timezone

    today = timezone.localdate()
    assert parse_year_month({}) == (today.year, today.month)
    assert parse_year_month({"y": "abc", "m": ""}) == (today.year, today.month)
    assert parse_year_month({"y": "2025", "m": "0"}) == (2025, 1)


def test_group_by_date_keeps_order(make_draft, csv_store):
    csv_store.create(make_draft(title="b", date="2025-03-01", start_time="10:00"))
    csv_store.create(make_draft(title="a", date="2025-03-01", start_time="09:00"))
    csv_store.create(make_draft(title="c", date="2025-03-02"))
    grouped = group_by_date(csv_store.all_for_month(2025, 3))
    assert {k: [e.title for e in v] for k, v in grouped.items()} == {
        "2025-03-01": ["a", "b"],
        "2025-03-02": ["c"],
    }


def test_export_filename():
    assert export_filename(datetime(2025, 2, 28, 9, 30, 0)) == "calendar_export_20250228_093000.csv"
