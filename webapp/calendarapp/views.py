# webapp/calendarapp/views.py
"""
Представления (views) приложения `calendarapp`.

- healthcheck   — проверка живости
- month_view    — сетка месяца с событиями (?y=&m=)
- login_view / logout_view — вход и выход администратора
- create_event / update_event / delete_event — изменения (только админ)
- export_csv    — резервная копия всех событий в CSV (только админ)

Изменяющие запросы:
- только POST и только для админ-сессии (иначе 403);
- скрытое поле csrf сверяется с токеном сессии (иначе 400);
- ошибки валидации показываются flash-сообщением, не исключением;
- после действия — редирект обратно на месяц.

Сбои хранилища здесь не перехватываются: Django отдаёт общий 500,
подробности остаются в логе.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import Callable

from django.conf import settings
from django.contrib import messages
from django.http import (
    HttpRequest,
    HttpResponse,
    HttpResponseBadRequest,
    HttpResponseForbidden,
    HttpResponseRedirect,
)
from django.shortcuts import render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from calstore import ValidationError
from calstore.grid import WEEKDAY_NAMES, month_grid, month_title, next_month, prev_month
from calstore.validation import parse_event_draft

from .auth import AdminSession
from .utils import export_filename, get_store, group_by_date, parse_year_month

logger = logging.getLogger(__name__)


def healthcheck(request: HttpRequest) -> HttpResponse:
    """Простой healthcheck для аптайм-мониторинга."""
    return HttpResponse("Family Calendar is running.")


def _month_url(year: int, month: int) -> str:
    return f"{reverse('calendarapp:month')}?y={year}&m={month}"


def _back_to_month(request: HttpRequest) -> HttpResponseRedirect:
    year, month = parse_year_month(request.GET)
    return HttpResponseRedirect(_month_url(year, month))


def admin_action(view: Callable) -> Callable:
    """
    Декоратор изменяющих действий: POST + админ-сессия + верный токен формы.
    """

    @require_POST
    @wraps(view)
    def wrapper(request: HttpRequest, *args, **kwargs) -> HttpResponse:
        session = AdminSession(request)
        if not session.is_admin():
            logger.warning("%s: отказано — нет админ-сессии", view.__name__)
            return HttpResponseForbidden("admin only")
        if not session.verify_token(request.POST.get("csrf")):
            logger.warning("%s: неверный токен формы", view.__name__)
            return HttpResponseBadRequest("bad csrf token")
        return view(request, *args, **kwargs)

    return wrapper


# ---------------------------------------------------------------------------
# Просмотр
# ---------------------------------------------------------------------------

@require_GET
def month_view(request: HttpRequest) -> HttpResponse:
    """Сетка месяца 6×7 с событиями своего месяца."""
    year, month = parse_year_month(request.GET)
    session = AdminSession(request)

    by_date = group_by_date(get_store().all_for_month(year, month))
    weeks = [
        [{"cell": cell, "events": by_date.get(cell.iso, []) if cell.in_month else []} for cell in row]
        for row in month_grid(year, month)
    ]
    prev_y, prev_m = prev_month(year, month)
    next_y, next_m = next_month(year, month)

    context = {
        "app_name": settings.CALENDAR_APP_NAME,
        "year": year,
        "month": month,
        "title": month_title(year, month),
        "weekday_names": WEEKDAY_NAMES,
        "weeks": weeks,
        "prev_url": _month_url(prev_y, prev_m),
        "prev_title": month_title(prev_y, prev_m),
        "next_url": _month_url(next_y, next_m),
        "next_title": month_title(next_y, next_m),
        "is_admin": session.is_admin(),
        "csrf": session.issue_token(),
    }
    return render(request, "calendarapp/month.html", context)


# ---------------------------------------------------------------------------
# Вход / выход
# ---------------------------------------------------------------------------

@require_POST
def login_view(request: HttpRequest) -> HttpResponse:
    if AdminSession(request).login(request.POST.get("password", "")):
        messages.success(request, "Добро пожаловать, администратор.")
    else:
        messages.error(request, "Неверный пароль.")
    return HttpResponseRedirect(reverse("calendarapp:month"))


@require_http_methods(["GET", "POST"])
def logout_view(request: HttpRequest) -> HttpResponse:
    AdminSession(request).logout()
    return HttpResponseRedirect(reverse("calendarapp:month"))


# ---------------------------------------------------------------------------
# Изменения (только админ)
# ---------------------------------------------------------------------------

@admin_action
def create_event(request: HttpRequest) -> HttpResponse:
    draft = parse_event_draft(request.POST)
    if isinstance(draft, ValidationError):
        logger.info("create_event: валидация не пройдена (%s)", draft.code.value)
        messages.error(request, draft.message)
    else:
        event_id = get_store().create(draft)
        messages.success(request, f"Событие #{event_id} создано.")
    return _back_to_month(request)


@admin_action
def update_event(request: HttpRequest, event_id: int) -> HttpResponse:
    draft = parse_event_draft(request.POST)
    if isinstance(draft, ValidationError):
        logger.info("update_event: валидация не пройдена id=%s (%s)", event_id, draft.code.value)
        messages.error(request, draft.message)
    elif get_store().update(event_id, draft):
        messages.success(request, f"Событие #{event_id} обновлено.")
    else:
        messages.error(request, f"Событие #{event_id} не найдено.")
    return _back_to_month(request)


@admin_action
def delete_event(request: HttpRequest, event_id: int) -> HttpResponse:
    if get_store().delete(event_id):
        messages.success(request, f"Событие #{event_id} удалено.")
    else:
        messages.error(request, f"Событие #{event_id} не найдено.")
    return _back_to_month(request)


# ---------------------------------------------------------------------------
# Экспорт
# ---------------------------------------------------------------------------

@require_GET
def export_csv(request: HttpRequest) -> HttpResponse:
    """
    Резервная копия всех событий: UTF-8 CSV как вложение.

    Имя файла: calendar_export_<YYYYMMDD_HHMMSS>.csv (локальное время).
    """
    if not AdminSession(request).is_admin():
        logger.warning("export_csv: отказано — нет админ-сессии")
        return HttpResponseForbidden("admin only")

    payload = get_store().export_csv()
    filename = export_filename()
    resp = HttpResponse(payload.encode("utf-8"), content_type="text/csv; charset=utf-8")
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    logger.info("export_csv: выгрузка %s (%s байт)", filename, len(resp.content))
    return resp
