"""
calstore.validation
===================

Проверка данных формы события перед записью в хранилище.

parse_event_draft() никогда не бросает исключений: возвращает либо
EventDraft, либо ValidationError с кодом нарушенного правила.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from .base import EventDraft
from .errors import ErrorCode, ValidationError
from .grid import MAX_YEAR, MIN_YEAR

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def _field(data: Mapping[str, Any], name: str) -> str:
    value = data.get(name)
    return "" if value is None else str(value).strip()


def _is_checked(value: Any) -> bool:
    # чекбокс: отсутствие поля = выключен
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() not in ("", "0", "false", "off")


def _is_date(value: str) -> bool:
    if not DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def _is_time(value: str) -> bool:
    if not TIME_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError:
        return False
    return True


def parse_event_draft(data: Mapping[str, Any]) -> Union[EventDraft, ValidationError]:
    """
    Разобрать отправленную форму в EventDraft.

    :param data: словарь/QueryDict с полями title, date, start_time, end_time,
                 description, all_day (отмеченный чекбокс = «весь день»)
    :return: EventDraft или ValidationError
    """
    title = _field(data, "title")
    date_str = _field(data, "date")
    start = _field(data, "start_time")
    end = _field(data, "end_time")
    description = _field(data, "description")
    all_day = _is_checked(data.get("all_day"))

    error: Optional[ValidationError] = None
    if not title or not date_str:
        error = ValidationError(ErrorCode.TITLE_AND_DATE_REQUIRED, "Название и дата обязательны.")
    elif not _is_date(date_str):
        error = ValidationError(ErrorCode.INVALID_DATE, "Дата должна быть в формате ГГГГ-ММ-ДД.")
    elif not MIN_YEAR <= int(date_str[:4]) <= MAX_YEAR:
        # месяц такой даты должен быть доступен для выборки и сетки
        error = ValidationError(ErrorCode.INVALID_DATE, f"Год должен быть от {MIN_YEAR} до {MAX_YEAR}.")
    elif start and not _is_time(start):
        error = ValidationError(ErrorCode.INVALID_START_TIME, "Время начала должно быть в формате ЧЧ:ММ.")
    elif end and not _is_time(end):
        error = ValidationError(ErrorCode.INVALID_END_TIME, "Время окончания должно быть в формате ЧЧ:ММ.")
    if error is not None:
        return error

    return EventDraft(
        title=title,
        date=date_str,
        description=description,
        start_time=start,
        end_time=end,
        all_day=all_day,
    ).normalized()
