"""
utils.py
========

Служебные функции для календарного приложения.

Содержит две логические группы:

1) Доступ к хранилищу и параметры месяца:
   - получение хранилища, собранного при старте (get_store);
   - разбор ?y=&m= из запроса с подстановкой текущего месяца;
   - группировка событий месяца по дате для сетки.

2) Экспорт:
   - имя файла выгрузки calendar_export_<YYYYMMDD_HHMMSS>.csv.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from django.apps import apps
from django.utils import timezone

from calstore import Event, EventStore
from calstore.grid import MAX_YEAR, MIN_YEAR


# ---------------------------------------------------------------------------
# ХРАНИЛИЩЕ И МЕСЯЦ
# ---------------------------------------------------------------------------

def get_store() -> EventStore:
    """Хранилище событий, собранное CalendarappConfig.ready()."""
    return apps.get_app_config("calendarapp").store


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def parse_year_month(params: Mapping[str, str]) -> Tuple[int, int]:
    """
    Достать (год, месяц) из GET-параметров y и m.

    Отсутствующие или нечисловые значения заменяются текущими (в зоне
    TIME_ZONE); месяц зажимается в диапазон 1..12, год — в MIN_YEAR..MAX_YEAR (2..9998)
    (сетке и навигации нужны соседние месяцы).
    """
    today = timezone.localdate()
    year = _to_int(params.get("y"))
    month = _to_int(params.get("m"))
    year = today.year if year is None else max(MIN_YEAR, min(MAX_YEAR, year))
    month = today.month if month is None else max(1, min(12, month))
    return year, month


def group_by_date(events: Iterable[Event]) -> Dict[str, List[Event]]:
    """События месяца, сгруппированные по строке даты (порядок сохраняется)."""
    by_date: Dict[str, List[Event]] = defaultdict(list)
    for event in events:
        by_date[event.date].append(event)
    return dict(by_date)


# ---------------------------------------------------------------------------
# ЭКСПОРТ
# ---------------------------------------------------------------------------

def export_filename(moment: Optional[datetime] = None) -> str:
    """
    Имя CSV-выгрузки с локальной меткой времени.

    :param moment: момент выгрузки (по умолчанию — сейчас, в TIME_ZONE)
    :return: 'calendar_export_20250228_093000.csv'
    """
    moment = moment or timezone.localtime()
    return f"calendar_export_{moment.strftime('%Y%m%d_%H%M%S')}.csv"


__all__ = [
    "get_store",
    "parse_year_month",
    "group_by_date",
    "export_filename",
]
