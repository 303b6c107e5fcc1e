"""
calstore.grid
=============

Чистые календарные вычисления — без зависимостей от Django и хранилища.

- month_grid    — сетка месяца 6×7 (неделя начинается с воскресенья);
- month_bounds  — полуоткрытый интервал дат месяца [start, end);
- prev_month / next_month — навигация с переходом через год;
- month_title   — заголовок вида 'March 2025'.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import List, NamedTuple, Tuple

WEEKS = 6
DAYS_IN_WEEK = 7
WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# поддерживаемые годы: у крайних месяцев сетка и граница месяца
# заходят в соседний год, который тоже должен помещаться в date
MIN_YEAR = 2
MAX_YEAR = 9998


class DayCell(NamedTuple):
    """Ячейка сетки: собственные год/месяц/день и флаг «свой месяц»."""

    year: int
    month: int
    day: int
    in_month: bool

    @property
    def iso(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")


def _check_year_month(year: int, month: int) -> None:
    _check_month(month)
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"year must be in {MIN_YEAR}..{MAX_YEAR}, got {year}")


def month_grid(year: int, month: int) -> List[List[DayCell]]:
    """
    Вернуть 6 недель по 7 дней для указанного месяца.

    Первая неделя начинается с воскресенья, приходящегося на 1-е число или
    раньше. Ячейки могут принадлежать соседним месяцам (и годам). Всегда
    ровно 42 ячейки, даже если месяцу хватает 4–5 строк.

    Исключения:
        ValueError: месяц вне 1..12 или год вне MIN_YEAR..MAX_YEAR.
    """
    _check_year_month(year, month)
    first = date(year, month, 1)
    # date.weekday(): пн=0..вс=6 → смещение назад до воскресенья
    current = first - timedelta(days=(first.weekday() + 1) % 7)

    grid: List[List[DayCell]] = []
    for _ in range(WEEKS):
        row: List[DayCell] = []
        for _ in range(DAYS_IN_WEEK):
            row.append(DayCell(current.year, current.month, current.day, current.month == month))
            current += timedelta(days=1)
        grid.append(row)
    return grid


def next_month(year: int, month: int) -> Tuple[int, int]:
    """(year, month) на месяц позже."""
    _check_month(month)
    if month == 12:
        return year + 1, 1
    return year, month + 1


def prev_month(year: int, month: int) -> Tuple[int, int]:
    """(year, month) на месяц раньше."""
    _check_month(month)
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_bounds(year: int, month: int) -> Tuple[str, str]:
    """
    Полуоткрытый интервал месяца: ('YYYY-MM-01', первое число следующего месяца).

    Конец считается прибавлением одного календарного месяца к началу,
    поэтому декабрь корректно переходит в январь следующего года.
    """
    _check_year_month(year, month)
    end_year, end_month = next_month(year, month)
    return date(year, month, 1).isoformat(), date(end_year, end_month, 1).isoformat()


def month_title(year: int, month: int) -> str:
    return date(year, month, 1).strftime("%B %Y")
