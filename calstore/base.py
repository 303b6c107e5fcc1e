"""
calstore.base
=============

Общий контракт хранилища событий и модель данных.

Содержит:
- Event — сохранённое событие (форма «транспорта»: только строки/числа/bool);
- EventDraft — черновик события до сохранения;
- EventStore — абстрактный интерфейс, одинаковый для всех бэкендов
  (SQLite, CSV-файл, PostgreSQL);
- общие помощники: порядок сортировки, нормализация all_day,
  текущая метка времени, рендер/разбор CSV-выгрузки.

Форматы:
- date        — 'YYYY-MM-DD';
- start/end   — 'HH:MM' или '' (пусто);
- created_at  — 'YYYY-MM-DD HH:MM:SS' в настроенной часовой зоне.
"""

from __future__ import annotations

import csv
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Mapping, Optional, Tuple

# Порядок колонок выгрузки фиксирован и совпадает с заголовком CSV-файла.
CSV_FIELDS: Tuple[str, ...] = (
    "id",
    "title",
    "description",
    "date",
    "start_time",
    "end_time",
    "all_day",
    "created_at",
    "updated_at",
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Модель данных
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class EventDraft:
    """Черновик события: всё, что пользователь может изменить."""

    title: str
    date: str
    description: str = ""
    start_time: str = ""
    end_time: str = ""
    all_day: bool = False

    def normalized(self) -> "EventDraft":
        """
        Вернуть копию, готовую к записи.

        Для all_day время начала/окончания всегда очищается, что бы ни пришло
        из формы. None в необязательных полях превращается в ''.

        Исключения:
            ValueError: нет title или date (ограничение NOT NULL хранилища).
        """
        if not self.title or not self.date:
            raise ValueError("Event title and date are required")
        all_day = bool(self.all_day)
        return replace(
            self,
            description=self.description or "",
            start_time="" if all_day else (self.start_time or ""),
            end_time="" if all_day else (self.end_time or ""),
            all_day=all_day,
        )


@dataclass(frozen=True)
class Event:
    """Сохранённое событие календаря."""

    id: int
    title: str
    description: str
    date: str
    start_time: str
    end_time: str
    all_day: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Event":
        """
        Собрать Event из строки БД/CSV.

        NULL-поля превращаются в '', all_day принимает 0/1, '0'/'1' и bool.
        """
        return cls(
            id=int(row["id"]),
            title=row["title"],
            description=row["description"] or "",
            date=row["date"],
            start_time=row["start_time"] or "",
            end_time=row["end_time"] or "",
            all_day=_as_bool(row["all_day"]),
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )

    def as_csv_row(self) -> List[str]:
        """Строка для CSV в порядке CSV_FIELDS (all_day → '1'/'0')."""
        return [
            str(self.id),
            self.title,
            self.description,
            self.date,
            self.start_time,
            self.end_time,
            "1" if self.all_day else "0",
            self.created_at,
            self.updated_at,
        ]

    @property
    def time_label(self) -> str:
        """Подпись времени для сетки: 'All day', '09:00–10:00', '09:00' или ''."""
        if self.all_day:
            return "All day"
        if self.start_time and self.end_time:
            return f"{self.start_time}–{self.end_time}"
        return self.start_time


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() not in ("", "0")
    return bool(value)


def sort_key(event: Event) -> Tuple[str, str, str, int]:
    """Ключ сортировки листингов: дата, время начала (пустое первым), название, id."""
    return (event.date, event.start_time, event.title, event.id)


def now_timestamp(tz: Optional[tzinfo] = None) -> str:
    """Текущее время с точностью до секунды в заданной зоне."""
    return datetime.now(tz).strftime(TIMESTAMP_FORMAT)


# --------------------------------------------------------------------------- #
# CSV: выгрузка и разбор
# --------------------------------------------------------------------------- #
def write_csv(fh: Any, events: Iterable[Event]) -> None:
    """Записать заголовок и события в открытый текстовый поток."""
    writer = csv.writer(fh, lineterminator="\r\n")
    writer.writerow(CSV_FIELDS)
    for event in events:
        writer.writerow(event.as_csv_row())


def render_csv(events: Iterable[Event]) -> str:
    """Полная CSV-выгрузка в виде строки."""
    buf = io.StringIO()
    write_csv(buf, events)
    return buf.getvalue()


def parse_csv(text: str) -> List[Event]:
    """
    Разобрать CSV-выгрузку обратно в события.

    Пустой текст или только заголовок — пустой список. Строки, где
    не хватает колонок, пропускаются с предупреждением в логе (номер строки
    файла); CSV-хранилище при следующей записи их не сохранит.
    """
    reader = csv.DictReader(io.StringIO(text))
    out: List[Event] = []
    for row in reader:
        if any(row.get(field) is None for field in CSV_FIELDS):
            logger.warning("CSV: пропущена неполная строка line=%s", reader.line_num)
            continue
        out.append(Event.from_row(row))
    return out


# --------------------------------------------------------------------------- #
# Контракт хранилища
# --------------------------------------------------------------------------- #
class EventStore(ABC):
    """
    Интерфейс хранилища событий.

    Бэкенды взаимозаменяемы: выбираются один раз при старте (factory.build_store)
    и дальше используются только через эти методы.
    """

    @abstractmethod
    def init_schema(self) -> None:
        """Идемпотентно подготовить хранилище (таблица/индекс/файл). Данные не трогает."""
        ...

    @abstractmethod
    def all_for_month(self, year: int, month: int) -> List[Event]:
        """События с date в [YYYY-MM-01, первое число следующего месяца), отсортированные."""
        ...

    @abstractmethod
    def get_by_id(self, event_id: int) -> Optional[Event]:
        """Событие по id или None."""
        ...

    @abstractmethod
    def create(self, draft: EventDraft) -> int:
        """Сохранить новое событие и вернуть его id."""
        ...

    @abstractmethod
    def update(self, event_id: int, draft: EventDraft) -> bool:
        """Заменить изменяемые поля; False, если события с таким id нет."""
        ...

    @abstractmethod
    def delete(self, event_id: int) -> bool:
        """Удалить событие; True, если запись действительно удалена."""
        ...

    @abstractmethod
    def export_csv(self) -> str:
        """Полная CSV-выгрузка всех событий с заголовком, в порядке sort_key."""
        ...
