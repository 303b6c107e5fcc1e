"""
calstore.csv_store
==================

Плоское файловое хранилище событий: один CSV-файл с заголовком.

Модель работы:
- весь файл читается в память, фильтруется и при любом изменении
  переписывается целиком (без частичных записей);
- запись держит эксклюзивную блокировку (fcntl.flock LOCK_EX) на весь цикл
  «прочитать → изменить → переписать», поэтому параллельные писатели
  выполняются строго по очереди;
- читатели берут разделяемую блокировку (LOCK_SH) и видят либо состояние
  до записи, либо после.

Новый id = максимальный существующий id + 1 (или 1 для пустого файла).
Если удалить запись с максимальным id, следующий create выдаст тот же id
повторно — это известное поведение, внешние скрипты на него опираются.
"""

from __future__ import annotations

import fcntl
import logging
import os
from contextlib import contextmanager
from datetime import tzinfo
from typing import IO, Callable, Iterator, List, Optional, Tuple, TypeVar

from .base import (
    Event,
    EventDraft,
    EventStore,
    now_timestamp,
    parse_csv,
    render_csv,
    sort_key,
    write_csv,
)
from .errors import StorageError
from .grid import month_bounds

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CsvEventStore(EventStore):
    """Хранилище событий в CSV-файле."""

    def __init__(self, path: str, tz: Optional[tzinfo] = None) -> None:
        self.path = path
        self.tz = tz

    # ------------------------------------------------------------------ #
    # Файл и блокировки
    # ------------------------------------------------------------------ #
    @contextmanager
    def _locked(self, exclusive: bool) -> Iterator[IO[str]]:
        """
        Открыть файл и удерживать flock до выхода.

        Запись открывает файл на чтение и запись (создавая при отсутствии),
        чтение с разделяемой блокировкой открывает только на чтение.

        Исключения:
            StorageError: файл нельзя открыть или заблокировать.
        """
        try:
            flags = (os.O_RDWR | os.O_CREAT) if exclusive else os.O_RDONLY
            fd = os.open(self.path, flags, 0o644)
        except OSError as e:
            logger.error("CSV: не удалось открыть %s: %s", self.path, e)
            raise StorageError(f"Cannot open CSV file {self.path}") from e

        with os.fdopen(fd, "r+" if exclusive else "r", encoding="utf-8", newline="") as fh:
            try:
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
            except OSError as e:
                logger.error("CSV: не удалось заблокировать %s: %s", self.path, e)
                raise StorageError(f"Cannot lock CSV file {self.path}") from e
            try:
                yield fh
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    @staticmethod
    def _read(fh: IO[str]) -> List[Event]:
        fh.seek(0)
        return parse_csv(fh.read())

    def _rewrite(self, fh: IO[str], events: List[Event]) -> None:
        try:
            fh.seek(0)
            fh.truncate()
            write_csv(fh, events)
            fh.flush()
            os.fsync(fh.fileno())
        except OSError as e:
            logger.error("CSV: не удалось записать %s: %s", self.path, e)
            raise StorageError(f"Cannot write CSV file {self.path}") from e

    def _read_all(self) -> List[Event]:
        if not os.path.exists(self.path):
            return []
        with self._locked(exclusive=False) as fh:
            return self._read(fh)

    def _mutate(self, change: Callable[[List[Event]], Tuple[Optional[List[Event]], T]]) -> T:
        """
        Выполнить изменение под эксклюзивной блокировкой.

        change(events) возвращает (новый список, результат); None вместо
        списка — «ничего не менять, файл не переписывать».
        """
        with self._locked(exclusive=True) as fh:
            events, result = change(self._read(fh))
            if events is not None:
                self._rewrite(fh, events)
            return result

    # ------------------------------------------------------------------ #
    # Контракт EventStore
    # ------------------------------------------------------------------ #
    def init_schema(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with self._locked(exclusive=True) as fh:
            fh.seek(0, os.SEEK_END)
            if fh.tell() == 0:
                self._rewrite(fh, [])
                logger.info("CSV: создан файл с заголовком path=%s", self.path)

    def all_for_month(self, year: int, month: int) -> List[Event]:
        start, end = month_bounds(year, month)
        events = [e for e in self._read_all() if start <= e.date < end]
        events.sort(key=sort_key)
        logger.info("CSV: all_for_month %s-%02d count=%s", year, month, len(events))
        return events

    def get_by_id(self, event_id: int) -> Optional[Event]:
        for event in self._read_all():
            if event.id == event_id:
                return event
        return None

    def create(self, draft: EventDraft) -> int:
        d = draft.normalized()

        def change(events: List[Event]):
            new_id = max((e.id for e in events), default=0) + 1
            now = now_timestamp(self.tz)
            events.append(
                Event(
                    id=new_id,
                    title=d.title,
                    description=d.description,
                    date=d.date,
                    start_time=d.start_time,
                    end_time=d.end_time,
                    all_day=d.all_day,
                    created_at=now,
                    updated_at=now,
                )
            )
            return events, new_id

        event_id = self._mutate(change)
        logger.info("CSV: create ok id=%s", event_id)
        return event_id

    def update(self, event_id: int, draft: EventDraft) -> bool:
        d = draft.normalized()

        def change(events: List[Event]):
            for i, e in enumerate(events):
                if e.id == event_id:
                    events[i] = Event(
                        id=e.id,
                        title=d.title,
                        description=d.description,
                        date=d.date,
                        start_time=d.start_time,
                        end_time=d.end_time,
                        all_day=d.all_day,
                        created_at=e.created_at,
                        updated_at=now_timestamp(self.tz),
                    )
                    return events, True
            return None, False

        updated = self._mutate(change)
        logger.info("CSV: update id=%s updated=%s", event_id, updated)
        return updated

    def delete(self, event_id: int) -> bool:
        def change(events: List[Event]):
            kept = [e for e in events if e.id != event_id]
            if len(kept) == len(events):
                return None, False
            return kept, True

        deleted = self._mutate(change)
        logger.info("CSV: delete id=%s deleted=%s", event_id, deleted)
        return deleted

    def export_csv(self) -> str:
        events = sorted(self._read_all(), key=sort_key)
        logger.info("CSV: export_csv count=%s", len(events))
        return render_csv(events)
