"""
calstore.sqlite_store
=====================

Встроенное реляционное хранилище событий на SQLite (sqlite3).

Особенности:
- соединение открывается на каждую операцию (get_cursor), commit после
  успешного запроса и rollback при ошибке;
- пустое время хранится как NULL и читается обратно как '';
- выборка месяца — полуоткрытый интервал [start, end), где end — первое
  число следующего месяца (см. grid.month_bounds).
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import tzinfo
from typing import Iterator, List, Optional

from .base import Event, EventDraft, EventStore, now_timestamp, render_csv
from .grid import month_bounds

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, description, date, start_time, end_time, all_day, created_at, updated_at"
_ORDER_BY = "ORDER BY date ASC, COALESCE(start_time, '') ASC, title ASC, id ASC"


class SqliteEventStore(EventStore):
    """Хранилище событий в файле SQLite."""

    def __init__(self, path: str, tz: Optional[tzinfo] = None) -> None:
        self.path = path
        self.tz = tz

    # ------------------------------------------------------------------ #
    # Подключение
    # ------------------------------------------------------------------ #
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        """Курсор с commit при успехе и rollback при исключении."""
        conn = self._connect()
        try:
            cur = conn.cursor()
            yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ------------------------------------------------------------------ #
    # Контракт EventStore
    # ------------------------------------------------------------------ #
    def init_schema(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        try:
            with self._cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS events (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        title TEXT NOT NULL,
                        description TEXT,
                        date TEXT NOT NULL,
                        start_time TEXT,
                        end_time TEXT,
                        all_day INTEGER NOT NULL DEFAULT 0,
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )
                cur.execute("CREATE INDEX IF NOT EXISTS idx_events_date ON events(date)")
            logger.info("SQLITE: схема готова path=%s", self.path)
        except sqlite3.Error:
            logger.exception("SQLITE: init_schema ошибка path=%s", self.path)
            raise

    def all_for_month(self, year: int, month: int) -> List[Event]:
        start, end = month_bounds(year, month)
        try:
            with self._cursor() as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM events "
                    f"WHERE date >= ? AND date < ? {_ORDER_BY}",
                    (start, end),
                )
                rows = cur.fetchall()
        except sqlite3.Error:
            logger.exception("SQLITE: all_for_month ошибка %s-%02d", year, month)
            raise
        logger.info("SQLITE: all_for_month %s-%02d count=%s", year, month, len(rows))
        return [Event.from_row(r) for r in rows]

    def get_by_id(self, event_id: int) -> Optional[Event]:
        try:
            with self._cursor() as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM events WHERE id = ?", (event_id,))
                row = cur.fetchone()
        except sqlite3.Error:
            logger.exception("SQLITE: get_by_id ошибка id=%s", event_id)
            raise
        return Event.from_row(row) if row else None

    def create(self, draft: EventDraft) -> int:
        d = draft.normalized()
        now = now_timestamp(self.tz)
        try:
            with self._cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO events
                        (title, description, date, start_time, end_time, all_day, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        d.title,
                        d.description,
                        d.date,
                        d.start_time or None,
                        d.end_time or None,
                        1 if d.all_day else 0,
                        now,
                        now,
                    ),
                )
                event_id = int(cur.lastrowid)
        except sqlite3.Error:
            logger.exception("SQLITE: create ошибка date=%s", d.date)
            raise
        logger.info("SQLITE: create ok id=%s", event_id)
        return event_id

    def update(self, event_id: int, draft: EventDraft) -> bool:
        d = draft.normalized()
        try:
            with self._cursor() as cur:
                cur.execute(
                    """
                    UPDATE events
                    SET title = ?, description = ?, date = ?, start_time = ?,
                        end_time = ?, all_day = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        d.title,
                        d.description,
                        d.date,
                        d.start_time or None,
                        d.end_time or None,
                        1 if d.all_day else 0,
                        now_timestamp(self.tz),
                        event_id,
                    ),
                )
                updated = cur.rowcount > 0
        except sqlite3.Error:
            logger.exception("SQLITE: update ошибка id=%s", event_id)
            raise
        logger.info("SQLITE: update id=%s updated=%s", event_id, updated)
        return updated

    def delete(self, event_id: int) -> bool:
        try:
            with self._cursor() as cur:
                cur.execute("DELETE FROM events WHERE id = ?", (event_id,))
                deleted = cur.rowcount > 0
        except sqlite3.Error:
            logger.exception("SQLITE: delete ошибка id=%s", event_id)
            raise
        logger.info("SQLITE: delete id=%s deleted=%s", event_id, deleted)
        return deleted

    def export_csv(self) -> str:
        try:
            with self._cursor() as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM events {_ORDER_BY}")
                rows = cur.fetchall()
        except sqlite3.Error:
            logger.exception("SQLITE: export_csv ошибка")
            raise
        logger.info("SQLITE: export_csv count=%s", len(rows))
        return render_csv(Event.from_row(r) for r in rows)
