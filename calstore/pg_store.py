"""
calstore.pg_store
=================

Сетевое реляционное хранилище событий на PostgreSQL (psycopg2).

Отвечает за:
- подключение к базе (get_connection, autocommit=True — каждый вызов
  хранилища выполняет ровно один оператор);
- CRUD-операции по таблице events.

Важно:
- В БД хранятся «родные» типы DATE / TIME / TIMESTAMP(0), но наружу
  всегда отдаются строки 'YYYY-MM-DD', 'HH:MM', 'YYYY-MM-DD HH:MM:SS' —
  форматирование выполняется на стороне сервера (to_char) при чтении.
- Ошибки psycopg2 логируются и пробрасываются вызывающему коду без изменений.
"""

from __future__ import annotations

import logging
from contextlib import closing
from datetime import tzinfo
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2 import Error as PGError
from psycopg2.extensions import connection as PGConnection
from psycopg2.extras import RealDictCursor

from .base import Event, EventDraft, EventStore, now_timestamp, render_csv
from .grid import month_bounds

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT id,
           title,
           description,
           to_char(date, 'YYYY-MM-DD')                AS date,
           to_char(start_time, 'HH24:MI')             AS start_time,
           to_char(end_time, 'HH24:MI')               AS end_time,
           all_day,
           to_char(created_at, 'YYYY-MM-DD HH24:MI:SS') AS created_at,
           to_char(updated_at, 'YYYY-MM-DD HH24:MI:SS') AS updated_at
    FROM events
"""

_ORDER_BY = """
    ORDER BY events.date ASC,
             events.start_time ASC NULLS FIRST,
             events.title COLLATE "C" ASC,
             events.id ASC
"""


# --------------------------------------------------------------------------- #
# Подключение к БД
# --------------------------------------------------------------------------- #
def get_connection(params: Dict[str, Any]) -> PGConnection:
    """
    Установить подключение к PostgreSQL и вернуть объект соединения.

    Параметры:
        params: host / port / dbname / user / password для psycopg2.connect.

    Возвращает:
        PGConnection: активное соединение с автокоммитом.
    """
    conn: PGConnection = psycopg2.connect(**params)
    conn.autocommit = True
    logger.debug("PG: подключение установлено host=%s db=%s", params.get("host"), params.get("dbname"))
    return conn


# --------------------------------------------------------------------------- #
# Хранилище
# --------------------------------------------------------------------------- #
class PostgresEventStore(EventStore):
    """
    Хранилище событий в таблице events PostgreSQL.

    Соединение открывается на каждый вызов и закрывается после него:
    запросы веб-слоя независимы, общих соединений между ними нет.
    """

    def __init__(self, params: Dict[str, Any], tz: Optional[tzinfo] = None) -> None:
        self.params = dict(params)
        self.tz = tz

    def _connect(self) -> PGConnection:
        return get_connection(self.params)

    def init_schema(self) -> None:
        try:
            with closing(self._connect()) as conn, conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS events (
                        id SERIAL PRIMARY KEY,
                        title VARCHAR(255) NOT NULL,
                        description TEXT,
                        date DATE NOT NULL,
                        start_time TIME NULL,
                        end_time TIME NULL,
                        all_day BOOLEAN NOT NULL DEFAULT FALSE,
                        created_at TIMESTAMP(0) NOT NULL,
                        updated_at TIMESTAMP(0) NOT NULL
                    );
                    """
                )
                cur.execute("CREATE INDEX IF NOT EXISTS idx_events_date ON events (date);")
            logger.info("PG: схема events готова.")
        except PGError:
            logger.exception("PG: init_schema ошибка")
            raise

    def all_for_month(self, year: int, month: int) -> List[Event]:
        start, end = month_bounds(year, month)
        try:
            with closing(self._connect()) as conn, conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    _SELECT + " WHERE events.date >= %s AND events.date < %s " + _ORDER_BY,
                    (start, end),
                )
                rows = cur.fetchall()
        except PGError:
            logger.exception("PG: all_for_month ошибка %s-%02d", year, month)
            raise
        logger.info("PG: all_for_month %s-%02d count=%s", year, month, len(rows))
        return [Event.from_row(r) for r in rows]

    def get_by_id(self, event_id: int) -> Optional[Event]:
        try:
            with closing(self._connect()) as conn, conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(_SELECT + " WHERE events.id = %s", (event_id,))
                row = cur.fetchone()
        except PGError:
            logger.exception("PG: get_by_id ошибка id=%s", event_id)
            raise
        logger.info("PG: get_by_id id=%s found=%s", event_id, bool(row))
        return Event.from_row(row) if row else None

    def create(self, draft: EventDraft) -> int:
        d = draft.normalized()
        now = now_timestamp(self.tz)
        try:
            with closing(self._connect()) as conn, conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO events
                        (title, description, date, start_time, end_time, all_day, created_at, updated_at)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING id;
                    """,
                    (
                        d.title,
                        d.description,
                        d.date,
                        d.start_time or None,
                        d.end_time or None,
                        d.all_day,
                        now,
                        now,
                    ),
                )
                event_id = int(cur.fetchone()[0])
        except PGError:
            logger.exception("PG: create ошибка date=%s", d.date)
            raise
        logger.info("PG: create ok id=%s", event_id)
        return event_id

    def update(self, event_id: int, draft: EventDraft) -> bool:
        d = draft.normalized()
        try:
            with closing(self._connect()) as conn, conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE events
                    SET title = %s, description = %s, date = %s, start_time = %s,
                        end_time = %s, all_day = %s, updated_at = %s
                    WHERE id = %s;
                    """,
                    (
                        d.title,
                        d.description,
                        d.date,
                        d.start_time or None,
                        d.end_time or None,
                        d.all_day,
                        now_timestamp(self.tz),
                        event_id,
                    ),
                )
                updated = cur.rowcount > 0
        except PGError:
            logger.exception("PG: update ошибка id=%s", event_id)
            raise
        logger.info("PG: update id=%s updated=%s", event_id, updated)
        return updated

    def delete(self, event_id: int) -> bool:
        try:
            with closing(self._connect()) as conn, conn.cursor() as cur:
                cur.execute("DELETE FROM events WHERE id = %s;", (event_id,))
                deleted = cur.rowcount > 0
        except PGError:
            logger.exception("PG: delete ошибка id=%s", event_id)
            raise
        logger.info("PG: delete id=%s deleted=%s", event_id, deleted)
        return deleted

    def export_csv(self) -> str:
        try:
            with closing(self._connect()) as conn, conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(_SELECT + _ORDER_BY)
                rows = cur.fetchall()
        except PGError:
            logger.exception("PG: export_csv ошибка")
            raise
        logger.info("PG: export_csv count=%s", len(rows))
        return render_csv(Event.from_row(r) for r in rows)
