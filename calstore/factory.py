"""
calstore.factory
================

Выбор и сборка хранилища событий по конфигурации.

Бэкенд выбирается один раз при старте приложения:
    'sqlite'   — SqliteEventStore(path)
    'csv'      — CsvEventStore(path)
    'postgres' — PostgresEventStore(host/port/dbname/user/password)

Неизвестное имя бэкенда — фатальная ошибка конфигурации
(UnsupportedBackendError), до обработки первого запроса.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from .base import EventStore
from .errors import ConfigurationError, UnsupportedBackendError

logger = logging.getLogger(__name__)

BACKENDS = ("sqlite", "csv", "postgres")


def _require(config: Dict[str, Any], key: str) -> Any:
    value = config.get(key)
    if not value:
        raise ConfigurationError(f"Calendar storage setting {key!r} is required")
    return value


def build_store(config: Dict[str, Any], init: bool = True) -> EventStore:
    """
    Собрать хранилище по словарю настроек.

    :param config: {"BACKEND": ..., "SQLITE_PATH": ..., "CSV_PATH": ...,
                    "POSTGRES": {...}, "TIME_ZONE": ...}
    :param init: сразу вызвать init_schema() (по умолчанию — да)
    :return: готовый экземпляр EventStore
    :raises UnsupportedBackendError: неизвестный BACKEND
    """
    backend = str(config.get("BACKEND", "")).strip().lower()
    tz: Optional[tzinfo] = ZoneInfo(config["TIME_ZONE"]) if config.get("TIME_ZONE") else None

    store: EventStore
    if backend == "sqlite":
        from .sqlite_store import SqliteEventStore

        store = SqliteEventStore(_require(config, "SQLITE_PATH"), tz=tz)
    elif backend == "csv":
        from .csv_store import CsvEventStore

        store = CsvEventStore(_require(config, "CSV_PATH"), tz=tz)
    elif backend == "postgres":
        from .pg_store import PostgresEventStore

        store = PostgresEventStore(_require(config, "POSTGRES"), tz=tz)
    else:
        logger.error("Неизвестный бэкенд хранилища: %r (ожидался один из %s)", backend, BACKENDS)
        raise UnsupportedBackendError(backend)

    logger.info("Хранилище событий: backend=%s (%s)", backend, type(store).__name__)
    if init:
        store.init_schema()
    return store
