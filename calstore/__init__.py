"""
calstore
========

Ядро семейного календаря, не зависящее от Django:

- base        — модель Event/EventDraft и контракт EventStore;
- sqlite_store, csv_store, pg_store — три взаимозаменяемых бэкенда;
- factory     — сборка хранилища по конфигурации;
- grid        — сетка месяца 6×7;
- validation  — разбор формы события;
- errors      — коды и исключения.
"""

from calstore.base import CSV_FIELDS, Event, EventDraft, EventStore, parse_csv
from calstore.errors import (
    ConfigurationError,
    ErrorCode,
    StorageError,
    UnsupportedBackendError,
    ValidationError,
)
from calstore.factory import build_store
from calstore.grid import DayCell, month_grid

__all__ = [
    "CSV_FIELDS",
    "Event",
    "EventDraft",
    "EventStore",
    "parse_csv",
    "build_store",
    "DayCell",
    "month_grid",
    "ErrorCode",
    "ValidationError",
    "StorageError",
    "ConfigurationError",
    "UnsupportedBackendError",
]
