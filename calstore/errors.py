"""
calstore.errors
===============

Коды ошибок и исключения хранилища событий.

Таксономия:
- ValidationError — результат проверки формы (значение, НЕ исключение);
- StorageError — сбой файлового хранилища (нельзя открыть/заблокировать/записать);
- ConfigurationError / UnsupportedBackendError — неверная конфигурация,
  фатальна при старте приложения.

Ошибки драйверов БД (sqlite3.Error, psycopg2.Error) НЕ оборачиваются:
хранилища логируют их и пробрасывают дальше как есть.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Коды ошибок валидации черновика события."""

    TITLE_AND_DATE_REQUIRED = "TITLE_AND_DATE_REQUIRED"
    INVALID_DATE = "INVALID_DATE"
    INVALID_START_TIME = "INVALID_START_TIME"
    INVALID_END_TIME = "INVALID_END_TIME"


@dataclass(frozen=True)
class ValidationError:
    """
    Результат неуспешной проверки черновика.

    Возвращается из parse_event_draft() вместо EventDraft; вызывающий код
    сам решает, как показать message пользователю.
    """

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class StorageError(Exception):
    """Сбой файлового хранилища (CSV): открытие, блокировка, запись."""


class ConfigurationError(Exception):
    """Ошибка конфигурации хранилища."""


class UnsupportedBackendError(ConfigurationError):
    """Указан неизвестный бэкенд хранилища."""

    def __init__(self, backend: str) -> None:
        super().__init__(f"Unsupported calendar backend: {backend!r}")
        self.backend = backend
