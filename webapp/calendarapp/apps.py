"""
apps.py
=======

Конфигурация Django-приложения `calendarapp`.

Назначение:
- регистрирует приложение в системе Django;
- один раз при старте собирает хранилище событий по settings.CALENDAR_STORAGE
  и готовит его схему (init_schema).

Хранилище — явный объект, принадлежащий конфигурации приложения;
вьюхи получают его через calendarapp.utils.get_store(). Неизвестный бэкенд
роняет старт (UnsupportedBackendError) до обработки первого запроса.
"""

import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class CalendarappConfig(AppConfig):
    """Конфигурация приложения семейного календаря."""

    name = "calendarapp"
    verbose_name = "Семейный календарь"

    store = None

    def ready(self) -> None:
        from calstore import build_store

        self.store = build_store(settings.CALENDAR_STORAGE)
        logger.info("calendarapp: хранилище готово (%s)", type(self.store).__name__)
