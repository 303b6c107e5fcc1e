"""
urls.py
=======

Корневой маршрутизатор Django-проекта **Family Calendar**.

Структура маршрутов:
- / — календарь, вход, изменения и экспорт (`calendarapp`);
- /api/ — read-only JSON-лента месяца (DRF).
"""

from django.urls import path, include


urlpatterns = [
    # Основное приложение календаря (корневой маршрут)
    path("", include("calendarapp.urls")),

    # DRF API
    path("api/", include("calendarapp.api.urls")),
]
