"""
urls.py (API)
=============

Маршрутизация DRF-эндпоинтов.
"""

from __future__ import annotations

from django.urls import path

from .views import MonthView

urlpatterns = [
    # Сетка и события месяца: /api/month/?y=2025&m=2
    path("month/", MonthView.as_view(), name="api-month"),
]
