"""
views.py (API)
==============

DRF-представления:
- MonthView: сетка месяца и его события в JSON (без входа, как и HTML-страница)
"""

from __future__ import annotations

import logging

from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from calstore.grid import month_grid, month_title

from calendarapp.utils import get_store, parse_year_month
from .serializers import DayCellSerializer, EventSerializer

logger = logging.getLogger(__name__)


class MonthView(APIView):
    """
    Лента месяца.
    Пример: GET /api/month/?y=2025&m=2

    Ответ:
        {"year": 2025, "month": 2, "title": "February 2025",
         "weeks": [[{year, month, day, in_month}, ...] × 6],
         "events": [{id, title, ...}, ...]}
    """

    permission_classes = [permissions.AllowAny]

    def get(self, request: Request) -> Response:
        year, month = parse_year_month(request.query_params)
        events = get_store().all_for_month(year, month)
        weeks = [DayCellSerializer(row, many=True).data for row in month_grid(year, month)]
        logger.info("api.month: %s-%02d events=%s", year, month, len(events))
        return Response(
            {
                "year": year,
                "month": month,
                "title": month_title(year, month),
                "weeks": weeks,
                "events": EventSerializer(events, many=True).data,
            }
        )
