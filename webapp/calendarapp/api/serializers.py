"""
serializers.py
==============

DRF-сериализаторы ленты месяца.

Модели здесь не ORM, а dataclass/NamedTuple из calstore, поэтому
используются обычные Serializer, не ModelSerializer.
"""

from __future__ import annotations

from rest_framework import serializers


class EventSerializer(serializers.Serializer):
    """
    Сериализатор события.

    Важно:
    - все поля read-only: лента не принимает изменений;
    - форматы строк такие же, как в CSV-выгрузке.
    """

    id = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    date = serializers.CharField(read_only=True)
    start_time = serializers.CharField(read_only=True)
    end_time = serializers.CharField(read_only=True)
    all_day = serializers.BooleanField(read_only=True)
    created_at = serializers.CharField(read_only=True)
    updated_at = serializers.CharField(read_only=True)


class DayCellSerializer(serializers.Serializer):
    """Ячейка сетки месяца."""

    year = serializers.IntegerField(read_only=True)
    month = serializers.IntegerField(read_only=True)
    day = serializers.IntegerField(read_only=True)
    in_month = serializers.BooleanField(read_only=True)
