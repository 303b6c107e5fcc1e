"""
manage.py
==========

Командный интерфейс Django-проекта **Family Calendar**.

Назначение:
------------
- является точкой входа для административных команд Django;
- обеспечивает корректную инициализацию настроек проекта и окружения.

Примеры использования:
----------------------
1. **Запуск сервера разработки (SQLite по умолчанию)**
    python manage.py runserver

2. **Запуск на CSV-файле**
    CALENDAR_BACKEND=csv CALENDAR_CSV_PATH=/srv/calendar/events.csv python manage.py runserver

3. **Запуск на PostgreSQL**
    CALENDAR_BACKEND=postgres CALENDAR_PG_HOST=db CALENDAR_PG_PASSWORD=... python manage.py runserver

4. **Проверка конфигурации**
    python manage.py check

Технические детали:
-------------------
- Скрипт задаёт `DJANGO_SETTINGS_MODULE=webapp.settings`;
- корень репозитория добавляется в sys.path, чтобы пакет `calstore`
  импортировался и без `pip install -e .`;
- хранилище событий собирается и готовит схему при `django.setup()`.
"""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def main() -> None:
    """
    Точка входа командной оболочки Django.

    При ошибках импорта Django выводит понятное сообщение пользователю.
    """
    if str(PROJECT_ROOT) not in sys.path:
        sys.path.insert(0, str(PROJECT_ROOT))
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "webapp.settings")

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Не удалось импортировать Django. "
            "Убедитесь, что оно установлено и доступно в текущем окружении."
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
