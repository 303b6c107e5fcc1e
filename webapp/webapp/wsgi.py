"""
wsgi.py
=======

WSGI-точка входа Django-проекта **Family Calendar**.

Назначение:
- обеспечивает совместимость с любым WSGI-сервером (gunicorn, uWSGI и др.);
- создаёт объект `application`; при создании собирается хранилище событий,
  поэтому ошибка конфигурации (неизвестный CALENDAR_BACKEND) видна сразу
  при старте воркера.
"""

import os
from django.core.wsgi import get_wsgi_application


# Указываем Django, какой модуль настроек использовать
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "webapp.settings")

# Экземпляр приложения WSGI, используемый сервером
application = get_wsgi_application()
