"""
auth.py
=======

Сессия администратора и токен защиты форм.

AdminSession — единственный «пользователь» календаря:
- is_admin()          — вошёл ли администратор в этой сессии;
- login(password)     — проверка общего пароля по хешу из настроек;
- logout()            — сброс сессии;
- issue_token()       — токен для скрытого поля изменяющих форм;
- verify_token(token) — сравнение за постоянное время.

Хранилище и сетка календаря об этом модуле ничего не знают —
его используют только вьюхи.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings
from django.contrib.auth.hashers import check_password
from django.http import HttpRequest
from django.utils.crypto import constant_time_compare, get_random_string

logger = logging.getLogger(__name__)

SESSION_ADMIN_KEY = "is_admin"
SESSION_TOKEN_KEY = "csrf"
TOKEN_LENGTH = 64


class AdminSession:
    """Обёртка над request.session для входа администратора и токена форм."""

    def __init__(self, request: HttpRequest) -> None:
        self.session = request.session

    def is_admin(self) -> bool:
        return bool(self.session.get(SESSION_ADMIN_KEY))

    def login(self, password: str) -> bool:
        """
        Проверить пароль и отметить сессию как админскую.

        :return: True — пароль верный
        """
        encoded = settings.CALENDAR_ADMIN_PASSWORD_HASH
        if not encoded or not password or not check_password(password, encoded):
            logger.warning("AUTH: неверный пароль администратора")
            return False
        # новый ключ сессии после входа
        self.session.cycle_key()
        self.session[SESSION_ADMIN_KEY] = True
        logger.info("AUTH: администратор вошёл")
        return True

    def logout(self) -> None:
        self.session.flush()
        logger.info("AUTH: администратор вышел")

    def issue_token(self) -> str:
        """Вернуть токен текущей сессии, выпустив его при первом обращении."""
        token = self.session.get(SESSION_TOKEN_KEY)
        if not token:
            token = get_random_string(TOKEN_LENGTH)
            self.session[SESSION_TOKEN_KEY] = token
        return token

    def verify_token(self, token: Optional[str]) -> bool:
        expected = self.session.get(SESSION_TOKEN_KEY)
        if not expected or not token:
            return False
        return constant_time_compare(expected, token)
