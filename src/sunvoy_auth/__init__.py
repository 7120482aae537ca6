"""
Sunvoy Auth - авторизация на challenge.sunvoy.com с сохранением сессии

Этот модуль предоставляет инструменты для:
- Входа через форму сайта (nonce + учётные данные)
- Сохранения cookies сессии в session.json на 24 часа
- Повторного использования сессии без сетевых запросов
"""

__version__ = "0.1.0"

from .auth import SessionAuthenticator
from .models import Credentials, SessionContext, SessionData
from .session_store import SessionStore

__all__ = [
    "SessionAuthenticator",
    "Credentials",
    "SessionContext",
    "SessionData",
    "SessionStore",
]
