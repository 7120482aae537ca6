#!/usr/bin/env python3
"""
Модуль авторизации для challenge.sunvoy.com

Предоставляет функционал для:
- Повторного использования сохранённой сессии
- Входа через форму /login (nonce + учётные данные)
- Сохранения cookies на диск на 24 часа
- Доступа к настроенному HTTP-клиенту для последующих запросов
"""

import logging
from datetime import datetime
from typing import Optional, Dict, Any, Union
from pathlib import Path

import requests

from .config import Config
from .login_form import extract_nonce, extract_set_cookies, build_login_body
from .models import Credentials, SessionContext, SessionData, now_ms
from .session_store import SessionStore

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
SUCCESS_STATUSES = (200, 302)


class SessionAuthenticator:
    """Класс для авторизации на challenge.sunvoy.com"""

    def __init__(
        self,
        cfg: Optional[Config] = None,
        session_file: Optional[Union[str, Path]] = None,
        http_session: Optional[requests.Session] = None,
    ):
        """
        Инициализация модуля авторизации

        Args:
            cfg: Конфигурация (по умолчанию глобальный config)
            session_file: Путь к файлу сессии вместо session.file из конфига
            http_session: Готовая сессия requests (для тестов)
        """
        if cfg is None:
            from .config import config as cfg
        self.config = cfg

        self.base_url = cfg.get_base_url()
        self.login_url = f"{self.base_url}{cfg.get_login_path()}"
        self.timeout = cfg.get_timeout()
        self.session_ttl_ms = int(float(cfg.get_session_ttl_hours()) * 60 * 60 * 1000)

        self.store = SessionStore(session_file or cfg.get_session_file())

        self.session = http_session if http_session is not None else requests.Session()
        self.session.headers.update(cfg.get_default_headers())
        self.session.max_redirects = cfg.get_max_redirects()

        self.context: Optional[SessionContext] = None
        self._authenticated = False

        logger.debug(f"Модуль авторизации инициализирован для {self.base_url}")

    def _install(self, context: Optional[SessionContext]) -> None:
        """Делает контекст текущим и выставляет заголовок Cookie в клиенте"""
        self.context = context
        header = context.cookie_header() if context else None
        if header:
            self.session.headers['Cookie'] = header
        else:
            self.session.headers.pop('Cookie', None)

    def authenticate(self, credentials: Credentials) -> bool:
        """
        Авторизуется, используя сохранённую сессию или форму входа

        Args:
            credentials: Email и пароль

        Returns:
            True если авторизация успешна, False при любой ошибке
        """
        self._authenticated = False
        try:
            stored = self.store.load()
            if stored is not None:
                logger.info("Использую сохранённую действующую сессию")
                self._install(SessionContext.from_session(stored))
                self._authenticated = True
                return True

            self._authenticated = self._login(credentials)

        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Ошибка сети при авторизации: {e}")
        except Exception as e:
            logger.error(f"❌ Неожиданная ошибка при авторизации: {e}")

        if not self._authenticated:
            self._install(None)
        return self._authenticated

    def _login(self, credentials: Credentials) -> bool:
        """Полный вход: GET формы, POST учётных данных, сохранение сессии"""
        logger.info("Авторизуюсь с новыми учётными данными...")

        # 1. Страница входа: cookies и nonce
        logger.info("Получаю страницу входа...")
        response = self.session.get(
            self.login_url,
            headers={'Accept': HTML_ACCEPT},
            timeout=self.timeout,
        )
        response.raise_for_status()

        cookies = extract_set_cookies(response)
        logger.info(f"Получено cookies: {len(cookies)}")

        nonce = extract_nonce(response.text)
        if nonce:
            logger.info("Найден nonce токен")

        context = SessionContext(cookies=tuple(cookies), csrf_token=nonce)
        self._install(context)

        # 2. Отправка формы, редиректы не выполняем
        logger.info("Отправляю форму входа...")
        headers = {
            'Content-Type': 'application/x-www-form-urlencoded',
            'Accept': HTML_ACCEPT,
            'Referer': self.login_url,
        }
        headers.update(context.headers())
        response = self.session.post(
            self.login_url,
            data=build_login_body(credentials.email, credentials.password, nonce),
            headers=headers,
            timeout=self.timeout,
            allow_redirects=False,
        )
        if not 200 <= response.status_code < 400:
            logger.error(f"❌ Авторизация не удалась, статус: {response.status_code}")
            return False

        new_cookies = extract_set_cookies(response)
        if new_cookies:
            context = context.with_cookies(new_cookies)
            self._install(context)

        # 200 встречается, если сайт отдаёт страницу без редиректа
        if response.status_code not in SUCCESS_STATUSES:
            logger.error(f"❌ Авторизация не удалась, неожиданный статус: {response.status_code}")
            return False

        logger.info("✅ Вход выполнен")
        session_data = SessionData(
            cookies=list(context.cookies),
            csrf_token=nonce,
            expiry_time=now_ms() + self.session_ttl_ms,
        )
        self.store.save(session_data)
        self._install(SessionContext.from_session(session_data))
        logger.info("✅ Авторизация успешна")
        return True

    def get_session(self) -> requests.Session:
        """Возвращает HTTP-клиент с установленными cookies"""
        return self.session

    def get_context(self) -> Optional[SessionContext]:
        """Возвращает текущий контекст авторизации (или None)"""
        return self.context

    def is_authenticated(self) -> bool:
        """Успешен ли последний вызов authenticate()"""
        return self._authenticated

    def get_session_info(self) -> Dict[str, Any]:
        """
        Возвращает информацию о текущей сессии

        Returns:
            Словарь с информацией о сессии
        """
        info = {
            'is_authenticated': self._authenticated,
            'base_url': self.base_url,
            'session_file': str(self.store.path),
        }

        if self.context is not None:
            info['cookies_count'] = len(self.context.cookies)
            info['has_csrf_token'] = bool(self.context.csrf_token)
            expires_at = self.context.expires_at()
            if expires_at is not None:
                info['expires_at'] = expires_at.isoformat()
                info['expires_in'] = max(0.0, (expires_at - datetime.now()).total_seconds())

        return info

    def logout(self) -> None:
        """Забывает сессию локально и удаляет файл сессии"""
        self._install(None)
        self._authenticated = False
        self.store.clear()
        logger.info("✅ Локальная сессия удалена")

    def close(self):
        """Закрывает HTTP-клиент"""
        try:
            self.session.close()
            logger.debug("HTTP-клиент закрыт")
        except Exception as e:
            logger.error(f"Ошибка при закрытии клиента: {e}")

    def __enter__(self):
        """Поддержка контекстного менеджера"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Автоматическое закрытие при выходе из контекста"""
        self.close()
