"""
Структуры данных авторизации: учётные данные, сохраняемая сессия и
неизменяемый контекст для последующих запросов.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple


def now_ms() -> int:
    """Текущее время в миллисекундах с начала эпохи."""
    return int(time.time() * 1000)


# 9999-12-31T23:59:59.999Z, дальше datetime не умеет
MAX_EXPIRY_MS = 253402300799999


def expiry_datetime(expiry_ms: int) -> Optional[datetime]:
    """Момент истечения как datetime или None, если платформа не может его представить"""
    try:
        return datetime.fromtimestamp(expiry_ms / 1000)
    except (OverflowError, OSError, ValueError):
        return None


@dataclass(frozen=True)
class Credentials:
    """Учётные данные для входа. На диск не сохраняются."""
    email: str
    password: str = field(repr=False)

    @classmethod
    def from_config(cls, cfg) -> "Credentials":
        """
        Берёт учётные данные из .env / переменных окружения

        Raises:
            ValueError: если email или пароль не заданы
        """
        email = cfg.get_env('SUNVOY_EMAIL')
        password = cfg.get_env('SUNVOY_PASSWORD')
        if not email or not password:
            raise ValueError("SUNVOY_EMAIL и SUNVOY_PASSWORD должны быть заданы в .env или окружении")
        return cls(email=email, password=password)


@dataclass
class SessionData:
    """Сессия в том виде, в котором она лежит в JSON-файле."""
    cookies: List[str]
    expiry_time: int
    csrf_token: Optional[str] = None

    def is_expired(self, at_ms: Optional[int] = None) -> bool:
        current = now_ms() if at_ms is None else at_ms
        return current >= self.expiry_time

    def to_dict(self) -> Dict[str, Any]:
        """Сериализует в формат файла: cookies, csrfToken?, expiryTime"""
        data: Dict[str, Any] = {'cookies': list(self.cookies)}
        if self.csrf_token is not None:
            data['csrfToken'] = self.csrf_token
        data['expiryTime'] = self.expiry_time
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionData":
        """
        Восстанавливает сессию из словаря, прочитанного из файла

        Raises:
            KeyError, TypeError, ValueError: при повреждённой структуре
        """
        if not isinstance(data, dict):
            raise TypeError(f"Ожидался объект, получено: {type(data).__name__}")
        cookies = data['cookies']
        if not isinstance(cookies, list) or not all(isinstance(c, str) for c in cookies):
            raise TypeError("cookies должен быть списком строк")
        expiry = data['expiryTime']
        if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
            raise TypeError("expiryTime должен быть числом")
        if not math.isfinite(expiry) or not 0 <= expiry <= MAX_EXPIRY_MS:
            raise ValueError(f"expiryTime вне допустимого диапазона: {expiry}")
        token = data.get('csrfToken')
        if token is not None and not isinstance(token, str):
            raise TypeError("csrfToken должен быть строкой")
        return cls(cookies=cookies, expiry_time=int(expiry), csrf_token=token)


@dataclass(frozen=True)
class SessionContext:
    """Неизменяемое состояние авторизации, которое передаётся в запросы явно."""
    cookies: Tuple[str, ...] = ()
    csrf_token: Optional[str] = None
    expiry_time: Optional[int] = None

    @classmethod
    def from_session(cls, session: SessionData) -> "SessionContext":
        return cls(
            cookies=tuple(session.cookies),
            csrf_token=session.csrf_token,
            expiry_time=session.expiry_time,
        )

    def with_cookies(self, cookies: Iterable[str]) -> "SessionContext":
        """Возвращает новый контекст с добавленными cookies (старые сохраняются)."""
        merged = list(self.cookies)
        for item in cookies:
            if item not in merged:
                merged.append(item)
        return SessionContext(
            cookies=tuple(merged),
            csrf_token=self.csrf_token,
            expiry_time=self.expiry_time,
        )

    def cookie_header(self) -> Optional[str]:
        """Значение заголовка Cookie или None, если cookies нет"""
        if not self.cookies:
            return None
        return '; '.join(self.cookies)

    def headers(self) -> Dict[str, str]:
        header = self.cookie_header()
        return {'Cookie': header} if header else {}

    def expires_at(self) -> Optional[datetime]:
        if self.expiry_time is None:
            return None
        return expiry_datetime(self.expiry_time)
