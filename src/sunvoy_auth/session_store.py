"""
Хранение сессии на диске

Сессия лежит в JSON-файле рядом с рабочей директорией процесса.
Просроченная сессия при чтении удаляется. Блокировок нет: утилита
рассчитана на одного пользователя.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from .models import SessionData, now_ms

logger = logging.getLogger(__name__)


class SessionStore:
    """Чтение, запись и удаление файла сессии"""

    def __init__(self, path: Union[str, Path] = "session.json"):
        """
        Args:
            path: Путь к файлу сессии (относительный путь считается от cwd)
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[SessionData]:
        """
        Загружает сессию, если она есть и ещё действует

        Returns:
            SessionData или None, если файла нет, он повреждён или сессия истекла
        """
        try:
            if not self.path.exists():
                return None

            with open(self.path, 'r', encoding='utf-8') as f:
                session = SessionData.from_dict(json.load(f))

            if not session.is_expired(now_ms()):
                logger.debug(f"Сессия загружена из {self.path}")
                return session

            logger.info("Сохранённая сессия истекла, потребуется повторный вход")
            self.clear()
        except (OSError, ValueError, KeyError, TypeError) as e:
            # json.JSONDecodeError — подкласс ValueError
            logger.warning(f"Не удалось загрузить сессию из файла: {e}")
        return None

    def peek(self) -> Optional[SessionData]:
        """Читает файл сессии без проверки срока и без удаления"""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return SessionData.from_dict(json.load(f))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Файл сессии повреждён: {e}")
            return None

    def save(self, session: SessionData) -> bool:
        """
        Сохраняет сессию (файл перезаписывается целиком)

        Returns:
            True если запись прошла успешно
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(session.to_dict(), f, indent=2)
            logger.info("Сессия сохранена для повторного использования")
            return True
        except OSError as e:
            logger.error(f"Не удалось сохранить сессию в файл: {e}")
            return False

    def clear(self) -> None:
        """Удаляет файл сессии (отсутствие файла не ошибка)"""
        try:
            self.path.unlink()
            logger.debug(f"Файл сессии удалён: {self.path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Не удалось удалить файл сессии: {e}")
