"""
Модуль для работы с конфигурацией проекта

Функции:
- Загрузка config.yaml (+ профили: config.prod.yaml, config.test.yaml)
- ENV-переопределения (префикс SUNVOY_AUTH_, вложенность через __)
- Учётные данные из .env (SUNVOY_EMAIL, SUNVOY_PASSWORD)
- Валидация значений
- Настройка логирования
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List
from dotenv import load_dotenv
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 10
DEFAULT_TTL_HOURS = 24


class Config:
    """Класс для работы с конфигурацией проекта"""

    def __init__(self, config_path: str = None):
        """
        Инициализация конфигурации

        Args:
            config_path: Путь к файлу конфигурации
        """
        if config_path:
            self.config_path = Path(config_path)
        else:
            # Ищем config.yaml в текущей директории и выше
            current_dir = Path.cwd()
            config_path = current_dir / "config.yaml"

            while not config_path.exists() and current_dir.parent != current_dir:
                current_dir = current_dir.parent
                config_path = current_dir / "config.yaml"

            self.config_path = config_path

        self.config_data = {}
        self.env_data = {}

        self._load_config()
        self._load_env()
        try:
            self._apply_env_overrides()
            self._validate()
        except Exception as e:
            logger.warning(f"Проблема при применении ENV/валидации: {e}")
        self._configure_logging_if_needed()

    def _load_env(self):
        """Загружает переменные окружения из .env файла"""
        try:
            load_dotenv()
            self.env_data = {
                'SUNVOY_EMAIL': os.getenv('SUNVOY_EMAIL'),
                'SUNVOY_PASSWORD': os.getenv('SUNVOY_PASSWORD'),
            }
            logger.debug("Переменные окружения загружены из .env (если есть)")
        except Exception as e:
            logger.error(f"Ошибка загрузки переменных окружения: {e}")

    # --- Профили/ENV overrides/валидация/логирование ---
    def _resolve_config_path(self) -> Path:
        env = os.getenv('SUNVOY_AUTH_ENV', '').lower().strip()
        root = self.config_path.parent if self.config_path else Path.cwd()
        if env == 'production':
            candidate = root / 'config.prod.yaml'
        elif env == 'testing':
            candidate = root / 'config.test.yaml'
        else:
            candidate = root / 'config.yaml'
        if candidate.exists():
            return candidate
        return self.config_path

    def _load_config(self):
        """Загружает конфигурацию из YAML файла поверх значений по умолчанию"""
        self.config_data = self._get_default_config()
        try:
            self.config_path = self._resolve_config_path()
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded = yaml.safe_load(f) or {}
                self._merge(self.config_data, loaded)
                logger.debug(f"Конфигурация загружена: {self.config_path}")
            else:
                logger.debug(f"Файл конфигурации {self.config_path} не найден, используются значения по умолчанию")
        except Exception as e:
            logger.error(f"Ошибка загрузки конфигурации: {e}")
            self.config_data = self._get_default_config()

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value

    def _set_nested(self, data: Dict[str, Any], dotted: str, value: Any) -> None:
        cur = data
        keys = dotted.split('.')
        for k in keys[:-1]:
            if k not in cur or not isinstance(cur[k], dict):
                cur[k] = {}
            cur = cur[k]
        cur[keys[-1]] = value

    def _apply_env_overrides(self) -> None:
        """Переопределяет конфиг значениями из ENV (SUNVOY_AUTH_*)."""
        prefix = 'SUNVOY_AUTH_'
        for key, val in os.environ.items():
            if not key.startswith(prefix):
                continue
            # Служебные переменные не являются ключами конфига
            if key in ('SUNVOY_AUTH_ENV', 'SUNVOY_AUTH_DEBUG'):
                continue
            tail = key[len(prefix):]
            dotted = tail.replace('__', '.').lower()
            parsed: Any = val
            if val.lower() in ('true', 'false'):
                parsed = (val.lower() == 'true')
            else:
                try:
                    if '.' in val:
                        parsed = float(val)
                    else:
                        parsed = int(val)
                except ValueError:
                    parsed = val
            self._set_nested(self.config_data, dotted, parsed)
        if os.getenv('SUNVOY_AUTH_ENV'):
            logger.info(f"Активирован профиль: {os.getenv('SUNVOY_AUTH_ENV')}")

    def _validate(self) -> None:
        """Проверяет диапазоны числовых параметров."""
        try:
            timeout = float(self.get('web.timeout', DEFAULT_TIMEOUT))
            if timeout <= 0:
                raise ValueError(timeout)
        except (TypeError, ValueError):
            logger.warning(f"web.timeout некорректен — установлено {DEFAULT_TIMEOUT}")
            self._set_nested(self.config_data, 'web.timeout', DEFAULT_TIMEOUT)
        try:
            ttl = float(self.get('session.ttl_hours', DEFAULT_TTL_HOURS))
            if ttl <= 0:
                raise ValueError(ttl)
        except (TypeError, ValueError):
            logger.warning(f"session.ttl_hours некорректен — установлено {DEFAULT_TTL_HOURS}")
            self._set_nested(self.config_data, 'session.ttl_hours', DEFAULT_TTL_HOURS)

    def _configure_logging_if_needed(self, force: bool = False) -> None:
        """Инициализирует/переинициализирует базовое логирование по config.

        Повторная конфигурация выполняется, если:
          - ранее не конфигурировалось, или
          - изменился уровень/формат/файл логирования, или
          - явно указан force=True
        """
        root = logging.getLogger()

        console_level_name = str(self.get_console_logging_level()).upper()
        file_level_name = str(self.get_file_logging_level()).upper()
        console_level = getattr(logging, console_level_name, logging.INFO)
        file_level = getattr(logging, file_level_name, logging.DEBUG)

        desired_fmt = self.get_logging_format()
        desired_file = self.get_logging_file() if self.is_logging_to_file_enabled() else None

        if getattr(root, "_sunvoy_auth_configured", False) and not force:
            current_console_level = getattr(root, "_sunvoy_auth_console_level", None)
            current_file_level = getattr(root, "_sunvoy_auth_file_level", None)
            current_fmt = getattr(root, "_sunvoy_auth_format", None)
            current_file = getattr(root, "_sunvoy_auth_file", None)
            if (
                current_console_level == console_level_name and
                current_file_level == file_level_name and
                current_fmt == desired_fmt and
                current_file == desired_file
            ):
                return

        handlers: List[logging.Handler] = []
        console = logging.StreamHandler()
        console.setLevel(console_level)
        console.setFormatter(logging.Formatter(desired_fmt))
        handlers.append(console)

        if desired_file:
            self.cleanup_old_log_files()

            log_file = Path(desired_file)
            try:
                log_file.parent.mkdir(parents=True, exist_ok=True)
                fh = logging.FileHandler(log_file, encoding='utf-8')
                fh.setLevel(file_level)
                fh.setFormatter(logging.Formatter(desired_fmt))
                handlers.append(fh)
            except OSError as e:
                logger.debug(f"Не удалось открыть файл лога: {e}")

        root_level = min(console_level, file_level) if desired_file else console_level
        logging.basicConfig(level=root_level, handlers=handlers, format=desired_fmt, force=True)
        setattr(root, "_sunvoy_auth_configured", True)
        setattr(root, "_sunvoy_auth_console_level", console_level_name)
        setattr(root, "_sunvoy_auth_file_level", file_level_name)
        setattr(root, "_sunvoy_auth_format", desired_fmt)
        setattr(root, "_sunvoy_auth_file", desired_file)

    def _get_default_config(self) -> Dict[str, Any]:
        """Возвращает конфигурацию по умолчанию"""
        return {
            'web': {
                'base_url': "https://challenge.sunvoy.com",
                'login_path': "/login",
                'timeout': DEFAULT_TIMEOUT,
                'max_redirects': 5,
                'user_agent': DEFAULT_USER_AGENT,
                # Заголовки «как у браузера», сайт отдаёт форму только им
                'headers': {
                    'Accept': "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
                    'Accept-Language': "en-US,en;q=0.5",
                    'Accept-Encoding': "gzip, deflate",
                    'Connection': "keep-alive",
                    'Upgrade-Insecure-Requests': "1",
                },
            },
            'session': {
                'file': "session.json",
                'ttl_hours': DEFAULT_TTL_HOURS,
            },
            'logging': {
                'level': "INFO",
                'format': "%(asctime)s - %(levelname)s - %(message)s",
                'log_to_file': False,
                'log_file': "logs/sunvoy_auth.log",
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Получает значение конфигурации по ключу

        Args:
            key: Ключ в формате 'section.subsection.parameter'
            default: Значение по умолчанию

        Returns:
            Значение параметра или default
        """
        try:
            keys = key.split('.')
            value = self.config_data

            for k in keys:
                value = value[k]

            return value
        except (KeyError, TypeError):
            return default

    def get_env(self, key: str, default: Any = None) -> Any:
        """
        Получает значение переменной окружения

        Args:
            key: Ключ переменной окружения
            default: Значение по умолчанию

        Returns:
            Значение переменной окружения или default
        """
        value = self.env_data.get(key)
        return default if value is None else value

    def get_base_url(self) -> str:
        """Получает базовый URL сайта без завершающего слэша"""
        return str(self.get('web.base_url', "https://challenge.sunvoy.com")).rstrip('/')

    def get_login_path(self) -> str:
        return self.get('web.login_path', "/login")

    def get_timeout(self) -> float:
        """Получает таймаут одного HTTP-запроса (секунды)"""
        return self.get('web.timeout', DEFAULT_TIMEOUT)

    def get_max_redirects(self) -> int:
        return int(self.get('web.max_redirects', 5))

    def get_user_agent(self) -> str:
        return self.get('web.user_agent', DEFAULT_USER_AGENT)

    def get_default_headers(self) -> Dict[str, str]:
        """Получает заголовки по умолчанию для всех запросов"""
        headers = dict(self.get('web.headers', {}) or {})
        headers['User-Agent'] = self.get_user_agent()
        return {k: str(v) for k, v in headers.items()}

    def get_session_file(self) -> str:
        """Получает путь к файлу сохранённой сессии"""
        return self.get('session.file', "session.json")

    def get_session_ttl_hours(self) -> float:
        """Получает срок жизни сохранённой сессии (часы)"""
        return self.get('session.ttl_hours', DEFAULT_TTL_HOURS)

    def get_console_logging_level(self) -> str:
        """Получает уровень логирования для консоли"""
        # Поддержка старого формата logging.level
        return self.get('logging.console_level', self.get('logging.level', "INFO"))

    def get_file_logging_level(self) -> str:
        """Получает уровень логирования для файла"""
        return self.get('logging.file_level', "DEBUG")

    def get_logging_format(self) -> str:
        """Получает формат логов"""
        return self.get('logging.format', "%(asctime)s - %(levelname)s - %(message)s")

    def get_logging_file(self) -> str:
        """Получает путь к файлу логов

        Шаблон может содержать {timestamp} — тогда для каждого запуска
        создаётся отдельный файл.
        """
        log_file_template = self.get('logging.log_file', "logs/sunvoy_auth.log")
        if "{timestamp}" in log_file_template:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            return log_file_template.replace("{timestamp}", timestamp)
        return log_file_template

    def is_logging_to_file_enabled(self) -> bool:
        """Проверяет, включено ли логирование в файл"""
        return bool(self.get('logging.log_to_file', False))

    def get_max_log_files(self) -> int:
        """Получает максимальное количество файлов логов для хранения"""
        return int(self.get('logging.max_log_files', 10))

    def cleanup_old_log_files(self) -> None:
        """Удаляет старые файлы логов, оставляя только последние max_log_files"""
        try:
            logs_dir = Path(self.get_logging_file()).parent
            if not logs_dir.exists():
                return

            log_files = list(logs_dir.glob("sunvoy_auth_*.log"))
            max_files = self.get_max_log_files()

            if len(log_files) <= max_files:
                return

            # Самые новые последними
            log_files.sort(key=lambda f: f.stat().st_mtime)

            for old_file in log_files[:-max_files]:
                try:
                    old_file.unlink()
                    logger.debug(f"Удален старый лог файл: {old_file}")
                except OSError as e:
                    logger.debug(f"Не удалось удалить лог файл {old_file}: {e}")

        except OSError as e:
            logger.debug(f"Ошибка при очистке старых логов: {e}")


# Глобальный экземпляр конфигурации
config = Config()
