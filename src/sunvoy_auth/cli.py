#!/usr/bin/env python3
"""
Интерфейс командной строки для Sunvoy Auth

Команды:
1. --login  - авторизация (по умолчанию)
2. --status - информация о сохранённой сессии без сетевых запросов
3. --logout - удаление сохранённой сессии
"""

import os
import argparse
from typing import List, Optional

from .auth import SessionAuthenticator
from .models import Credentials, expiry_datetime, now_ms
from .session_store import SessionStore


def run_login(cfg, session_file: Optional[str] = None,
              email: Optional[str] = None, password: Optional[str] = None) -> bool:
    """Авторизуется на сайте и сохраняет сессию"""
    print("🔐 Авторизация...")

    try:
        if email and password:
            credentials = Credentials(email=email, password=password)
        else:
            credentials = Credentials.from_config(cfg)
    except ValueError as e:
        print(f"❌ {e}")
        print("💡 Создайте файл .env с вашими данными для входа:")
        print("   SUNVOY_EMAIL=ваш_email@example.com")
        print("   SUNVOY_PASSWORD=ваш_пароль")
        return False

    with SessionAuthenticator(cfg, session_file=session_file) as auth:
        if not auth.authenticate(credentials):
            print("❌ Авторизация не удалась")
            return False

        info = auth.get_session_info()
        print("✅ Авторизация успешна")
        print(f"   Cookies: {info.get('cookies_count', 0)}")
        if 'expires_at' in info:
            print(f"   Действует до: {info['expires_at']}")
        return True


def run_status(cfg, session_file: Optional[str] = None) -> bool:
    """Показывает состояние сохранённой сессии"""
    store = SessionStore(session_file or cfg.get_session_file())
    session = store.peek()

    if session is None:
        print(f"📭 Сохранённой сессии нет ({store.path})")
        return False

    expires_at = expiry_datetime(session.expiry_time)
    expires_text = expires_at.isoformat() if expires_at else str(session.expiry_time)
    print(f"📄 Файл сессии: {store.path}")
    print(f"   Cookies: {len(session.cookies)}")
    print(f"   CSRF токен: {'есть' if session.csrf_token else 'нет'}")
    if session.is_expired(now_ms()):
        print(f"⚠️ Сессия истекла: {expires_text}")
        return False
    print(f"✅ Сессия действует до: {expires_text}")
    return True


def run_logout(cfg, session_file: Optional[str] = None) -> bool:
    """Удаляет сохранённую сессию"""
    store = SessionStore(session_file or cfg.get_session_file())
    if not store.exists():
        print("📭 Сохранённой сессии нет, удалять нечего")
        return True
    store.clear()
    print("✅ Сохранённая сессия удалена")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sunvoy Auth - авторизация на challenge.sunvoy.com с сохранением сессии",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:
  python -m sunvoy_auth.cli                  # Авторизация (учётные данные из .env)
  python -m sunvoy_auth.cli --status         # Состояние сохранённой сессии
  python -m sunvoy_auth.cli --logout         # Удалить сохранённую сессию
        """
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument('--login', action='store_true', help='Авторизоваться (по умолчанию)')
    group.add_argument('--status', action='store_true', help='Показать состояние сохранённой сессии')
    group.add_argument('--logout', action='store_true', help='Удалить сохранённую сессию')

    parser.add_argument('--email', help='Email (иначе SUNVOY_EMAIL из .env)')
    parser.add_argument('--password', help='Пароль (иначе SUNVOY_PASSWORD из .env)')
    parser.add_argument('--session-file', help='Путь к файлу сессии вместо session.file из config.yaml')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Основная функция CLI"""
    from .config import config

    # SUNVOY_AUTH_DEBUG=1 принудительно включает DEBUG
    if os.environ.get('SUNVOY_AUTH_DEBUG') == '1':
        os.environ['SUNVOY_AUTH_LOGGING__LEVEL'] = 'DEBUG'
        config._apply_env_overrides()
        print("🔍 DEBUG режим активирован через SUNVOY_AUTH_DEBUG=1")

    config._configure_logging_if_needed(force=True)

    args = build_parser().parse_args(argv)

    if args.status:
        success = run_status(config, args.session_file)
    elif args.logout:
        success = run_logout(config, args.session_file)
    else:
        success = run_login(config, args.session_file, args.email, args.password)

    return 0 if success else 1


if __name__ == "__main__":
    raise SystemExit(main())
