"""
Разбор страницы входа и заголовков ответа

- Поиск скрытого поля nonce в форме входа
- Сбор Set-Cookie из ответа в виде пар name=value
- Сборка тела POST-запроса формы
"""

import logging
from typing import List
from urllib.parse import quote, urlencode

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

NONCE_FIELD = "nonce"


def extract_nonce(html: str, field_name: str = NONCE_FIELD) -> str:
    """
    Ищет в HTML элемент с name="nonce" и возвращает его value

    Args:
        html: HTML страницы входа
        field_name: Имя скрытого поля

    Returns:
        Значение токена или пустая строка, если поле не найдено
    """
    if not html:
        return ""
    try:
        soup = BeautifulSoup(html, 'html.parser')
    except Exception as e:
        logger.warning(f"Не удалось разобрать страницу входа: {e}")
        return ""

    for tag in soup.find_all(attrs={'name': field_name}):
        value = tag.get('value')
        if value:
            logger.debug("Найден nonce токен")
            return value

    logger.debug("Поле nonce на странице не найдено, продолжаю с пустым токеном")
    return ""


def cookie_pair(set_cookie: str) -> str:
    """Оставляет от значения Set-Cookie только name=value (до первой ';')"""
    return set_cookie.split(';', 1)[0].strip()


def extract_set_cookies(response) -> List[str]:
    """
    Собирает все Set-Cookie ответа как список name=value

    requests склеивает повторяющиеся заголовки через запятую, поэтому
    значения берутся из исходных заголовков urllib3, где они хранятся отдельно.
    """
    raw_headers = getattr(getattr(response, 'raw', None), 'headers', None)
    if raw_headers is not None and hasattr(raw_headers, 'getlist'):
        values = raw_headers.getlist('Set-Cookie')
    else:
        header = response.headers.get('Set-Cookie')
        values = [header] if header else []

    return [pair for pair in (cookie_pair(v) for v in values) if pair]


def build_login_body(email: str, password: str, nonce: str) -> str:
    """Тело формы: username=...&password=...&nonce=... (URL-encoded)"""
    # Кодирование как у encodeURIComponent: пробел -> %20, а не +
    return urlencode(
        [('username', email), ('password', password), ('nonce', nonce)],
        quote_via=quote,
        safe="!*'()",
    )
