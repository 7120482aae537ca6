import io
import sys
from pathlib import Path
from typing import Iterable
from unittest.mock import Mock

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from urllib3._collections import HTTPHeaderDict
from urllib3.response import HTTPResponse

# Добавляем путь к src для доступа к модулям
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sunvoy_auth.config import Config  # noqa: E402
from sunvoy_auth.auth import SessionAuthenticator  # noqa: E402


LOGIN_PAGE_HTML = """
<html>
  <body>
    <form method="post" action="/login">
      <input type="hidden" name="nonce" value="abc123">
      <input type="text" name="username">
      <input type="password" name="password">
      <button type="submit">Login</button>
    </form>
  </body>
</html>
"""


def build_response(status_code: int = 200, text: str = "", set_cookies: Iterable[str] = ()) -> requests.Response:
    """Собирает настоящий requests.Response с несколькими Set-Cookie."""
    raw = HTTPResponse(
        body=io.BytesIO(b""),
        headers=HTTPHeaderDict([('Set-Cookie', c) for c in set_cookies]),
        status=status_code,
        preload_content=False,
    )
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    response.raw = raw
    response.headers = CaseInsensitiveDict(raw.headers)
    response.url = "https://challenge.sunvoy.com/login"
    return response


@pytest.fixture
def login_page_html() -> str:
    return LOGIN_PAGE_HTML


@pytest.fixture
def make_response():
    """Фабрика ответов для моков GET/POST."""
    return build_response


@pytest.fixture
def cfg(tmp_path: Path, monkeypatch) -> Config:
    """Конфигурация по умолчанию, без config.yaml и без учётных данных из окружения."""
    monkeypatch.delenv("SUNVOY_AUTH_ENV", raising=False)
    monkeypatch.chdir(tmp_path)
    return Config(config_path=str(tmp_path / "missing.yaml"))


@pytest.fixture
def session_file(tmp_path: Path) -> Path:
    return tmp_path / "session.json"


@pytest.fixture
def make_auth(cfg, session_file):
    """Создаёт SessionAuthenticator с замоканными GET/POST настоящей requests.Session."""

    def _make(get_response=None, post_response=None, get_side_effect=None):
        http = requests.Session()
        http.get = Mock(return_value=get_response, side_effect=get_side_effect)
        http.post = Mock(return_value=post_response)
        return SessionAuthenticator(cfg, session_file=session_file, http_session=http)

    return _make
