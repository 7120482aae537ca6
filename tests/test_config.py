import os
import textwrap

from sunvoy_auth.config import Config


def test_config_defaults_when_missing_file(tmp_path, monkeypatch):
    """
    При отсутствии config.yaml подставляются значения по умолчанию,
    чтобы авторизация работала «из коробки».
    """
    monkeypatch.chdir(tmp_path)
    cfg = Config()

    assert cfg.get_base_url() == "https://challenge.sunvoy.com"
    assert cfg.get_login_path() == "/login"
    assert cfg.get_timeout() == 10
    assert cfg.get_max_redirects() == 5
    assert cfg.get_session_file() == "session.json"
    assert cfg.get_session_ttl_hours() == 24


def test_config_overrides_from_yaml(tmp_path):
    yaml_text = textwrap.dedent(
        """
        web:
          base_url: "https://staging.example.org/"
          timeout: 3
        session:
          file: "state/session.json"
        """
    ).strip()
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(yaml_text, encoding="utf-8")

    cfg = Config(config_path=str(cfg_path))

    # Завершающий слэш отрезается
    assert cfg.get_base_url() == "https://staging.example.org"
    assert cfg.get_timeout() == 3
    assert cfg.get_session_file() == "state/session.json"
    # Ключи, не заданные в YAML, остаются по умолчанию
    assert cfg.get_login_path() == "/login"
    assert cfg.get_default_headers()["Accept-Language"] == "en-US,en;q=0.5"


def test_env_overrides_are_typed(tmp_path, monkeypatch):
    monkeypatch.setenv("SUNVOY_AUTH_WEB__TIMEOUT", "5")
    monkeypatch.setenv("SUNVOY_AUTH_SESSION__TTL_HOURS", "1.5")
    monkeypatch.setenv("SUNVOY_AUTH_LOGGING__LOG_TO_FILE", "false")

    cfg = Config(config_path=str(tmp_path / "missing.yaml"))

    assert cfg.get_timeout() == 5
    assert cfg.get_session_ttl_hours() == 1.5
    assert cfg.is_logging_to_file_enabled() is False


def test_invalid_values_fall_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("SUNVOY_AUTH_WEB__TIMEOUT", "-1")
    monkeypatch.setenv("SUNVOY_AUTH_SESSION__TTL_HOURS", "never")

    cfg = Config(config_path=str(tmp_path / "missing.yaml"))

    assert cfg.get_timeout() == 10
    assert cfg.get_session_ttl_hours() == 24


def test_testing_profile_selects_profile_file(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text("web:\n  timeout: 7\n", encoding="utf-8")
    (tmp_path / "config.test.yaml").write_text("web:\n  timeout: 1\n", encoding="utf-8")
    monkeypatch.setenv("SUNVOY_AUTH_ENV", "testing")

    cfg = Config(config_path=str(tmp_path / "config.yaml"))

    assert cfg.config_path.name == "config.test.yaml"
    assert cfg.get_timeout() == 1


def test_user_agent_is_part_of_default_headers(tmp_path, monkeypatch):
    monkeypatch.setenv("SUNVOY_AUTH_WEB__USER_AGENT", "custom-agent/1.0")
    cfg = Config(config_path=str(tmp_path / "missing.yaml"))

    assert cfg.get_default_headers()["User-Agent"] == "custom-agent/1.0"


def test_credentials_come_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("SUNVOY_EMAIL", "env@example.org")
    monkeypatch.setenv("SUNVOY_PASSWORD", "env-secret")

    cfg = Config(config_path=str(tmp_path / "missing.yaml"))

    assert cfg.get_env("SUNVOY_EMAIL") == "env@example.org"
    assert cfg.get_env("SUNVOY_PASSWORD") == "env-secret"
    assert cfg.get_env("UNKNOWN", "fallback") == "fallback"


def test_log_file_template_gets_timestamp(tmp_path):
    cfg = Config(config_path=str(tmp_path / "missing.yaml"))
    cfg.config_data["logging"]["log_file"] = os.path.join("logs", "sunvoy_auth_{timestamp}.log")

    path = cfg.get_logging_file()
    assert "{timestamp}" not in path
    assert path.startswith(os.path.join("logs", "sunvoy_auth_"))


def test_default_accept_encoding_is_decodable(tmp_path):
    cfg = Config(config_path=str(tmp_path / "missing.yaml"))

    encodings = [e.strip() for e in cfg.get_default_headers()["Accept-Encoding"].split(",")]
    assert encodings == ["gzip", "deflate"]
