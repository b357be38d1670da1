"""
Settings Tests

Layering: defaults < YAML file < environment < explicit overrides.
"""

import pytest
from pydantic import ValidationError

from inkmatch.config.settings import (
    PACKAGE_PUBLIC_DIR,
    Settings,
    deep_merge,
    get_settings,
    load_settings,
    read_config_file,
    set_settings,
)


class TestDefaults:
    def test_defaults(self):
        settings = load_settings(environ={})
        assert settings.host == "0.0.0.0"
        assert settings.port == 8787
        assert settings.mcp_path == "/mcp"
        assert settings.static_prefix == "/public/"
        assert settings.static_dir == PACKAGE_PUBLIC_DIR
        assert settings.inkmatch_url == "https://inkmatch.io"
        assert settings.poll_interval == 1.0
        assert settings.job_timeout == 60.0
        assert settings.replicate_api_token is None

    def test_token_not_in_repr(self):
        settings = Settings(replicate_api_token="r8_secret")
        assert "r8_secret" not in repr(settings)
        assert settings.replicate_api_token == "r8_secret"

    def test_frozen(self):
        with pytest.raises(ValidationError):
            Settings().port = 1


class TestLayering:
    def test_environment(self):
        settings = load_settings(
            environ={
                "PORT": "9000",
                "REPLICATE_API_TOKEN": "r8_env",
                "INKMATCH_JSON_RESPONSE": "true",
                "HOST": "",
            }
        )
        assert settings.port == 9000
        assert settings.replicate_api_token == "r8_env"
        assert settings.json_response is True
        assert settings.host == "0.0.0.0"

    def test_config_file_then_env_then_overrides(self, tmp_path):
        conf = tmp_path / "inkmatch.yaml"
        conf.write_text("inkmatch:\n  port: 7000\n  job_timeout: 30\n  host: 127.0.0.1\n")

        settings = load_settings(conf, environ={"PORT": "7100"}, host=None)
        assert settings.port == 7100
        assert settings.job_timeout == 30
        assert settings.host == "127.0.0.1"

        overridden = load_settings(conf, environ={"PORT": "7100"}, port=7200)
        assert overridden.port == 7200

    def test_config_path_from_environment(self, tmp_path):
        conf = tmp_path / "conf.yaml"
        conf.write_text("port: 7300\n")
        settings = load_settings(environ={"INKMATCH_CONFIG": str(conf)})
        assert settings.port == 7300

    def test_invalid_value(self):
        with pytest.raises(ValidationError):
            load_settings(environ={"PORT": "not-a-port"})


class TestConfigFile:
    def test_missing_file(self, tmp_path):
        assert read_config_file(tmp_path / "absent.yaml") == {}

    def test_empty_file(self, tmp_path):
        conf = tmp_path / "empty.yaml"
        conf.write_text("")
        assert read_config_file(conf) == {}

    def test_non_mapping_rejected(self, tmp_path):
        conf = tmp_path / "list.yaml"
        conf.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            read_config_file(conf)


def test_deep_merge():
    base = {"a": {"x": 1, "y": 2}, "b": 1}
    assert deep_merge(base, {"a": {"y": 3}, "c": 4}) == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base == {"a": {"x": 1, "y": 2}, "b": 1}


def test_process_settings_cache(monkeypatch):
    monkeypatch.setenv("PORT", "8123")
    monkeypatch.delenv("INKMATCH_CONFIG", raising=False)
    first = get_settings()
    assert first.port == 8123
    assert get_settings() is first

    custom = Settings(port=1)
    set_settings(custom)
    assert get_settings() is custom
