"""Tests for alertrelay/core/config.py — YAML loading, defaults, fatal errors, SecretStr."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from alertrelay.core import config as config_module
from alertrelay.core.config import (
    ConfigError,
    ListenerConfig,
    LoggingConfig,
    RelayConfig,
    Settings,
    WeComConfig,
    get_settings,
    load_settings,
    reset_settings,
)


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()


def _write(tmp_path: Path, data: object, name: str = "settings.yaml") -> Path:
    config_file = tmp_path / name
    config_file.write_text(yaml.dump(data))
    return config_file


def _minimal() -> dict[str, object]:
    return {"wecom": {"corp_id": "ww123", "corp_secret": "s3cret", "agent_id": 1000002}}


class TestDefaults:
    """Optional sections should have sensible defaults."""

    def test_default_wecom_config(self) -> None:
        cfg = WeComConfig()
        assert cfg.api_base == "https://qyapi.weixin.qq.com/cgi-bin"
        assert cfg.token_ttl_secs == 7200.0
        assert cfg.retry_backoff_secs == 5.0
        assert cfg.http_timeout_secs is None
        assert cfg.corp_secret.get_secret_value() == ""

    def test_default_relay_config(self) -> None:
        cfg = RelayConfig()
        assert cfg.queue_capacity == 1000
        assert cfg.send_interval_secs == 1.0

    def test_default_listener_config(self) -> None:
        cfg = ListenerConfig()
        assert cfg.port == 9000
        assert cfg.path == "/"

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "json"

    def test_default_settings(self) -> None:
        s = Settings()
        assert s.severity_recipients == {}
        assert s.relay.queue_capacity == 1000


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, {
            "wecom": {
                "corp_id": "ww123",
                "corp_secret": "s3cret",
                "agent_id": 1000002,
                "to_party": "2",
            },
            "severity_recipients": {"1": "alice|bob", "2": "carol", "3": "dave"},
            "relay": {"queue_capacity": 50},
            "logging": {"level": "DEBUG", "format": "console"},
        })

        settings = load_settings(config_file)

        assert settings.wecom.corp_id == "ww123"
        assert settings.wecom.corp_secret.get_secret_value() == "s3cret"
        assert settings.wecom.agent_id == 1000002
        assert settings.wecom.to_party == "2"
        assert settings.severity_recipients["1"] == "alice|bob"
        assert settings.relay.queue_capacity == 50
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "console"

    def test_integer_severity_keys_become_strings(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            "wecom:\n  corp_id: ww123\n  corp_secret: s3cret\n  agent_id: 1000002\n"
            "severity_recipients:\n  1: alice\n  2: bob\n  3:\n"
        )
        settings = load_settings(config_file)
        assert settings.severity_recipients == {"1": "alice", "2": "bob", "3": ""}

    def test_partial_yaml_merges_with_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(_write(tmp_path, _minimal()))
        assert settings.wecom.token_ttl_secs == 7200.0
        assert settings.listener.port == 9000

    def test_load_caches_globally(self, tmp_path: Path) -> None:
        settings = load_settings(_write(tmp_path, _minimal()))
        assert get_settings() is settings


class TestFatalConfig:
    """Missing or malformed configuration must be reported, not defaulted."""

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nonexistent.yaml")

    def test_empty_file_raises_missing_credentials(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        with pytest.raises(ConfigError, match="corp_id"):
            load_settings(config_file)

    def test_unparsable_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("wecom: [unclosed\n")
        with pytest.raises(ConfigError):
            load_settings(config_file)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(_write(tmp_path, ["a", "b"]))

    def test_wrong_type_raises(self, tmp_path: Path) -> None:
        data = _minimal()
        data["relay"] = {"queue_capacity": "lots"}
        with pytest.raises(ConfigError, match="invalid"):
            load_settings(_write(tmp_path, data))

    def test_missing_secret_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_settings(_write(tmp_path, {"wecom": {"corp_id": "ww123"}}))

    def test_missing_agent_id_raises(self, tmp_path: Path) -> None:
        data = {"wecom": {"corp_id": "ww1", "corp_secret": "x"}}
        with pytest.raises(ConfigError, match="agent_id"):
            load_settings(_write(tmp_path, data))

    def test_negative_agent_id_raises(self, tmp_path: Path) -> None:
        data = {"wecom": {"corp_id": "ww1", "corp_secret": "x", "agent_id": -5}}
        with pytest.raises(ConfigError, match="agent_id"):
            load_settings(_write(tmp_path, data))

    def test_failed_load_does_not_cache(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "nonexistent.yaml")
        assert config_module._settings is None


class TestSecretStr:
    """Sensitive fields should use SecretStr to prevent leaking."""

    def test_secret_str_repr_does_not_leak(self) -> None:
        cfg = WeComConfig(corp_secret="super-secret")  # type: ignore[arg-type]
        repr_str = repr(cfg)
        assert "super-secret" not in repr_str
        assert "**********" in repr_str

    def test_secret_str_get_value(self) -> None:
        cfg = WeComConfig(corp_secret="my-secret")  # type: ignore[arg-type]
        assert cfg.corp_secret.get_secret_value() == "my-secret"
