"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, SecretStr, ValidationError, field_validator

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class ConfigError(Exception):
    """Configuration file is missing, unreadable, or invalid."""


class WeComConfig(BaseModel):
    """WeCom (WeChat Work) application credentials and API behaviour."""

    corp_id: str = ""
    corp_secret: SecretStr = SecretStr("")
    agent_id: int = 0
    to_party: str = ""
    to_tag: str = ""
    api_base: str = "https://qyapi.weixin.qq.com/cgi-bin"
    token_ttl_secs: float = 7200.0
    retry_backoff_secs: float = 5.0
    http_timeout_secs: float | None = None


class RelayConfig(BaseModel):
    """Ingestion queue and dispatch pacing."""

    queue_capacity: int = 1000
    send_interval_secs: float = 1.0


class ListenerConfig(BaseModel):
    """Webhook HTTP listener."""

    host: str = "0.0.0.0"
    port: int = 9000
    path: str = "/"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    wecom: WeComConfig = WeComConfig()
    severity_recipients: dict[str, str] = {}
    relay: RelayConfig = RelayConfig()
    listener: ListenerConfig = ListenerConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("severity_recipients", mode="before")
    @classmethod
    def _stringify_severity_keys(cls, value: Any) -> Any:
        # YAML reads unquoted `1:` as an int key.
        if isinstance(value, dict):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Unlike optional tuning knobs, the WeCom application identity is mandatory,
    so a missing file or any absent WeCom credential is an error.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.

    Raises:
        ConfigError: File missing, unparsable, or failing validation.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise ConfigError(f"config file not found: {config_path}")

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read config file {config_path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {config_path} must contain a mapping")

    try:
        settings = Settings(**raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid config file {config_path}: {exc}") from exc

    if not settings.wecom.corp_id or not settings.wecom.corp_secret.get_secret_value():
        raise ConfigError("wecom.corp_id and wecom.corp_secret are required")
    if settings.wecom.agent_id <= 0:
        raise ConfigError("wecom.agent_id must be a positive WeCom application id")

    _settings = settings
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading the default file if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
