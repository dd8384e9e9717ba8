"""Core module — config, types, logging."""

from alertrelay.core.config import (
    ConfigError,
    Settings,
    get_settings,
    load_settings,
    reset_settings,
)
from alertrelay.core.logging import setup_logging
from alertrelay.core.types import (
    AlertEvent,
    AlertStatus,
    Credential,
    DeliveryOutcome,
    RawPayload,
    SeverityRecipientMap,
)

__all__ = [
    "AlertEvent",
    "AlertStatus",
    "ConfigError",
    "Credential",
    "DeliveryOutcome",
    "RawPayload",
    "Settings",
    "SeverityRecipientMap",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
