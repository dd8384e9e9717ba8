"""Domain types for alert relaying — decoded events, credentials, outcomes."""

from __future__ import annotations

import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# A single webhook body, exactly as received.
RawPayload = bytes

# Severity label value → WeCom recipient (user ids joined with "|").
SeverityRecipientMap = dict[str, str]


class AlertStatus(StrEnum):
    """Alertmanager alert status."""

    FIRING = "firing"
    RESOLVED = "resolved"


class AlertEvent(BaseModel):
    """One firing/resolved condition, destined for exactly one message.

    All string fields default to ``""`` because the decoder degrades missing
    labels instead of rejecting the alert. ``status`` is kept as a plain
    string so unexpected values pass through untouched.
    """

    status: str = ""
    alert_name: str = ""
    hostname: str = ""
    env: str = ""
    job: str = ""
    project: str = ""
    service: str = ""
    severity: str = ""
    starts_at: datetime.datetime | None = None

    @property
    def is_firing(self) -> bool:
        return self.status == AlertStatus.FIRING


class Credential(BaseModel):
    """WeCom access token plus the moment it was issued."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    issued_at: float  # epoch seconds
    ttl_secs: float = 7200.0

    @property
    def expires_at(self) -> float:
        return self.issued_at + self.ttl_secs

    def is_stale(self, now: float) -> bool:
        """True once the validity window has fully elapsed."""
        return now >= self.expires_at


class DeliveryOutcome(BaseModel):
    """Parsed result of one message/send call."""

    success: bool
    errcode: int = 0
    errmsg: str = ""
    invalid_user: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)
