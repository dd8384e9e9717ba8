"""Pure functions that turn AlertEvents into WeCom text messages."""

from __future__ import annotations

import datetime
from typing import Any

from alertrelay.core.types import AlertEvent, SeverityRecipientMap

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# WeCom renders </br> as a line break in text messages.
_LINE_BREAK = "</br>"


def resolve_recipient(severity: str, recipients: SeverityRecipientMap) -> str:
    """Map a severity label to its recipient; unknown severities map to ``""``."""
    return recipients.get(severity, "")


def format_time(value: datetime.datetime | None) -> str:
    return value.strftime(TIME_FORMAT) if value is not None else ""


def format_content(event: AlertEvent, sent_at: datetime.datetime) -> str:
    """Render the human-readable body of one alert notification."""
    lines = [
        f"[{event.status}]-{event.alert_name}",
        f"Project: {event.project}",
        f"Env: {event.env}",
        f"Hostname: {event.hostname}",
        f"Job: {event.job}",
        f"Service: {event.service}",
        f"Level: {event.severity}",
        f"StartAt: {format_time(event.starts_at)}",
        f"SendAt: {format_time(sent_at)}",
    ]
    return _LINE_BREAK.join(lines)


def build_message(
    event: AlertEvent,
    recipient: str,
    agent_id: int,
    sent_at: datetime.datetime,
    to_party: str = "",
    to_tag: str = "",
) -> dict[str, Any]:
    """Build the message/send request body for one alert."""
    return {
        "touser": recipient,
        "toparty": to_party,
        "totag": to_tag,
        "msgtype": "text",
        "agentid": agent_id,
        "text": {"content": format_content(event, sent_at)},
    }
