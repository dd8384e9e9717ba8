"""Alert dispatch — rate-limited delivery loop and message formatting."""

from alertrelay.dispatch.factory import create_relay_stack
from alertrelay.dispatch.formatters import (
    build_message,
    format_content,
    format_time,
    resolve_recipient,
)
from alertrelay.dispatch.loop import DispatchLoop

__all__ = [
    "DispatchLoop",
    "build_message",
    "create_relay_stack",
    "format_content",
    "format_time",
    "resolve_recipient",
]
