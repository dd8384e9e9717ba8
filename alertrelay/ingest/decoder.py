"""Decode Alertmanager webhook bodies into AlertEvent objects.

Expected structure::

    {
        "alerts": [
            {
                "status": "firing",
                "labels": {"alertname": "HostDown", "severity": "1", ...},
                "startsAt": "2024-01-01T00:00:00.123456789+08:00"
            },
            ...
        ]
    }

Only unparsable JSON is an error. Every other deviation (missing
``alerts``, wrong types, absent labels) degrades to empty values.
"""

from __future__ import annotations

import datetime
import json
import re
from typing import Any

from alertrelay.core.fields import get_dict, get_list, get_str
from alertrelay.core.types import AlertEvent, RawPayload
from alertrelay.ingest.exceptions import PayloadDecodeError

_ISO_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:?\d{2})?$"
)


def parse_timestamp(value: str) -> datetime.datetime | None:
    """Parse an ISO-8601 timestamp with offset into an aware datetime.

    Fractions longer than microseconds are truncated, ``Z`` means UTC, and
    a missing offset is taken as UTC. Returns None if unparsable.
    """
    match = _ISO_RE.match(value.strip())
    if match is None:
        return None

    text = match["base"]
    if match["frac"]:
        text += "." + match["frac"][:6].ljust(6, "0")
    tz = match["tz"]
    if tz and tz != "Z":
        text += tz if ":" in tz else f"{tz[:3]}:{tz[3:]}"
    try:
        parsed = datetime.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.UTC)
    return parsed


def _decode_alert(alert: dict[str, Any]) -> AlertEvent:
    labels = get_dict(alert, "labels")
    return AlertEvent(
        status=get_str(alert, "status"),
        alert_name=get_str(labels, "alertname"),
        hostname=get_str(labels, "hostname"),
        env=get_str(labels, "env"),
        job=get_str(labels, "job"),
        project=get_str(labels, "project"),
        service=get_str(labels, "service"),
        severity=get_str(labels, "severity") or get_str(labels, "level"),
        starts_at=parse_timestamp(get_str(alert, "startsAt")),
    )


def decode_payload(raw: RawPayload | str) -> list[AlertEvent]:
    """Decode one webhook body into its alerts, preserving array order.

    Raises:
        PayloadDecodeError: The body is not valid JSON.
    """
    try:
        doc = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as exc:
        raise PayloadDecodeError(f"webhook body is not valid JSON: {exc}") from exc

    return [
        _decode_alert(alert)
        for alert in get_list(doc, "alerts")
        if isinstance(alert, dict)
    ]
