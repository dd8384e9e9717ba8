"""Exception hierarchy for webhook ingestion."""

from __future__ import annotations


class IngestError(Exception):
    """Base exception for all ingestion errors."""


class PayloadDecodeError(IngestError):
    """Webhook body is not valid JSON."""
