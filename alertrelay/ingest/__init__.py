"""Webhook ingestion — listener, bounded queue, and payload decoding."""

from alertrelay.ingest.decoder import decode_payload, parse_timestamp
from alertrelay.ingest.exceptions import IngestError, PayloadDecodeError
from alertrelay.ingest.listener import create_listener_app, start_listener
from alertrelay.ingest.queue import IngestionQueue

__all__ = [
    "IngestError",
    "IngestionQueue",
    "PayloadDecodeError",
    "create_listener_app",
    "decode_payload",
    "parse_timestamp",
    "start_listener",
]
