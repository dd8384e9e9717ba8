"""Convenience factory for wiring the relay stack."""

from __future__ import annotations

import httpx

from alertrelay.core.config import Settings
from alertrelay.dispatch.loop import DispatchLoop
from alertrelay.ingest.queue import IngestionQueue
from alertrelay.wecom.client import DeliveryClient
from alertrelay.wecom.token import CredentialManager


def create_relay_stack(
    settings: Settings,
    http: httpx.AsyncClient | None = None,
) -> tuple[IngestionQueue, DispatchLoop]:
    """Build the queue and dispatch loop from settings.

    Both WeCom clients share *http* when given; otherwise each creates its
    own on first use and closes it when closed.

    Returns:
        (queue, dispatch_loop)
    """
    wecom = settings.wecom
    queue = IngestionQueue(capacity=settings.relay.queue_capacity)
    credentials = CredentialManager(wecom, http=http)
    delivery = DeliveryClient(wecom, http=http)

    loop = DispatchLoop(
        queue=queue,
        credentials=credentials,
        delivery=delivery,
        recipients=settings.severity_recipients,
        agent_id=wecom.agent_id,
        to_party=wecom.to_party,
        to_tag=wecom.to_tag,
        send_interval_secs=settings.relay.send_interval_secs,
    )
    return queue, loop
