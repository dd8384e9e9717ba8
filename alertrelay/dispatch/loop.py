"""Single-consumer dispatch loop — decode, format, authenticate, deliver, pace."""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Callable

import structlog

from alertrelay.core.types import AlertEvent, SeverityRecipientMap
from alertrelay.dispatch.formatters import build_message, resolve_recipient
from alertrelay.ingest.decoder import decode_payload
from alertrelay.ingest.exceptions import PayloadDecodeError
from alertrelay.ingest.queue import IngestionQueue
from alertrelay.wecom.base import SleepFn
from alertrelay.wecom.client import DeliveryClient
from alertrelay.wecom.token import CredentialManager

logger = structlog.stdlib.get_logger()

# WeCom errcodes meaning the access token itself was refused.
_TOKEN_REJECTED_ERRCODES = frozenset({40014, 41001, 42001})


def _local_now() -> datetime.datetime:
    return datetime.datetime.now().astimezone()


class DispatchLoop:
    """Drains the ingestion queue and delivers each alert to WeCom.

    One iteration handles one payload. Alerts inside it are sent in array
    order, each followed by a fixed pause for the WeCom rate limit; a
    payload without alerts costs no pause. Bad JSON is logged and skipped.

    This task is the sole owner of the credential manager, which is why
    the manager needs no locking.

    Usage::

        loop = DispatchLoop(queue, credentials, delivery, recipients, agent_id=1000002)
        await loop.start()
        # ...
        await loop.stop()
    """

    def __init__(
        self,
        queue: IngestionQueue,
        credentials: CredentialManager,
        delivery: DeliveryClient,
        recipients: SeverityRecipientMap,
        agent_id: int,
        to_party: str = "",
        to_tag: str = "",
        send_interval_secs: float = 1.0,
        sleep: SleepFn = asyncio.sleep,
        now: Callable[[], datetime.datetime] = _local_now,
    ) -> None:
        self._queue = queue
        self._credentials = credentials
        self._delivery = delivery
        self._recipients = dict(recipients)
        self._agent_id = agent_id
        self._to_party = to_party
        self._to_tag = to_tag
        self._send_interval_secs = send_interval_secs
        self._sleep = sleep
        self._now = now

        self._task: asyncio.Task[None] | None = None
        self._running = False

        self._payloads_received = 0
        self._payloads_skipped = 0
        self._alerts_delivered = 0
        self._alerts_failed = 0
        self._error_count = 0

    @property
    def running(self) -> bool:
        return self._running

    def stats(self) -> dict[str, object]:
        return {
            "running": self._running,
            "payloads_received": self._payloads_received,
            "payloads_skipped": self._payloads_skipped,
            "alerts_delivered": self._alerts_delivered,
            "alerts_failed": self._alerts_failed,
            "errors": self._error_count,
        }

    # ── Lifecycle ───────────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "dispatch_started",
            send_interval_secs=self._send_interval_secs,
            severities=sorted(self._recipients),
        )

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("dispatch_stopped", pending=self._queue.size, **self.stats())

    async def close(self) -> None:
        """Release the WeCom HTTP clients."""
        for client in (self._credentials, self._delivery):
            try:
                await client.close()
            except Exception:
                logger.exception("wecom_client_close_error", client=type(client).__name__)

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception:
                self._error_count += 1
                logger.exception("dispatch_iteration_error", errors=self._error_count)

    # ── One iteration ───────────────────────────────────────────

    async def run_once(self) -> int:
        """Dequeue one payload and deliver its alerts. Returns the alert count."""
        payload = await self._queue.dequeue()
        self._payloads_received += 1

        try:
            events = decode_payload(payload)
        except PayloadDecodeError as exc:
            self._payloads_skipped += 1
            logger.error(
                "payload_decode_failed",
                error=str(exc),
                size=len(payload),
                body=payload[:200].decode("utf-8", errors="replace"),
            )
            return 0

        if not events:
            logger.info("payload_without_alerts", size=len(payload))
            return 0

        for event in events:
            try:
                await self._deliver(event)
            except Exception:
                self._alerts_failed += 1
                logger.exception("alert_dispatch_error", alert_name=event.alert_name)
            await self._sleep(self._send_interval_secs)

        return len(events)

    async def _deliver(self, event: AlertEvent) -> None:
        recipient = resolve_recipient(event.severity, self._recipients)
        if not recipient:
            logger.warning(
                "alert_recipient_unresolved",
                severity=event.severity,
                alert_name=event.alert_name,
            )

        message = build_message(
            event,
            recipient=recipient,
            agent_id=self._agent_id,
            sent_at=self._now(),
            to_party=self._to_party,
            to_tag=self._to_tag,
        )
        token = await self._credentials.ensure_valid()
        outcome = await self._delivery.send(token, message)

        if outcome.success:
            self._alerts_delivered += 1
        else:
            self._alerts_failed += 1
            if outcome.errcode in _TOKEN_REJECTED_ERRCODES:
                logger.warning("wecom_token_rejected", errcode=outcome.errcode)
                self._credentials.invalidate()
        logger.info(
            "alert_dispatched",
            status=event.status,
            firing=event.is_firing,
            alert_name=event.alert_name,
            severity=event.severity,
            touser=recipient,
            success=outcome.success,
        )
