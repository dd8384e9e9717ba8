"""Tests for create_relay_stack() wiring."""

from __future__ import annotations

import httpx
from pydantic import SecretStr

from alertrelay.core.config import RelayConfig, Settings, WeComConfig
from alertrelay.dispatch.factory import create_relay_stack
from alertrelay.dispatch.loop import DispatchLoop
from alertrelay.ingest.queue import IngestionQueue
from alertrelay.wecom.client import DeliveryClient
from alertrelay.wecom.token import CredentialManager


def _settings(**kw: object) -> Settings:
    defaults: dict[str, object] = {
        "wecom": WeComConfig(
            corp_id="ww123",
            corp_secret=SecretStr("s3cret"),
            agent_id=42,
            to_party="2",
        ),
        "severity_recipients": {"1": "alice"},
        "relay": RelayConfig(queue_capacity=7, send_interval_secs=0.5),
    }
    defaults.update(kw)
    return Settings(**defaults)  # type: ignore[arg-type]


class TestCreateRelayStack:
    def test_returns_queue_and_loop(self) -> None:
        queue, loop = create_relay_stack(_settings())
        assert isinstance(queue, IngestionQueue)
        assert isinstance(loop, DispatchLoop)
        assert queue.capacity == 7

    def test_loop_wired_from_settings(self) -> None:
        queue, loop = create_relay_stack(_settings())
        assert loop._queue is queue
        assert loop._agent_id == 42
        assert loop._to_party == "2"
        assert loop._recipients == {"1": "alice"}
        assert loop._send_interval_secs == 0.5
        assert isinstance(loop._credentials, CredentialManager)
        assert isinstance(loop._delivery, DeliveryClient)

    async def test_shared_http_client(self) -> None:
        http = httpx.AsyncClient()
        _, loop = create_relay_stack(_settings(), http=http)
        assert loop._credentials._http is http
        assert loop._delivery._http is http
        await loop.close()
        assert not http.is_closed
        await http.aclose()
