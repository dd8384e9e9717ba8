"""Webhook HTTP listener — accepts Alertmanager POSTs and queues them.

Exposes:
- ``POST <path>``   → enqueue the raw body, always acknowledge with 200
- ``GET /healthz``  → queue depth plus dispatch counters
"""

from __future__ import annotations

from typing import Callable

import structlog
from aiohttp import web

from alertrelay.ingest.queue import IngestionQueue

logger = structlog.stdlib.get_logger()

StatsFn = Callable[[], dict[str, object]]


async def _handle_webhook(request: web.Request) -> web.Response:
    queue = request.app["queue"]
    body = await request.read()
    await queue.enqueue(body)
    logger.info(
        "webhook_received",
        remote=request.remote,
        size=len(body),
        queued=queue.size,
        body=body[:500].decode("utf-8", errors="replace"),
    )
    return web.json_response({"status": "queued"})


async def _handle_health(request: web.Request) -> web.Response:
    queue = request.app["queue"]
    stats_fn = request.app.get("stats_fn")
    data: dict[str, object] = {
        "status": "ok",
        "queue_size": queue.size,
        "queue_capacity": queue.capacity,
    }
    if callable(stats_fn):
        data["dispatch"] = stats_fn()
    return web.json_response(data)


def create_listener_app(
    queue: IngestionQueue,
    path: str = "/",
    stats_fn: StatsFn | None = None,
) -> web.Application:
    """Create the aiohttp application serving the webhook endpoint."""
    app = web.Application()
    app["queue"] = queue
    app["stats_fn"] = stats_fn
    app.router.add_post(path, _handle_webhook)
    app.router.add_get("/healthz", _handle_health)
    return app


async def start_listener(
    queue: IngestionQueue,
    host: str = "0.0.0.0",
    port: int = 9000,
    path: str = "/",
    stats_fn: StatsFn | None = None,
) -> web.AppRunner:
    """Start the webhook listener. Returns the runner for cleanup."""
    app = create_listener_app(queue, path=path, stats_fn=stats_fn)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("listener_started", host=host, port=port, path=path)
    return runner
