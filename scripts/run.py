#!/usr/bin/env python3
"""Relay entrypoint — wires the webhook listener to the WeCom dispatch loop.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Override log level
    python scripts/run.py --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from alertrelay.core.config import ConfigError, load_settings
from alertrelay.core.logging import setup_logging
from alertrelay.dispatch.factory import create_relay_stack
from alertrelay.ingest.listener import start_listener

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start the listener and dispatch loop, run until interrupted."""
    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"Failed to load configuration: {exc}", file=sys.stderr)
        return 1

    setup_logging(level=args.log_level, config=settings.logging)

    logger.info(
        "relay_starting",
        corp_id=settings.wecom.corp_id,
        agent_id=settings.wecom.agent_id,
        severities=sorted(settings.severity_recipients),
        queue_capacity=settings.relay.queue_capacity,
    )

    # ── Queue + dispatch loop ────────────────────────────────────
    queue, dispatch = create_relay_stack(settings)
    await dispatch.start()

    # ── Webhook listener ─────────────────────────────────────────
    listener = settings.listener
    runner = await start_listener(
        queue,
        host=listener.host,
        port=listener.port,
        path=listener.path,
        stats_fn=dispatch.stats,
    )

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    logger.info("relay_shutting_down")

    await runner.cleanup()
    await dispatch.stop()
    await dispatch.close()

    logger.info("relay_stopped", **dispatch.stats())
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Relay Alertmanager webhooks to WeCom application messages.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
