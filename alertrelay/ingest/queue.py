"""Bounded FIFO buffer between the webhook listener and the dispatch loop."""

from __future__ import annotations

import asyncio

import structlog

from alertrelay.core.types import RawPayload

logger = structlog.stdlib.get_logger()

DEFAULT_CAPACITY = 1000


class IngestionQueue:
    """FIFO of raw webhook bodies with blocking backpressure.

    ``enqueue`` waits while the queue is full instead of dropping, so a
    burst slows the webhook response rather than losing alerts. Payload
    contents are never inspected here.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._queue: asyncio.Queue[RawPayload] = asyncio.Queue(maxsize=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        return self._queue.qsize()

    def full(self) -> bool:
        return self._queue.full()

    def empty(self) -> bool:
        return self._queue.empty()

    async def enqueue(self, payload: RawPayload) -> None:
        """Append a payload, waiting for a free slot if the queue is full."""
        if self._queue.full():
            logger.warning("ingestion_queue_full", capacity=self._capacity)
        await self._queue.put(bytes(payload))

    async def dequeue(self) -> RawPayload:
        """Remove and return the oldest payload, waiting until one arrives."""
        return await self._queue.get()

    def __len__(self) -> int:
        return self._queue.qsize()
