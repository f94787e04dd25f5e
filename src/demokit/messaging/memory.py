"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

In-memory fan-out bus for single-process installations and testing.
"""

from __future__ import annotations

import asyncio
import logging

from ..core.event import Event
from .base import BaseEventTransport
from .types import TransportConnectionError

logger = logging.getLogger("demokit.messaging.memory")


class InMemoryEventBus:
    """
    In-process fan-out exchange using one ``asyncio.Queue`` per subscriber.

    Every subscriber receives every published message, the publisher
    included. Messages published while nobody is subscribed are lost.
    """

    def __init__(self) -> None:
        self._subscribers: list[asyncio.Queue[str]] = []
        self._closed = False

    def subscribe(self) -> asyncio.Queue[str]:
        """Bind a new exclusive queue to the exchange."""
        if self._closed:
            raise TransportConnectionError("in-memory bus is closed")
        queue: asyncio.Queue[str] = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[str]) -> None:
        """Remove ``queue`` from the exchange and discard its backlog."""
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def publish(self, raw: str) -> None:
        """Fan ``raw`` out to every bound queue."""
        if self._closed:
            raise TransportConnectionError("in-memory bus is closed")
        for queue in self._subscribers:
            queue.put_nowait(raw)

    def close(self) -> None:
        """Simulate a broker outage: later connects and publishes fail."""
        self._closed = True
        self._subscribers.clear()

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


class InMemoryEventTransport(BaseEventTransport):
    """Event transport attached to an ``InMemoryEventBus``."""

    def __init__(self, bus: InMemoryEventBus) -> None:
        super().__init__()
        self._bus = bus
        self._queue: asyncio.Queue[str] | None = None
        self._pump: asyncio.Task[None] | None = None

    async def connect(self) -> None:
        if self._bus.is_closed:
            raise TransportConnectionError("failed to connect to the in-memory bus: bus is closed")

    async def broadcast(self, event: Event) -> None:
        try:
            self._bus.publish(event.to_json())
        except TransportConnectionError as exc:
            logger.error("Could not send event %s: %s", event.name, exc)

    async def _open_listener(self) -> None:
        self._queue = self._bus.subscribe()
        self._pump = asyncio.create_task(self._pump_loop(self._queue))

    async def _close_listener(self) -> None:
        if self._queue is not None:
            self._bus.unsubscribe(self._queue)
            self._queue = None
        if self._pump is not None and not self._pump.done():
            self._pump.cancel()
            await asyncio.gather(self._pump, return_exceptions=True)
        self._pump = None

    async def _pump_loop(self, queue: asyncio.Queue[str]) -> None:
        while True:
            raw = await queue.get()
            self._receive_raw(raw)
