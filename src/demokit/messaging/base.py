"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Shared inbound delivery logic for event transports.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from abc import abstractmethod

from ..core.event import Event, EventDecodeError
from .types import EventHandler, EventTransport, TransportError

logger = logging.getLogger("demokit.messaging")


class BaseEventTransport(EventTransport):
    """
    Base transport handing every inbound event to its own task.

    Subclasses implement ``connect``, ``broadcast``, ``_open_listener`` and
    ``_close_listener``, and call ``_receive_raw`` for each wire message.
    """

    def __init__(self) -> None:
        self._handler: EventHandler | None = None
        self._listening = False
        self._active_tasks: set[asyncio.Task[object]] = set()

    async def send_to(self, receiver: str, event: Event) -> None:
        await self.broadcast(dataclasses.replace(event, receiver=receiver))

    def on_receive(self, handler: EventHandler) -> None:
        self._handler = handler

    async def start_listening(self) -> None:
        if self._handler is None:
            raise TransportError("on_receive() must be called before start_listening()")
        if self._listening:
            return
        await self._open_listener()
        self._listening = True
        logger.info("Listening for events...")

    async def stop(self) -> None:
        if not self._listening:
            return
        self._listening = False
        await self._close_listener()
        if self._active_tasks:
            logger.info(
                "Stopped listening with %d chain(s) still running",
                len(self._active_tasks),
            )

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def active_task_count(self) -> int:
        """Number of inbound events whose handler is still running."""
        return len(self._active_tasks)

    @abstractmethod
    async def _open_listener(self) -> None:
        """Subscribe to the bus and start feeding ``_receive_raw``."""
        ...

    @abstractmethod
    async def _close_listener(self) -> None:
        """Unsubscribe from the bus."""
        ...

    def _receive_raw(self, raw: str | bytes) -> None:
        """Decode one wire message and hand it to the handler on a new task."""
        try:
            event = Event.from_json(raw)
        except EventDecodeError as exc:
            logger.warning("Could not decode event, dropping it: %s", exc)
            return
        self._dispatch(event)

    def _dispatch(self, event: Event) -> None:
        if self._handler is None or not self._listening:
            return
        task = asyncio.create_task(self._handler(event))
        self._active_tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[object]) -> None:
        """Cleanup callback when an inbound handler completes."""
        self._active_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Event handler failed", exc_info=exc)
