"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Redis pub/sub event transport for distributed installations.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..core.event import Event
from .base import BaseEventTransport
from .types import TransportConnectionError

logger = logging.getLogger("demokit.messaging.redis")


class RedisEventTransport(BaseEventTransport):
    """
    Fan-out transport over a single Redis pub/sub channel.

    Every node subscribes to ``{prefix}:events``; Redis delivers each
    published message to every current subscriber and keeps nothing for
    subscribers that are offline.

    Requires ``redis.asyncio`` (``pip install redis``).

    Args:
        redis: An ``redis.asyncio.Redis`` client instance.
        prefix: Key prefix for namespacing.
    """

    def __init__(self, redis: Any, *, prefix: str = "demokit") -> None:
        super().__init__()
        self._redis = redis
        self._prefix = prefix
        self._pubsub: Any | None = None
        self._listener: asyncio.Task[None] | None = None

    @property
    def channel(self) -> str:
        """Pub/sub channel carrying every event of the installation."""
        return f"{self._prefix}:events"

    async def connect(self) -> None:
        try:
            await self._redis.ping()
        except Exception as exc:  # noqa: BLE001
            raise TransportConnectionError(f"failed to connect to Redis: {exc}") from exc

    async def broadcast(self, event: Event) -> None:
        try:
            await self._redis.publish(self.channel, event.to_json())
        except Exception as exc:  # noqa: BLE001
            logger.error("Could not send event %s: %s", event.name, exc)

    async def _open_listener(self) -> None:
        pubsub = self._redis.pubsub(ignore_subscribe_messages=True)
        try:
            await pubsub.subscribe(self.channel)
        except Exception as exc:  # noqa: BLE001
            raise TransportConnectionError(
                f"failed to subscribe to {self.channel}: {exc}"
            ) from exc
        self._pubsub = pubsub
        self._listener = asyncio.create_task(self._listen_loop(pubsub))
        logger.debug("Subscribed to channel %s", self.channel)

    async def _close_listener(self) -> None:
        if self._listener is not None and not self._listener.done():
            self._listener.cancel()
            await asyncio.gather(self._listener, return_exceptions=True)
        self._listener = None
        await self._release_pubsub()

    async def _release_pubsub(self) -> None:
        if self._pubsub is None:
            return
        pubsub, self._pubsub = self._pubsub, None
        try:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
        except Exception:  # noqa: BLE001
            logger.exception("Failed to close subscription to %s", self.channel)

    async def _listen_loop(self, pubsub: Any) -> None:
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                self._receive_raw(message["data"])
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            self._listening = False
            logger.exception(
                "Event listener on %s failed, inbound delivery stopped", self.channel
            )
            await self._release_pubsub()
