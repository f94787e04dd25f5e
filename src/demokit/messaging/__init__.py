"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Event transport package.

Provides the ``EventTransport`` fan-out contract with in-memory and Redis
backends.

Quick start::

    from demokit.messaging import InMemoryEventBus, InMemoryEventTransport

    bus = InMemoryEventBus()
    transport = InMemoryEventTransport(bus)
    transport.on_receive(dispatcher.handle_event)
    await transport.connect()
    await transport.start_listening()
"""

from .base import BaseEventTransport
from .factory import create_event_transport_from_env
from .memory import InMemoryEventBus, InMemoryEventTransport
from .types import (
    EventHandler,
    EventTransport,
    TransportConnectionError,
    TransportError,
)

__all__ = [
    "EventHandler",
    "EventTransport",
    "BaseEventTransport",
    "TransportError",
    "TransportConnectionError",
    "InMemoryEventBus",
    "InMemoryEventTransport",
    "create_event_transport_from_env",
]


# Lazy import for Redis transport to avoid hard dependency
def __getattr__(name: str):
    if name == "RedisEventTransport":
        from .redis_transport import RedisEventTransport

        return RedisEventTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
