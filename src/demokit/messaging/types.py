"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Event transport contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.event import Event

EventHandler = Callable[[Event], Awaitable[Any]]


class TransportError(RuntimeError):
    """Raised for invalid transport usage."""


class TransportConnectionError(TransportError):
    """Raised when the transport cannot reach its broker."""


class EventTransport(ABC):
    """
    Fan-out event bus shared by every node of an installation.

    The bus has no addressed-delivery primitive: every subscriber sees every
    event, including the sender. Addressing is applied by the receiving
    node's dispatcher.
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish the broker connection.

        Raises:
            TransportConnectionError: If the broker is unreachable.
        """
        ...

    @abstractmethod
    async def broadcast(self, event: Event) -> None:
        """
        Publish ``event`` to every subscriber.

        Publish failures are logged and the event is dropped.
        """
        ...

    @abstractmethod
    async def send_to(self, receiver: str, event: Event) -> None:
        """Publish ``event`` with its receiver set to ``receiver``."""
        ...

    @abstractmethod
    def on_receive(self, handler: EventHandler) -> None:
        """Set the single callback invoked for every inbound event."""
        ...

    @abstractmethod
    async def start_listening(self) -> None:
        """
        Begin delivering inbound events to the handler.

        Raises:
            TransportError: If no handler was set.
        """
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop delivering inbound events. In-flight handlers are not awaited."""
        ...

    @property
    @abstractmethod
    def is_listening(self) -> bool:
        """Whether inbound events are currently delivered."""
        ...
