"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Hardware abstraction layer contract.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

HardwareEventHandler = Callable[[Any], None]


class HardwareUnavailableError(RuntimeError):
    """Raised when a capability is requested from unavailable hardware."""


@dataclass(frozen=True, slots=True)
class InputEvent:
    """
    Raw input reported by a physical control (joystick, button).

    Attributes:
        direction: Control direction such as ``"up"`` or ``"middle"``.
        action: Control action such as ``"pressed"`` or ``"released"``.
        timestamp: Unix timestamp of the input.
    """

    direction: str
    action: str
    timestamp: float = field(default_factory=time.time)


class HardwareLayer(ABC):
    """
    Access to the sensors and actuators of a node.

    ``set_event_handler`` and ``init`` are called during node construction.
    The handler may receive any object; the node only understands
    ``InputEvent`` and drops everything else.
    """

    @abstractmethod
    def init(self) -> None:
        """Perform hardware initialisation."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Whether real hardware backs this layer."""
        ...

    @abstractmethod
    def set_event_handler(self, handler: HardwareEventHandler) -> None:
        """Set the callback receiving raw input events. May be called from any thread."""
        ...

    @abstractmethod
    def read_temperature(self) -> float:
        ...

    @abstractmethod
    def read_humidity(self) -> float:
        ...

    @abstractmethod
    def light_on(self) -> None:
        ...

    @abstractmethod
    def light_off(self) -> None:
        ...
