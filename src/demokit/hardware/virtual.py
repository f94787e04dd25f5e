"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Virtual hardware layer used when no hardware is attached.
"""

from __future__ import annotations

from .types import HardwareEventHandler, HardwareLayer, HardwareUnavailableError

UNAVAILABLE_HARDWARE = "hardware unavailable, this is a virtual hardware layer"


class VirtualHardwareLayer(HardwareLayer):
    """Hardware layer that reports itself unavailable and performs nothing."""

    def __init__(self) -> None:
        self._handler: HardwareEventHandler | None = None

    def init(self) -> None:
        return None

    def is_available(self) -> bool:
        return False

    def set_event_handler(self, handler: HardwareEventHandler) -> None:
        self._handler = handler

    def emit(self, raw: object) -> None:
        """Feed ``raw`` to the configured handler, as a real input listener would."""
        if self._handler is not None:
            self._handler(raw)

    def read_temperature(self) -> float:
        raise HardwareUnavailableError(UNAVAILABLE_HARDWARE)

    def read_humidity(self) -> float:
        raise HardwareUnavailableError(UNAVAILABLE_HARDWARE)

    def light_on(self) -> None:
        raise HardwareUnavailableError(UNAVAILABLE_HARDWARE)

    def light_off(self) -> None:
        raise HardwareUnavailableError(UNAVAILABLE_HARDWARE)
