"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Hardware abstraction layer package.
"""

from .types import (
    HardwareEventHandler,
    HardwareLayer,
    HardwareUnavailableError,
    InputEvent,
)
from .virtual import UNAVAILABLE_HARDWARE, VirtualHardwareLayer

__all__ = [
    "HardwareLayer",
    "HardwareEventHandler",
    "HardwareUnavailableError",
    "InputEvent",
    "VirtualHardwareLayer",
    "UNAVAILABLE_HARDWARE",
]
