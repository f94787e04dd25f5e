"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Media playback package.
"""

from .types import MediaController, MediaEventCallback, MediaUnavailableError
from .virtual import UNAVAILABLE_CONTROLLER, VirtualMediaController

__all__ = [
    "MediaController",
    "MediaEventCallback",
    "MediaUnavailableError",
    "VirtualMediaController",
    "UNAVAILABLE_CONTROLLER",
]
