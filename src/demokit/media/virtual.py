"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Virtual media controller used when no player is available.
"""

from __future__ import annotations

from .types import MediaController, MediaEventCallback, MediaUnavailableError

UNAVAILABLE_CONTROLLER = "media controller unavailable, this is a virtual controller"


class VirtualMediaController(MediaController):
    """Media controller that reports itself unavailable and plays nothing."""

    def init(self) -> None:
        return None

    def is_available(self) -> bool:
        return False

    def load_media_from_path(self, path: str) -> None:
        raise MediaUnavailableError(UNAVAILABLE_CONTROLLER)

    def load_media_from_url(self, url: str) -> None:
        raise MediaUnavailableError(UNAVAILABLE_CONTROLLER)

    def play(self) -> None:
        raise MediaUnavailableError(UNAVAILABLE_CONTROLLER)

    def pause(self) -> None:
        raise MediaUnavailableError(UNAVAILABLE_CONTROLLER)

    def mute(self) -> None:
        raise MediaUnavailableError(UNAVAILABLE_CONTROLLER)

    def stop(self) -> None:
        raise MediaUnavailableError(UNAVAILABLE_CONTROLLER)

    def get_current_media_position(self) -> float:
        raise MediaUnavailableError(UNAVAILABLE_CONTROLLER)

    def set_current_media_position(self, position: float) -> None:
        raise MediaUnavailableError(UNAVAILABLE_CONTROLLER)

    def set_on_media_started_callback(self, callback: MediaEventCallback) -> None:
        _ = callback

    def set_on_media_paused_callback(self, callback: MediaEventCallback) -> None:
        _ = callback

    def set_on_media_ended_callback(self, callback: MediaEventCallback) -> None:
        _ = callback
