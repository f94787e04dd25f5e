"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Media playback controller contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

MediaEventCallback = Callable[[], None]


class MediaUnavailableError(RuntimeError):
    """Raised when playback is requested from an unavailable controller."""


class MediaController(ABC):
    """
    Media playback on a node.

    Started/paused/ended callbacks are set during node construction and may
    fire from a player thread.
    """

    @abstractmethod
    def init(self) -> None:
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Whether a real player backs this controller."""
        ...

    @abstractmethod
    def load_media_from_path(self, path: str) -> None:
        ...

    @abstractmethod
    def load_media_from_url(self, url: str) -> None:
        ...

    @abstractmethod
    def play(self) -> None:
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def mute(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @abstractmethod
    def get_current_media_position(self) -> float:
        """Playback position as a fraction between 0.0 and 1.0."""
        ...

    @abstractmethod
    def set_current_media_position(self, position: float) -> None:
        ...

    @abstractmethod
    def set_on_media_started_callback(self, callback: MediaEventCallback) -> None:
        ...

    @abstractmethod
    def set_on_media_paused_callback(self, callback: MediaEventCallback) -> None:
        ...

    @abstractmethod
    def set_on_media_ended_callback(self, callback: MediaEventCallback) -> None:
        ...
