"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Event value type and its wire codec.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass

WILDCARD_RECEIVER = "*"

# Internal events emitted by the media bridge.
INTERNAL_MEDIA_STARTED = "I_MEDIA_STARTED"
INTERNAL_MEDIA_PAUSED = "I_MEDIA_PAUSED"
INTERNAL_MEDIA_ENDED = "I_MEDIA_ENDED"

_WIRE_FIELDS = ("name", "emitter", "receiver", "payload")


class EventDecodeError(ValueError):
    """Raised when an inbound wire payload cannot be decoded into an Event."""


@dataclass(frozen=True, slots=True)
class Event:
    """
    Immutable message exchanged between nodes.

    Attributes:
        name: Event identifier, matched verbatim against registry keys.
        emitter: Identity of the originating node.
        receiver: ``"*"`` for every node, or one node identity.
        payload: Opaque string, typically JSON. Never interpreted by the core.
    """

    name: str
    emitter: str
    receiver: str = WILDCARD_RECEIVER
    payload: str = ""

    @property
    def is_broadcast(self) -> bool:
        """Whether the event targets every listening node."""
        return self.receiver == WILDCARD_RECEIVER

    def to_json(self) -> str:
        """Serialize to the wire representation."""
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str | bytes) -> Event:
        """
        Parse the wire representation.

        Raises:
            EventDecodeError: If the payload is not a JSON object carrying
                the four string fields.
        """
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise EventDecodeError("event payload is not valid UTF-8") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise EventDecodeError(f"event payload is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise EventDecodeError("event payload must be a JSON object")

        values: dict[str, str] = {}
        for key in _WIRE_FIELDS:
            value = data.get(key)
            if not isinstance(value, str):
                raise EventDecodeError(f"event field '{key}' must be a string")
            values[key] = value
        return cls(**values)
