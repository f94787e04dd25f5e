"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Node settings and explicit environment loading.
"""

from __future__ import annotations

import logging
import os
import random
import uuid
from dataclasses import dataclass

from .errors import NodeConfigError

_ADJECTIVES = (
    "amber", "bold", "brisk", "calm", "clever", "crimson", "dusty", "eager",
    "gentle", "hollow", "icy", "jolly", "lively", "misty", "noble", "quiet",
    "rapid", "silent", "sunny", "wild",
)
_NOUNS = (
    "badger", "beacon", "canyon", "comet", "falcon", "forest", "harbor",
    "lantern", "meadow", "otter", "pebble", "prism", "raven", "river",
    "signal", "sparrow", "summit", "thunder", "violet", "willow",
)

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env_first(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise NodeConfigError(f"environment variable {name} must be a boolean, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = _env_first(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise NodeConfigError(
            f"environment variable {name} must be an integer, got {raw!r}"
        ) from exc


def generate_node_name() -> str:
    """Generate a readable random node name such as ``misty-falcon-3fa2``."""
    return f"{random.choice(_ADJECTIVES)}-{random.choice(_NOUNS)}-{uuid.uuid4().hex[:4]}"


@dataclass(frozen=True, slots=True)
class NodeSettings:
    """Explicit settings used to assemble a node."""

    node_name: str
    expose_actions: bool = True
    http_enabled: bool = True
    http_host: str = "0.0.0.0"
    http_port: int = 8081
    state_writable: bool = False
    registration_server: str | None = None
    transport_backend: str = "inmemory"

    @staticmethod
    def from_env() -> "NodeSettings":
        """
        Load settings from environment variables.

        Raises:
            NodeConfigError: If a value is malformed, or the Redis transport
                is selected without a Redis URL or host.
        """
        backend = (
            _env_first("DEMOKIT_TRANSPORT_BACKEND", default="inmemory") or "inmemory"
        ).lower()
        if backend == "redis" and _env_first("DEMOKIT_REDIS_URL", "DEMOKIT_REDIS_HOST") is None:
            raise NodeConfigError(
                "environment variable not set: DEMOKIT_REDIS_URL or DEMOKIT_REDIS_HOST"
            )

        return NodeSettings(
            node_name=_env_first("DEMOKIT_NODE_NAME", "NODE_NAME") or generate_node_name(),
            expose_actions=_env_bool("DEMOKIT_EXPOSE_ACTIONS", True),
            http_enabled=_env_bool("DEMOKIT_HTTP_ENABLED", True),
            http_host=_env_first("DEMOKIT_HTTP_HOST", default="0.0.0.0") or "0.0.0.0",
            http_port=_env_int("DEMOKIT_HTTP_PORT", 8081),
            state_writable=_env_bool("DEMOKIT_STATE_WRITABLE", False),
            registration_server=_env_first("DEMOKIT_REGISTRATION_SERVER"),
            transport_backend=backend,
        )


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging for node applications.

    The library itself never installs handlers; call this from an
    application entry point. ``level`` defaults to ``DEMOKIT_LOG_LEVEL`` or
    ``INFO``.
    """
    if level is None:
        level = (_env_first("DEMOKIT_LOG_LEVEL", default="INFO") or "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
