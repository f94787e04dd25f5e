"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for selecting event transport backends from environment variables.
"""

from __future__ import annotations

import os
from typing import Any

from ..core.config import _env_first
from .memory import InMemoryEventBus, InMemoryEventTransport
from .types import EventTransport


def create_event_transport_from_env(
    *,
    backend: str | None = None,
    redis_client: Any | None = None,
    bus: InMemoryEventBus | None = None,
) -> EventTransport:
    """
    Create an event transport from `DEMOKIT_*` environment variables.

    `backend` overrides `DEMOKIT_TRANSPORT_BACKEND` when given.

    Backends:
    - `inmemory` (default), attached to `bus` or to a fresh private bus
    - `redis`

    Redis resolution:
    - Uses the provided `redis_client` when supplied.
    - Otherwise builds a client from `DEMOKIT_REDIS_URL`.
    - If no URL is set, falls back to host/port/db/password variables.
    """
    if backend is None:
        backend = os.getenv("DEMOKIT_TRANSPORT_BACKEND", "inmemory")
    backend = backend.strip().lower()

    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return InMemoryEventTransport(bus or InMemoryEventBus())

    if backend in ("redis",):
        from .redis_transport import RedisEventTransport

        prefix = _env_first("DEMOKIT_REDIS_PREFIX", default="demokit") or "demokit"

        client = redis_client
        if client is None:
            try:
                import redis.asyncio as redis
            except ModuleNotFoundError as exc:  # pragma: no cover
                raise RuntimeError(
                    "Redis transport backend requires `redis` to be installed."
                ) from exc

            url = _env_first("DEMOKIT_REDIS_URL")
            if not url:
                host = _env_first("DEMOKIT_REDIS_HOST", default="localhost") or "localhost"
                port = _env_first("DEMOKIT_REDIS_PORT", default="6379") or "6379"
                db = _env_first("DEMOKIT_REDIS_DB", default="0") or "0"
                password = _env_first("DEMOKIT_REDIS_PASSWORD", default="") or ""
                if password:
                    url = f"redis://:{password}@{host}:{port}/{db}"
                else:
                    url = f"redis://{host}:{port}/{db}"

            client = redis.Redis.from_url(url)

        return RedisEventTransport(client, prefix=prefix)

    raise ValueError(f"Unknown DEMOKIT_TRANSPORT_BACKEND: {backend}")
