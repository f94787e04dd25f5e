"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

HTTP client for the installation's registration/discovery service.
"""

from __future__ import annotations

import asyncio
import http.client
import json
import urllib.error
import urllib.request
from collections.abc import Callable

from pydantic import BaseModel, Field, ValidationError

from ..server.status import NodeInfo, NodeStatus


class RegistrationError(RuntimeError):
    """Raised when the registration service rejects or fails a request."""


class RegisteredNode(BaseModel):
    """One node as known by the registration service."""

    info: NodeInfo
    status: NodeStatus = Field(default_factory=NodeStatus)


Transport = Callable[[urllib.request.Request, float], tuple[int, bytes]]


def _urlopen(request: urllib.request.Request, timeout_s: float) -> tuple[int, bytes]:
    try:
        with urllib.request.urlopen(request, timeout=timeout_s) as resp:  # noqa: S310
            return resp.status, resp.read()
    except urllib.error.HTTPError as e:
        return e.code, b""
    except urllib.error.URLError as e:
        raise RegistrationError(
            f"Network error calling registration server {request.full_url}: {e.reason}"
        ) from e
    except (OSError, http.client.HTTPException) as e:
        raise RegistrationError(
            f"Registration server {request.full_url} failed mid-response: {e!r}"
        ) from e


class RegistrationClient:
    """
    Register this node and list the installation's nodes.

    Args:
        addr: ``host:port`` of the registration service.
        timeout_s: Per-request timeout.
        transport: Blocking ``(request, timeout) -> (status, body)`` callable;
            defaults to ``urllib.request.urlopen``.
    """

    def __init__(
        self,
        addr: str,
        *,
        timeout_s: float = 2.0,
        transport: Transport | None = None,
    ) -> None:
        self.addr = addr
        self.timeout_s = timeout_s
        self._transport = transport or _urlopen

    def _url(self, path: str) -> str:
        return f"http://{self.addr}{path}"

    async def _call(self, request: urllib.request.Request) -> bytes:
        status, body = await asyncio.to_thread(self._transport, request, self.timeout_s)
        if status != 200:
            raise RegistrationError(
                f"incorrect response code, expected 200, received {status}"
            )
        return body

    async def register_node(self, info: NodeInfo) -> None:
        """POST ``info`` to ``/register``."""
        request = urllib.request.Request(
            self._url("/register"),
            data=info.model_dump_json().encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        await self._call(request)

    async def fetch_nodes(self) -> list[RegisteredNode]:
        """GET ``/nodes`` and parse the list of registered nodes."""
        request = urllib.request.Request(
            self._url("/nodes"),
            method="GET",
            headers={"Accept": "application/json"},
        )
        body = await self._call(request)
        try:
            decoded = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RegistrationError("Invalid JSON response from registration server") from e
        if not isinstance(decoded, list):
            raise RegistrationError("Registration server must return a list of nodes")
        try:
            return [RegisteredNode.model_validate(item) for item in decoded]
        except ValidationError as e:
            raise RegistrationError(f"Invalid node entry from registration server: {e}") from e
