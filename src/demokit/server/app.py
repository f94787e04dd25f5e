"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

FastAPI service host exposing node status and served state.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

from starlette.requests import Request

from .status import NodeStatusReport

logger = logging.getLogger("demokit.server")

STATE_ERROR_MESSAGE = "500 - An error occurred while getting the node's state."


class NodeServiceHostError(RuntimeError):
    """Raised for invalid service host setup or lifecycle use."""


@dataclass(slots=True)
class ServedState:
    """
    Application state exposed on ``/state``.

    ``value`` is any JSON-serializable object; its shape is never validated.
    """

    value: Any
    writable: bool = False


class StatusSource(Protocol):
    """What the service host needs from a node."""

    def status(self) -> NodeStatusReport:
        ...

    @property
    def served_state(self) -> ServedState | None:
        ...


class NodeServiceHost:
    """Expose a node's status and served state via FastAPI endpoints."""

    def __init__(
        self,
        source: StatusSource,
        *,
        service_name: str = "demokit-node",
        host: str = "0.0.0.0",
        port: int = 8081,
    ) -> None:
        self.source = source
        self.service_name = service_name
        self.host = host
        self.port = port
        self._server: Any | None = None
        self._serve_task: asyncio.Task[None] | None = None

    def create_app(self):
        """Create and return FastAPI app exposing node endpoints."""
        try:
            from fastapi import FastAPI, HTTPException
            from fastapi.responses import Response
        except ImportError as exc:  # pragma: no cover - optional runtime path
            raise NodeServiceHostError(
                "FastAPI is required to serve node endpoints. "
                "Install it with: pip install fastapi uvicorn"
            ) from exc

        app = FastAPI(title=self.service_name)

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            logger.info(
                "%s %s -> %d (latency=%.1fms, client_ip=%s)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000.0,
                request.client.host if request.client else None,
            )
            return response

        @app.get("/status")
        async def status() -> dict[str, Any]:
            return self.source.status().model_dump()

        @app.get("/state")
        async def get_state():
            state = self.source.served_state
            if state is None:
                raise HTTPException(status_code=404, detail="Node does not serve a state")
            try:
                body = json.dumps(state.value)
            except (TypeError, ValueError):
                logger.exception("Could not serialize the served state")
                return Response(
                    content=STATE_ERROR_MESSAGE,
                    status_code=500,
                    media_type="text/plain",
                )
            return Response(content=body, media_type="application/json")

        @app.put("/state")
        async def put_state(request: Request):
            state = self.source.served_state
            if state is None:
                raise HTTPException(status_code=404, detail="Node does not serve a state")
            if not state.writable:
                raise HTTPException(status_code=405, detail="Served state is read-only")
            try:
                payload = await request.json()
            except ValueError as exc:
                raise HTTPException(
                    status_code=400, detail=f"Invalid JSON body: {exc}"
                ) from exc
            state.value = payload
            return Response(content=json.dumps(payload), media_type="application/json")

        return app

    async def start(self) -> None:
        """
        Start serving with uvicorn and wait until the socket is bound.

        Raises:
            NodeServiceHostError: If uvicorn cannot start serving.
        """
        if self._serve_task is not None:
            raise NodeServiceHostError("Service host is already running")
        try:
            import uvicorn
        except ImportError as exc:  # pragma: no cover - optional runtime path
            raise NodeServiceHostError(
                "uvicorn is required to serve node endpoints. "
                "Install it with: pip install uvicorn"
            ) from exc

        config = uvicorn.Config(
            self.create_app(),
            host=self.host,
            port=self.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        serve_task = asyncio.create_task(self._serve(server))
        while not server.started and not serve_task.done():
            await asyncio.sleep(0.01)
        if not server.started:
            error = serve_task.exception() if not serve_task.cancelled() else None
            raise NodeServiceHostError(
                f"Could not serve node endpoints on {self.host}:{self.port}: {error}"
            )
        self._server = server
        self._serve_task = serve_task
        logger.info("Serving node endpoints on %s:%d", self.host, self.port)

    async def _serve(self, server: Any) -> None:
        # uvicorn calls sys.exit() when it cannot bind
        try:
            await server.serve()
        except SystemExit as exc:
            raise NodeServiceHostError(f"uvicorn exited with status {exc.code}") from exc

    async def stop(self) -> None:
        """Ask uvicorn to exit and wait for it."""
        if self._server is None or self._serve_task is None:
            return
        self._server.should_exit = True
        await asyncio.gather(self._serve_task, return_exceptions=True)
        self._server = None
        self._serve_task = None
