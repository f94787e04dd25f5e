"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Node runtime: identity, action wiring, lifecycle and collaborator bridging.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
from collections.abc import Coroutine
from typing import Any

from ..hardware import HardwareLayer, InputEvent, VirtualHardwareLayer
from ..media import MediaController, VirtualMediaController
from ..messaging import (
    EventTransport,
    InMemoryEventBus,
    TransportConnectionError,
    create_event_transport_from_env,
)
from ..registration import RegistrationClient, RegistrationError
from ..server import NodeServiceHost, NodeStatusReport, ServedState, build_node_status
from .action import Action, execute_chain
from .config import NodeSettings
from .dispatcher import Dispatcher
from .errors import NodeStartupError
from .event import (
    INTERNAL_MEDIA_ENDED,
    INTERNAL_MEDIA_PAUSED,
    INTERNAL_MEDIA_STARTED,
    WILDCARD_RECEIVER,
    Event,
)
from .metrics import DispatchMetrics
from .registry import ActionRegistry

logger = logging.getLogger("demokit.core.node")


def hardware_input_event(node_name: str, raw: InputEvent) -> Event:
    """Translate a raw hardware input into a broadcast-addressed event."""
    return Event(
        name=f"I_{raw.direction.upper()}_{raw.action.upper()}",
        emitter=f"{node_name}-hardware",
        receiver=WILDCARD_RECEIVER,
        payload=json.dumps({"timestamp": int(raw.timestamp)}),
    )


class Node:
    """
    One addressable participant of the installation.

    Wire chains with ``on_event_do`` and ``set_entry_point`` before calling
    ``start``; the registry is frozen when the node starts listening.
    Chains must be acyclic.
    """

    def __init__(
        self,
        name: str,
        transport: EventTransport,
        *,
        expose_actions: bool = True,
        state_writable: bool = False,
        hardware: HardwareLayer | None = None,
        media: MediaController | None = None,
        registration: RegistrationClient | None = None,
        metrics: DispatchMetrics | None = None,
        http_enabled: bool = False,
        http_host: str = "0.0.0.0",
        http_port: int = 8081,
    ) -> None:
        if not name:
            raise ValueError("node name must be non-empty")
        self._name = name
        self._transport = transport
        self._expose_actions = expose_actions
        self._state_writable = state_writable
        self._registry = ActionRegistry(owner=name)
        self._metrics = metrics
        self._registration = registration
        self._entry_point: Action | None = None
        self._served_state: ServedState | None = None
        self._dispatcher: Dispatcher | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._ready = False
        self._stop_requested: asyncio.Event | None = None
        self._background: set[asyncio.Task[Any]] = set()
        self._service_host = (
            NodeServiceHost(self, service_name=name, host=http_host, port=http_port)
            if http_enabled
            else None
        )

        self.hardware: HardwareLayer = hardware or VirtualHardwareLayer()
        self.hardware.set_event_handler(self._on_hardware_input)
        self.hardware.init()

        self.media: MediaController = media or VirtualMediaController()
        self.media.set_on_media_started_callback(
            lambda: self._on_media_event(INTERNAL_MEDIA_STARTED)
        )
        self.media.set_on_media_paused_callback(
            lambda: self._on_media_event(INTERNAL_MEDIA_PAUSED)
        )
        self.media.set_on_media_ended_callback(
            lambda: self._on_media_event(INTERNAL_MEDIA_ENDED)
        )
        self.media.init()

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    @property
    def served_state(self) -> ServedState | None:
        return self._served_state

    @property
    def service_host(self) -> NodeServiceHost | None:
        return self._service_host

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def on_event_do(self, event_name: str, action: Action) -> bool:
        """Register ``action`` to run when ``event_name`` is received. First registration wins."""
        return self._registry.register(event_name, action)

    def set_entry_point(self, action: Action | None) -> None:
        """Set the chain fired once at startup, with no triggering event."""
        self._entry_point = action

    def serve_state(self, state: Any, *, writable: bool | None = None) -> None:
        """
        Expose ``state`` on ``/state``.

        ``writable`` enables rebinding through PUT and defaults to the node's
        ``state_writable`` setting.
        """
        if writable is None:
            writable = self._state_writable
        self._served_state = ServedState(value=state, writable=writable)

    # ------------------------------------------------------------------
    # Outbound events
    # ------------------------------------------------------------------

    async def broadcast_event(self, event_name: str, payload: str = "") -> Event:
        event = Event(
            name=event_name,
            emitter=self._name,
            receiver=WILDCARD_RECEIVER,
            payload=payload,
        )
        await self._transport.broadcast(event)
        return event

    async def send_event_to(self, receiver: str, event_name: str, payload: str = "") -> Event:
        event = Event(
            name=event_name,
            emitter=self._name,
            receiver=receiver or WILDCARD_RECEIVER,
            payload=payload,
        )
        await self._transport.send_to(event.receiver, event)
        return event

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> NodeStatusReport:
        return build_node_status(
            name=self._name,
            ready=self._ready,
            hardware_available=self.hardware.is_available(),
            media_available=self.media.is_available(),
            actions=self._registry.view() if self._expose_actions else None,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        Connect, freeze the registry, start listening and fire the startup chain.

        Raises:
            NodeStartupError: If the node was already started or the
                transport, registry or HTTP surface cannot be set up.
                Listening is undone when a later step fails.
        """
        if self._dispatcher is not None:
            raise NodeStartupError(f"Node {self._name} is already started")
        logger.info("Starting node... (node=%s)", self._name)
        self._loop = asyncio.get_running_loop()

        try:
            await self._transport.connect()
        except TransportConnectionError as exc:
            raise NodeStartupError(f"Node {self._name} could not connect: {exc}") from exc

        dispatcher = Dispatcher(self._name, self._registry.freeze(), metrics=self._metrics)
        self._transport.on_receive(dispatcher.handle_event)
        try:
            await self._transport.start_listening()
        except TransportConnectionError as exc:
            raise NodeStartupError(
                f"Node {self._name} could not listen for events: {exc}"
            ) from exc
        self._dispatcher = dispatcher

        try:
            if self._registration is not None:
                try:
                    await self._registration.register_node(self.status().info)
                except RegistrationError as exc:
                    logger.warning(
                        "Could not register with %s: %s (node=%s)",
                        self._registration.addr,
                        exc,
                        self._name,
                    )

            if self._service_host is not None:
                await self._service_host.start()
        except Exception as exc:
            self._dispatcher = None
            await self._transport.stop()
            raise NodeStartupError(f"Node {self._name} failed to start: {exc}") from exc

        self._ready = True
        logger.info("Node started (node=%s)", self._name)

        if self._entry_point is not None:
            self._spawn(execute_chain(self._entry_point, None))

    async def stop(self) -> None:
        """
        Stop accepting new work: event listening and HTTP serving.

        Chains already running are left to finish on their own.
        """
        logger.info("Stopping node... (node=%s)", self._name)
        self._ready = False
        await self._transport.stop()
        if self._service_host is not None:
            await self._service_host.stop()

    def request_stop(self) -> None:
        """Make ``run`` return after stopping the node."""
        if self._stop_requested is not None:
            self._stop_requested.set()

    async def run(self) -> None:
        """Start the node and block until SIGINT/SIGTERM or ``request_stop``."""
        self._stop_requested = asyncio.Event()
        await self.start()
        loop = asyncio.get_running_loop()
        installed: list[signal.Signals] = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                logger.debug("Signal handler for %s unavailable (node=%s)", sig.name, self._name)
        try:
            await self._stop_requested.wait()
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            await self.stop()

    # ------------------------------------------------------------------
    # Collaborator bridging
    # ------------------------------------------------------------------

    def inject_event(self, event: Event) -> asyncio.Task[Any] | None:
        """
        Push a locally produced event into the dispatch pipeline.

        Safe to call from collaborator threads. Returns the dispatch task
        when called on the node's event loop.
        """
        if self._loop is None or self._dispatcher is None or not self._ready:
            logger.warning(
                "Node not running, dropping event %s from %s (node=%s)",
                event.name,
                event.emitter,
                self._name,
            )
            return None
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            return self._spawn(self._dispatcher.handle_event(event))
        self._loop.call_soon_threadsafe(self._spawn_dispatch, event)
        return None

    def _spawn_dispatch(self, event: Event) -> None:
        if self._dispatcher is not None and self._ready:
            self._spawn(self._dispatcher.handle_event(event))

    def _on_hardware_input(self, raw: object) -> None:
        if not isinstance(raw, InputEvent):
            logger.error(
                "Could not get event from hardware layer: %r (node=%s)", raw, self._name
            )
            return
        self.inject_event(hardware_input_event(self._name, raw))

    def _on_media_event(self, event_name: str) -> None:
        self.inject_event(
            Event(
                name=event_name,
                emitter=f"{self._name}.media-controller",
                receiver=self._name,
                payload="{}",
            )
        )

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background_done)
        return task

    def _background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Chain execution failed (node=%s)", self._name, exc_info=exc)


def create_default_node(
    settings: NodeSettings | None = None,
    *,
    redis_client: Any | None = None,
    bus: InMemoryEventBus | None = None,
    hardware: HardwareLayer | None = None,
    media: MediaController | None = None,
    metrics: DispatchMetrics | None = None,
) -> Node:
    """
    Assemble a node from ``DEMOKIT_*`` environment variables.

    Raises:
        NodeConfigError: If required configuration is missing.
    """
    settings = settings or NodeSettings.from_env()
    transport = create_event_transport_from_env(
        backend=settings.transport_backend, redis_client=redis_client, bus=bus
    )
    registration = (
        RegistrationClient(settings.registration_server)
        if settings.registration_server
        else None
    )
    return Node(
        settings.node_name,
        transport,
        expose_actions=settings.expose_actions,
        state_writable=settings.state_writable,
        hardware=hardware,
        media=media,
        registration=registration,
        metrics=metrics,
        http_enabled=settings.http_enabled,
        http_host=settings.http_host,
        http_port=settings.http_port,
    )
