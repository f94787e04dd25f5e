from __future__ import annotations

import asyncio
import json
import logging
import socket

import pytest

from demokit.core import (
    INTERNAL_MEDIA_ENDED,
    INTERNAL_MEDIA_STARTED,
    Action,
    Event,
    Node,
    NodeSettings,
    NodeStartupError,
    RegistryFrozenError,
    chain,
    create_default_node,
    hardware_input_event,
)
from demokit.hardware import InputEvent, VirtualHardwareLayer
from demokit.media import VirtualMediaController
from demokit.messaging import InMemoryEventBus, InMemoryEventTransport
from demokit.registration import RegistrationClient


def run_async(coro):
    return asyncio.run(coro)


async def _settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0.01)


def _node(name: str, bus: InMemoryEventBus, **kwargs) -> Node:
    return Node(name, InMemoryEventTransport(bus), **kwargs)


class _PlayerMedia(VirtualMediaController):
    def __init__(self) -> None:
        self.callbacks = {}

    def is_available(self) -> bool:
        return True

    def set_on_media_started_callback(self, callback) -> None:
        self.callbacks["started"] = callback

    def set_on_media_paused_callback(self, callback) -> None:
        self.callbacks["paused"] = callback

    def set_on_media_ended_callback(self, callback) -> None:
        self.callbacks["ended"] = callback


def test_broadcast_triggers_peer_once_and_never_the_sender():
    async def scenario() -> tuple[list[str], list[Event]]:
        bus = InMemoryEventBus()
        alpha = _node("alpha", bus)
        beta = _node("beta", bus)
        lamp: list[str] = []
        alpha_calls: list[Event] = []
        beta.on_event_do("LIGHT_ON", Action("turnOn", operation=lambda e: lamp.append("on")))
        alpha.on_event_do("LIGHT_ON", Action("selfTurnOn", operation=alpha_calls.append))

        await alpha.start()
        await beta.start()
        sent = await alpha.broadcast_event("LIGHT_ON", "{}")
        await _settle()
        await alpha.stop()
        await beta.stop()

        assert sent == Event(name="LIGHT_ON", emitter="alpha", receiver="*", payload="{}")
        return lamp, alpha_calls

    lamp, alpha_calls = run_async(scenario())
    assert lamp == ["on"]
    assert alpha_calls == []


def test_unicast_is_executed_only_by_its_receiver():
    async def scenario() -> dict[str, list[str]]:
        bus = InMemoryEventBus()
        beta = _node("beta", bus)
        gamma = _node("gamma", bus)
        delta = _node("delta", bus)
        calls: dict[str, list[str]] = {"gamma": [], "delta": []}
        gamma.on_event_do("PING", Action("pong", operation=lambda e: calls["gamma"].append(e.receiver)))
        delta.on_event_do("PING", Action("pong", operation=lambda e: calls["delta"].append(e.receiver)))

        for node in (beta, gamma, delta):
            await node.start()
        await beta.send_event_to("gamma", "PING")
        await _settle()
        for node in (beta, gamma, delta):
            await node.stop()
        return calls

    calls = run_async(scenario())
    assert calls == {"gamma": ["gamma"], "delta": []}


def test_delayed_chain_does_not_block_other_events():
    async def scenario() -> list[str]:
        bus = InMemoryEventBus()
        alpha = _node("alpha", bus)
        beta = _node("beta", bus)
        order: list[str] = []
        beta.on_event_do("SLOW", Action("slow", operation=lambda e: order.append("slow"), delay_s=0.2))
        beta.on_event_do("FAST", Action("fast", operation=lambda e: order.append("fast")))

        await alpha.start()
        await beta.start()
        await alpha.broadcast_event("SLOW")
        await alpha.broadcast_event("FAST")
        await asyncio.sleep(0.05)
        snapshot = list(order)
        await asyncio.sleep(0.3)
        await alpha.stop()
        await beta.stop()
        return snapshot + ["|"] + order

    assert run_async(scenario()) == ["fast", "|", "fast", "slow"]


def test_startup_chain_runs_once_without_event():
    async def scenario() -> list[Event | None]:
        node = _node("alpha", InMemoryEventBus())
        seen: list[Event | None] = []
        node.set_entry_point(
            chain(
                Action("boot", operation=seen.append, guard=lambda e: e is None),
                Action("announce", operation=seen.append),
            )
        )
        await node.start()
        await _settle()
        await node.stop()
        return seen

    assert run_async(scenario()) == [None, None]


def test_start_fails_when_transport_is_unreachable():
    async def scenario() -> Node:
        bus = InMemoryEventBus()
        bus.close()
        node = _node("alpha", bus)
        with pytest.raises(NodeStartupError, match="could not connect"):
            await node.start()
        return node

    node = run_async(scenario())
    assert node.is_ready is False


def test_registration_after_start_is_rejected():
    async def scenario() -> None:
        node = _node("alpha", InMemoryEventBus())
        node.on_event_do("A", Action("a", operation=lambda e: None))
        await node.start()
        with pytest.raises(RegistryFrozenError):
            node.on_event_do("B", Action("b", operation=lambda e: None))
        with pytest.raises(NodeStartupError, match="already started"):
            await node.start()
        await node.stop()

    run_async(scenario())


def test_status_reports_readiness_capabilities_and_chains():
    async def scenario() -> tuple[dict, dict]:
        node = _node("alpha", InMemoryEventBus(), media=_PlayerMedia())
        node.on_event_do(
            "LIGHT_ON",
            chain(
                Action("turnOn", operation=lambda e: None),
                Action("wait", operation=lambda e: None, delay_s=1),
                Action("turnOff", operation=lambda e: None),
            ),
        )
        before = node.status().model_dump()
        await node.start()
        after = node.status().model_dump()
        await node.stop()
        return before, after

    before, after = run_async(scenario())
    assert before["status"] == {"ready": False, "hardware_available": False, "media_available": True}
    assert after["status"]["ready"] is True
    assert after["info"] == {"name": "alpha"}
    assert after["actions"] == {"LIGHT_ON": ["turnOn", "wait", "turnOff"]}


def test_status_hides_chains_when_not_exposed():
    node = _node("alpha", InMemoryEventBus(), expose_actions=False)
    node.on_event_do("A", Action("a", operation=lambda e: None))
    assert node.status().actions is None


def test_hardware_input_is_dispatched_as_local_broadcast():
    async def scenario() -> tuple[list[Event], list[str]]:
        hardware = VirtualHardwareLayer()
        node = _node("alpha", InMemoryEventBus(), hardware=hardware)
        seen: list[Event] = []
        node.on_event_do("I_UP_PRESSED", Action("up", operation=seen.append))
        await node.start()
        hardware.emit(InputEvent(direction="up", action="pressed", timestamp=1700000000.5))
        hardware.emit("garbage")
        await _settle()
        await node.stop()
        return seen

    seen = run_async(scenario())
    assert seen == [
        Event(
            name="I_UP_PRESSED",
            emitter="alpha-hardware",
            receiver="*",
            payload=json.dumps({"timestamp": 1700000000}),
        )
    ]


def test_hardware_input_event_naming():
    event = hardware_input_event("beta", InputEvent("middle", "released", timestamp=12.0))
    assert event.name == "I_MIDDLE_RELEASED"
    assert event.emitter == "beta-hardware"
    assert json.loads(event.payload) == {"timestamp": 12}


def test_media_callbacks_become_internal_events_from_any_thread():
    async def scenario() -> list[Event]:
        media = _PlayerMedia()
        node = _node("alpha", InMemoryEventBus(), media=media)
        seen: list[Event] = []
        node.on_event_do(INTERNAL_MEDIA_STARTED, Action("started", operation=seen.append))
        node.on_event_do(INTERNAL_MEDIA_ENDED, Action("ended", operation=seen.append))
        await node.start()
        media.callbacks["started"]()
        await asyncio.to_thread(media.callbacks["ended"])
        await _settle()
        await node.stop()
        return seen

    seen = run_async(scenario())
    assert [e.name for e in seen] == [INTERNAL_MEDIA_STARTED, INTERNAL_MEDIA_ENDED]
    assert {e.emitter for e in seen} == {"alpha.media-controller"}
    assert {e.receiver for e in seen} == {"alpha"}


def test_injected_events_before_start_are_dropped(caplog):
    node = _node("alpha", InMemoryEventBus())
    with caplog.at_level(logging.WARNING, logger="demokit.core.node"):
        assert node.inject_event(Event(name="X", emitter="alpha-hardware")) is None
    assert "not running" in caplog.text


def test_stopped_node_no_longer_receives_events():
    async def scenario() -> list[str]:
        bus = InMemoryEventBus()
        alpha = _node("alpha", bus)
        beta = _node("beta", bus)
        calls: list[str] = []
        beta.on_event_do("PING", Action("pong", operation=lambda e: calls.append("pong")))
        await alpha.start()
        await beta.start()
        await beta.stop()
        await alpha.broadcast_event("PING")
        await _settle()
        await alpha.stop()
        return calls

    assert run_async(scenario()) == []


def test_failing_operation_is_logged_and_node_keeps_running(caplog):
    async def scenario() -> list[str]:
        bus = InMemoryEventBus()
        alpha = _node("alpha", bus)
        beta = _node("beta", bus)
        calls: list[str] = []

        def boom(event):
            raise RuntimeError("lamp is broken")

        beta.on_event_do("BOOM", Action("boom", operation=boom))
        beta.on_event_do("PING", Action("pong", operation=lambda e: calls.append("pong")))
        await alpha.start()
        await beta.start()
        await alpha.broadcast_event("BOOM")
        await _settle()
        await alpha.broadcast_event("PING")
        await _settle()
        await alpha.stop()
        await beta.stop()
        return calls

    with caplog.at_level(logging.ERROR, logger="demokit.messaging"):
        calls = run_async(scenario())
    assert calls == ["pong"]
    assert "Event handler failed" in caplog.text


def test_registration_failure_does_not_abort_startup(caplog):
    def refusing_transport(request, timeout_s):
        return 503, b""

    async def scenario() -> bool:
        node = _node(
            "alpha",
            InMemoryEventBus(),
            registration=RegistrationClient("registry:4000", transport=refusing_transport),
        )
        await node.start()
        ready = node.is_ready
        await node.stop()
        return ready

    with caplog.at_level(logging.WARNING, logger="demokit.core.node"):
        assert run_async(scenario()) is True
    assert "Could not register" in caplog.text


def test_run_returns_after_stop_request():
    async def scenario() -> bool:
        node = _node("alpha", InMemoryEventBus())
        runner = asyncio.create_task(node.run())
        await _settle()
        assert node.is_ready is True
        node.request_stop()
        await asyncio.wait_for(runner, timeout=1.0)
        return node.is_ready

    assert run_async(scenario()) is False


def test_served_state_defaults_to_node_setting():
    node = _node("alpha", InMemoryEventBus(), state_writable=True)
    node.serve_state({"score": 1})
    assert node.served_state is not None
    assert node.served_state.writable is True

    node.serve_state({"score": 2}, writable=False)
    assert node.served_state.writable is False


def test_create_default_node_uses_settings():
    bus = InMemoryEventBus()
    settings = NodeSettings(node_name="kiosk", http_enabled=False, expose_actions=False)
    node = create_default_node(settings, bus=bus)
    assert node.name == "kiosk"
    assert node.service_host is None
    assert node.status().actions is None


def test_start_fails_cleanly_when_http_port_is_taken():
    pytest.importorskip("uvicorn")
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
        taken.bind(("127.0.0.1", 0))
        taken.listen(1)
        port = taken.getsockname()[1]

        async def scenario() -> tuple[Node, InMemoryEventTransport, list[None]]:
            transport = InMemoryEventTransport(InMemoryEventBus())
            node = Node(
                "alpha", transport, http_enabled=True, http_host="127.0.0.1", http_port=port
            )
            startup: list[None] = []
            node.set_entry_point(Action("boot", operation=startup.append))
            with pytest.raises(NodeStartupError, match="failed to start"):
                await node.start()
            await _settle()
            return node, transport, startup

        node, transport, startup = run_async(scenario())
    assert node.is_ready is False
    assert transport.is_listening is False
    assert startup == []


def test_stalled_registration_server_does_not_abort_startup(caplog):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        host, port = listener.getsockname()

        async def scenario() -> bool:
            node = _node(
                "alpha",
                InMemoryEventBus(),
                registration=RegistrationClient(f"{host}:{port}", timeout_s=0.2),
            )
            await node.start()
            ready = node.is_ready
            await node.stop()
            return ready

        with caplog.at_level(logging.WARNING, logger="demokit.core.node"):
            assert run_async(scenario()) is True
    assert "Could not register" in caplog.text


def test_collaborator_input_after_stop_is_dropped(caplog):
    async def scenario() -> list[Event]:
        hardware = VirtualHardwareLayer()
        media = _PlayerMedia()
        node = _node("alpha", InMemoryEventBus(), hardware=hardware, media=media)
        seen: list[Event] = []
        node.on_event_do("I_UP_PRESSED", Action("up", operation=seen.append))
        node.on_event_do(INTERNAL_MEDIA_ENDED, Action("ended", operation=seen.append))
        await node.start()
        await node.stop()
        hardware.emit(InputEvent("up", "pressed", 1.0))
        await asyncio.to_thread(media.callbacks["ended"])
        await _settle()
        return seen

    with caplog.at_level(logging.WARNING, logger="demokit.core.node"):
        assert run_async(scenario()) == []
    assert "Node not running, dropping event I_UP_PRESSED" in caplog.text
