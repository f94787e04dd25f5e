from __future__ import annotations

import asyncio
import logging

import pytest

from demokit.core import Action, Node, chain
from demokit.messaging import InMemoryEventBus, InMemoryEventTransport
from demokit.server import (
    NodeServiceHost,
    NodeServiceHostError,
    action_names,
    build_node_status,
)


def _node(**kwargs) -> Node:
    node = Node("alpha", InMemoryEventTransport(InMemoryEventBus()), **kwargs)
    node.on_event_do(
        "LIGHT_ON",
        chain(Action("turnOn", operation=lambda e: None), Action("notify", operation=lambda e: None)),
    )
    node.on_event_do("PING", Action("pong", operation=lambda e: None))
    return node


def _client(node: Node):
    pytest.importorskip("fastapi")
    pytest.importorskip("httpx")
    from fastapi.testclient import TestClient

    return TestClient(NodeServiceHost(node).create_app())


def test_action_names_walk_the_whole_chain():
    steps = [Action(f"step{index}", operation=lambda e: None) for index in range(5)]
    assert action_names(chain(*steps)) == [f"step{index}" for index in range(5)]
    assert action_names(Action("solo")) == ["solo"]
    assert action_names(None) == []


def test_build_node_status_omits_actions_when_hidden():
    report = build_node_status(
        name="alpha", ready=True, hardware_available=False, media_available=False
    )
    assert report.actions is None
    assert report.status.ready is True


def test_status_endpoint_reports_node_and_chains():
    with _client(_node()) as client:
        response = client.get("/status")

    assert response.status_code == 200
    assert response.json() == {
        "info": {"name": "alpha"},
        "status": {"ready": False, "hardware_available": False, "media_available": False},
        "actions": {"LIGHT_ON": ["turnOn", "notify"], "PING": ["pong"]},
    }


def test_status_endpoint_hides_chains_when_disabled():
    with _client(_node(expose_actions=False)) as client:
        body = client.get("/status").json()
    assert body["actions"] is None


def test_state_endpoint_requires_served_state():
    with _client(_node()) as client:
        assert client.get("/state").status_code == 404
        assert client.put("/state", json={"a": 1}).status_code == 404


def test_state_endpoint_serves_and_protects_read_only_state():
    node = _node()
    node.serve_state({"visitors": 3})
    with _client(node) as client:
        assert client.get("/state").json() == {"visitors": 3}
        assert client.put("/state", json={"visitors": 0}).status_code == 405
    assert node.served_state.value == {"visitors": 3}


def test_state_endpoint_rebinds_writable_state():
    node = _node()
    node.serve_state({"visitors": 3}, writable=True)
    with _client(node) as client:
        response = client.put("/state", json=["anything", {"goes": True}])
        assert response.status_code == 200
        assert client.get("/state").json() == ["anything", {"goes": True}]
        bad = client.put(
            "/state", content=b"{oops", headers={"Content-Type": "application/json"}
        )
        assert bad.status_code == 400
    assert node.served_state.value == ["anything", {"goes": True}]


def test_state_endpoint_reports_unserializable_state():
    node = _node()
    node.serve_state({"lamp": object()})
    with _client(node) as client:
        response = client.get("/state")
    assert response.status_code == 500
    assert "error occurred" in response.text


def test_requests_are_logged(caplog):
    with caplog.at_level(logging.INFO, logger="demokit.server"):
        with _client(_node()) as client:
            client.get("/status")
    assert "GET /status -> 200" in caplog.text


def test_service_host_start_waits_for_bound_socket():
    pytest.importorskip("uvicorn")
    host = NodeServiceHost(_node(), host="127.0.0.1", port=0)

    async def scenario() -> bool:
        await host.start()
        started = host._server.started
        with pytest.raises(NodeServiceHostError, match="already running"):
            await host.start()
        await host.stop()
        return started

    assert asyncio.run(scenario()) is True
