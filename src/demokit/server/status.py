"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Read-only status projection of a node.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from ..core.action import Action, iter_chain


class NodeInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)


class NodeStatus(BaseModel):
    ready: bool = False
    hardware_available: bool = False
    media_available: bool = False


class NodeStatusReport(BaseModel):
    """Payload of the status endpoint."""

    info: NodeInfo
    status: NodeStatus
    actions: dict[str, list[str]] | None = None


def action_names(entry: Action | None) -> list[str]:
    """Names of the actions along the chain starting at ``entry``, in ``then`` order."""
    return [action.name for action in iter_chain(entry)]


def build_node_status(
    *,
    name: str,
    ready: bool,
    hardware_available: bool,
    media_available: bool,
    actions: Mapping[str, Action] | None = None,
) -> NodeStatusReport:
    """
    Project node state into a status report.

    ``actions`` is included only when given; pass ``None`` to hide the
    registered chains.
    """
    chains = None
    if actions is not None:
        chains = {event_name: action_names(entry) for event_name, entry in actions.items()}
    return NodeStatusReport(
        info=NodeInfo(name=name),
        status=NodeStatus(
            ready=ready,
            hardware_available=hardware_available,
            media_available=media_available,
        ),
        actions=chains,
    )
