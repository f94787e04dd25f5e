"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

demokit: event-driven action chains for distributed exhibit nodes.

Quick start::

    from demokit import Action, create_default_node

    node = create_default_node()
    node.on_event_do("LIGHT_ON", Action("turnOn", operation=lambda e: lamp.on()))
    await node.run()
"""

from .core import (
    WILDCARD_RECEIVER,
    Action,
    ActionRegistry,
    Dispatcher,
    Event,
    Node,
    NodeConfigError,
    NodeSettings,
    NodeStartupError,
    chain,
    configure_logging,
    create_default_node,
    execute_chain,
)

__all__ = [
    "Action",
    "ActionRegistry",
    "Dispatcher",
    "Event",
    "Node",
    "NodeConfigError",
    "NodeSettings",
    "NodeStartupError",
    "WILDCARD_RECEIVER",
    "chain",
    "configure_logging",
    "create_default_node",
    "execute_chain",
]
