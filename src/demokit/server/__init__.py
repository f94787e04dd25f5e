"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

HTTP status surface for nodes.
"""

from .app import NodeServiceHost, NodeServiceHostError, ServedState, StatusSource
from .status import (
    NodeInfo,
    NodeStatus,
    NodeStatusReport,
    action_names,
    build_node_status,
)

__all__ = [
    "NodeInfo",
    "NodeStatus",
    "NodeStatusReport",
    "NodeServiceHost",
    "NodeServiceHostError",
    "ServedState",
    "StatusSource",
    "action_names",
    "build_node_status",
]
