"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Event-driven action orchestration core.
"""

from .action import Action, Guard, Operation, chain, execute_chain, iter_chain
from .config import NodeSettings, configure_logging, generate_node_name
from .dispatcher import Dispatcher
from .errors import NodeConfigError, NodeError, NodeStartupError
from .event import (
    INTERNAL_MEDIA_ENDED,
    INTERNAL_MEDIA_PAUSED,
    INTERNAL_MEDIA_STARTED,
    WILDCARD_RECEIVER,
    Event,
    EventDecodeError,
)
from .metrics import DispatchMetrics, NoOpDispatchMetrics, PrometheusDispatchMetrics
from .node import Node, create_default_node, hardware_input_event
from .registry import ActionRegistry, RegistryFrozenError

__all__ = [
    "Action",
    "Guard",
    "Operation",
    "chain",
    "execute_chain",
    "iter_chain",
    "ActionRegistry",
    "RegistryFrozenError",
    "Dispatcher",
    "DispatchMetrics",
    "NoOpDispatchMetrics",
    "PrometheusDispatchMetrics",
    "Event",
    "EventDecodeError",
    "WILDCARD_RECEIVER",
    "INTERNAL_MEDIA_STARTED",
    "INTERNAL_MEDIA_PAUSED",
    "INTERNAL_MEDIA_ENDED",
    "Node",
    "NodeSettings",
    "NodeError",
    "NodeConfigError",
    "NodeStartupError",
    "create_default_node",
    "configure_logging",
    "generate_node_name",
    "hardware_input_event",
]
