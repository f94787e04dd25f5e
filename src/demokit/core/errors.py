"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Node-level error types.
"""

from __future__ import annotations


class NodeError(RuntimeError):
    """Base class for node lifecycle errors."""


class NodeConfigError(NodeError):
    """Raised when required node configuration is missing or invalid."""


class NodeStartupError(NodeError):
    """Raised when a node cannot complete startup. No partial start is kept."""
