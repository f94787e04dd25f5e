"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Event-name to action-chain registry.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from .action import Action

logger = logging.getLogger("demokit.core.registry")


class RegistryFrozenError(RuntimeError):
    """Raised when registering an action after the registry was frozen."""


class ActionRegistry:
    """
    Maps event names to the entry point of an action chain.

    The registry is filled during node setup and frozen before the node starts
    listening. The first registration for a name wins; there is no replace or
    remove operation.
    """

    def __init__(self, *, owner: str | None = None) -> None:
        self._entries: dict[str, Action] = {}
        self._frozen = False
        self._owner = owner

    def register(self, event_name: str, action: Action) -> bool:
        """
        Register ``action`` as the entry point for ``event_name``.

        Returns:
            ``True`` when registered, ``False`` when a previous registration
            for the same name was kept.

        Raises:
            ValueError: If ``event_name`` is empty.
            RegistryFrozenError: If called after ``freeze()``.
        """
        if not event_name:
            raise ValueError("event_name must be non-empty")
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{event_name}': registry is frozen (node={self._owner})"
            )
        if event_name in self._entries:
            logger.warning(
                "An action is already registered for event %s, ignoring %s (node=%s)",
                event_name,
                action.name,
                self._owner,
            )
            return False

        self._entries[event_name] = action
        logger.info(
            "Action configured: %s -> %s (node=%s)", event_name, action.name, self._owner
        )
        return True

    def freeze(self) -> Mapping[str, Action]:
        """Stop accepting registrations and return the read-only view."""
        self._frozen = True
        return self.view()

    def view(self) -> Mapping[str, Action]:
        """Read-only live view of the registered entry points."""
        return MappingProxyType(self._entries)

    def get(self, event_name: str) -> Action | None:
        return self._entries.get(event_name)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __contains__(self, event_name: object) -> bool:
        return event_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
