"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Inbound event routing: addressing rules, registry lookup, chain execution.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .action import Action, execute_chain
from .event import WILDCARD_RECEIVER, Event
from .metrics import DispatchMetrics, NoOpDispatchMetrics

logger = logging.getLogger("demokit.core.dispatcher")


class Dispatcher:
    """
    Route inbound events to registered action chains.

    Every event that passes the addressing rules and has a registered entry
    point triggers exactly one independent chain execution. Events are never
    merged, batched or de-duplicated.
    """

    def __init__(
        self,
        self_identity: str,
        actions: Mapping[str, Action],
        *,
        metrics: DispatchMetrics | None = None,
    ) -> None:
        self._self_identity = self_identity
        self._actions = actions
        self._metrics: DispatchMetrics = metrics or NoOpDispatchMetrics()

    @property
    def self_identity(self) -> str:
        return self._self_identity

    def resolve(self, event: Event) -> Action | None:
        """Return the entry point ``event`` would trigger, if any."""
        # Ignoring events sent by this node
        if event.emitter == self._self_identity:
            self._ignored("self")
            return None

        # Ignoring unicast events that are not for this node
        if event.receiver != WILDCARD_RECEIVER and event.receiver != self._self_identity:
            self._ignored("not_addressed")
            return None

        action = self._actions.get(event.name)
        if action is None:
            self._ignored("unregistered")
            logger.debug(
                "No actions registered for event %s, ignoring (node=%s)",
                event.name,
                self._self_identity,
            )
            return None
        return action

    async def handle_event(self, event: Event) -> bool:
        """
        Apply addressing rules to ``event`` and run the matching chain.

        Returns:
            ``True`` when a chain was executed, ``False`` when the event was
            discarded.
        """
        self._metrics.incr("dispatcher_events_received_total")
        action = self.resolve(event)
        if action is None:
            return False

        self._metrics.incr("dispatcher_chains_started_total", tags={"event": event.name})
        logger.debug(
            "Executing %s for event %s from %s (node=%s)",
            action.name,
            event.name,
            event.emitter,
            self._self_identity,
        )
        await execute_chain(action, event)
        return True

    def _ignored(self, reason: str) -> None:
        self._metrics.incr("dispatcher_events_ignored_total", tags={"reason": reason})
