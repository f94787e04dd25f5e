"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Action chains and their execution engine.

A chain is a singly linked list of ``Action`` steps. Executing a chain walks
``then`` links in order; each step may wait, may be gated by a guard and may
run an operation. A guard that evaluates false skips only its own step's
operation: the chain always continues to ``then``.

Chains must be acyclic. The engine does not detect cycles; a chain whose
``then`` links loop back runs until the process stops.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .event import Event

# Operations and guards receive ``None`` when the chain is the startup chain.
Operation = Callable[[Event | None], Awaitable[None] | None]
Guard = Callable[[Event | None], Awaitable[bool] | bool]


@dataclass(eq=False, slots=True)
class Action:
    """
    One step of an action chain.

    Attributes:
        name: Label used for diagnostics and status reporting.
        operation: Effect to perform. ``None`` marks an inert placeholder that
            ends the chain.
        guard: Optional predicate over the triggering event.
        delay_s: Seconds to wait before evaluating guard and operation.
        then: Next step, or ``None`` at the end of the chain.
    """

    name: str
    operation: Operation | None = None
    guard: Guard | None = None
    delay_s: float = 0.0
    then: Action | None = None

    def __post_init__(self) -> None:
        if self.delay_s < 0:
            raise ValueError(f"Action '{self.name}' delay_s must be >= 0")


def chain(*actions: Action) -> Action:
    """
    Link ``actions`` in order through ``then`` and return the first one.

    The last action keeps its existing ``then`` so a chain can be attached in
    front of a shared tail.
    """
    if not actions:
        raise ValueError("chain() requires at least one action")
    for current, following in zip(actions, actions[1:]):
        current.then = following
    return actions[0]


def iter_chain(entry: Action | None):
    """Yield every action reachable from ``entry`` in ``then`` order."""
    current = entry
    while current is not None:
        yield current
        current = current.then


async def _resolve(value):
    if inspect.isawaitable(value):
        return await value
    return value


async def execute_chain(action: Action | None, event: Event | None) -> None:
    """
    Execute the chain starting at ``action`` with ``event`` as context.

    Exceptions raised by operations or guards propagate to the caller and end
    this execution.
    """
    current = action
    while current is not None:
        if current.operation is None:
            return
        if current.delay_s > 0:
            await asyncio.sleep(current.delay_s)
        if current.guard is None or await _resolve(current.guard(event)):
            await _resolve(current.operation(event))
        current = current.then
