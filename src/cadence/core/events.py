# src/cadence/core/events.py

"""
Outcome events and the observer hub.

The scheduler owns one EventHub. Callers subscribe listeners; the hub calls them
synchronously on the scheduler's control flow, in subscription order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TaskCompleted:
    name: str
    exec_seconds: float


@dataclass(slots=True, frozen=True)
class TaskFailed:
    name: str
    exec_seconds: float
    error: BaseException


@dataclass(slots=True, frozen=True)
class SchedulerStopped:
    """Emitted once the run loop has drained its final cycle and the scheduler is idle."""

    history_size: int


SchedulerEvent = Union[TaskCompleted, TaskFailed, SchedulerStopped]
Listener = Callable[[SchedulerEvent], None]


class EventHub:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def emit(self, event: SchedulerEvent) -> None:
        # Copy: a listener may unsubscribe itself while we iterate.
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, type(event).__name__)

    def __len__(self) -> int:
        return len(self._listeners)
