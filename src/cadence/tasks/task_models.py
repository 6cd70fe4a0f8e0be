# src/cadence/tasks/task_models.py

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from ..core.ports import Clock
    from .task_registry import ExecutionLedger

logger = logging.getLogger(__name__)

# A period is either a literal duration in seconds or a key of the period table.
Period = Union[float, int, str]

TaskFn = Callable[..., Union[Awaitable[Any], Any]]


@dataclass(slots=True, frozen=True, order=True)
class TaskHandle:
    """Opaque id issued at registration; index follows registration order."""

    index: int


@dataclass(slots=True, frozen=True)
class TaskRegistration:
    handle: TaskHandle
    task: TaskFn
    period: Period
    name: str
    accepts_marker: bool

    @property
    def is_named(self) -> bool:
        return isinstance(self.period, str)


@dataclass(slots=True)
class HistoryEntry:
    """
    One selection round.

    Appended when a task is chosen, then flipped in place:
    started=True right before dispatch, completed=True once the task resolved
    (successfully or not).
    """

    task: str
    started: bool = False
    completed: bool = False


@dataclass(slots=True, frozen=True)
class TaskChoice:
    """
    Selector output.

    wait may be negative (overdue) or -inf (group never ran); the run loop
    treats anything <= 0 as "run now".
    """

    handle: TaskHandle
    wait: float


class Marker:
    """
    Capability handed to a running task to redefine its dispatch timestamp.

    marker() stamps the current clock value, marker(ts) an explicit one.
    Callable any number of times; the last call wins. A timestamp older than
    `floor` (the ledger value right after dispatch) is ignored, so a task's
    ledger entry never drops below its dispatch stamp.
    """

    __slots__ = ("_handle", "_ledger", "_clock", "_floor")

    def __init__(
        self,
        handle: TaskHandle,
        ledger: ExecutionLedger,
        clock: Clock,
        *,
        floor: float | None = None,
    ) -> None:
        self._handle = handle
        self._ledger = ledger
        self._clock = clock
        self._floor = -math.inf if floor is None else floor

    def __call__(self, timestamp: float | None = None) -> float:
        ts = self._clock.now() if timestamp is None else float(timestamp)
        if ts < self._floor:
            logger.debug(
                "Marker for %s ignored: %.6f is older than dispatch stamp %.6f",
                self._handle,
                ts,
                self._floor,
            )
            current = self._ledger.get(self._handle)
            return self._floor if current is None else current
        self._ledger.set(self._handle, ts)
        return ts
