# src/cadence/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduler.

The scheduler depends on Protocols instead of concrete implementations.
This keeps the time source and outcome listeners swappable and makes testing
on virtual time possible.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .events import SchedulerEvent


class Clock(Protocol):
    """
    Time source + delay primitive.

    now() returns seconds on a monotonic scale (the origin is irrelevant,
    only differences are used). sleep() must return immediately for waits <= 0.
    """

    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class TaskObserver(Protocol):
    """Outcome listener: receives TaskCompleted / TaskFailed / SchedulerStopped."""

    def __call__(self, event: SchedulerEvent) -> None: ...
