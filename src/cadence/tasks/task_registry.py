# src/cadence/tasks/task_registry.py

"""
Task registry + execution ledger.

Registry:
- validates periods (literal > 0, or a name present in the period table),
- issues a TaskHandle per task (re-registering an equal callable returns the same handle),
- keeps registrations in insertion order.

Ledger:
- handle -> last dispatch timestamp (absent == never executed),
- written only by the dispatcher and by the Marker it hands to a running task.
"""

from __future__ import annotations

import inspect
import logging
import math
from collections.abc import Hashable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ..errors import PeriodError, SchedulerStateError
from .task_models import Period, TaskFn, TaskHandle, TaskRegistration

logger = logging.getLogger(__name__)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_periods(periods: Mapping[str, float]) -> dict[str, float]:
    """Return a private copy of the period table; every value must be a finite number > 0."""
    out: dict[str, float] = {}
    for key, value in periods.items():
        if not isinstance(key, str) or not key:
            raise PeriodError(f"Period name must be a non-empty string, got {key!r}")
        if not _is_number(value) or not math.isfinite(value) or value <= 0:
            raise PeriodError(f'Period "{key}" is too short: {value!r}')
        out[key] = float(value)
    return out


def _accepts_marker(task: TaskFn) -> bool:
    try:
        sig = inspect.signature(task)
    except (TypeError, ValueError):
        return False
    for param in sig.parameters.values():
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        ):
            return True
    return False


@dataclass(slots=True, frozen=True)
class _IdentityKey:
    ident: int


def _task_key(task: object) -> Hashable:
    try:
        hash(task)
    except TypeError:
        return _IdentityKey(id(task))
    return task


def default_task_name(task: TaskFn) -> str:
    name = getattr(task, "__name__", None)
    if isinstance(name, str) and name:
        return name
    return type(task).__name__


class TaskRegistry:
    def __init__(self, periods: Mapping[str, float] | None = None) -> None:
        self._periods: dict[str, float] | None = (
            None if periods is None else validate_periods(periods)
        )
        self._registrations: list[TaskRegistration] = []
        # Keyed by the callable itself so equal bound methods (obj.poll accessed
        # twice) map to one task; unhashable callables fall back to id().
        self._by_task: dict[Hashable, TaskHandle] = {}

    @property
    def periods(self) -> Mapping[str, float] | None:
        if self._periods is None:
            return None
        return MappingProxyType(self._periods)

    def check_period(self, period: Period) -> None:
        if isinstance(period, str):
            if self._periods is None:
                raise PeriodError("Periods were not specified in Scheduler constructor")
            if period not in self._periods:
                raise PeriodError(f"Period {period} was not specified")
            return
        if not _is_number(period) or not math.isfinite(period):
            raise PeriodError(f"Period must be a positive number or a period name, got {period!r}")
        if period <= 0:
            raise PeriodError("Period is too short")

    def register(self, task: TaskFn, period: Period, name: str | None = None) -> TaskHandle:
        """
        Bind `task` to `period`.

        Raises PeriodError for invalid periods. Registering an already known
        task is a no-op that returns the existing handle (the first binding wins).
        """
        self.check_period(period)

        existing = self._by_task.get(_task_key(task))
        if existing is not None:
            return existing

        handle = TaskHandle(len(self._registrations))
        reg = TaskRegistration(
            handle=handle,
            task=task,
            period=period if isinstance(period, str) else float(period),
            name=name or default_task_name(task),
            accepts_marker=_accepts_marker(task),
        )
        self._registrations.append(reg)
        self._by_task[_task_key(task)] = handle
        logger.debug('Task "%s" was added to scheduler (period=%r)', reg.name, period)
        return handle

    def get(self, handle: TaskHandle) -> TaskRegistration:
        if not 0 <= handle.index < len(self._registrations):
            raise SchedulerStateError(f"Unknown task handle: {handle}")
        return self._registrations[handle.index]

    def handle_for(self, task: TaskFn) -> TaskHandle | None:
        return self._by_task.get(_task_key(task))

    def period_seconds(self, reg: TaskRegistration) -> float:
        """Effective duration of a registration's period."""
        if isinstance(reg.period, str):
            if self._periods is None:
                raise SchedulerStateError(f"Period {reg.period} has no period table")
            return self._periods[reg.period]
        return float(reg.period)

    def __iter__(self) -> Iterator[TaskRegistration]:
        return iter(self._registrations)

    def __len__(self) -> int:
        return len(self._registrations)

    def __contains__(self, task: object) -> bool:
        return _task_key(task) in self._by_task


class ExecutionLedger:
    def __init__(self) -> None:
        self._last: dict[TaskHandle, float] = {}

    def get(self, handle: TaskHandle) -> float | None:
        return self._last.get(handle)

    def set(self, handle: TaskHandle, timestamp: float) -> None:
        self._last[handle] = timestamp

    def stamp_dispatch(self, handle: TaskHandle, now: float) -> float | None:
        """
        Record a dispatch at `now` and return the previous value.

        Never moves an entry backwards (a marker may have stamped a later instant).
        """
        previous = self._last.get(handle)
        if previous is None or now >= previous:
            self._last[handle] = now
        return previous

    def snapshot(self) -> dict[TaskHandle, float]:
        return dict(self._last)

    def __len__(self) -> int:
        return len(self._last)

    def __contains__(self, handle: object) -> bool:
        return handle in self._last
