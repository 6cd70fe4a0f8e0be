# src/cadence/tasks/task_group.py

from __future__ import annotations

import math

from ..errors import SchedulerStateError
from .task_models import TaskChoice, TaskHandle
from .task_registry import ExecutionLedger


class TaskGroup:
    """
    Tasks taking turns within one shared period, built fresh per selection round.

    The period budget belongs to the group: it may fire again only once
    `period` has elapsed since the most recent dispatch of ANY member, and the
    member that has waited longest goes next.
    """

    __slots__ = ("period", "members", "_ledger")

    def __init__(self, ledger: ExecutionLedger, period: float) -> None:
        self._ledger = ledger
        self.period = period
        self.members: list[TaskHandle] = []

    def add(self, handle: TaskHandle) -> None:
        self.members.append(handle)

    @property
    def order_key(self) -> TaskHandle:
        """Earliest registered member; used as the last resort in tie-breaks."""
        return self.members[0]

    def anchor(self) -> float | None:
        """Most recent dispatch among members, None if no member has run."""
        latest: float | None = None
        for handle in self.members:
            ts = self._ledger.get(handle)
            if ts is not None and (latest is None or ts > latest):
                latest = ts
        return latest

    def find_best_match(self, now: float) -> TaskChoice:
        if not self.members:
            raise SchedulerStateError("Task group is empty")

        anchor = self.anchor()
        # -inf sorts before any real wait: cold groups are always picked first.
        wait = -math.inf if anchor is None else anchor + self.period - now

        # Longest-waiting member; never-run members count as -inf.
        best = self.members[0]
        best_ts = math.inf
        for handle in self.members:
            ts = self._ledger.get(handle)
            ts = -math.inf if ts is None else ts
            if ts < best_ts:
                best = handle
                best_ts = ts

        return TaskChoice(handle=best, wait=wait)
