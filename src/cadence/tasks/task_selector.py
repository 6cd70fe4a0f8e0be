# src/cadence/tasks/task_selector.py

"""
Task selection.

Two regimes:
- cold start (nothing has run yet): the task with the largest period goes first,
  with no wait, so the rarest task gets its due time established early;
- warm: tasks are partitioned into fairness groups, each group proposes
  (candidate, wait), and the group with the smallest wait wins.

Ties are resolved by a total order: smaller wait, then larger period, then the
group whose earliest member registered first.
"""

from __future__ import annotations

import logging

from ..errors import SchedulerStateError
from .task_group import TaskGroup
from .task_models import TaskChoice, TaskHandle
from .task_registry import ExecutionLedger, TaskRegistry

logger = logging.getLogger(__name__)


def choose_rarest_task(registry: TaskRegistry) -> TaskHandle:
    best: TaskHandle | None = None
    best_period = 0.0
    for reg in registry:
        period = registry.period_seconds(reg)
        # Strict ">" keeps the earliest registration on equal periods.
        if period > best_period:
            best = reg.handle
            best_period = period
    if best is None:
        raise SchedulerStateError("Scheduler does not have tasks")
    return best


def build_task_groups(registry: TaskRegistry, ledger: ExecutionLedger) -> list[TaskGroup]:
    """
    Partition registrations into fairness groups.

    Named periods group by name; literal periods are always singleton groups,
    even when two literal values coincide.
    """
    groups: list[TaskGroup] = []
    named: dict[str, TaskGroup] = {}

    for reg in registry:
        if isinstance(reg.period, str):
            group = named.get(reg.period)
            if group is None:
                group = TaskGroup(ledger, registry.period_seconds(reg))
                named[reg.period] = group
                groups.append(group)
        else:
            group = TaskGroup(ledger, float(reg.period))
            groups.append(group)
        group.add(reg.handle)

    return groups


def choose_task(registry: TaskRegistry, ledger: ExecutionLedger, now: float) -> TaskChoice:
    if not len(registry):
        raise SchedulerStateError("Scheduler does not have tasks")

    if not len(ledger):
        handle = choose_rarest_task(registry)
        logger.debug("Cold start: rarest task %s runs first", handle)
        return TaskChoice(handle=handle, wait=0.0)

    best: TaskChoice | None = None
    best_key: tuple[float, float, TaskHandle] | None = None

    for group in build_task_groups(registry, ledger):
        choice = group.find_best_match(now)
        key = (choice.wait, -group.period, group.order_key)
        logger.debug("Wait for %s is %.6f (period %.6f)", choice.handle, choice.wait, group.period)
        if best_key is None or key < best_key:
            best = choice
            best_key = key

    if best is None:
        raise SchedulerStateError("No task group produced a candidate")
    return best
