# src/cadence/tasks/task_scheduler.py

from __future__ import annotations

"""
Single-flight periodic task scheduler.

One asyncio task owns the run loop. Each cycle:
- asks the selector for the most due task and how long to wait,
- appends a history entry, sleeps for the wait,
- runs the task (never more than one at a time),
- stamps the execution ledger and emits TaskCompleted / TaskFailed.

stop() is advisory: the in-flight cycle (wait + task) always finishes, then the
loop observes the flag, emits SchedulerStopped and exits. Await wait_stopped()
to know when that happened.
"""

import asyncio
import dataclasses
import inspect
import logging
from collections.abc import Callable, Mapping

from ..core.clock import MonotonicClock
from ..core.events import EventHub, SchedulerStopped, TaskCompleted, TaskFailed
from ..core.ports import Clock, TaskObserver
from ..errors import SchedulerStateError
from .task_models import HistoryEntry, Marker, Period, TaskFn, TaskHandle, TaskRegistration
from .task_registry import ExecutionLedger, TaskRegistry
from .task_selector import choose_task



class Scheduler:
    def __init__(
        self,
        periods: Mapping[str, float] | None = None,
        *,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = TaskRegistry(periods)
        self._ledger = ExecutionLedger()
        self._history: list[HistoryEntry] = []
        self._events = EventHub()
        self._clock: Clock = clock if clock is not None else MonotonicClock()
        self._log = logger if logger is not None else logging.getLogger(__name__)

        self._started = False
        self._task_running = False
        self._runner: asyncio.Task[None] | None = None

    # ---- registration / observers ----

    def register(self, task: TaskFn, period: Period, name: str | None = None) -> TaskHandle:
        """
        Register `task` with a literal period (seconds) or a period-table name.

        Raises PeriodError on invalid periods. Re-registering the same task (or the
        same bound method) is a no-op and returns its existing handle.
        """
        return self._registry.register(task, period, name)

    def subscribe(self, listener: TaskObserver) -> Callable[[], None]:
        """Listen for TaskCompleted / TaskFailed / SchedulerStopped; returns an unsubscribe callable."""
        return self._events.subscribe(listener)

    # ---- introspection ----

    @property
    def periods(self) -> Mapping[str, float] | None:
        return self._registry.periods

    @property
    def tasks(self) -> tuple[TaskRegistration, ...]:
        return tuple(self._registry)

    @property
    def history(self) -> list[HistoryEntry]:
        """Copies of the history log, in dispatch order."""
        return [dataclasses.replace(entry) for entry in self._history]

    @property
    def is_running(self) -> bool:
        return self._started

    @property
    def is_idle(self) -> bool:
        """True once no run loop is active (a stopped loop still draining counts as busy)."""
        return self._runner is None or self._runner.done()

    def last_dispatched(self, handle: TaskHandle) -> float | None:
        return self._ledger.get(handle)

    # ---- lifecycle ----

    def start(self) -> None:
        """Start the run loop on the current event loop. Must be called from async code."""
        if self._started:
            raise SchedulerStateError("Scheduler is already running")
        if not len(self._registry):
            raise SchedulerStateError("Scheduler does not have tasks")
        if not self.is_idle:
            raise SchedulerStateError(
                "Scheduler is still finishing its last cycle; await wait_stopped() before restarting"
            )

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise SchedulerStateError("start() must be called with a running event loop") from e

        self._started = True
        self._runner = loop.create_task(self._run_loop(), name="cadence-scheduler")
        self._log.debug("Scheduler has been started")

    def stop(self) -> None:
        """Ask the loop to halt after the in-flight cycle. Does not preempt anything."""
        if not self._started:
            raise SchedulerStateError("Scheduler is not running")
        self._started = False
        self._log.debug("Scheduler was asked to stop")

    async def wait_stopped(self) -> None:
        """
        Wait until the run loop has fully drained.

        Re-raises if the loop itself crashed. Cancelling the waiter does not
        cancel the loop.
        """
        runner = self._runner
        if runner is None:
            return
        await asyncio.shield(runner)

    # ---- run loop ----

    async def _run_loop(self) -> None:
        self._log.debug("Loop processing started")
        try:
            while True:
                await self._run_cycle()
                if not self._started:
                    break
        except Exception:
            self._log.exception("Scheduler run loop crashed")
            raise
        finally:
            self._started = False
            self._log.debug("Scheduler is stopped")
            self._events.emit(SchedulerStopped(history_size=len(self._history)))

    async def _run_cycle(self) -> None:
        choice = choose_task(self._registry, self._ledger, self._clock.now())
        reg = self._registry.get(choice.handle)

        entry = HistoryEntry(task=reg.name)
        self._history.append(entry)
        self._log.debug('Task chosen: "%s", time to wait: %s', reg.name, choice.wait)

        await self._clock.sleep(max(0.0, choice.wait))

        entry.started = True
        await self._run_task(reg)
        entry.completed = True

    async def _run_task(self, reg: TaskRegistration) -> None:
        if self._task_running:
            raise SchedulerStateError("Task is already running")
        self._task_running = True

        started_at = self._clock.now()
        self._ledger.stamp_dispatch(reg.handle, started_at)
        marker = Marker(reg.handle, self._ledger, self._clock, floor=self._ledger.get(reg.handle))
        self._log.debug('Run task "%s"', reg.name)

        error: BaseException | None = None
        try:
            result = reg.task(marker) if reg.accepts_marker else reg.task()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError as exc:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                # The run loop itself is being cancelled.
                raise
            # Cancellation raised from inside the task body: an ordinary failure.
            error = exc
            self._log.warning('Task "%s" was cancelled from within', reg.name)
        except Exception as exc:
            error = exc
            self._log.warning('Task "%s" failed: %s', reg.name, exc, exc_info=True)
        finally:
            self._task_running = False

        elapsed = self._clock.now() - started_at
        if error is None:
            self._events.emit(TaskCompleted(name=reg.name, exec_seconds=elapsed))
        else:
            self._events.emit(TaskFailed(name=reg.name, exec_seconds=elapsed, error=error))
