# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable, Mapping

import pytest

from cadence.tasks.task_scheduler import Scheduler

from .fakes import EventRecorder, VirtualClock


@pytest.fixture()
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture()
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture()
def make_scheduler(
    clock: VirtualClock, recorder: EventRecorder
) -> Callable[..., Scheduler]:
    """
    Scheduler factory wired to the virtual clock and the event recorder.

    Real time is never involved, so cadence assertions are exact.
    """

    def _make(periods: Mapping[str, float] | None = None) -> Scheduler:
        scheduler = Scheduler(periods, clock=clock)
        scheduler.subscribe(recorder)
        return scheduler

    return _make
