"""Single-flight periodic task scheduler with shared-period fairness."""

import logging

from .core.clock import MonotonicClock, sleep
from .core.events import SchedulerStopped, TaskCompleted, TaskFailed
from .errors import CadenceError, ConfigError, PeriodError, SchedulerStateError
from .tasks.task_models import HistoryEntry, Marker, TaskHandle
from .tasks.task_scheduler import Scheduler

# Silent unless the application configures logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CadenceError",
    "ConfigError",
    "HistoryEntry",
    "Marker",
    "MonotonicClock",
    "PeriodError",
    "Scheduler",
    "SchedulerStateError",
    "SchedulerStopped",
    "TaskCompleted",
    "TaskFailed",
    "TaskHandle",
    "sleep",
]
