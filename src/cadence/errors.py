# src/cadence/errors.py

"""Error taxonomy.

Caller misuse raises one of these synchronously. Failures of the task bodies
themselves never surface here: the dispatcher reports them as events.
"""

from __future__ import annotations


class CadenceError(Exception):
    """Base exception for cadence."""


class PeriodError(CadenceError, ValueError):
    """Raised when a period (literal or named) is invalid or unknown."""


class SchedulerStateError(CadenceError, RuntimeError):
    """Raised when start/stop/dispatch is called in the wrong scheduler state."""


class ConfigError(CadenceError, ValueError):
    """Raised when environment or command line configuration cannot be parsed."""
