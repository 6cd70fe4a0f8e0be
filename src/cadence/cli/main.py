# src/cadence/cli/main.py

"""
CLI entrypoint.

    cadence run --task pkg.jobs:refresh=fast --task pkg.jobs:cleanup=10m \
                --period fast=30s --duration 600

Initializes logging from settings, imports the task callables, runs the
scheduler until SIGINT/SIGTERM (or --duration), then waits for the last
in-flight task to finish and prints a per-task summary.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import importlib
import logging
import signal
import sys
from collections import Counter
from collections.abc import Mapping, Sequence

from ..config import get_settings, parse_duration, parse_periods
from ..core.events import SchedulerEvent, SchedulerStopped, TaskCompleted, TaskFailed
from ..errors import CadenceError, ConfigError
from ..logging_setup import setup_logging
from ..tasks.task_models import Period, TaskFn
from ..tasks.task_scheduler import Scheduler

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2


class RunSummary:
    """Observer that logs outcomes and keeps per-task counters for the final report."""

    def __init__(self) -> None:
        self.completed: Counter[str] = Counter()
        self.failed: Counter[str] = Counter()

    def __call__(self, event: SchedulerEvent) -> None:
        if isinstance(event, TaskCompleted):
            self.completed[event.name] += 1
            logger.info("Task %s completed in %.3fs", event.name, event.exec_seconds)
        elif isinstance(event, TaskFailed):
            self.failed[event.name] += 1
            logger.warning(
                "Task %s failed after %.3fs: %s", event.name, event.exec_seconds, event.error
            )
        elif isinstance(event, SchedulerStopped):
            logger.info("Scheduler stopped after %d selection rounds", event.history_size)

    def lines(self) -> list[str]:
        names = sorted(set(self.completed) | set(self.failed))
        return [f"{n}: completed={self.completed[n]} failed={self.failed[n]}" for n in names]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cadence", description="Periodic task scheduler")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run tasks until interrupted (or for --duration)")
    run.add_argument(
        "--task",
        dest="tasks",
        action="append",
        required=True,
        metavar="MODULE:ATTR=PERIOD",
        help="Task callable and its period (a duration like 30s or a period name)",
    )
    run.add_argument(
        "--period",
        dest="periods",
        action="append",
        default=[],
        metavar="NAME=DURATION",
        help="Named period shared by tasks (overrides CADENCE_PERIODS)",
    )
    run.add_argument(
        "--duration",
        type=parse_duration,
        default=None,
        help="Stop after this long (default: CADENCE_RUN_SECONDS, 0 = until signal)",
    )
    run.add_argument("--log-level", default=None, help="Console log level (default: CADENCE_LOG_LEVEL)")
    return parser


def split_task_ref(ref: str) -> tuple[str, str, str]:
    """'pkg.mod:attr=5m' -> ('pkg.mod', 'attr', '5m')."""
    target, sep, period = ref.rpartition("=")
    module, colon, attr = target.partition(":")
    if not sep or not colon or not module or not attr or not period:
        raise ConfigError(f"task must look like MODULE:ATTR=PERIOD, got {ref!r}")
    return module.strip(), attr.strip(), period.strip()


def load_task(module_name: str, attr_path: str) -> TaskFn:
    try:
        obj: object = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"cannot import {module_name!r}: {e}") from e
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise ConfigError(f"{module_name!r} has no attribute {attr_path!r}") from None
    if not callable(obj):
        raise ConfigError(f"{module_name}:{attr_path} is not callable")
    return obj


def resolve_period(value: str, periods: Mapping[str, float]) -> Period:
    """Period names take precedence over duration literals."""
    if value in periods:
        return value
    return parse_duration(value)


def build_scheduler(task_refs: Sequence[str], periods: Mapping[str, float]) -> Scheduler:
    scheduler = Scheduler(dict(periods) if periods else None)
    for ref in task_refs:
        module_name, attr, period_spec = split_task_ref(ref)
        task = load_task(module_name, attr)
        scheduler.register(task, resolve_period(period_spec, periods), name=f"{module_name}:{attr}")
    return scheduler


async def run_scheduler(scheduler: Scheduler, *, duration: float = 0.0) -> None:
    """Run until a signal arrives or `duration` elapses, then drain the last cycle."""
    loop = asyncio.get_running_loop()
    stop_requested = asyncio.Event()

    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on every platform / outside the main thread.
        with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
            loop.add_signal_handler(sig, stop_requested.set)
            installed.append(sig)

    scheduler.start()
    try:
        if duration > 0:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop_requested.wait(), timeout=duration)
        else:
            await stop_requested.wait()
        logger.info("Stop requested, waiting for the in-flight task...")
    finally:
        if scheduler.is_running:
            scheduler.stop()
        await scheduler.wait_stopped()
        for sig in installed:
            loop.remove_signal_handler(sig)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
        periods = dict(settings.periods)
        for entry in args.periods:
            periods.update(parse_periods(entry))

        level_name = str(args.log_level or settings.log_level).upper()
        console_level = getattr(logging, level_name, logging.INFO)
        setup_logging(log_dir=settings.log_dir, console_level=console_level)

        scheduler = build_scheduler(args.tasks, periods)
    except CadenceError as e:
        print(f"cadence: error: {e}", file=sys.stderr)
        return EXIT_USAGE

    duration = settings.run_seconds if args.duration is None else args.duration
    summary = RunSummary()
    scheduler.subscribe(summary)

    logger.info("Starting %s with %d task(s)...", settings.app_name, len(scheduler.tasks))
    asyncio.run(run_scheduler(scheduler, duration=duration))

    for line in summary.lines():
        print(line)
    logger.info("Bye.")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
