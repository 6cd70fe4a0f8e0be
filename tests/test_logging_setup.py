# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cadence.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "allowed"),
    [
        ("cadence.tasks.task_scheduler", logging.DEBUG, True),
        ("cadence", logging.INFO, True),
        ("cadence_other", logging.INFO, False),
        ("asyncio", logging.INFO, False),
        ("asyncio", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("py.warnings", logging.ERROR, True),
    ],
)
def test_console_noise_filter(name, level, allowed) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is allowed


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)

    logging.getLogger("cadence.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()

    assert "hello file" in (tmp_path / "logs" / "cadence.log").read_text("utf-8")


def test_setup_logging_console_only(restore_root_logging) -> None:
    setup_logging()

    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)
