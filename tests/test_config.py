# tests/test_config.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from cadence.config import Settings, parse_duration, parse_periods
from cadence.errors import ConfigError


@pytest.mark.parametrize(
    ("raw", "seconds"),
    [
        ("250ms", 0.25),
        ("30s", 30.0),
        ("5m", 300.0),
        ("1.5h", 5400.0),
        ("1d", 86400.0),
        ("12", 12.0),
        (2.5, 2.5),
        (" 10 S ", 10.0),
    ],
)
def test_parse_duration(raw, seconds) -> None:
    assert parse_duration(raw) == pytest.approx(seconds)


@pytest.mark.parametrize("raw", ["", "soon", "5 weeks", True, None])
def test_parse_duration_rejects_garbage(raw) -> None:
    with pytest.raises(ConfigError):
        parse_duration(raw)


def test_parse_periods() -> None:
    assert parse_periods("fast=1s, slow=5m") == {"fast": 1.0, "slow": 300.0}
    assert parse_periods("") == {}


@pytest.mark.parametrize("raw", ["fast", "=1s", "fast=0", "fast=-2s"])
def test_parse_periods_rejects_bad_entries(raw) -> None:
    with pytest.raises(ConfigError):
        parse_periods(raw)


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CADENCE_APP_NAME", "jobs")
    monkeypatch.setenv("CADENCE_LOG_LEVEL", "debug")
    monkeypatch.setenv("CADENCE_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("CADENCE_PERIODS", "feeds=30s reports=1h")
    monkeypatch.setenv("CADENCE_RUN_SECONDS", "2m")

    settings = Settings.from_env(dotenv=False)

    assert settings.app_name == "jobs"
    assert settings.log_level == "DEBUG"
    assert settings.log_dir == tmp_path
    assert dict(settings.periods) == {"feeds": 30.0, "reports": 3600.0}
    assert settings.run_seconds == 120.0


def test_settings_defaults(monkeypatch) -> None:
    for name in ("APP_NAME", "LOG_LEVEL", "LOG_DIR", "PERIODS", "RUN_SECONDS"):
        monkeypatch.delenv(f"CADENCE_{name}", raising=False)

    settings = Settings.from_env(dotenv=False)

    assert settings == Settings()


def test_settings_reads_dotenv(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("CADENCE_PERIODS", raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("CADENCE_PERIODS=nightly=1d\n", encoding="utf-8")

    try:
        settings = Settings.from_env()
    finally:
        # load_dotenv writes straight into os.environ
        os.environ.pop("CADENCE_PERIODS", None)

    assert dict(settings.periods) == {"nightly": 86400.0}


def test_negative_run_seconds_rejected(monkeypatch) -> None:
    monkeypatch.setenv("CADENCE_RUN_SECONDS", "-5")
    with pytest.raises(ConfigError):
        Settings.from_env(dotenv=False)
