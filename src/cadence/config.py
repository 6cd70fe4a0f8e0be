# src/cadence/config.py

"""Settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the CLI ("settings layer").
- The library itself never reads the environment: Scheduler takes plain arguments.
- Human friendly durations ("250ms", "30s", "5m") for periods.
"""

from __future__ import annotations

import functools
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError

ENV_PREFIX = "CADENCE"

_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


def parse_duration(value: object) -> float:
    """
    Convert "30s" / "5m" / "250ms" / 2.5 into seconds.

    Plain numbers (and digit-only strings) are seconds.
    """
    if isinstance(value, bool):
        raise ConfigError(f"unsupported duration value: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise ConfigError(f"unsupported duration value: {value!r}")

    text = value.strip().lower()
    if not text:
        raise ConfigError("empty duration")

    unit = "s"
    amount = text
    for suffix in ("ms", "s", "m", "h", "d"):
        if text.endswith(suffix):
            unit = suffix
            amount = text[: -len(suffix)].strip()
            break

    try:
        number = float(amount)
    except ValueError:
        raise ConfigError(f"invalid duration: {value!r}") from None
    return number * _DURATION_UNITS[unit]


def parse_periods(raw: str) -> dict[str, float]:
    """Parse "fast=1s, slow=5m" (comma or whitespace separated) into a period table."""
    out: dict[str, float] = {}
    for part in raw.replace(",", " ").split():
        name, sep, duration = part.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ConfigError(f"period entry must look like NAME=DURATION, got {part!r}")
        seconds = parse_duration(duration)
        if seconds <= 0:
            raise ConfigError(f'Period "{name}" must be > 0, got {duration!r}')
        out[name] = seconds
    return out


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str = "cadence"
    log_level: str = "INFO"
    log_dir: Path | None = None

    # ---- Scheduling ----
    periods: Mapping[str, float] = field(default_factory=dict)
    run_seconds: float = 0.0

    @staticmethod
    def from_env(*, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True), override=False)

        run_seconds = parse_duration(_env(_k("RUN_SECONDS"), "0"))
        if run_seconds < 0:
            raise ConfigError(f"{_k('RUN_SECONDS')} must be >= 0")

        return Settings(
            app_name=_env(_k("APP_NAME"), "cadence") or "cadence",
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            log_dir=_env_path(_k("LOG_DIR")),
            periods=parse_periods(_env(_k("PERIODS"), "")),
            run_seconds=run_seconds,
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
