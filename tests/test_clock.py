# tests/test_clock.py

from __future__ import annotations

import asyncio
import math
import time

import pytest

from cadence.core.clock import MonotonicClock, sleep


@pytest.mark.asyncio
async def test_sleep_resolves_after_timeout() -> None:
    start = time.monotonic()
    await sleep(0.05)
    assert time.monotonic() - start >= 0.045


@pytest.mark.asyncio
@pytest.mark.parametrize("seconds", [0, -200, -math.inf])
async def test_non_positive_sleep_returns_immediately(seconds) -> None:
    await asyncio.wait_for(sleep(seconds), timeout=0.5)


@pytest.mark.asyncio
async def test_monotonic_clock_moves_forward() -> None:
    clock = MonotonicClock()
    before = clock.now()
    await clock.sleep(0.01)
    assert clock.now() > before
