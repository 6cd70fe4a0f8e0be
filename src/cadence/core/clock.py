# src/cadence/core/clock.py

from __future__ import annotations

import asyncio
import time


async def sleep(seconds: float) -> None:
    """Suspend for `seconds`. Zero, negative and -inf waits resolve immediately."""
    if seconds > 0:
        await asyncio.sleep(seconds)


class MonotonicClock:
    """Default Clock: time.monotonic() for timestamps, asyncio for delays."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await sleep(seconds)
