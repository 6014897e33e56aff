"""Tick schedulers: AsyncioScheduler for live preview, ManualScheduler for tests."""

from __future__ import annotations

import asyncio
import itertools
import time
from collections.abc import Callable
from typing import Any, Protocol

TickCallback = Callable[[float], None]
"""Receives the scheduler's monotonic time in seconds."""


class Scheduler(Protocol):
    """Single-shot tick scheduling plus a monotonic clock."""

    def schedule(self, callback: TickCallback) -> Any: ...

    def cancel(self, token: Any) -> None: ...

    def now(self) -> float: ...


class AsyncioScheduler:
    """Schedules ticks on an asyncio event loop at a fixed refresh rate.

    Parameters
    ----------
    rate_hz:
        Display refresh rate to emulate (default 60).
    loop:
        Event loop to use; defaults to the running loop at first schedule.
    """

    def __init__(self, rate_hz: float = 60.0, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if rate_hz <= 0:
            raise ValueError("rate_hz must be > 0")
        self._interval = 1.0 / rate_hz
        self._loop = loop

    def schedule(self, callback: TickCallback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self._interval, lambda: callback(self.now()))

    def cancel(self, token: asyncio.TimerHandle) -> None:
        token.cancel()

    def now(self) -> float:
        return time.monotonic()


class ManualScheduler:
    """Synthetic-clock scheduler; tests advance time and fire ticks explicitly."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._ids = itertools.count(1)
        self.pending: dict[int, TickCallback] = {}

    def schedule(self, callback: TickCallback) -> int:
        token = next(self._ids)
        self.pending[token] = callback
        return token

    def cancel(self, token: int) -> None:
        self.pending.pop(token, None)

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire every tick pending at that moment.

        Ticks scheduled by the fired callbacks wait for the next advance.
        Returns the number of callbacks fired.
        """
        self._now += seconds
        due, self.pending = self.pending, {}
        for callback in due.values():
            callback(self._now)
        return len(due)
