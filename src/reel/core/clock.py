"""Timeline clocks: fixed-rate tick sources for playback.

A clock has at most one subscriber and calls it with `dt == period` on
every tick. Unsubscribing is the cancellation point: no callback runs
after `unsubscribe()` returns.
"""

import asyncio
import logging
from typing import Callable, Optional

from .config import DEFAULT_TICK_PERIOD

logger = logging.getLogger("ReelMCP.core.clock")

TickCallback = Callable[[float], None]


class TimelineClock:
    """Base clock interface."""

    def __init__(self, period: float = DEFAULT_TICK_PERIOD):
        if period <= 0:
            raise ValueError("Clock period must be positive")
        self.period = period
        self._callback: Optional[TickCallback] = None

    @property
    def subscribed(self) -> bool:
        return self._callback is not None

    def subscribe(self, callback: TickCallback) -> None:
        self._callback = callback

    def unsubscribe(self) -> None:
        self._callback = None

    def _emit(self) -> bool:
        callback = self._callback
        if callback is None:
            return False
        callback(self.period)
        return True


class ManualClock(TimelineClock):
    """Clock driven by explicit calls, for tests and headless runs."""

    def __init__(self, period: float = DEFAULT_TICK_PERIOD):
        super().__init__(period)
        self.ticks_emitted = 0

    def tick(self, count: int = 1) -> int:
        """Emit up to `count` ticks. Returns how many were delivered."""
        delivered = 0
        for _ in range(count):
            if not self._emit():
                break
            delivered += 1
        self.ticks_emitted += delivered
        return delivered

    def run_for(self, seconds: float) -> int:
        return self.tick(round(seconds / self.period))


class AsyncioClock(TimelineClock):
    """Real-time clock that ticks from an asyncio task."""

    def __init__(self, period: float = DEFAULT_TICK_PERIOD):
        super().__init__(period)
        self._task: Optional[asyncio.Task] = None

    def subscribe(self, callback: TickCallback) -> None:
        loop = asyncio.get_running_loop()
        super().subscribe(callback)
        if self._task is None or self._task.done():
            self._task = loop.create_task(self._run())

    def unsubscribe(self) -> None:
        super().unsubscribe()
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self):
        try:
            while self._callback is not None:
                await asyncio.sleep(self.period)
                self._emit()
        except asyncio.CancelledError:
            logger.debug("Clock task cancelled")
            raise
