"""
Deferred actions for the single-threaded session loop.

The runtime has exactly one asynchronous primitive: clearing a mismatched
matching pair after a short delay. Tasks are queued against a monotonic clock
and fired cooperatively by whoever drives the event loop (the terminal runner
calls run_due() between learner actions). Nothing here blocks or sleeps.

Tests swap in ManualScheduler and fast-forward time with advance().
"""

from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable

from loguru import logger


@dataclass
class ScheduledTask:
    """Handle for a queued callback."""

    due: float
    callback: Callable[[], None] = field(repr=False)
    label: str = ""
    cancelled: bool = False
    fired: bool = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        self.cancelled = True


class DeferredScheduler:
    """
    Cooperative timer queue.

    Usage:
        scheduler = DeferredScheduler()
        task = scheduler.call_later(0.5, clear_highlight)
        ...
        scheduler.run_due()   # from the event loop
        task.cancel()         # superseded before it fired
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._queue: list[tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._clock()

    def call_later(
        self,
        delay: float,
        callback: Callable[[], None],
        label: str = "",
    ) -> ScheduledTask:
        """Queue callback to run once delay seconds have elapsed."""
        task = ScheduledTask(due=self.now() + max(0.0, delay), callback=callback, label=label)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        logger.debug("Scheduled '{}' in {:.3f}s", label or "task", delay)
        return task

    def run_due(self) -> int:
        """
        Fire every active task whose deadline has passed, earliest first.

        Returns:
            Number of callbacks that ran
        """
        fired = 0
        now = self.now()
        while self._queue and self._queue[0][0] <= now:
            _, _, task = heapq.heappop(self._queue)
            if not task.active:
                continue
            task.fired = True
            task.callback()
            fired += 1
        return fired

    def next_deadline(self) -> float | None:
        """Deadline of the earliest active task, if any."""
        self._drop_cancelled()
        return self._queue[0][0] if self._queue else None

    def cancel_all(self) -> None:
        for _, _, task in self._queue:
            task.cancel()
        self._queue.clear()

    @property
    def pending(self) -> int:
        """Number of tasks still waiting to fire."""
        return sum(1 for _, _, task in self._queue if task.active)

    def _drop_cancelled(self) -> None:
        while self._queue and not self._queue[0][2].active:
            heapq.heappop(self._queue)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = start

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


class ManualScheduler(DeferredScheduler):
    """Scheduler on a ManualClock, for test harnesses."""

    def __init__(self, start: float = 0.0):
        self.clock = ManualClock(start)
        super().__init__(clock=self.clock)

    def advance(self, seconds: float) -> int:
        """Move time forward and fire whatever became due."""
        self.clock.advance(seconds)
        return self.run_due()
