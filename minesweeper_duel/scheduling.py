"""Cancellable deferred tasks used to hand the turn to the AI."""

import heapq
import itertools
import threading
from typing import Callable, List, Optional, Tuple


class ScheduledTask:
    """Handle for a deferred callback; `cancel()` is idempotent."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.cancelled: bool = False
        self.done: bool = False
        self._timer: Optional[threading.Timer] = None

    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()

    def run(self) -> None:
        if self.cancelled or self.done:
            return
        self.done = True
        self.callback()

    @property
    def pending(self) -> bool:
        return not self.cancelled and not self.done


class TimerScheduler:
    """Runs each task once on a daemon `threading.Timer` after its delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback)
        timer = threading.Timer(delay, task.run)
        timer.daemon = True
        task._timer = timer
        timer.start()
        return task


class ManualScheduler:
    """
    Deterministic scheduler driven by the host.

    Tasks run only when `advance()` moves the scheduler's clock past their
    due time or `run_pending()` flushes everything that is still pending.
    """

    def __init__(self) -> None:
        self.now: float = 0.0
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback)
        heapq.heappush(self._queue, (self.now + delay, next(self._counter), task))
        return task

    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._queue if task.pending)

    def advance(self, seconds: float) -> int:
        """Move time forward and run every task that became due. Returns runs."""
        self.now += seconds
        ran = 0
        while self._queue and self._queue[0][0] <= self.now:
            _, _, task = heapq.heappop(self._queue)
            if task.pending:
                task.run()
                ran += 1
        return ran

    def run_pending(self) -> int:
        """Run all pending tasks in due order, including ones they schedule."""
        ran = 0
        while self._queue:
            due, _, task = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if task.pending:
                task.run()
                ran += 1
        return ran
