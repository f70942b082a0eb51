"""Tick schedulers driving the cooperative capture loop."""

from __future__ import annotations

import heapq
import itertools
import sched
import time
from typing import Any, Callable, List, Optional, Tuple


class TickScheduler:
    """Schedule callbacks after a delay on a single thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Any:  # pragma: no cover - interface method
        raise NotImplementedError

    def cancel(self, handle: Any) -> None:  # pragma: no cover - interface method
        raise NotImplementedError

    def now(self) -> float:  # pragma: no cover - interface method
        raise NotImplementedError


class SchedScheduler(TickScheduler):
    """Real-time scheduler backed by :class:`sched.scheduler`.

    ``run`` blocks, sleeping between events with ``delayfunc``, and returns
    once no events are pending.
    """

    def __init__(
        self,
        timefunc: Callable[[], float] = time.monotonic,
        delayfunc: Callable[[float], Any] = time.sleep,
    ) -> None:
        self._timefunc = timefunc
        self._sched = sched.scheduler(timefunc, delayfunc)

    def call_later(self, delay: float, callback: Callable[[], None]) -> sched.Event:
        return self._sched.enter(max(float(delay), 0.0), 0, callback)

    def cancel(self, handle: sched.Event) -> None:
        try:
            self._sched.cancel(handle)
        except ValueError:
            # Already executed or cancelled.
            pass

    def now(self) -> float:
        return self._timefunc()

    def empty(self) -> bool:
        return self._sched.empty()

    def run(self, blocking: bool = True) -> Optional[float]:
        """Run due events; without blocking, return the delay until the next one."""
        return self._sched.run(blocking)


class ManualScheduler(TickScheduler):
    """Virtual-time scheduler whose callbacks only run when the caller steps it."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._cancelled: set[int] = set()
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> int:
        token = next(self._counter)
        heapq.heappush(self._queue, (self._now + max(float(delay), 0.0), token, callback))
        return token

    def cancel(self, handle: int) -> None:
        self._cancelled.add(handle)

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for _, token, _ in self._queue if token not in self._cancelled)

    def _pop(self) -> Optional[Tuple[float, Callable[[], None]]]:
        while self._queue:
            due, token, callback = heapq.heappop(self._queue)
            if token in self._cancelled:
                self._cancelled.discard(token)
                continue
            return due, callback
        return None

    def run_next(self) -> bool:
        """Advance to the next pending callback and run it."""

        item = self._pop()
        if item is None:
            return False
        due, callback = item
        self._now = max(self._now, due)
        callback()
        return True

    def run_ticks(self, count: int) -> int:
        ran = 0
        while ran < count and self.run_next():
            ran += 1
        return ran

    def advance(self, seconds: float) -> int:
        """Run every callback due within the next ``seconds`` of virtual time."""

        deadline = self._now + float(seconds)
        ran = 0
        while True:
            live = [entry for entry in self._queue if entry[1] not in self._cancelled]
            if not live or min(live)[0] > deadline:
                break
            self.run_next()
            ran += 1
        self._now = deadline
        return ran


__all__ = ["TickScheduler", "SchedScheduler", "ManualScheduler"]
