"""Timer scheduling for the single-threaded pipeline.

Every phase of the pipeline advances through callbacks scheduled on a
`Scheduler`. Nothing blocks the calling thread: the production scheduler
wraps an asyncio event loop, while `VirtualScheduler` keeps a deterministic
millisecond clock that tests and dry runs advance by hand.
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """Abstract timer source used by the pipeline components."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[..., None], *args: Any):
        """Run `callback(*args)` once after `delay_ms` milliseconds.

        Returns:
            Handle exposing `cancel()`
        """
        pass

    @abstractmethod
    def now(self) -> datetime:
        """Current time as seen by scheduled callbacks."""
        pass


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def schedule(self, delay_ms: int, callback: Callable[..., None], *args: Any) -> asyncio.TimerHandle:
        return self.loop.call_later(delay_ms / 1000.0, callback, *args)

    def now(self) -> datetime:
        return datetime.now()


class ScheduledCall:
    """Handle for a callback queued on a `VirtualScheduler`."""

    def __init__(self, when_ms: int, callback: Callable[..., None], args: Tuple[Any, ...]):
        self.when_ms = when_ms
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler(Scheduler):
    """Deterministic scheduler driven by an integer millisecond clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.start = start or datetime.now()
        self.time_ms = 0
        self._queue: List[Tuple[int, int, ScheduledCall]] = []
        self._sequence = itertools.count()

    def schedule(self, delay_ms: int, callback: Callable[..., None], *args: Any) -> ScheduledCall:
        if delay_ms < 0:
            raise ValueError(f"Delay must be non-negative, got {delay_ms}")
        call = ScheduledCall(self.time_ms + int(delay_ms), callback, args)
        heapq.heappush(self._queue, (call.when_ms, next(self._sequence), call))
        return call

    def now(self) -> datetime:
        return self.start + timedelta(milliseconds=self.time_ms)

    @property
    def pending_count(self) -> int:
        """Number of queued callbacks that have not been cancelled."""
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def advance(self, delta_ms: int) -> int:
        """Move the clock forward, firing every callback that falls due.

        Callbacks scheduled while advancing fire too if they are due before
        the target time.

        Returns:
            Number of callbacks fired
        """
        target = self.time_ms + int(delta_ms)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when_ms, _, call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self.time_ms = when_ms
            call.callback(*call.args)
            fired += 1
        self.time_ms = target
        return fired

    def run_until_idle(self, limit_ms: int = 10 * 60 * 1000) -> int:
        """Fire callbacks until the queue drains or `limit_ms` elapses."""
        deadline = self.time_ms + limit_ms
        fired = 0
        while True:
            live = [entry for entry in self._queue if not entry[2].cancelled]
            if not live:
                break
            next_when = min(when for when, _, _ in live)
            if next_when > deadline:
                logger.warning(f"VirtualScheduler stopped at limit with {len(live)} callbacks pending")
                break
            fired += self.advance(next_when - self.time_ms)
        return fired
