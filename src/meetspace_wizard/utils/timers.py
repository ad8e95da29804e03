"""Timer scheduling and debouncing.

The wizard runs on a single event-driven thread. Timers are abstracted behind
a `Scheduler` so the same debounce logic runs on an asyncio loop in an
application and on a virtual clock in tests and the CLI.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """Handle to a scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the callback if it has not run yet."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Whether the callback was cancelled."""


class Scheduler(ABC):
    """Schedules callbacks after a delay."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        """Run `callback` once after `delay` seconds."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on this scheduler's clock."""


class _ManualHandle(TimerHandle):
    def __init__(self, due: float, callback: Callable[[], Any]) -> None:
        self.due = due
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Virtual-clock scheduler. Time only moves when `advance` is called.

    Example:
        >>> scheduler = ManualScheduler()
        >>> _ = scheduler.call_later(2.0, lambda: print("saved"))
        >>> scheduler.advance(2.0)
        saved
        1
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        handle = _ManualHandle(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Returns:
            Number of callbacks that ran
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            handle.fired = True
            handle.callback()
            ran += 1
        self._now = target
        return ran

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have not fired or been cancelled."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)


class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        return _AsyncioHandle(self._get_loop().call_later(delay, callback))

    def now(self) -> float:
        return self._get_loop().time()


class Debouncer:
    """Runs a callback once, `delay` seconds after the most recent trigger.

    Each trigger cancels the pending timer and schedules a new one, so at
    most one call is ever pending. `flush` runs the pending call immediately.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        delay: float,
        callback: Callable[..., Any],
        name: str = "debounce",
    ) -> None:
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self.name = name
        self._handle: TimerHandle | None = None
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}
        self.scheduled_at: float | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        """(Re)start the quiet period with the latest arguments."""
        if self._handle is not None:
            self._handle.cancel()
        self._args = args
        self._kwargs = kwargs
        self.scheduled_at = self.scheduler.now()
        self._handle = self.scheduler.call_later(self.delay, self._fire)
        logger.debug(f"[{self.name}] scheduled in {self.delay:.2f}s")

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self.scheduled_at = None

    def flush(self) -> bool:
        """Run the pending call now.

        Returns:
            True if a call was pending and ran
        """
        if not self.pending:
            return False
        self._handle.cancel()
        self._fire()
        return True

    def _fire(self) -> None:
        args, kwargs = self._args, self._kwargs
        self._handle = None
        self.scheduled_at = None
        self._args, self._kwargs = (), {}
        self.callback(*args, **kwargs)
