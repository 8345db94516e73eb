"""Single-shot delayed-call schedulers that drive a Timer's loop."""
from __future__ import annotations

import asyncio
import heapq
import threading
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class Handle(Protocol):
    """A pending delayed call. ``cancel`` must be safe to call more than once."""

    def cancel(self) -> None:
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Protocol for the delayed-execution primitive a Timer runs on.

    Implementations run ``callback`` once, ``delay`` seconds from now, unless
    the returned handle is cancelled first.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle:
        ...


class AsyncioScheduler:
    """Schedules on an asyncio event loop with ``loop.call_later``.

    Without an explicit loop, the running loop is looked up at each call, so
    a Timer using this scheduler must be started from inside that loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ThreadScheduler:
    """Schedules each call on a daemon ``threading.Timer``."""

    def __init__(self, name: str = "tick-timer") -> None:
        self._name = name

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.name = self._name
        timer.daemon = True
        timer.start()
        return timer


class _ManualHandle:
    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock for deterministic tests. Time only moves in ``advance``."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._seq = 0
        self._heap: list[tuple[float, int, _ManualHandle]] = []

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of scheduled calls that have neither fired nor been cancelled."""
        return sum(1 for _, _, handle in self._heap if not handle.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self._now + max(delay, 0.0), callback)
        heapq.heappush(self._heap, (handle.due, self._seq, handle))
        self._seq += 1
        return handle

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every call that falls due on the way.

        Calls fire in due order, ties in scheduling order. Calls scheduled by a
        firing callback run too if they fall inside the window. Returns the
        number of callbacks fired.
        """
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        target = self._now + seconds
        fired = 0
        while self._heap and self._heap[0][0] <= target:
            due, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self._now = due
            handle.cancelled = True
            handle.callback()
            fired += 1
        self._now = target
        return fired
