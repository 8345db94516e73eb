"""Producer timers - call a function on every tick and emit its result as ``data``."""
from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Generic, TypeVar

from tick_timer.scheduler import Scheduler
from tick_timer.timer import Timer
from tick_timer.types import DATA, ERROR, TICK, EventListener, Listener, ProducerError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _swallow(error: BaseException) -> None:
    pass


class BaseProducerTimer(ABC, Generic[T]):
    """Shared lifecycle and listener surface for producer timers.

    Owns its Timer outright: every lifecycle call and listener registration is
    forwarded to it, and ``data`` is emitted on it. A no-op ``error`` listener
    is installed, so producer failures are dropped unless the caller adds an
    ``error`` listener of its own.
    """

    def __init__(
        self, interval: float, auto_start: bool = False, *, scheduler: Scheduler | None = None
    ) -> None:
        self._timer = Timer(interval, False, scheduler=scheduler)
        self._timer.on(TICK, self._on_tick)
        self._timer.on(ERROR, _swallow)
        if auto_start:
            self._timer.start()

    @abstractmethod
    def _on_tick(self, *args: Any) -> None:
        ...

    def _publish(self, result: T, timestamp: int, interval: float) -> None:
        self._timer.emit(DATA, result, timestamp, interval)

    def _fail(self, error: BaseException) -> None:
        logger.debug("Producer of timer %#x failed: %r", id(self._timer), error)
        self._timer.emit(ERROR, error)

    # --- State ---

    @property
    def interval(self) -> float:
        return self._timer.interval

    @interval.setter
    def interval(self, value: float) -> None:
        self._timer.interval = value

    @property
    def paused(self) -> bool:
        return self._timer.paused

    @property
    def running(self) -> bool:
        return self._timer.running

    @property
    def destroyed(self) -> bool:
        return self._timer.destroyed

    # --- Lifecycle ---

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def destroy(self) -> None:
        self._timer.destroy()

    def toggle(self) -> bool:
        return self._timer.toggle()

    def tick(self, *args: Any) -> None:
        """Run the producer now, outside the schedule."""
        self._timer.tick(*args)

    # --- Listeners ---

    def on(self, event: str, listener: Listener) -> None:
        self._timer.on(event, listener)

    def once(self, event: str, listener: Listener) -> None:
        self._timer.once(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self._timer.off(event, listener)

    def on_event(self, listener: EventListener) -> None:
        self._timer.on_event(listener)

    def off_event(self, listener: EventListener) -> None:
        self._timer.off_event(listener)

    def listener_count(self, event: str) -> int:
        return self._timer.listener_count(event)


class ProducerTimer(BaseProducerTimer[T]):
    """Calls ``func`` synchronously on every tick.

    Emits ``data(result, timestamp, interval)`` on success and ``error`` when
    ``func`` raises. The loop step does not return until ``func`` does.
    Only ``Exception`` failures are reported; ``KeyboardInterrupt``,
    ``SystemExit`` and other ``BaseException`` types propagate.
    """

    def __init__(
        self,
        func: Callable[[], T],
        interval: float,
        auto_start: bool = False,
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._func = func
        super().__init__(interval, auto_start, scheduler=scheduler)

    def _on_tick(self, *args: Any) -> None:
        now = int(time.time())
        interval = self._timer.interval
        try:
            result = self._func()
        except Exception as exc:
            self._fail(exc)
            return
        self._publish(result, now, interval)


class AsyncProducerTimer(BaseProducerTimer[T]):
    """Awaits ``func()`` on every tick without holding up the loop.

    Each tick starts a task on the asyncio loop (``loop`` if given, else the
    running loop) and returns at once; results arrive later as ``data`` or
    ``error``. Runs may overlap when ``func`` is slower than the interval.
    Neither ``stop`` nor ``destroy`` cancels runs already in flight; ``drain``
    waits for them. A tick with no loop to run on is reported as an ``error``
    carrying the ``RuntimeError``.
    """

    def __init__(
        self,
        func: Callable[[], Awaitable[T]],
        interval: float,
        auto_start: bool = False,
        *,
        scheduler: Scheduler | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._func = func
        self._loop = loop
        self._tasks: set[asyncio.Task[None]] = set()
        super().__init__(interval, auto_start, scheduler=scheduler)

    @property
    def pending(self) -> int:
        """Number of producer runs still in flight."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every in-flight producer run has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _on_tick(self, *args: Any) -> None:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        task = loop.create_task(self._produce(int(time.time()), self._timer.interval))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _produce(self, now: int, interval: float) -> None:
        try:
            result = await self._func()
        except asyncio.CancelledError as exc:
            self._fail(ProducerError("producer cancelled", exc))
            raise
        except Exception as exc:
            self._fail(exc)
            return
        self._publish(result, now, interval)
