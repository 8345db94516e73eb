"""Timer - recurring interval scheduler with start/stop/destroy lifecycle."""
from __future__ import annotations

import logging
from typing import Any

from tick_timer.config import MIN_INTERVAL_MS, TimerConfig, clamp_delay
from tick_timer.emitter import Emitter
from tick_timer.scheduler import AsyncioScheduler, Handle, Scheduler
from tick_timer.types import START, STOP, TICK

logger = logging.getLogger(__name__)


class Timer(Emitter):
    """Emits ``tick`` every ``interval`` milliseconds while running.

    Extra positional arguments are delivered with every automatic tick. Manual
    ticks (``tick(*args)``) carry only the arguments they are given.

    The loop reschedules itself ``interval`` ms after each step completes, so
    late steps are not caught up and drift is not corrected. Changing
    ``interval`` takes effect from the next scheduled step.

    Events: ``start``, ``stop``, ``tick``, ``error``. No default ``error``
    listener is installed.
    """

    def __init__(
        self,
        interval: float,
        auto_start: bool = False,
        *args: Any,
        scheduler: Scheduler | None = None,
        min_interval: float = MIN_INTERVAL_MS,
    ) -> None:
        if not min_interval > 0:
            raise ValueError("min_interval must be positive")
        super().__init__()
        self.interval = interval
        self._args = args
        self._scheduler: Scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._min_interval = min_interval
        self._paused = True
        self._destroyed = False
        self._handle: Handle | None = None

        if auto_start:
            self.start()

    @classmethod
    def from_config(
        cls, config: TimerConfig, *args: Any, scheduler: Scheduler | None = None
    ) -> Timer:
        return cls(
            config.interval,
            config.auto_start,
            *args,
            scheduler=scheduler,
            min_interval=config.min_interval,
        )

    @property
    def args(self) -> tuple[Any, ...]:
        return self._args

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def running(self) -> bool:
        return not self._paused and not self._destroyed

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    # --- Lifecycle ---

    def start(self) -> None:
        if self._destroyed or not self._paused:
            return
        self._cancel()
        self._schedule()
        self._paused = False
        logger.debug("Timer %#x started (interval=%sms)", id(self), self.interval)
        self.emit(START)

    def stop(self) -> None:
        """Pause automatic ticks. The pending step still fires and reschedules."""
        if self._destroyed or self._paused:
            return
        self._paused = True
        logger.debug("Timer %#x stopped", id(self))
        self.emit(STOP)

    def destroy(self) -> None:
        """Stop for good and cancel the pending step. Safe to call repeatedly."""
        if self._destroyed:
            return
        self.stop()
        self._destroyed = True
        self._cancel()
        logger.debug("Timer %#x destroyed", id(self))

    def toggle(self) -> bool:
        """Flip between running and stopped. Returns True if now running."""
        if self._destroyed:
            return False
        if self._paused:
            self.start()
        else:
            self.stop()
        return self.running

    def tick(self, *args: Any) -> None:
        """Emit ``tick`` with exactly ``args``, whether or not the timer is running."""
        if self._destroyed:
            return
        self.emit(TICK, *args)

    # --- Loop ---

    def _schedule(self) -> None:
        delay = clamp_delay(self.interval, self._min_interval)
        self._handle = self._scheduler.call_later(delay, self._step)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _step(self) -> None:
        self._handle = None
        if self._destroyed:
            return
        if not self._paused:
            try:
                self.tick(*self._args)
            except Exception:
                # Raised only when no error listener took the failure.
                logger.exception("Unhandled error during automatic tick of timer %#x", id(self))
        # A listener may have destroyed or restarted the timer.
        if not self._destroyed and self._handle is None:
            self._schedule()
