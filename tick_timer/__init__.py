"""tick-timer - Recurring interval timers with producer functions."""
from __future__ import annotations

import logging

from tick_timer.config import MIN_INTERVAL_MS, TimerConfig, clamp_delay
from tick_timer.emitter import Emitter
from tick_timer.producer import AsyncProducerTimer, BaseProducerTimer, ProducerTimer
from tick_timer.scheduler import AsyncioScheduler, Handle, ManualScheduler, Scheduler, ThreadScheduler
from tick_timer.timer import Timer
from tick_timer.types import (
    DATA,
    ERROR,
    START,
    STOP,
    TICK,
    Data,
    Errored,
    ProducerError,
    Started,
    Stopped,
    Ticked,
    TimerError,
    TimerEvent,
    as_event,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Timer",
    "ProducerTimer",
    "AsyncProducerTimer",
    "BaseProducerTimer",
    "Emitter",
    "TimerConfig",
    "MIN_INTERVAL_MS",
    "clamp_delay",
    "Scheduler",
    "Handle",
    "AsyncioScheduler",
    "ThreadScheduler",
    "ManualScheduler",
    "START",
    "STOP",
    "TICK",
    "DATA",
    "ERROR",
    "TimerEvent",
    "Started",
    "Stopped",
    "Ticked",
    "Data",
    "Errored",
    "as_event",
    "TimerError",
    "ProducerError",
]
