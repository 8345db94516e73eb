"""Event kinds, typed event payloads, and exceptions for tick-timer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Literal, Union

START = "start"
STOP = "stop"
TICK = "tick"
DATA = "data"
ERROR = "error"

EVENT_KINDS = frozenset({START, STOP, TICK, DATA, ERROR})

EventKind = Literal["start", "stop", "tick", "data", "error"]

Listener = Callable[..., None]


class TimerError(Exception):
    """Base class for errors raised by tick-timer."""


class ProducerError(TimerError):
    """Raised (and emitted) when a producer fails with a non-Exception value.

    The original failure is kept on ``value``.
    """

    def __init__(self, message: str, value: Any = None) -> None:
        self.value = value
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class Started:
    kind: ClassVar[str] = START

    def payload(self) -> tuple[Any, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class Stopped:
    kind: ClassVar[str] = STOP

    def payload(self) -> tuple[Any, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class Ticked:
    kind: ClassVar[str] = TICK
    args: tuple[Any, ...] = ()

    def payload(self) -> tuple[Any, ...]:
        return self.args


@dataclass(frozen=True, slots=True)
class Data:
    """Producer result plus the whole-second timestamp and interval (ms) of its tick."""

    kind: ClassVar[str] = DATA
    result: Any
    timestamp: int
    interval: float

    def payload(self) -> tuple[Any, ...]:
        return (self.result, self.timestamp, self.interval)


@dataclass(frozen=True, slots=True)
class Errored:
    kind: ClassVar[str] = ERROR
    cause: BaseException

    def payload(self) -> tuple[Any, ...]:
        return (self.cause,)


TimerEvent = Union[Started, Stopped, Ticked, Data, Errored]

EventListener = Callable[[TimerEvent], None]


def as_event(kind: str, *payload: Any) -> TimerEvent:
    """Build the typed event for an emission of ``kind`` with ``payload``."""
    if kind == START:
        return Started()
    if kind == STOP:
        return Stopped()
    if kind == TICK:
        return Ticked(args=payload)
    if kind == DATA:
        result, timestamp, interval = payload
        return Data(result=result, timestamp=timestamp, interval=interval)
    if kind == ERROR:
        (cause,) = payload
        return Errored(cause=cause)
    raise ValueError(f"Unknown event kind {kind!r}")
