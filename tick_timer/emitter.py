"""In-process listener registry with synchronous, failure-isolating dispatch."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tick_timer.types import ERROR, EVENT_KINDS, EventListener, Listener, TimerError, as_event


@dataclass(eq=False)
class _Registration:
    callback: Listener
    once: bool = False


class Emitter:
    """Maps event names to ordered listeners and dispatches to them in place.

    Unlike a queued bus, ``emit`` calls every listener before it returns. A
    listener that raises while a non-error event is dispatched does not stop
    the others: its exception is re-emitted as an ``error`` event. An ``error``
    event with no ``error`` listeners raises its cause.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Registration]] = {}
        self._event_listeners: list[EventListener] = []

    # --- Registration ---

    def on(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(_Registration(listener))

    def once(self, event: str, listener: Listener) -> None:
        """Register a listener that is removed before its first call."""
        self._listeners.setdefault(event, []).append(_Registration(listener, once=True))

    def off(self, event: str, listener: Listener) -> None:
        """Remove the earliest registration of ``listener`` for ``event``."""
        registrations = self._listeners.get(event)
        if registrations is None:
            return
        for reg in registrations:
            if reg.callback == listener:
                registrations.remove(reg)
                return

    def on_event(self, listener: EventListener) -> None:
        """Register a listener that receives every emission as a typed event."""
        self._event_listeners.append(listener)

    def off_event(self, listener: EventListener) -> None:
        try:
            self._event_listeners.remove(listener)
        except ValueError:
            pass

    def remove_all_listeners(self, event: str | None = None) -> None:
        if event is None:
            self._listeners.clear()
            self._event_listeners.clear()
        else:
            self._listeners.pop(event, None)

    # --- Queries ---

    def listeners(self, event: str) -> list[Listener]:
        return [reg.callback for reg in self._listeners.get(event, [])]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    # --- Dispatch ---

    def emit(self, event: str, *payload: Any) -> bool:
        """Call every listener of ``event`` with ``payload``, in registration order.

        Returns True if ``event`` had at least one listener.
        """
        snapshot = list(self._listeners.get(event, []))
        typed = list(self._event_listeners)

        if event == ERROR:
            return self._emit_error(snapshot, typed, *payload)

        unhandled: Exception | None = None
        for reg in snapshot:
            self._consume(event, reg)
            try:
                reg.callback(*payload)
            except Exception as exc:
                unhandled = self._redirect(exc, unhandled)

        if typed and event in EVENT_KINDS:
            typed_event = as_event(event, *payload)
            for listener in typed:
                try:
                    listener(typed_event)
                except Exception as exc:
                    unhandled = self._redirect(exc, unhandled)

        if unhandled is not None:
            raise unhandled
        return bool(snapshot)

    def _emit_error(
        self, snapshot: list[_Registration], typed: list[EventListener], *payload: Any
    ) -> bool:
        for reg in snapshot:
            self._consume(ERROR, reg)
            reg.callback(*payload)

        if typed:
            typed_event = as_event(ERROR, *payload)
            for listener in typed:
                listener(typed_event)

        if not snapshot:
            (cause,) = payload
            if isinstance(cause, BaseException):
                raise cause
            raise TimerError(f"Unhandled error event: {cause!r}")
        return True

    def _consume(self, event: str, reg: _Registration) -> None:
        if not reg.once:
            return
        registrations = self._listeners.get(event)
        if registrations is not None and reg in registrations:
            registrations.remove(reg)

    def _redirect(self, exc: Exception, unhandled: Exception | None) -> Exception | None:
        # Keep the first failure nobody handled; later listeners still run.
        try:
            self.emit(ERROR, exc)
        except Exception as err:
            if unhandled is None:
                return err
        return unhandled
