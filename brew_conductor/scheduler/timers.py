"""Clock and timer primitives the engine is scheduled on.

The engine never touches the event loop directly.  It talks to a
TimerBackend, which hands back a cancellable handle for every timer it
schedules.  Cancelling a handle guarantees its callback never runs.

A backend that cannot schedule (e.g. no running event loop) raises; that
is a host configuration error and is not caught anywhere in the engine.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

from brew_conductor.foundation.clock import now_ms

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


class TimerHandle(Protocol):
    """Anything returned by a backend that can be cancelled."""

    def cancel(self) -> None:
        ...


class TimerBackend(Protocol):
    """Protocol for the clock/timer primitive."""

    def now_ms(self) -> int:
        """Current time in epoch milliseconds."""
        ...

    def schedule_once(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        """Run *callback* once after *delay_ms*."""
        ...

    def schedule_repeating(self, interval_ms: float, callback: TimerCallback) -> TimerHandle:
        """Run *callback* every *interval_ms*, first after one interval."""
        ...

    def cancel(self, handle: TimerHandle) -> None:
        ...


class _RepeatingTimer:
    """Drift-free repeating timer on top of ``loop.call_at``.

    Each firing is anchored to the first one, so a slow callback does not
    push later firings back.
    """

    __slots__ = ("_loop", "_interval_s", "_callback", "_next_at", "_handle", "_cancelled")

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval_s: float,
        callback: TimerCallback,
    ) -> None:
        self._loop = loop
        self._interval_s = interval_s
        self._callback = callback
        self._next_at = loop.time() + interval_s
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False

    def start(self) -> None:
        self._handle = self._loop.call_at(self._next_at, self._run)

    def _run(self) -> None:
        if self._cancelled:
            return
        # Reschedule first so the callback itself may cancel us.
        self._next_at += self._interval_s
        self._handle = self._loop.call_at(self._next_at, self._run)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioTimerBackend:
    """TimerBackend on the asyncio event loop.

    Args:
        loop: Loop to schedule on.  Defaults to the loop running at the
              time each timer is scheduled.
        clock: Wall clock in epoch milliseconds.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._loop = loop
        self._clock = clock

    def now_ms(self) -> int:
        return self._clock()

    def schedule_once(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        return self._get_loop().call_later(max(delay_ms, 0.0) / 1000.0, callback)

    def schedule_repeating(self, interval_ms: float, callback: TimerCallback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        timer = _RepeatingTimer(self._get_loop(), interval_ms / 1000.0, callback)
        timer.start()
        return timer

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancel()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()
