"""Deterministic virtual-time TimerBackend.

Time only moves when ``advance()`` is called.  Due callbacks run in due
order (ties in scheduling order), with ``now_ms()`` reporting each
callback's due time while it runs.  Used to replay recipes against
recorded temperature traces and to test the engine without sleeping.
"""

from __future__ import annotations

import heapq
import itertools
import logging

from brew_conductor.scheduler.timers import TimerCallback, TimerHandle

logger = logging.getLogger(__name__)


class VirtualTimer:
    """Handle for one virtual timer."""

    __slots__ = ("due_ms", "interval_ms", "callback", "_cancelled")

    def __init__(self, due_ms: float, interval_ms: float | None, callback: TimerCallback) -> None:
        self.due_ms = due_ms
        self.interval_ms = interval_ms
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class VirtualTimerBackend:
    """TimerBackend whose clock is advanced by hand.

    Args:
        start_ms: Initial value of the virtual clock (epoch milliseconds).
    """

    def __init__(self, start_ms: int = 0) -> None:
        self._now: float = float(start_ms)
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, VirtualTimer]] = []

    # ── TimerBackend ─────────────────────────────────────────────────────

    def now_ms(self) -> int:
        return int(self._now)

    def schedule_once(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        timer = VirtualTimer(self._now + max(delay_ms, 0.0), None, callback)
        self._push(timer)
        return timer

    def schedule_repeating(self, interval_ms: float, callback: TimerCallback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        timer = VirtualTimer(self._now + interval_ms, interval_ms, callback)
        self._push(timer)
        return timer

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancel()

    # ── Time control ─────────────────────────────────────────────────────

    def advance(self, ms: float) -> int:
        """Move the clock forward by *ms*, running everything that falls due.

        ``advance(0)`` flushes timers that are already due.  Returns the
        number of callbacks run.
        """
        if ms < 0:
            raise ValueError("virtual time cannot run backwards")
        return self.run_until(self._now + ms)

    def run_until(self, target_ms: float) -> int:
        ran = 0
        while self._queue and self._queue[0][0] <= target_ms:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            if timer.interval_ms is not None:
                timer.due_ms = due + timer.interval_ms
                self._push(timer)
            timer.callback()
            ran += 1
        self._now = max(self._now, target_ms)
        return ran

    @property
    def pending_count(self) -> int:
        """Timers still scheduled and not cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    # ── Internals ────────────────────────────────────────────────────────

    def _push(self, timer: VirtualTimer) -> None:
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))
