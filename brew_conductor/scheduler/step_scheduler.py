"""StepScheduler — owns every timer of the current step.

Design notes:
    - ``arm(step)`` always starts from a clean slate: whatever was armed
      before is cancelled first.
    - Every handle returned by the backend is tracked and cancelled on
      ``disarm()``.  Callbacks additionally carry the generation they were
      armed under and do nothing if the scheduler has moved on since, so a
      callback that was already dequeued when ``disarm()`` ran is inert.
    - Level-sensitive triggers are not scheduled; the session drives them
      from sensor updates.
    - The scheduler never touches lifecycle state.  It reports firings to
      the ``on_fire`` callback and the session decides what they mean.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from brew_conductor.domain.recipe import (
    Event,
    Step,
    TimeElapsedTrigger,
    TimeIntervalTrigger,
)
from brew_conductor.scheduler.timers import TimerBackend, TimerHandle

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000

# (event, occurrence index or None for one-shot triggers)
FireCallback = Callable[[Event, Optional[int]], None]


class _IntervalRun:
    """Firing state of one repeating trigger under one arming."""

    __slots__ = ("scheduler", "event", "trigger", "generation", "fired", "repeating")

    def __init__(
        self,
        scheduler: StepScheduler,
        event: Event,
        trigger: TimeIntervalTrigger,
        generation: int,
    ) -> None:
        self.scheduler = scheduler
        self.event = event
        self.trigger = trigger
        self.generation = generation
        self.fired = 0
        self.repeating: TimerHandle | None = None

    @property
    def exhausted(self) -> bool:
        return self.trigger.is_bounded and self.fired >= self.trigger.repeat_times

    def begin(self) -> None:
        """Initial delay elapsed: fire occurrence 0, then start repeating."""
        if not self.scheduler.is_current(self.generation):
            return
        self.fire()
        # The first firing may have caused a disarm.
        if self.exhausted or not self.scheduler.is_current(self.generation):
            return
        self.repeating = self.scheduler._track(
            self.scheduler.timers.schedule_repeating(
                self.trigger.interval_minutes * MS_PER_MINUTE, self.fire
            )
        )

    def fire(self) -> None:
        if not self.scheduler.is_current(self.generation):
            return
        if self.exhausted:
            self._stop_repeating()
            return
        index = self.fired
        self.fired += 1
        if self.exhausted:
            self._stop_repeating()
        self.scheduler._on_fire(self.event, index)

    def _stop_repeating(self) -> None:
        if self.repeating is not None:
            self.scheduler.timers.cancel(self.repeating)
            self.repeating = None


class StepScheduler:
    """Schedules time-based triggers of one step at a time.

    Args:
        timers: The clock/timer primitive.
        on_fire: Called with ``(event, occurrence)`` whenever a timer fires.
                 ``occurrence`` is None for one-shot triggers.
    """

    def __init__(self, timers: TimerBackend, on_fire: FireCallback) -> None:
        self.timers = timers
        self._on_fire = on_fire
        self._handles: list[TimerHandle] = []
        self._generation = 0
        self._armed_step_id: str | None = None

    # ── Public API ───────────────────────────────────────────────────────

    def arm(self, step: Step) -> None:
        """Cancel everything, then schedule every time-based event of *step*."""
        self.disarm()
        generation = self._generation
        self._armed_step_id = step.step_id

        for event in step.events:
            trigger = event.trigger
            if isinstance(trigger, TimeElapsedTrigger):
                self._arm_elapsed(event, trigger, generation)
            elif isinstance(trigger, TimeIntervalTrigger):
                run = _IntervalRun(self, event, trigger, generation)
                self._track(
                    self.timers.schedule_once(
                        trigger.start_offset_minutes * MS_PER_MINUTE, run.begin
                    )
                )

        logger.info(
            "Armed step %s with %d timer(s)", step.step_id, len(self._handles)
        )

    def disarm(self) -> None:
        """Cancel every pending and repeating timer.  Safe to call repeatedly."""
        self._generation += 1
        handles, self._handles = self._handles, []
        for handle in handles:
            self.timers.cancel(handle)
        if handles:
            logger.debug(
                "Disarmed step %s (%d timer(s) cancelled)",
                self._armed_step_id,
                len(handles),
            )
        self._armed_step_id = None

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    @property
    def armed_step_id(self) -> str | None:
        return self._armed_step_id

    @property
    def handle_count(self) -> int:
        return len(self._handles)

    # ── Internals ────────────────────────────────────────────────────────

    def _arm_elapsed(self, event: Event, trigger: TimeElapsedTrigger, generation: int) -> None:
        def fire() -> None:
            if self.is_current(generation):
                self._on_fire(event, None)

        self._track(self.timers.schedule_once(trigger.value_minutes * MS_PER_MINUTE, fire))

    def _track(self, handle: TimerHandle) -> TimerHandle:
        self._handles.append(handle)
        return handle
