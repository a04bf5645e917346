"""BrewingSession — orchestrates one recipe run.

The session is the single writer of all runtime state.  Three kinds of
input reach it:

    1. sensor samples       → push_sample() / on_sensor_update()
    2. scheduler timers     → _on_timer_fired()
    3. operator commands    → load / start / stop / advance / dismiss

All of them are plain synchronous methods that run to completion on the
event-loop thread, so they are serialised by the loop itself and never
interleave.  In particular an ``advance()`` has disarmed the old timers,
reset the lifecycle store and armed the new step before any later sample
or timer callback is handled.  Entering a step evaluates its
level-sensitive events against the latest reading, when there is one.
On a multi-threaded host, wrap the session in a lock or feed it through
a queue.

Invalid commands (start without a recipe, dismissing an unknown event…)
are logged and answered with False.  Nothing raises across this API.

Rearm window:
    A level-sensitive event that fired may not fire again until the rearm
    interval has passed since its last firing, even if its condition
    dropped and came back in between.  The window map is owned here and
    cleared whenever the lifecycle store is reset.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable

from brew_conductor.core.evaluator import evaluate, is_level_sensitive
from brew_conductor.core.smoother import SignalSmoother
from brew_conductor.domain.alert import Alert
from brew_conductor.domain.enums import EventStatus, TriggerInput
from brew_conductor.domain.event_state import EventState
from brew_conductor.domain.readings import SmoothedReading
from brew_conductor.domain.recipe import Event, Recipe, Step
from brew_conductor.domain.snapshots import EventStateSnapshot, SessionSnapshot
from brew_conductor.scheduler.step_scheduler import StepScheduler
from brew_conductor.scheduler.timers import TimerBackend
from brew_conductor.services.notifier import LoggingNotificationSink, NotificationSink
from brew_conductor.store.lifecycle_store import EventLifecycleStore

logger = logging.getLogger(__name__)


class BrewingSession:
    """Session controller: recipe pointer, brewing flag and event wiring.

    Args:
        timers: Clock/timer primitive shared by the scheduler and the store.
        smoother: Filter for the raw sensor stream.
        notifier: Receives an Alert on every activation.
        rearm_interval: Minimum gap between two firings of the same
            level-sensitive event.
        trigger_input: Evaluate level-sensitive triggers against the
            smoothed temperature (default) or the raw sample.
    """

    def __init__(
        self,
        timers: TimerBackend,
        smoother: SignalSmoother | None = None,
        notifier: NotificationSink | None = None,
        rearm_interval: timedelta = timedelta(seconds=60),
        trigger_input: TriggerInput = TriggerInput.SMOOTHED,
    ) -> None:
        self._timers = timers
        self._smoother = smoother or SignalSmoother()
        self._notifier = notifier or LoggingNotificationSink()
        self._rearm_ms = rearm_interval.total_seconds() * 1000.0
        self._trigger_input = trigger_input

        self._store = EventLifecycleStore(clock=timers.now_ms)
        self._scheduler = StepScheduler(timers, self._on_timer_fired)

        self._recipe: Recipe | None = None
        self._step_index: int = 0
        self._is_brewing: bool = False
        self._step_start_ms: int | None = None
        self._latest: SmoothedReading | None = None
        self._last_fire_ms: dict[str, int] = {}

    # ── Commands ─────────────────────────────────────────────────────────

    def load(self, recipe: Recipe) -> None:
        """Make *recipe* current.  Brewing stops; nothing is armed."""
        self._scheduler.disarm()
        self._recipe = recipe
        self._step_index = 0
        self._is_brewing = False
        self._step_start_ms = None
        self._reset_lifecycle(())
        logger.info("Loaded recipe %s (%d steps)", recipe.recipe_id, recipe.step_count)

    def start(self) -> bool:
        """Begin brewing at the first step.  Returns False if nothing is loaded."""
        if self._recipe is None:
            logger.info("Ignoring start: no recipe loaded")
            return False
        if self._is_brewing:
            logger.info("Ignoring start: already brewing %s", self._recipe.recipe_id)
            return False

        self._is_brewing = True
        self._enter_step(0)
        logger.info("Started brewing %s", self._recipe.recipe_id)
        return True

    def stop(self) -> None:
        """Stop brewing: disarm timers and drop all event state."""
        self._scheduler.disarm()
        self._is_brewing = False
        self._step_start_ms = None
        self._reset_lifecycle(())
        logger.info("Stopped brewing")

    def advance(self) -> bool:
        """Move to the next step, or stop after the last one.

        Returns False when not brewing.
        """
        if not self._is_brewing or self._recipe is None:
            logger.info("Ignoring advance: not brewing")
            return False

        if self._step_index >= self._recipe.step_count - 1:
            logger.info("Last step finished")
            self.stop()
            return True

        self._scheduler.disarm()
        self._enter_step(self._step_index + 1)
        return True

    def dismiss(self, event_id: str) -> bool:
        """Operator dismissed an event of the current step."""
        if not self._is_brewing:
            return False
        applied = self._store.dismiss(event_id)
        if not applied:
            logger.info("Ignoring dismiss of %s", event_id)
        return applied

    def dismiss_occurrence(self, event_id: str, index: int) -> bool:
        """Operator dismissed one occurrence of a repeating event."""
        if not self._is_brewing:
            return False
        applied = self._store.dismiss_occurrence(event_id, index)
        if not applied:
            logger.info("Ignoring dismiss of occurrence %d of %s", index, event_id)
        return applied

    # ── Sensor input ─────────────────────────────────────────────────────

    def push_sample(self, raw_value: float, timestamp_ms: int) -> SmoothedReading:
        """Feed one raw sample through the smoother and evaluate triggers.

        A sample that does not advance the smoother's clock changes nothing.
        """
        previous = self._smoother.last
        reading = self._smoother.push(raw_value, timestamp_ms)
        if reading is previous:
            return reading

        self._latest = reading
        if self._is_brewing:
            self.on_sensor_update(self._trigger_value(reading))
        return reading

    def on_sensor_update(self, value: float | None) -> None:
        """Evaluate every level-sensitive event of the current step.

        Holding conditions activate their event once the rearm window has
        passed; an active event whose condition no longer holds drops back
        to pending immediately.
        """
        step = self.current_step
        if not self._is_brewing or step is None or value is None:
            return

        now = self._timers.now_ms()
        for event in step.events:
            if not is_level_sensitive(event.trigger):
                continue
            state = self._store.get(event.event_id)
            if state is None or state.status == EventStatus.DISMISSED:
                continue

            if evaluate(event.trigger, value):
                last = self._last_fire_ms.get(event.event_id)
                if last is not None and now - last < self._rearm_ms:
                    continue
                if self._store.activate(event.event_id):
                    self._last_fire_ms[event.event_id] = now
                    self._publish(step, state)
            elif state.status == EventStatus.ACTIVE:
                self._store.deactivate(event.event_id)

    def sensor_lost(self) -> None:
        """The sensor stopped reporting.  No current value until it resumes."""
        self._latest = None
        logger.info("Sensor stream lost")

    # ── Read accessors ───────────────────────────────────────────────────

    @property
    def current_recipe(self) -> Recipe | None:
        return self._recipe

    @property
    def current_step_index(self) -> int:
        return self._step_index

    @property
    def current_step(self) -> Step | None:
        if self._recipe is None:
            return None
        return self._recipe.steps[self._step_index]

    @property
    def is_brewing(self) -> bool:
        return self._is_brewing

    @property
    def step_start_ms(self) -> int | None:
        return self._step_start_ms

    @property
    def step_elapsed_seconds(self) -> float:
        if self._step_start_ms is None:
            return 0.0
        return max(0.0, (self._timers.now_ms() - self._step_start_ms) / 1000.0)

    @property
    def latest_reading(self) -> SmoothedReading | None:
        return self._latest

    @property
    def lifecycle(self) -> EventLifecycleStore:
        return self._store

    @property
    def scheduler(self) -> StepScheduler:
        return self._scheduler

    def get_event_state(self, event_id: str) -> EventState | None:
        return self._store.get(event_id)

    def event_states(self) -> list[EventStateSnapshot]:
        return self._store.snapshot(self.step_elapsed_seconds / 60.0)

    def snapshot(self) -> SessionSnapshot:
        """Immutable view of the whole session for the UI."""
        recipe = self._recipe
        step = self.current_step
        return SessionSnapshot(
            recipe_id=recipe.recipe_id if recipe else None,
            recipe_name=recipe.name if recipe else None,
            is_brewing=self._is_brewing,
            current_step_index=self._step_index,
            step_count=recipe.step_count if recipe else 0,
            current_step_id=step.step_id if step else None,
            current_step_name=step.name if step else None,
            step_started_at_ms=self._step_start_ms,
            step_elapsed_seconds=self.step_elapsed_seconds,
            latest_reading=self._latest,
            events=self.event_states(),
        )

    # ── Internals ────────────────────────────────────────────────────────

    def _enter_step(self, index: int) -> None:
        assert self._recipe is not None
        step = self._recipe.steps[index]
        self._step_index = index
        self._step_start_ms = self._timers.now_ms()
        self._reset_lifecycle(step.events)
        self._scheduler.arm(step)
        logger.info("Entered step %d/%d: %s", index + 1, self._recipe.step_count, step.name)
        if self._latest is not None:
            self.on_sensor_update(self._trigger_value(self._latest))

    def _trigger_value(self, reading: SmoothedReading) -> float:
        return reading.raw if self._trigger_input == TriggerInput.RAW else reading.smoothed

    def _reset_lifecycle(self, events: Iterable[Event]) -> None:
        self._store.reset(events)
        self._last_fire_ms.clear()

    def _on_timer_fired(self, event: Event, occurrence: int | None) -> None:
        step = self.current_step
        if not self._is_brewing or step is None:
            return
        state = self._store.get(event.event_id)
        if state is None or state.event is not event:
            logger.debug("Dropping stale timer for %s", event.event_id)
            return
        if self._store.activate(event.event_id, occurrence):
            self._publish(step, state)

    def _publish(self, step: Step, state: EventState) -> None:
        notification = state.event.notification
        assert state.activated_at_ms is not None
        self._notifier.notify(
            Alert(
                kind=notification.alert_kind,
                message=notification.message,
                action_label=notification.action_label,
                event_id=state.event_id,
                step_id=step.step_id,
                occurrence=state.occurrence if state.is_repeating else None,
                activated_at_ms=state.activated_at_ms,
            )
        )
