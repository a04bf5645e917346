"""EventState — runtime lifecycle of one recipe event within the current step.

EventStates are never persisted and never written back into the recipe.
A fresh map of them is created whenever a step becomes current, and the
whole map is discarded when the step changes or brewing stops.

Lifecycle:  pending → active → dismissed
    - pending:   waiting for its trigger (initial state)
    - active:    trigger fired and the operator has not dismissed it
    - dismissed: operator acknowledged it; terminal for this step

Level-sensitive events fall back from active to pending on their own when
their condition stops holding.  Time-based events only leave ``active``
through dismissal.  A repeating event stays active while any of its
fired occurrences is still unacknowledged.
"""

from __future__ import annotations

from brew_conductor.domain.enums import EventStatus
from brew_conductor.domain.recipe import (
    BoundaryViolationTrigger,
    Event,
    TemperatureTargetTrigger,
    TimeElapsedTrigger,
    TimeIntervalTrigger,
)
from brew_conductor.domain.snapshots import EventStateSnapshot


class EventState:
    """Mutable runtime record for one event.

    Thread-safety note:
        EventState objects are mutated *only* by the EventLifecycleStore,
        which is driven from the session's single event-loop thread.
        They are not themselves locked.
    """

    __slots__ = (
        "event",
        "status",
        "activated_at_ms",
        "activation_count",
        "occurrence",
        "_active_occurrences",
        "_dismissed_occurrences",
    )

    def __init__(self, event: Event) -> None:
        self.event: Event = event
        self.status: EventStatus = EventStatus.PENDING
        self.activated_at_ms: int | None = None
        self.activation_count: int = 0
        self.occurrence: int | None = None
        self._active_occurrences: set[int] = set()
        self._dismissed_occurrences: set[int] = set()

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def event_id(self) -> str:
        return self.event.event_id

    @property
    def is_level_sensitive(self) -> bool:
        return isinstance(
            self.event.trigger, (TemperatureTargetTrigger, BoundaryViolationTrigger)
        )

    @property
    def is_repeating(self) -> bool:
        return isinstance(self.event.trigger, TimeIntervalTrigger)

    @property
    def active_occurrences(self) -> frozenset[int]:
        """Occurrences that fired and still await the operator."""
        return frozenset(self._active_occurrences)

    @property
    def dismissed_occurrences(self) -> frozenset[int]:
        """Read-only view of the occurrence indices the operator dismissed."""
        return frozenset(self._dismissed_occurrences)

    def elapsed_seconds(self, now_ms: int) -> float:
        """Seconds since the event last became active (0.0 if it never did)."""
        if self.activated_at_ms is None:
            return 0.0
        return max(0.0, (now_ms - self.activated_at_ms) / 1000.0)

    def next_due_minutes(self, step_elapsed_minutes: float) -> float | None:
        """Step-relative minute at which the next timer firing is due.

        Only meaningful for time-based events; None when nothing more is due.
        """
        if self.status == EventStatus.DISMISSED:
            return None
        trigger = self.event.trigger
        if isinstance(trigger, TimeElapsedTrigger):
            return trigger.value_minutes if self.activation_count == 0 else None
        if isinstance(trigger, TimeIntervalTrigger):
            exclude = set(self._dismissed_occurrences)
            if self.occurrence is not None:
                exclude.update(range(self.occurrence + 1))
            found = trigger.next_occurrence(step_elapsed_minutes, exclude)
            return found[1] if found else None
        return None

    # ── Mutation (EventLifecycleStore only) ──────────────────────────────

    def mark_active(self, now_ms: int, occurrence: int | None = None) -> None:
        self.status = EventStatus.ACTIVE
        self.activated_at_ms = now_ms
        self.activation_count += 1
        if occurrence is not None:
            self.occurrence = occurrence
            self._active_occurrences.add(occurrence)

    def mark_pending(self) -> None:
        self.status = EventStatus.PENDING

    def mark_dismissed(self) -> None:
        self.status = EventStatus.DISMISSED
        self._active_occurrences.clear()

    def add_dismissed_occurrence(self, index: int) -> None:
        self._dismissed_occurrences.add(index)
        self._active_occurrences.discard(index)

    # ── Snapshot ─────────────────────────────────────────────────────────

    def snapshot(self, now_ms: int, step_elapsed_minutes: float = 0.0) -> EventStateSnapshot:
        """Create an immutable view of this event's current state."""
        return EventStateSnapshot(
            event_id=self.event_id,
            trigger_type=self.event.trigger.type,
            notification_type=self.event.notification.type,
            message=self.event.notification.message,
            status=self.status,
            activated_at_ms=self.activated_at_ms,
            activation_count=self.activation_count,
            elapsed_seconds=self.elapsed_seconds(now_ms),
            occurrence=self.occurrence,
            active_occurrences=sorted(self._active_occurrences),
            dismissed_occurrences=sorted(self._dismissed_occurrences),
            next_due_minutes=self.next_due_minutes(step_elapsed_minutes),
        )

    # ── Dunder ───────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        return (
            f"EventState(id={self.event_id}, "
            f"status={self.status.value}, "
            f"activations={self.activation_count}, "
            f"occurrence={self.occurrence})"
        )
