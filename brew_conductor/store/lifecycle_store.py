"""In-memory event lifecycle store for the current step.

Design notes:
    - The store holds exactly one EventState per event of the current step,
      keyed by event id.  ``reset()`` swaps the whole map in one go.
    - Every method is synchronous and total: an unknown event id is a no-op
      that returns False.  Nothing here raises.
    - The store applies transitions; it does not decide *when* to apply
      them.  Rearm gating and evaluation belong to the session controller,
      timers belong to the step scheduler.
    - The recipe's Event objects are referenced, never mutated.

Transitions:
    activate            pending/active → active   (not once dismissed)
    deactivate          active → pending          (level-sensitive only)
    dismiss             pending/active → dismissed
                        repeating triggers: dismisses the oldest outstanding
                        occurrence; active until none is left
    dismiss_occurrence  records an occurrence; the event is dismissed once
                        ``repeat_times`` distinct occurrences are dismissed
    reset               fresh pending map for the given events
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from brew_conductor.domain.enums import EventStatus
from brew_conductor.domain.event_state import EventState
from brew_conductor.domain.recipe import Event, TimeIntervalTrigger
from brew_conductor.domain.snapshots import EventStateSnapshot
from brew_conductor.foundation.clock import now_ms

logger = logging.getLogger(__name__)


class EventLifecycleStore:
    """Single-writer container for the current step's EventStates.

    Args:
        clock: Source of "now" in epoch milliseconds, used to stamp
               activations and to compute elapsed times.
    """

    def __init__(self, clock: Callable[[], int] = now_ms) -> None:
        self._clock = clock
        self._states: dict[str, EventState] = {}

    # ── Bulk ─────────────────────────────────────────────────────────────

    def reset(self, events: Iterable[Event] = ()) -> None:
        """Replace all state with fresh pending entries for *events*."""
        self._states = {event.event_id: EventState(event) for event in events}
        logger.debug("Lifecycle reset with %d event(s)", len(self._states))

    # ── Transitions ──────────────────────────────────────────────────────

    def activate(self, event_id: str, occurrence: int | None = None) -> bool:
        """Mark an event active.  Returns True if the activation was applied.

        For repeating triggers *occurrence* names the firing; an occurrence
        the operator already dismissed is not activated again.  An event
        that is already active is re-stamped, which is how rearmed
        level-sensitive triggers fire again.
        """
        state = self._states.get(event_id)
        if state is None or state.status == EventStatus.DISMISSED:
            return False

        if state.is_repeating:
            if occurrence is None:
                occurrence = 0 if state.occurrence is None else state.occurrence + 1
            if occurrence in state.dismissed_occurrences:
                logger.debug("Occurrence %d of %s already dismissed", occurrence, event_id)
                return False
            state.mark_active(self._clock(), occurrence)
        else:
            state.mark_active(self._clock())

        logger.debug("Activated %r", state)
        return True

    def deactivate(self, event_id: str) -> bool:
        """Return a level-sensitive event from active to pending.

        Time-based events never deactivate on their own; only dismissal
        moves them on.
        """
        state = self._states.get(event_id)
        if state is None or not state.is_level_sensitive:
            return False
        if state.status != EventStatus.ACTIVE:
            return False
        state.mark_pending()
        logger.debug("Deactivated %r", state)
        return True

    def dismiss(self, event_id: str) -> bool:
        """Operator dismissal.

        Repeating triggers are dismissed one occurrence at a time, so this
        acknowledges the oldest fired occurrence still outstanding.
        """
        state = self._states.get(event_id)
        if state is None or state.status == EventStatus.DISMISSED:
            return False

        if state.is_repeating:
            outstanding = state.active_occurrences
            if not outstanding:
                return False
            return self.dismiss_occurrence(event_id, min(outstanding))

        state.mark_dismissed()
        logger.debug("Dismissed %r", state)
        return True

    def dismiss_occurrence(self, event_id: str, index: int) -> bool:
        """Dismiss one occurrence of a repeating trigger.

        Occurrences may be dismissed ahead of time, which suppresses them
        when their timer fires.  Out-of-range and repeated indices are
        ignored.
        """
        state = self._states.get(event_id)
        if state is None or state.status == EventStatus.DISMISSED:
            return False
        trigger = state.event.trigger
        if not isinstance(trigger, TimeIntervalTrigger):
            return False
        if index < 0 or (trigger.is_bounded and index >= trigger.repeat_times):
            return False
        if index in state.dismissed_occurrences:
            return False

        state.add_dismissed_occurrence(index)

        if trigger.is_bounded and len(state.dismissed_occurrences) >= trigger.repeat_times:
            state.mark_dismissed()
        elif state.status == EventStatus.ACTIVE and not state.active_occurrences:
            state.mark_pending()

        logger.debug("Dismissed occurrence %d of %r", index, state)
        return True

    # ── Queries ──────────────────────────────────────────────────────────

    def get(self, event_id: str) -> EventState | None:
        return self._states.get(event_id)

    def get_active(self) -> list[EventState]:
        return [s for s in self._states.values() if s.status == EventStatus.ACTIVE]

    def get_pending(self) -> list[EventState]:
        return [s for s in self._states.values() if s.status == EventStatus.PENDING]

    def get_dismissed(self) -> list[EventState]:
        return [s for s in self._states.values() if s.status == EventStatus.DISMISSED]

    def get_elapsed(self, event_id: str) -> float | None:
        """Seconds since the event last became active, or None if unknown."""
        state = self._states.get(event_id)
        if state is None:
            return None
        return state.elapsed_seconds(self._clock())

    def snapshot(self, step_elapsed_minutes: float = 0.0) -> list[EventStateSnapshot]:
        """Immutable views of every event, in recipe order."""
        now = self._clock()
        return [s.snapshot(now, step_elapsed_minutes) for s in self._states.values()]

    @property
    def event_ids(self) -> list[str]:
        return list(self._states)

    # ── Dunder ───────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._states
