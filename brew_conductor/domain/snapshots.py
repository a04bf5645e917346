"""Snapshots — immutable point-in-time views of session and event state.

These are pure data structures handed to the UI layer.  They carry no
behaviour; everything in them is derived from runtime state and the clock
at the moment they are created.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from brew_conductor.domain.enums import EventStatus, NotificationType, TriggerType
from brew_conductor.domain.readings import SmoothedReading


class EventStateSnapshot(BaseModel):
    """Immutable observation of one event's lifecycle."""

    event_id: str
    trigger_type: TriggerType
    notification_type: NotificationType
    message: str
    status: EventStatus
    activated_at_ms: Optional[int] = Field(None, description="When the event last became active")
    activation_count: int = Field(0, description="How many times the event has fired this step")
    elapsed_seconds: float = Field(0.0, description="Seconds since the last activation")
    occurrence: Optional[int] = Field(None, description="Latest fired occurrence (repeating triggers)")
    active_occurrences: list[int] = Field(
        default_factory=list, description="Fired occurrences still awaiting the operator"
    )
    dismissed_occurrences: list[int] = Field(default_factory=list)
    next_due_minutes: Optional[float] = Field(
        None, description="Step minute of the next timer firing (time-based triggers only)"
    )

    model_config = {"frozen": True}


class SessionSnapshot(BaseModel):
    """Everything the UI needs to render the brewing screen."""

    recipe_id: Optional[str] = None
    recipe_name: Optional[str] = None
    is_brewing: bool = False
    current_step_index: int = 0
    step_count: int = 0
    current_step_id: Optional[str] = None
    current_step_name: Optional[str] = None
    step_started_at_ms: Optional[int] = None
    step_elapsed_seconds: float = 0.0
    latest_reading: Optional[SmoothedReading] = None
    events: list[EventStateSnapshot] = Field(default_factory=list)

    model_config = {"frozen": True}
