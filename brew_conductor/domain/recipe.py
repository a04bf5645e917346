"""Recipe model — the immutable template a brewing session executes.

A Recipe is an ordered list of Steps; each Step carries Events; each Event
pairs a Trigger (when) with a Notification (what to tell the operator).
Triggers, Steps and Notifications are closed tagged variants discriminated
on their ``type`` field, so every consumer can match them exhaustively.

All models are frozen and validated at the boundary.  The engine assumes
it only ever sees validated recipes and never re-checks field constraints.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from brew_conductor.domain.enums import (
    AlertKind,
    BoundaryCondition,
    Direction,
    TemperatureCondition,
)

# Physical range accepted for any temperature in a recipe.
MIN_TEMPERATURE_C = -50.0
MAX_TEMPERATURE_C = 150.0

# One day, the longest span any step or timer may cover.
MAX_MINUTES = 1440


# ── Triggers ─────────────────────────────────────────────────────────────────

class TemperatureTargetTrigger(BaseModel):
    """Fires while the kettle is at or past a target temperature."""

    type: Literal["temperature_target"] = "temperature_target"
    condition: TemperatureCondition
    value_c: float = Field(..., ge=MIN_TEMPERATURE_C, le=MAX_TEMPERATURE_C)

    model_config = {"frozen": True}


class BoundaryViolationTrigger(BaseModel):
    """Safety check: fires while the temperature is strictly outside a bound."""

    type: Literal["boundary_violation"] = "boundary_violation"
    condition: BoundaryCondition
    value_c: float = Field(..., ge=MIN_TEMPERATURE_C, le=MAX_TEMPERATURE_C)

    model_config = {"frozen": True}


class TimeElapsedTrigger(BaseModel):
    """One-shot: fires once when the step has run for ``value_minutes``."""

    type: Literal["time_elapsed"] = "time_elapsed"
    value_minutes: float = Field(..., ge=0, le=MAX_MINUTES)

    model_config = {"frozen": True}


class TimeIntervalTrigger(BaseModel):
    """Repeating: occurrence *n* fires at ``start_offset + n * interval`` minutes.

    ``repeat_times`` of None means the trigger repeats for as long as the
    step lasts.
    """

    type: Literal["time_interval"] = "time_interval"
    interval_minutes: float = Field(..., ge=1, le=MAX_MINUTES)
    repeat_times: Optional[int] = Field(default=None, ge=1, le=100)
    start_offset_minutes: float = Field(default=0, ge=0, le=MAX_MINUTES)

    model_config = {"frozen": True}

    @property
    def is_bounded(self) -> bool:
        return self.repeat_times is not None

    def occurrence_offset(self, index: int) -> float:
        """Minutes after step start at which occurrence *index* fires."""
        return self.start_offset_minutes + index * self.interval_minutes

    def next_occurrence(
        self,
        elapsed_minutes: float,
        dismissed: frozenset[int] | set[int] = frozenset(),
    ) -> tuple[int, float] | None:
        """First occurrence due at or after *elapsed_minutes* that is not dismissed.

        Returns ``(index, offset_minutes)`` or None once every occurrence has
        passed or been dismissed.
        """
        if elapsed_minutes <= self.start_offset_minutes:
            index = 0
        else:
            index = math.ceil(
                (elapsed_minutes - self.start_offset_minutes) / self.interval_minutes
            )
        while not self.is_bounded or index < self.repeat_times:
            if index not in dismissed:
                return index, self.occurrence_offset(index)
            index += 1
        return None


Trigger = Annotated[
    Union[
        TemperatureTargetTrigger,
        BoundaryViolationTrigger,
        TimeElapsedTrigger,
        TimeIntervalTrigger,
    ],
    Field(discriminator="type"),
]


# ── Notifications ────────────────────────────────────────────────────────────

class CriticalDialog(BaseModel):
    """Must be acknowledged by the operator."""

    type: Literal["critical_dialog"] = "critical_dialog"
    message: str = Field(..., min_length=1, max_length=200)
    action_button_text: str = Field(default="OK", min_length=1, max_length=50)

    model_config = {"frozen": True}

    @property
    def alert_kind(self) -> AlertKind:
        return AlertKind.CRITICAL

    @property
    def action_label(self) -> str | None:
        return self.action_button_text


class SoftReminder(BaseModel):
    """Informational only."""

    type: Literal["soft_reminder"] = "soft_reminder"
    message: str = Field(..., min_length=1, max_length=200)

    model_config = {"frozen": True}

    @property
    def alert_kind(self) -> AlertKind:
        return AlertKind.REMINDER

    @property
    def action_label(self) -> str | None:
        return None


Notification = Annotated[
    Union[CriticalDialog, SoftReminder],
    Field(discriminator="type"),
]


# ── Event ────────────────────────────────────────────────────────────────────

class Event(BaseModel):
    """A trigger paired with the notification it raises."""

    event_id: str = Field(..., min_length=1, max_length=50)
    trigger: Trigger
    notification: Notification

    model_config = {"frozen": True}


# ── Steps ────────────────────────────────────────────────────────────────────

class _StepBase(BaseModel):
    step_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    duration_minutes: float = Field(
        default=0,
        ge=0,
        le=MAX_MINUTES,
        description="Nominal duration; informational, never enforced",
    )
    events: tuple[Event, ...] = Field(default=(), max_length=10)

    model_config = {"frozen": True}

    @field_validator("events")
    @classmethod
    def event_ids_must_be_unique(cls, v: tuple[Event, ...]) -> tuple[Event, ...]:
        seen: set[str] = set()
        for event in v:
            if event.event_id in seen:
                raise ValueError(f"duplicate event_id within step: {event.event_id}")
            seen.add(event.event_id)
        return v


class TargetTemperatureStep(_StepBase):
    """Drive the kettle towards a single target temperature."""

    type: Literal["target_temperature"] = "target_temperature"
    direction: Direction
    target_temperature_c: float = Field(..., ge=MIN_TEMPERATURE_C, le=MAX_TEMPERATURE_C)


class MaintenanceStep(_StepBase):
    """Hold the kettle inside a temperature band."""

    type: Literal["temperature_maintenance"] = "temperature_maintenance"
    temp_low_c: float = Field(..., ge=MIN_TEMPERATURE_C, le=MAX_TEMPERATURE_C)
    temp_high_c: float = Field(..., ge=MIN_TEMPERATURE_C, le=MAX_TEMPERATURE_C)

    @model_validator(mode="after")
    def low_below_high(self) -> "MaintenanceStep":
        if self.temp_low_c >= self.temp_high_c:
            raise ValueError("temp_low_c must be less than temp_high_c")
        return self


Step = Annotated[
    Union[TargetTemperatureStep, MaintenanceStep],
    Field(discriminator="type"),
]


# ── Recipe ───────────────────────────────────────────────────────────────────

class Recipe(BaseModel):
    """Immutable brewing template.  Read-only input to the engine."""

    recipe_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    created_at: datetime
    steps: tuple[Step, ...] = Field(..., min_length=1, max_length=20)

    model_config = {"frozen": True}

    @field_validator("created_at")
    @classmethod
    def created_at_must_be_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v

    @property
    def step_count(self) -> int:
        return len(self.steps)
