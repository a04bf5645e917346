"""Trigger evaluation — does a level-sensitive condition hold right now?

Pure functions.  No state, no side effects, no error conditions: every
call returns a boolean.  Time-based triggers are never true here; they are
driven by the StepScheduler instead.
"""

from __future__ import annotations

from brew_conductor.domain.enums import BoundaryCondition, TemperatureCondition
from brew_conductor.domain.recipe import (
    BoundaryViolationTrigger,
    TemperatureTargetTrigger,
    TimeElapsedTrigger,
    TimeIntervalTrigger,
    Trigger,
)


def is_level_sensitive(trigger: Trigger) -> bool:
    """True for triggers evaluated continuously against the live temperature."""
    return isinstance(trigger, (TemperatureTargetTrigger, BoundaryViolationTrigger))


def evaluate(trigger: Trigger, current_value: float | None) -> bool:
    """Return True if *trigger*'s condition holds for *current_value*.

    Target conditions include the target value itself; boundary violations
    are strict, so sitting exactly on a boundary is not a violation.
    Returns False when no sensor value is available yet.
    """
    if current_value is None:
        return False

    if isinstance(trigger, TemperatureTargetTrigger):
        if trigger.condition == TemperatureCondition.REACHED_OR_EXCEEDED:
            return current_value >= trigger.value_c
        return current_value <= trigger.value_c

    if isinstance(trigger, BoundaryViolationTrigger):
        if trigger.condition == BoundaryCondition.ABOVE_HIGH:
            return current_value > trigger.value_c
        return current_value < trigger.value_c

    if isinstance(trigger, (TimeElapsedTrigger, TimeIntervalTrigger)):
        return False

    raise TypeError(f"unknown trigger variant: {type(trigger).__name__}")
