"""Controlled enumerations for the brewing domain.

Every categorical field in a recipe or in runtime state references an enum
defined here.  The discriminator tags of the tagged variants live on the
models themselves (``type`` literals) and mirror ``TriggerType`` and
``NotificationType``.
"""

from __future__ import annotations

from enum import Enum


class TriggerType(str, Enum):
    """The four kinds of event trigger a step may carry."""

    TEMPERATURE_TARGET = "temperature_target"
    BOUNDARY_VIOLATION = "boundary_violation"
    TIME_ELAPSED = "time_elapsed"
    TIME_INTERVAL = "time_interval"


class TemperatureCondition(str, Enum):
    REACHED_OR_EXCEEDED = "reached_or_exceeded"
    REACHED_OR_BELOW = "reached_or_below"


class BoundaryCondition(str, Enum):
    ABOVE_HIGH = "above_high"
    BELOW_LOW = "below_low"


class NotificationType(str, Enum):
    CRITICAL_DIALOG = "critical_dialog"
    SOFT_REMINDER = "soft_reminder"


class AlertKind(str, Enum):
    """What the notification sink is asked to deliver."""

    CRITICAL = "critical"
    REMINDER = "reminder"


class Direction(str, Enum):
    """Which way a target-temperature step drives the kettle."""

    HEATING = "heating"
    COOLING = "cooling"
    BOILING = "boiling"


class EventStatus(str, Enum):
    """Lifecycle of one event within the current step.

    pending → active → dismissed.  ``dismissed`` is terminal until the step
    changes.
    """

    PENDING = "pending"
    ACTIVE = "active"
    DISMISSED = "dismissed"


class TriggerInput(str, Enum):
    """Which temperature the level-sensitive triggers are evaluated against."""

    SMOOTHED = "smoothed"
    RAW = "raw"
