"""Alert — the payload handed to the notification sink on every activation."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from brew_conductor.domain.enums import AlertKind


class Alert(BaseModel):
    """One request to surface a notification to the operator.

    Delivery and acknowledgement are the sink's business; the engine only
    learns about acknowledgement through an explicit dismiss.
    """

    kind: AlertKind
    message: str
    action_label: Optional[str] = Field(
        default=None,
        description="Button text for critical dialogs; None for reminders",
    )
    event_id: str
    step_id: str
    occurrence: Optional[int] = Field(
        default=None,
        description="Occurrence index for repeating triggers",
    )
    activated_at_ms: int

    model_config = {"frozen": True}
