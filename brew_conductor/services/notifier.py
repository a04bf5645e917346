"""Notification sinks — where activations are sent for delivery.

The engine hands every activation to a NotificationSink as an Alert.  How
the alert reaches the operator (dialog, sound, push) is the sink's
business.  Sinks must not call back into the session synchronously.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from brew_conductor.domain.alert import Alert
from brew_conductor.domain.enums import AlertKind

if TYPE_CHECKING:
    from brew_conductor.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Protocol for alert delivery."""

    def notify(self, alert: Alert) -> None:
        ...


class LoggingNotificationSink:
    """Writes alerts to the log.  Critical alerts are logged as warnings."""

    def notify(self, alert: Alert) -> None:
        level = logging.WARNING if alert.kind == AlertKind.CRITICAL else logging.INFO
        logger.log(
            level,
            "[%s] %s (event=%s step=%s occurrence=%s)",
            alert.kind.value,
            alert.message,
            alert.event_id,
            alert.step_id,
            alert.occurrence,
        )


class BroadcastNotificationSink(LoggingNotificationSink):
    """Logs each alert and pushes it to every ``/ws/alerts`` client.

    The push runs as a background task on the running loop so the
    session handler that raised the alert never awaits.
    """

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager
        self._tasks: set[asyncio.Task] = set()

    def notify(self, alert: Alert) -> None:
        super().notify(alert)
        if self._manager.active_count == 0:
            return
        task = asyncio.get_running_loop().create_task(
            self._manager.broadcast_json({"type": "alert", "alert": alert.model_dump(mode="json")})
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
