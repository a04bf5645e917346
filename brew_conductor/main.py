"""brew-conductor — brewing orchestration engine.

This is the application entry point.  It wires the SignalSmoother,
BrewingSession, notification sink and the HTTP/WebSocket endpoints
together.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import FastAPI

from brew_conductor.api.session import create_session_router
from brew_conductor.api.ws_alerts import create_alerts_router
from brew_conductor.api.ws_sensor import create_sensor_router
from brew_conductor.config import Settings, settings
from brew_conductor.core.session import BrewingSession
from brew_conductor.core.smoother import SignalSmoother
from brew_conductor.recipes.sample import sample_recipe
from brew_conductor.scheduler.timers import AsyncioTimerBackend, TimerBackend
from brew_conductor.services.connection_manager import ConnectionManager
from brew_conductor.services.notifier import BroadcastNotificationSink

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(
    config: Settings = settings,
    timers: TimerBackend | None = None,
) -> FastAPI:
    """Build the application around one BrewingSession.

    Args:
        config: Application settings.
        timers: Timer backend; defaults to the running asyncio loop.
    """

    # ── Session ──────────────────────────────────────────────────────────

    alert_clients = ConnectionManager()
    session = BrewingSession(
        timers=timers or AsyncioTimerBackend(),
        smoother=SignalSmoother(
            alpha_temp=config.smoothing_alpha_temp,
            alpha_rate=config.smoothing_alpha_rate,
        ),
        notifier=BroadcastNotificationSink(alert_clients),
        rearm_interval=timedelta(seconds=config.rearm_interval_seconds),
        trigger_input=config.trigger_input,
    )

    if config.load_sample_recipe:
        session.load(sample_recipe())

    # ── App ──────────────────────────────────────────────────────────────

    application = FastAPI(
        title=config.app_name,
        description="Recipe step scheduling, temperature triggers and operator alerts",
        version="0.1.0",
        debug=config.debug,
    )
    application.state.session = session
    application.state.alert_clients = alert_clients

    # ── Routes ───────────────────────────────────────────────────────────

    application.include_router(create_session_router(session))
    application.include_router(create_sensor_router(session))
    application.include_router(create_alerts_router(alert_clients))

    # ── Health ───────────────────────────────────────────────────────────

    @application.get("/health")
    async def health() -> dict:
        snap = session.snapshot()
        return {
            "status": "ok",
            "recipe_id": snap.recipe_id,
            "is_brewing": snap.is_brewing,
            "current_step_id": snap.current_step_id,
            "active_events": len(session.lifecycle.get_active()),
            "armed_timers": session.scheduler.handle_count,
            "sensor_available": snap.latest_reading is not None,
            "alert_clients": alert_clients.active_count,
        }

    return application


app = create_app()
