"""WebSocket endpoint for temperature sample ingestion.

Path: /ws/sensor

Accepts JSON matching the SensorSample schema, validates it at the
boundary, pushes it through the session, and answers with the smoothed
reading.  Frames that are not valid JSON get the same error payload as
failed validation.  However the connection ends, the session is told the
sensor is lost; a disconnect is not an error.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from brew_conductor.core.session import BrewingSession
from brew_conductor.domain.readings import SensorSample

logger = logging.getLogger(__name__)


def create_sensor_router(session: BrewingSession) -> APIRouter:
    """Factory that wires the sensor endpoint to a concrete BrewingSession."""

    router = APIRouter()

    @router.websocket("/ws/sensor")
    async def ingest_samples(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Sensor connected")

        try:
            while True:
                raw = await websocket.receive_text()

                # ── Validate at the boundary ─────────────────────────────
                try:
                    sample = SensorSample.model_validate_json(raw)
                except ValidationError as exc:
                    await websocket.send_json({
                        "status": "error",
                        "detail": exc.errors(include_url=False, include_context=False),
                    })
                    continue

                # ── Route into session ───────────────────────────────────
                reading = session.push_sample(sample.value, sample.timestamp_ms)

                # ── Acknowledge ──────────────────────────────────────────
                await websocket.send_json({
                    "status": "accepted",
                    "smoothed": reading.smoothed,
                    "rate_per_minute": reading.rate_per_minute,
                    "timestamp_ms": reading.timestamp_ms,
                })

        except WebSocketDisconnect:
            logger.info("Sensor disconnected")

        finally:
            session.sensor_lost()

    return router
