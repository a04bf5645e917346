"""WebSocket endpoint: streams alerts to the UI as events activate."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from brew_conductor.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


def create_alerts_router(manager: ConnectionManager) -> APIRouter:
    """Factory that attaches alert subscribers to *manager*."""

    router = APIRouter()

    @router.websocket("/ws/alerts")
    async def stream_alerts(websocket: WebSocket) -> None:
        await manager.connect(websocket)
        logger.info("Alert client connected — total: %d", manager.active_count)

        try:
            while True:
                # Keep the connection alive; alerts are pushed server-side
                await websocket.receive_text()

        except WebSocketDisconnect:
            manager.disconnect(websocket)
            logger.info("Alert client disconnected — total: %d", manager.active_count)

    return router
