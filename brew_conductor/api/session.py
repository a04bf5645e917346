"""HTTP endpoints for the session API used by the UI.

Commands always answer 200.  A command the session ignored (start with no
recipe, dismissing an unknown event…) is reported as
``{"status": "ignored", "reason": ...}`` rather than as an HTTP error.
Malformed recipe bodies are rejected with 422 by request validation and
never reach the session.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from brew_conductor.core.session import BrewingSession
from brew_conductor.domain.recipe import Recipe
from brew_conductor.domain.snapshots import SessionSnapshot

logger = logging.getLogger(__name__)


def _result(applied: bool, reason: str) -> dict:
    if applied:
        return {"status": "ok"}
    return {"status": "ignored", "reason": reason}


def create_session_router(session: BrewingSession) -> APIRouter:
    """Factory that wires the session endpoints to a concrete BrewingSession."""

    router = APIRouter(prefix="/session", tags=["session"])

    @router.get("", response_model=SessionSnapshot)
    async def get_session() -> SessionSnapshot:
        return session.snapshot()

    @router.post("/recipe", response_model=SessionSnapshot)
    async def load_recipe(recipe: Recipe) -> SessionSnapshot:
        session.load(recipe)
        return session.snapshot()

    @router.post("/start")
    async def start() -> dict:
        if session.current_recipe is None:
            return _result(False, "no_recipe_loaded")
        return _result(session.start(), "already_brewing")

    @router.post("/stop")
    async def stop() -> dict:
        session.stop()
        return _result(True, "")

    @router.post("/advance")
    async def advance() -> dict:
        return _result(session.advance(), "not_brewing")

    @router.post("/events/{event_id}/dismiss")
    async def dismiss(event_id: str) -> dict:
        return _result(session.dismiss(event_id), "not_dismissable")

    @router.post("/events/{event_id}/occurrences/{index}/dismiss")
    async def dismiss_occurrence(event_id: str, index: int) -> dict:
        return _result(session.dismiss_occurrence(event_id, index), "not_dismissable")

    return router
