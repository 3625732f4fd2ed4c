"""Operator routes for inspecting and resetting conversations."""

from fastapi import APIRouter, Depends, HTTPException

from tractorbot.api.dependencies import get_dispatcher
from tractorbot.core.dispatcher import Dispatcher

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("/{user_id}")
async def get_session(user_id: str, dispatcher: Dispatcher = Depends(get_dispatcher)) -> dict:
    """Return a user's stored session and current state."""
    session = await dispatcher.sessions.get(user_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    return {
        **session.model_dump(mode="json"),
        "state": session.state.value,
    }


@router.delete("/{user_id}")
async def clear_session(user_id: str, dispatcher: Dispatcher = Depends(get_dispatcher)) -> dict:
    """Forget a user's session, abandoning any open negotiation."""
    async with dispatcher.sessions.lock(user_id):
        deleted = await dispatcher.sessions.clear(user_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": True, "user_id": user_id}
