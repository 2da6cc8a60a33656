"""
Session Routes - Identity, loading state and sign-out
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from habit_duo.core.dependencies import get_habit_session, get_session_store
from habit_duo.core.exceptions import NotAuthenticatedError
from habit_duo.services.session import HabitSession, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


def _session_state(session: HabitSession):
    return {
        "status": "success",
        "user": session.current_user,
        "partner": session.partner,
        "loading": session.is_loading,
        "failed": session.failed_slices,
        "error": str(session.error) if session.error else None
    }


@router.get("")
async def get_session(session: HabitSession = Depends(get_habit_session)):
    """Current user, partner and which data slices failed to load"""
    return _session_state(session)


@router.post("/refresh")
async def refresh_session(session: HabitSession = Depends(get_habit_session)):
    """Reload habits, completions, profiles and messages"""
    try:
        await session.refresh()
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return _session_state(session)


@router.delete("")
async def sign_out(
    session: HabitSession = Depends(get_habit_session),
    store: SessionStore = Depends(get_session_store)
):
    """End the caller's session"""
    user_id = session.user_id
    await store.end_session(user_id)
    return {"status": "success", "message": "Signed out", "user_id": user_id}
