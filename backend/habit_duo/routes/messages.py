"""
Message Routes - Motivational messages between partners
"""
from fastapi import APIRouter, Depends, HTTPException

from habit_duo.core.dependencies import get_habit_session
from habit_duo.core.exceptions import NotAuthenticatedError, RemoteError
from habit_duo.models.message import SendMessageRequest
from habit_duo.services.session import HabitSession

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/current")
async def get_current_message(session: HabitSession = Depends(get_habit_session)):
    """Newest unexpired message from the partner; null when there is none"""
    return {
        "status": "success",
        "message": session.motivational_message,
        "failed": "messages" in session.failed_slices
    }


@router.post("")
async def send_message(request: SendMessageRequest, session: HabitSession = Depends(get_habit_session)):
    """Send a message to the partner, visible to them for the configured TTL"""
    try:
        result = await session.send_motivational_message(request.text)
        return {"status": "success", "message": "Message sent to your partner", **result.model_dump()}
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except RemoteError as e:
        raise HTTPException(status_code=500, detail=str(e))
