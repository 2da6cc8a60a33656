"""
Habit Routes - Endpoints for habit management
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from habit_duo.core.config import settings
from habit_duo.core.dependencies import get_habit_session
from habit_duo.core.exceptions import (
    HabitPermissionError,
    InvalidHabitDataError,
    NotAuthenticatedError,
    NotFoundError,
    RemoteError
)
from habit_duo.models.habit import HabitChanges, HabitDraft, ToggleCompletionRequest
from habit_duo.services.session import HabitSession

router = APIRouter(prefix="/habits", tags=["habits"])


@router.get("")
async def list_habits(session: HabitSession = Depends(get_habit_session)):
    """Own personal, own shared and partner-visible habits"""
    return {
        "status": "success",
        "personal": session.get_personal_habits(),
        "shared": session.get_shared_habits(),
        "partner": session.get_visible_partner_habits()
    }


@router.get("/today")
async def get_habits_for_date(
    target_date: Optional[date] = Query(None, alias="date"),
    session: HabitSession = Depends(get_habit_session)
):
    """Habits due on a date (default today) with both partners' completion"""
    day = target_date or session.today()
    habits = []
    for habit in session.get_habits_for_date(day):
        habits.append({
            "habit": habit,
            "completed": session.get_habit_completion(habit.id, day),
            "partner_completed": session.get_partner_habit_completion(habit.id, day)
        })
    return {
        "status": "success",
        "date": str(day),
        "habits": habits
    }


@router.get("/summary")
async def get_daily_summary(
    target_date: Optional[date] = Query(None, alias="date"),
    session: HabitSession = Depends(get_habit_session)
):
    """Completion summary of the caller's habits due on a date"""
    summary = session.get_daily_summary(target_date or session.today())
    return {"status": "success", **summary}


@router.get("/calendar")
async def get_calendar(
    end: Optional[date] = None,
    days: int = Query(settings.CALENDAR_DAYS, ge=1, le=31),
    session: HabitSession = Depends(get_habit_session)
):
    """Due habits and completion for the last N days"""
    return {
        "status": "success",
        "days": session.get_calendar(end or session.today(), days)
    }


@router.get("/{habit_id}")
async def get_habit_detail(habit_id: str, session: HabitSession = Depends(get_habit_session)):
    """Habit with completion history and current streak"""
    try:
        return {"status": "success", **session.get_habit_detail(habit_id)}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("")
async def add_habit(request: HabitDraft, session: HabitSession = Depends(get_habit_session)):
    """Create a habit owned by the caller"""
    try:
        result = await session.add_habit(request)
        return {"status": "success", "message": f"Habit '{result.data.title}' added", **result.model_dump()}
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except RemoteError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{habit_id}")
async def update_habit(
    habit_id: str,
    request: HabitChanges,
    session: HabitSession = Depends(get_habit_session)
):
    """Partially update one of the caller's habits"""
    try:
        result = await session.update_habit(habit_id, request)
        return {"status": "success", "message": f"Habit '{result.data.title}' updated", **result.model_dump()}
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except HabitPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidHabitDataError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RemoteError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{habit_id}")
async def delete_habit(habit_id: str, session: HabitSession = Depends(get_habit_session)):
    """Delete one of the caller's habits and its completions"""
    try:
        result = await session.delete_habit(habit_id)
        return {"status": "success", "message": "Habit deleted", **result.model_dump()}
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except HabitPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RemoteError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{habit_id}/toggle")
async def toggle_completion(
    habit_id: str,
    request: ToggleCompletionRequest,
    session: HabitSession = Depends(get_habit_session)
):
    """Flip the caller's completion of a habit on a date"""
    try:
        result = await session.toggle_habit_completion(habit_id, request.date)
        return {"status": "success", **result.model_dump()}
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RemoteError as e:
        raise HTTPException(status_code=500, detail=str(e))
