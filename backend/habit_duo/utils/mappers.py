"""
Entity Mappers - Translate between store rows and domain models
Rows are decoded through the pydantic models, so a row that does not match the
schema is rejected with InvalidRowError instead of leaking into the caches.
"""
from typing import Any, Callable, Dict, Iterable, List, TypeVar, Union
import logging

from pydantic import BaseModel, ValidationError

from habit_duo.core.exceptions import InvalidRowError
from habit_duo.models.habit import (
    Habit,
    HabitCompletion,
    HabitDraft,
    HabitType,
    RecurrenceType
)
from habit_duo.models.message import MotivationalMessage
from habit_duo.models.user import Relationship, User

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
Row = Dict[str, Any]


def _decode(model: type, table: str, row: Any, fields: Callable[[Row], Row]):
    if not isinstance(row, dict):
        raise InvalidRowError(table, row, "row is not a mapping")
    try:
        return model.model_validate(fields(row))
    except ValidationError as e:
        raise InvalidRowError(table, row, str(e)) from e


def _value(member):
    return member.value if member is not None else None


def decode_rows(rows: Iterable[Any], decoder: Callable[[Any], M]) -> List[M]:
    """
    Decode a result set, skipping rows that fail validation

    Args:
        rows: Raw rows from the store
        decoder: One of the *_from_row functions

    Returns:
        List of decoded domain models, in input order
    """
    decoded = []
    for row in rows or []:
        try:
            decoded.append(decoder(row))
        except InvalidRowError as e:
            logger.warning(f"Skipping row: {e}")
    return decoded


# ============================================================================
# HABITS
# ============================================================================

def habit_from_row(row: Row) -> Habit:
    """
    Decode a habits row

    Raises:
        InvalidRowError: If the row does not match the habit schema
    """
    return _decode(Habit, "habits", row, lambda r: {
        "id": r.get("id"),
        "title": r.get("title"),
        "description": r.get("description"),
        "type": r.get("type"),
        "recurrence": r.get("recurrence"),
        "recurrence_days": r.get("recurrence_days"),
        "visibility": r.get("visibility"),
        "completion_requirement": r.get("completion_requirement"),
        "creator_id": r.get("creator_id"),
        "created_at": r.get("created_at"),
        "updated_at": r.get("updated_at"),
    })


def habit_to_row(habit: Union[Habit, HabitDraft], creator_id: str = None) -> Row:
    """
    Encode a habit for insert/update

    Only the fields relevant to the habit's type and recurrence are written,
    so switching a habit to daily never rewrites an old day list.

    Args:
        habit: Full habit or creation draft
        creator_id: Owner to record; defaults to habit.creator_id when present

    Returns:
        Row dict without id and timestamps
    """
    row = {
        "title": habit.title,
        "description": habit.description,
        "type": _value(habit.type),
        "recurrence": _value(habit.recurrence),
    }

    if habit.recurrence == RecurrenceType.SPECIFIC_DAYS:
        row["recurrence_days"] = list(habit.recurrence_days or [])

    if habit.type == HabitType.PERSONAL:
        row["visibility"] = _value(habit.visibility)
    elif habit.type == HabitType.SHARED:
        row["completion_requirement"] = _value(habit.completion_requirement)

    owner = creator_id or getattr(habit, "creator_id", None)
    if owner:
        row["creator_id"] = owner

    return row


# ============================================================================
# HABIT_COMPLETIONS
# ============================================================================

def completion_from_row(row: Row) -> HabitCompletion:
    """Decode a habit_completions row"""
    return _decode(HabitCompletion, "habit_completions", row, lambda r: {
        "id": r.get("id"),
        "habit_id": r.get("habit_id"),
        "user_id": r.get("user_id"),
        "date": r.get("date"),
        "completed": r.get("completed"),
    })


def completion_to_row(habit_id: str, user_id: str, day, completed: bool) -> Row:
    """Encode a new completion; dates are written as YYYY-MM-DD"""
    return {
        "habit_id": habit_id,
        "user_id": user_id,
        "date": day.isoformat(),
        "completed": completed,
    }


# ============================================================================
# PROFILES / RELATIONSHIPS
# ============================================================================

def user_from_row(row: Row) -> User:
    return _decode(User, "profiles", row, lambda r: {
        "id": r.get("id"),
        "name": r.get("name"),
    })


def user_to_row(user: User) -> Row:
    return {"id": user.id, "name": user.name}


def relationship_from_row(row: Row) -> Relationship:
    return _decode(Relationship, "relationships", row, lambda r: {
        "id": r.get("id"),
        "user_id_1": r.get("user_id_1"),
        "user_id_2": r.get("user_id_2"),
        "created_at": r.get("created_at"),
        "updated_at": r.get("updated_at"),
    })


# ============================================================================
# MOTIVATIONAL_MESSAGES
# ============================================================================

def message_from_row(row: Row) -> MotivationalMessage:
    """Decode a motivational_messages row"""
    return _decode(MotivationalMessage, "motivational_messages", row, lambda r: {
        "id": r.get("id"),
        "text": r.get("text"),
        "sender_id": r.get("sender_id"),
        "created_at": r.get("created_at"),
        "expires_at": r.get("expires_at"),
    })


def message_to_row(text: str, sender_id: str, expires_at) -> Row:
    """Encode a new message; created_at is assigned by the store"""
    return {
        "text": text,
        "sender_id": sender_id,
        "expires_at": expires_at.isoformat(),
    }
