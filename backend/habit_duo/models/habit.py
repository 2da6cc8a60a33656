"""
Pydantic models for habits and completions
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class HabitType(str, Enum):
    """Who a habit belongs to"""
    PERSONAL = "personal"
    SHARED = "shared"


class RecurrenceType(str, Enum):
    """Schedule rule deciding on which days a habit is due"""
    DAILY = "daily"
    SPECIFIC_DAYS = "specific-days"


class Visibility(str, Enum):
    """Partner exposure of a personal habit"""
    VISIBLE = "visible"
    SECRET = "secret"


class CompletionRequirement(str, Enum):
    """How many participants a shared habit asks for"""
    ONE = "one"
    BOTH = "both"


def _check_weekdays(days: Optional[List[int]]) -> Optional[List[int]]:
    if days is None:
        return None
    for day in days:
        if not 0 <= day <= 6:
            raise ValueError(f"Invalid weekday {day}. Use 0 (Sunday) to 6 (Saturday)")
    return days


class Habit(BaseModel):
    """A recurring task tracked by one user (personal) or both (shared)"""
    id: str
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: HabitType
    recurrence: RecurrenceType
    recurrence_days: Optional[List[int]] = None
    visibility: Optional[Visibility] = None
    completion_requirement: Optional[CompletionRequirement] = None
    creator_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("recurrence_days")
    @classmethod
    def validate_recurrence_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        return _check_weekdays(v)


class HabitCompletion(BaseModel):
    """Per-user, per-day completion record"""
    id: str
    habit_id: str
    user_id: str
    date: date
    completed: bool


class HabitDraft(BaseModel):
    """Fields supplied by a user when creating a habit"""
    title: str = Field(..., min_length=1, max_length=200, description="Habit title")
    description: Optional[str] = Field(None, max_length=2000)
    type: HabitType
    recurrence: RecurrenceType = RecurrenceType.DAILY
    recurrence_days: Optional[List[int]] = Field(None, description="Weekdays 0 (Sunday) to 6 (Saturday)")
    visibility: Optional[Visibility] = None
    completion_requirement: Optional[CompletionRequirement] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject whitespace-only titles"""
        if not v.strip():
            raise ValueError("Title must not be empty")
        return v.strip()

    @field_validator("recurrence_days")
    @classmethod
    def validate_recurrence_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        return _check_weekdays(v)

    @model_validator(mode="after")
    def fill_type_defaults(self):
        """Require days for specific-days habits and default the type-specific field"""
        if self.recurrence == RecurrenceType.SPECIFIC_DAYS and not self.recurrence_days:
            raise ValueError("recurrence_days must list at least one weekday for specific-days habits")
        if self.type == HabitType.PERSONAL and self.visibility is None:
            self.visibility = Visibility.VISIBLE
        if self.type == HabitType.SHARED and self.completion_requirement is None:
            self.completion_requirement = CompletionRequirement.ONE
        return self


class HabitChanges(BaseModel):
    """Partial update of a habit; omitted fields keep their current value"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    type: Optional[HabitType] = None
    recurrence: Optional[RecurrenceType] = None
    recurrence_days: Optional[List[int]] = None
    visibility: Optional[Visibility] = None
    completion_requirement: Optional[CompletionRequirement] = None

    @field_validator("recurrence_days")
    @classmethod
    def validate_recurrence_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        return _check_weekdays(v)


class ToggleCompletionRequest(BaseModel):
    """Request model for toggling a habit completion"""
    date: date
