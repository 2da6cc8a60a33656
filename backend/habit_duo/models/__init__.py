"""
Pydantic models for the application
"""
from habit_duo.models.common import LocallyApplied
from habit_duo.models.habit import (
    HabitType,
    RecurrenceType,
    Visibility,
    CompletionRequirement,
    Habit,
    HabitCompletion,
    HabitDraft,
    HabitChanges,
    ToggleCompletionRequest
)
from habit_duo.models.user import User, Relationship, AuthUser
from habit_duo.models.message import MotivationalMessage, SendMessageRequest

__all__ = [
    "LocallyApplied",
    "HabitType",
    "RecurrenceType",
    "Visibility",
    "CompletionRequirement",
    "Habit",
    "HabitCompletion",
    "HabitDraft",
    "HabitChanges",
    "ToggleCompletionRequest",
    "User",
    "Relationship",
    "AuthUser",
    "MotivationalMessage",
    "SendMessageRequest"
]
