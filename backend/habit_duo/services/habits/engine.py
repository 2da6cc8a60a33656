"""
Habit visibility and recurrence engine
Pure functions deciding which habits a user sees on a day, whose completions
count, and how long a streak is. No I/O; every function is total over
well-typed input and degrades malformed optional data to "not due"/"not done".
"""
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel

from habit_duo.models.habit import (
    CompletionRequirement,
    Habit,
    HabitCompletion,
    HabitType,
    RecurrenceType,
    Visibility
)


class OwnershipClass(str, Enum):
    """How a habit relates to the viewing user"""
    OWN_PERSONAL = "own-personal"
    OWN_SHARED = "own-shared"
    PARTNER_VISIBLE = "partner-visible"
    HIDDEN = "hidden"


LISTED_CLASSES = frozenset({
    OwnershipClass.OWN_PERSONAL,
    OwnershipClass.OWN_SHARED,
    OwnershipClass.PARTNER_VISIBLE,
})


class SharedCompletion(BaseModel):
    """Per-participant completion state of a habit on one day"""
    habit_id: str
    date: date
    requirement: Optional[CompletionRequirement] = None
    self_completed: bool
    partner_completed: bool


# ============================================================================
# RECURRENCE
# ============================================================================

def weekday_of(day: date) -> int:
    """Day of week with 0 = Sunday .. 6 = Saturday"""
    return day.isoweekday() % 7


def is_due_on(habit: Habit, day: date) -> bool:
    """
    Check whether a habit is scheduled on a calendar day

    Args:
        habit: The habit
        day: Calendar date (no time component, so no timezone drift)

    Returns:
        True for daily habits, or when the weekday is one of recurrence_days
    """
    if habit.recurrence == RecurrenceType.DAILY:
        return True
    if habit.recurrence == RecurrenceType.SPECIFIC_DAYS:
        if not habit.recurrence_days:
            return False
        return weekday_of(day) in habit.recurrence_days
    return False


# ============================================================================
# VISIBILITY
# ============================================================================

def ownership_class(habit: Habit, user_id: Optional[str], partner_id: Optional[str]) -> OwnershipClass:
    """
    Classify a habit relative to the viewer

    Shared habits are listed for their creator only; the other participant
    still has their own completion state for them.
    """
    if user_id is not None and habit.creator_id == user_id:
        if habit.type == HabitType.PERSONAL:
            return OwnershipClass.OWN_PERSONAL
        if habit.type == HabitType.SHARED:
            return OwnershipClass.OWN_SHARED
        return OwnershipClass.HIDDEN

    if (
        partner_id is not None
        and habit.creator_id == partner_id
        and habit.type == HabitType.PERSONAL
        and habit.visibility == Visibility.VISIBLE
    ):
        return OwnershipClass.PARTNER_VISIBLE

    return OwnershipClass.HIDDEN


def is_listed(habit: Habit, user_id: Optional[str], partner_id: Optional[str]) -> bool:
    return ownership_class(habit, user_id, partner_id) in LISTED_CLASSES


def habits_for_date(
    habits: Sequence[Habit],
    user_id: Optional[str],
    partner_id: Optional[str],
    day: date
) -> List[Habit]:
    """
    Habits the viewer should see on a day, in input order

    Args:
        habits: All habits in memory (the store may or may not have pre-filtered them)
        user_id: Viewer
        partner_id: Viewer's partner, or None
        day: Calendar date

    Returns:
        Own personal, own shared and partner-visible habits that are due on day
    """
    return [
        habit for habit in habits
        if is_listed(habit, user_id, partner_id) and is_due_on(habit, day)
    ]


def personal_habits(habits: Sequence[Habit], user_id: Optional[str]) -> List[Habit]:
    """Personal habits created by the user"""
    return [h for h in habits if ownership_class(h, user_id, None) == OwnershipClass.OWN_PERSONAL]


def shared_habits(habits: Sequence[Habit], user_id: Optional[str]) -> List[Habit]:
    """Shared habits created by the user"""
    return [h for h in habits if ownership_class(h, user_id, None) == OwnershipClass.OWN_SHARED]


def visible_partner_habits(
    habits: Sequence[Habit],
    user_id: Optional[str],
    partner_id: Optional[str]
) -> List[Habit]:
    """Partner's personal habits flagged visible; empty without a partner"""
    if partner_id is None:
        return []
    return [
        h for h in habits
        if ownership_class(h, user_id, partner_id) == OwnershipClass.PARTNER_VISIBLE
    ]


def can_edit(habit: Habit, user_id: Optional[str]) -> bool:
    """Only the creator may edit or delete a habit"""
    return user_id is not None and habit.creator_id == user_id


# ============================================================================
# COMPLETIONS
# ============================================================================

def find_completion(
    completions: Sequence[HabitCompletion],
    habit_id: str,
    user_id: Optional[str],
    day: date
) -> Optional[HabitCompletion]:
    """The completion row for (habit, user, day), or None"""
    for completion in completions:
        if (
            completion.habit_id == habit_id
            and completion.user_id == user_id
            and completion.date == day
        ):
            return completion
    return None


def completion_status(
    completions: Sequence[HabitCompletion],
    habit_id: str,
    user_id: Optional[str],
    day: date
) -> bool:
    """Whether user completed habit on day; a missing row means not completed"""
    if user_id is None:
        return False
    completion = find_completion(completions, habit_id, user_id, day)
    return completion.completed if completion else False


def toggled_value(existing: Optional[HabitCompletion]) -> bool:
    """
    Completed flag after a toggle

    A first toggle creates the row as completed; later toggles negate it.
    """
    if existing is None:
        return True
    return not existing.completed


def completion_dates(
    completions: Sequence[HabitCompletion],
    habit_id: str,
    user_id: Optional[str]
) -> List[date]:
    """Distinct dates on which user completed habit, oldest first"""
    if user_id is None:
        return []
    return sorted({
        c.date for c in completions
        if c.habit_id == habit_id and c.user_id == user_id and c.completed
    })


def streak(
    completions: Sequence[HabitCompletion],
    habit_id: str,
    user_id: Optional[str],
    today: date
) -> int:
    """
    Consecutive completed days ending today

    Args:
        completions: All completions in memory
        habit_id: The habit
        user_id: Whose completions count
        today: Local calendar date

    Returns:
        0 unless today is completed, otherwise the length of the unbroken run of days ending today
    """
    dates = sorted(completion_dates(completions, habit_id, user_id), reverse=True)
    if not dates or dates[0] != today:
        return 0

    count = 1
    for previous, current in zip(dates, dates[1:]):
        if previous - current != timedelta(days=1):
            break
        count += 1
    return count


def shared_completion_display(
    habit: Habit,
    completions: Sequence[HabitCompletion],
    user_id: Optional[str],
    partner_id: Optional[str],
    day: date
) -> SharedCompletion:
    """
    Each participant's own completion of habit on day

    The two flags are not merged; completion_requirement is passed through
    for display only.
    """
    requirement = habit.completion_requirement if habit.type == HabitType.SHARED else None
    return SharedCompletion(
        habit_id=habit.id,
        date=day,
        requirement=requirement,
        self_completed=completion_status(completions, habit.id, user_id, day),
        partner_completed=completion_status(completions, habit.id, partner_id, day),
    )
