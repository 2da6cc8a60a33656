"""
Habit Summaries - Derived views for today, the calendar and habit details
Built on the engine; pure functions over in-memory collections
"""
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from habit_duo.models.habit import Habit, HabitCompletion
from . import engine


def daily_summary(
    habits: Sequence[Habit],
    completions: Sequence[HabitCompletion],
    user_id: Optional[str],
    partner_id: Optional[str],
    day: date
) -> Dict[str, Any]:
    """
    Summary of the viewer's own habits due on a day

    Partner-visible habits are listed on the day but do not count towards the
    viewer's completion rate.

    Returns:
        Dict with date, total_habits, completed, missed, completion_rate,
        completed_habits and missed_habits
    """
    due = engine.habits_for_date(habits, user_id, partner_id, day)
    own = [
        h for h in due
        if engine.ownership_class(h, user_id, partner_id) != engine.OwnershipClass.PARTNER_VISIBLE
    ]
    total_habits = len(own)

    completed_habits = []
    missed_habits = []
    for habit in own:
        if engine.completion_status(completions, habit.id, user_id, day):
            completed_habits.append(habit.title)
        else:
            missed_habits.append(habit.title)

    completion_rate = (len(completed_habits) / total_habits * 100) if total_habits > 0 else 0.0

    return {
        "date": str(day),
        "total_habits": total_habits,
        "completed": len(completed_habits),
        "missed": len(missed_habits),
        "completion_rate": round(completion_rate, 2),
        "completed_habits": completed_habits,
        "missed_habits": missed_habits
    }


def calendar_overview(
    habits: Sequence[Habit],
    completions: Sequence[HabitCompletion],
    user_id: Optional[str],
    partner_id: Optional[str],
    end: date,
    days: int = 7
) -> List[Dict[str, Any]]:
    """
    The last `days` calendar days up to and including end, oldest first

    Each entry lists the habits due that day with the viewer's completion.
    """
    overview = []
    for offset in range(days - 1, -1, -1):
        day = end - timedelta(days=offset)
        overview.append({
            "date": str(day),
            "weekday": engine.weekday_of(day),
            "habits": [
                {
                    "habit": habit,
                    "completed": engine.completion_status(completions, habit.id, user_id, day)
                }
                for habit in engine.habits_for_date(habits, user_id, partner_id, day)
            ]
        })
    return overview


def habit_detail(
    habit: Habit,
    completions: Sequence[HabitCompletion],
    user_id: Optional[str],
    partner_id: Optional[str],
    today: date
) -> Dict[str, Any]:
    """Completion history, streak and ownership for one habit"""
    return {
        "habit": habit,
        "is_creator": engine.can_edit(habit, user_id),
        "streak": engine.streak(completions, habit.id, user_id, today),
        "completion_dates": [str(d) for d in engine.completion_dates(completions, habit.id, user_id)],
        "partner_completion_dates": [str(d) for d in engine.completion_dates(completions, habit.id, partner_id)]
    }
