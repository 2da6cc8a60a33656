"""
Habits Repository - Gateways for the habits and habit_completions tables
Each gateway keeps a local cache that mirrors successful remote writes.
"""
from datetime import date
from typing import List, Optional
import logging

from habit_duo.core.exceptions import RemoteError
from habit_duo.models.common import LocallyApplied
from habit_duo.models.habit import Habit, HabitCompletion, HabitDraft
from habit_duo.services.gateway import Gateway
from habit_duo.utils.mappers import (
    completion_from_row,
    completion_to_row,
    decode_rows,
    habit_from_row,
    habit_to_row
)
from . import engine

logger = logging.getLogger(__name__)


# ============================================================================
# HABITS TABLE
# ============================================================================

class HabitsGateway(Gateway):
    """CRUD over the habits table with a local list of Habit"""

    table_name = "habits"

    def __init__(self, client):
        super().__init__(client)
        self.habits: List[Habit] = []

    async def fetch_all(self) -> List[Habit]:
        """
        Replace the local list with every habit the store returns

        Raises:
            RemoteError: If the query fails (the previous list is kept)
        """
        result = await self._execute(self.table().select("*"), "fetch habits")
        self.habits = decode_rows(result.data, habit_from_row)
        return self.habits

    def get(self, habit_id: str) -> Optional[Habit]:
        for habit in self.habits:
            if habit.id == habit_id:
                return habit
        return None

    async def create(self, draft: HabitDraft, creator_id: str) -> LocallyApplied[Habit]:
        """
        Insert a habit and append the row the store returned

        Raises:
            RemoteError: If the insert fails or returns no row
        """
        row = habit_to_row(draft, creator_id=creator_id)
        result = await self._execute(self.table().insert(row), "create habit")
        created = self._first(result)
        if created is None:
            raise RemoteError("Failed to create habit: store returned no row")

        habit = habit_from_row(created)
        self.habits = [*self.habits, habit]
        logger.info(f"Created habit {habit.id} '{habit.title}'")
        return LocallyApplied[Habit](data=habit)

    async def update(self, habit: Habit) -> LocallyApplied[Habit]:
        """
        Update a habit by id and replace the local entry with the given value

        The entry is not re-read, so server-side changes only show up after
        the next fetch_all.
        """
        query = self.table().update(habit_to_row(habit)).eq("id", habit.id)
        await self._execute(query, f"update habit {habit.id}")
        self.habits = [habit if h.id == habit.id else h for h in self.habits]
        return LocallyApplied[Habit](data=habit)

    async def delete(self, habit_id: str) -> LocallyApplied[str]:
        """Delete a habit by id and drop it from the local list"""
        await self._execute(self.table().delete().eq("id", habit_id), f"delete habit {habit_id}")
        self.habits = [h for h in self.habits if h.id != habit_id]
        logger.info(f"Deleted habit {habit_id}")
        return LocallyApplied[str](data=habit_id)

    def clear(self) -> None:
        self.habits = []


# ============================================================================
# HABIT_COMPLETIONS TABLE
# ============================================================================

class CompletionsGateway(Gateway):
    """Completion rows; created lazily on the first toggle, flipped afterwards"""

    table_name = "habit_completions"

    def __init__(self, client):
        super().__init__(client)
        self.completions: List[HabitCompletion] = []

    async def fetch_all(self) -> List[HabitCompletion]:
        """
        Replace the local list with every completion the store returns

        Raises:
            RemoteError: If the query fails (the previous list is kept)
        """
        result = await self._execute(self.table().select("*"), "fetch completions")
        self.completions = decode_rows(result.data, completion_from_row)
        return self.completions

    async def toggle(self, habit_id: str, day: date, user_id: str) -> LocallyApplied[HabitCompletion]:
        """
        Flip the completion of (habit, user, day)

        Creates the row as completed when none exists locally, otherwise
        negates the existing row.

        Raises:
            RemoteError: If the insert/update fails; the local list is unchanged
        """
        existing = engine.find_completion(self.completions, habit_id, user_id, day)
        completed = engine.toggled_value(existing)

        if existing is not None:
            query = self.table().update({"completed": completed}).eq("id", existing.id)
            await self._execute(query, f"toggle completion {existing.id}")
            toggled = existing.model_copy(update={"completed": completed})
            self.completions = [toggled if c.id == existing.id else c for c in self.completions]
            return LocallyApplied[HabitCompletion](data=toggled)

        row = completion_to_row(habit_id, user_id, day, completed)
        result = await self._execute(self.table().insert(row), f"create completion for habit {habit_id}")
        created = self._first(result)
        if created is None:
            raise RemoteError("Failed to create completion: store returned no row")

        completion = completion_from_row(created)
        self.completions = [*self.completions, completion]
        return LocallyApplied[HabitCompletion](data=completion)

    def forget_habit(self, habit_id: str) -> int:
        """
        Drop every local completion of a deleted habit

        The store removes the rows itself when the habit is deleted.

        Returns:
            Number of completions removed
        """
        before = len(self.completions)
        self.completions = [c for c in self.completions if c.habit_id != habit_id]
        return before - len(self.completions)

    def clear(self) -> None:
        self.completions = []
