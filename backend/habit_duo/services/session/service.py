"""
Habit Session - Per-user aggregator over the gateways and the engine
Constructed when a user's session starts and closed on sign-out.
"""
from datetime import date
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from habit_duo.core.exceptions import (
    HabitPermissionError,
    InvalidHabitDataError,
    NotAuthenticatedError,
    NotFoundError
)
from habit_duo.models.common import LocallyApplied
from habit_duo.models.habit import (
    Habit,
    HabitChanges,
    HabitCompletion,
    HabitDraft,
    HabitType,
    RecurrenceType
)
from habit_duo.models.message import MotivationalMessage
from habit_duo.models.user import User
from habit_duo.services.habits import engine, summary
from habit_duo.services.habits.repository import CompletionsGateway, HabitsGateway
from habit_duo.services.messages.repository import MessagesGateway
from habit_duo.services.users.repository import UsersGateway
from habit_duo.utils.timezone import get_local_today_date, get_utc_now

logger = logging.getLogger(__name__)

SLICES = ("habits", "completions", "users", "messages")


class HabitSession:
    """
    Facade consumed by the routes

    Holds the four gateways, refetches them together when the identity
    changes and exposes the engine bound to the current data and identity.
    Mutations are mirrored locally without re-reading, so derived views may
    be stale until the next refresh.
    """

    def __init__(
        self,
        habits: HabitsGateway,
        completions: CompletionsGateway,
        users: UsersGateway,
        messages: MessagesGateway,
        today: Callable[[], date] = get_local_today_date,
        clock=get_utc_now
    ):
        self.habits_gateway = habits
        self.completions_gateway = completions
        self.users_gateway = users
        self.messages_gateway = messages
        self._today = today
        self._clock = clock

        self._user_id: Optional[str] = None
        self._in_flight = 0
        self.errors: Dict[str, BaseException] = {}

    # ------------------------------------------------------------------
    # identity and loading
    # ------------------------------------------------------------------

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def partner_id(self) -> Optional[str]:
        return self.users_gateway.partner_id

    @property
    def current_user(self) -> Optional[User]:
        return self.users_gateway.current_user

    @property
    def partner(self) -> Optional[User]:
        return self.users_gateway.partner

    @property
    def habits(self) -> List[Habit]:
        return self.habits_gateway.habits

    @property
    def completions(self) -> List[HabitCompletion]:
        return self.completions_gateway.completions

    @property
    def motivational_message(self) -> Optional[MotivationalMessage]:
        """Current message from the partner, unless it has expired since it was fetched"""
        message = self.messages_gateway.current
        if message is None or message.is_expired(self._clock()):
            return None
        return message

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def error(self) -> Optional[BaseException]:
        """First failure of the last refresh, in slice order, or None"""
        for name in SLICES:
            if name in self.errors:
                return self.errors[name]
        return None

    @property
    def failed_slices(self) -> List[str]:
        return [name for name in SLICES if name in self.errors]

    async def set_identity(self, user_id: Optional[str]) -> None:
        """
        Switch the authenticated identity

        A new identity triggers a refresh; None clears every collection.
        """
        if user_id == self._user_id:
            return

        self._user_id = user_id
        if user_id is None:
            self._clear()
            return

        logger.info(f"Identity changed to {user_id}, refreshing")
        await self.refresh()

    async def refresh(self) -> Dict[str, BaseException]:
        """
        Fetch all four collections concurrently

        Every fetch is attempted even if another fails; a failed slice keeps
        its previous contents.

        Returns:
            Mapping of failed slice name to its exception (empty on success)

        Raises:
            NotAuthenticatedError: If there is no identity
        """
        user_id = self._require_user()

        self._in_flight += 1
        try:
            results = await asyncio.gather(
                self.habits_gateway.fetch_all(),
                self.completions_gateway.fetch_all(),
                self.users_gateway.fetch_all(user_id),
                self.messages_gateway.fetch_all(user_id),
                return_exceptions=True
            )
        finally:
            self._in_flight -= 1

        self.errors = {
            name: result
            for name, result in zip(SLICES, results)
            if isinstance(result, BaseException)
        }
        for name, exc in self.errors.items():
            logger.warning(f"Failed to load {name} for {user_id}: {exc}")
        return self.errors

    async def close(self) -> None:
        """Tear down at sign-out"""
        await self.set_identity(None)

    def _clear(self) -> None:
        self.habits_gateway.clear()
        self.completions_gateway.clear()
        self.users_gateway.clear()
        self.messages_gateway.clear()
        self.errors = {}

    def _require_user(self) -> str:
        if self._user_id is None:
            raise NotAuthenticatedError("You must be signed in")
        return self._user_id

    def today(self) -> date:
        return self._today()

    # ------------------------------------------------------------------
    # derived views
    # ------------------------------------------------------------------

    def get_habit(self, habit_id: str) -> Habit:
        """
        Raises:
            NotFoundError: If the habit is unknown or not visible to the user
        """
        habit = self.habits_gateway.get(habit_id)
        if habit is None or not engine.is_listed(habit, self._user_id, self.partner_id):
            raise NotFoundError(f"Habit {habit_id} not found")
        return habit

    def get_habits_for_date(self, day: date) -> List[Habit]:
        return engine.habits_for_date(self.habits, self._user_id, self.partner_id, day)

    def get_habit_completion(self, habit_id: str, day: date) -> bool:
        return engine.completion_status(self.completions, habit_id, self._user_id, day)

    def get_partner_habit_completion(self, habit_id: str, day: date) -> bool:
        return engine.completion_status(self.completions, habit_id, self.partner_id, day)

    def get_personal_habits(self) -> List[Habit]:
        return engine.personal_habits(self.habits, self._user_id)

    def get_shared_habits(self) -> List[Habit]:
        return engine.shared_habits(self.habits, self._user_id)

    def get_visible_partner_habits(self) -> List[Habit]:
        return engine.visible_partner_habits(self.habits, self._user_id, self.partner_id)

    def get_shared_completion(self, habit_id: str, day: date) -> engine.SharedCompletion:
        return engine.shared_completion_display(
            self.get_habit(habit_id), self.completions, self._user_id, self.partner_id, day
        )

    def get_streak(self, habit_id: str, today: Optional[date] = None) -> int:
        return engine.streak(self.completions, habit_id, self._user_id, today or self.today())

    def get_daily_summary(self, day: date) -> Dict[str, Any]:
        return summary.daily_summary(self.habits, self.completions, self._user_id, self.partner_id, day)

    def get_calendar(self, end: date, days: int) -> List[Dict[str, Any]]:
        return summary.calendar_overview(
            self.habits, self.completions, self._user_id, self.partner_id, end, days
        )

    def get_habit_detail(self, habit_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        return summary.habit_detail(
            self.get_habit(habit_id), self.completions, self._user_id, self.partner_id,
            today or self.today()
        )

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    async def add_habit(self, draft: HabitDraft) -> LocallyApplied[Habit]:
        """
        Create a habit owned by the current user

        Raises:
            NotAuthenticatedError: If there is no identity
            RemoteError: If the insert fails
        """
        user_id = self._require_user()
        return await self.habits_gateway.create(draft, creator_id=user_id)

    async def update_habit(self, habit_id: str, changes: HabitChanges) -> LocallyApplied[Habit]:
        """
        Apply a partial update to one of the user's habits

        creator_id and timestamps are never changed by an update.

        Raises:
            NotAuthenticatedError: If there is no identity
            NotFoundError: If the habit is unknown
            HabitPermissionError: If the user did not create the habit
            InvalidHabitDataError: If the merged habit is inconsistent
            RemoteError: If the update fails
        """
        user_id = self._require_user()
        current = self._editable_habit(habit_id, user_id)

        updates = changes.model_dump(exclude_unset=True)
        try:
            merged = Habit.model_validate({**current.model_dump(), **updates})
        except ValidationError as e:
            raise InvalidHabitDataError(f"Invalid habit update: {e}") from e
        self._check_habit(merged)

        return await self.habits_gateway.update(merged)

    async def delete_habit(self, habit_id: str) -> LocallyApplied[str]:
        """
        Delete one of the user's habits and drop its completions locally

        Raises:
            NotAuthenticatedError: If there is no identity
            NotFoundError: If the habit is unknown
            HabitPermissionError: If the user did not create the habit
            RemoteError: If the delete fails
        """
        user_id = self._require_user()
        self._editable_habit(habit_id, user_id)

        result = await self.habits_gateway.delete(habit_id)
        removed = self.completions_gateway.forget_habit(habit_id)
        logger.info(f"Dropped {removed} local completions of habit {habit_id}")
        return result

    async def toggle_habit_completion(self, habit_id: str, day: date) -> LocallyApplied[HabitCompletion]:
        """
        Toggle the current user's completion of a habit on a day

        Raises:
            NotAuthenticatedError: If there is no identity
            NotFoundError: If the habit is unknown or not visible to the user
            RemoteError: If the store write fails
        """
        user_id = self._require_user()
        self.get_habit(habit_id)
        return await self.completions_gateway.toggle(habit_id, day, user_id)

    async def send_motivational_message(self, text: str) -> LocallyApplied[MotivationalMessage]:
        """
        Raises:
            NotAuthenticatedError: If there is no identity
            RemoteError: If the insert fails
        """
        user_id = self._require_user()
        return await self.messages_gateway.send(text, user_id)

    def _editable_habit(self, habit_id: str, user_id: str) -> Habit:
        habit = self.habits_gateway.get(habit_id)
        if habit is None:
            raise NotFoundError(f"Habit {habit_id} not found")
        if not engine.can_edit(habit, user_id):
            raise HabitPermissionError(f"Only the creator can change habit '{habit.title}'")
        return habit

    @staticmethod
    def _check_habit(habit: Habit) -> None:
        if not habit.title or not habit.title.strip():
            raise InvalidHabitDataError("Title must not be empty")
        if habit.recurrence == RecurrenceType.SPECIFIC_DAYS and not habit.recurrence_days:
            raise InvalidHabitDataError("Specific-days habits need at least one weekday")
        if habit.type == HabitType.PERSONAL and habit.visibility is None:
            raise InvalidHabitDataError("Personal habits need a visibility")
        if habit.type == HabitType.SHARED and habit.completion_requirement is None:
            raise InvalidHabitDataError("Shared habits need a completion requirement")
