"""
Session Store - One HabitSession per signed-in user
Sessions are created on first request, reused while active and dropped after
SESSION_TIMEOUT_MINUTES of inactivity or on sign-out.
"""
from datetime import datetime, timedelta
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from supabase import AsyncClient

from habit_duo.core.config import settings
from habit_duo.services.habits.repository import CompletionsGateway, HabitsGateway
from habit_duo.services.messages.repository import MessagesGateway
from habit_duo.services.users.auth import get_auth_user
from habit_duo.services.users.repository import UsersGateway
from habit_duo.utils.timezone import get_utc_now
from .service import HabitSession

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Optional[str]], Awaitable[AsyncClient]]


def build_session(client: AsyncClient) -> HabitSession:
    """Wire the four gateways around one client"""
    return HabitSession(
        habits=HabitsGateway(client),
        completions=CompletionsGateway(client),
        users=UsersGateway(client, use_relationships=settings.USE_RELATIONSHIPS),
        messages=MessagesGateway(client, ttl_hours=settings.MESSAGE_TTL_HOURS)
    )


class SessionStore:
    """
    In-memory registry of habit sessions keyed by user id

    Args:
        client_factory: Coroutine returning a Supabase client; called with an
            access token to get a client acting as that user, or None for the
            anonymous client used to check tokens
        timeout_minutes: Idle time after which a session is dropped
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        timeout_minutes: int = None,
        session_factory: Callable[[AsyncClient], HabitSession] = build_session
    ):
        self.client_factory = client_factory
        self.timeout = timedelta(minutes=timeout_minutes or settings.SESSION_TIMEOUT_MINUTES)
        self.session_factory = session_factory
        self.sessions: Dict[str, Dict] = {}
        self._creation_locks: Dict[str, asyncio.Lock] = {}
        self._auth_client: Optional[AsyncClient] = None

    async def _get_auth_client(self) -> AsyncClient:
        if self._auth_client is None:
            self._auth_client = await self.client_factory(None)
        return self._auth_client

    async def get_or_create_session(self, access_token: str) -> HabitSession:
        """
        Resolve the token's user and return their session, creating it if needed

        A new session ensures the user's profile exists and loads all data.

        Raises:
            NotAuthenticatedError: If the token does not resolve to a user
            RemoteError: If auth or the profile check fails
        """
        await self.cleanup_expired_sessions()

        auth_user = await get_auth_user(await self._get_auth_client(), access_token)

        entry = self.sessions.get(auth_user.id)
        if entry is not None:
            entry["last_active"] = get_utc_now()
            return entry["session"]

        # Concurrent first requests of one user share a single creation
        lock = self._creation_locks.setdefault(auth_user.id, asyncio.Lock())
        async with lock:
            entry = self.sessions.get(auth_user.id)
            if entry is not None:
                entry["last_active"] = get_utc_now()
                return entry["session"]

            client = await self.client_factory(access_token)
            session = self.session_factory(client)
            await session.users_gateway.ensure_profile(auth_user)
            await session.set_identity(auth_user.id)

            self.sessions[auth_user.id] = {
                "session": session,
                "last_active": get_utc_now()
            }
        logger.info(f"Started session for {auth_user.id}")
        return session

    async def end_session(self, user_id: str) -> bool:
        """
        Close and forget a user's session (sign-out)

        Returns:
            True if a session was open
        """
        entry = self.sessions.pop(user_id, None)
        lock = self._creation_locks.get(user_id)
        if lock is not None and not lock.locked():
            del self._creation_locks[user_id]
        if entry is None:
            return False
        await entry["session"].close()
        logger.info(f"Ended session for {user_id}")
        return True

    async def cleanup_expired_sessions(self, now: datetime = None) -> int:
        """
        Close sessions inactive for longer than the timeout

        Returns:
            Number of sessions removed
        """
        cutoff_time = (now or get_utc_now()) - self.timeout

        expired_users = [
            user_id
            for user_id, entry in self.sessions.items()
            if entry["last_active"] < cutoff_time
        ]

        for user_id in expired_users:
            await self.end_session(user_id)

        return len(expired_users)

    def get_active_session_count(self) -> int:
        return len(self.sessions)

    async def close_all(self) -> None:
        for user_id in list(self.sessions):
            await self.end_session(user_id)
