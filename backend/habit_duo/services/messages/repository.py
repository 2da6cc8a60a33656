"""
Messages Repository - Motivational messages between partners
"""
from datetime import timedelta
from typing import Optional
import logging

from habit_duo.core.exceptions import RemoteError
from habit_duo.models.common import LocallyApplied
from habit_duo.models.message import MotivationalMessage
from habit_duo.services.gateway import Gateway
from habit_duo.utils.mappers import decode_rows, message_from_row, message_to_row
from habit_duo.utils.timezone import get_utc_now

logger = logging.getLogger(__name__)


class MessagesGateway(Gateway):
    """
    Holds at most one current message: the newest unexpired one sent by the partner

    Row-level security already hides the caller's own messages; the sender
    filter is applied here too.
    """

    table_name = "motivational_messages"

    def __init__(self, client, ttl_hours: int = 24, clock=get_utc_now):
        super().__init__(client)
        self.ttl = timedelta(hours=ttl_hours)
        self.clock = clock
        self.current: Optional[MotivationalMessage] = None

    async def fetch_all(self, user_id: str) -> Optional[MotivationalMessage]:
        """
        Load the newest unexpired message addressed to user_id

        Returns:
            The message, or None when there is none (not an error)

        Raises:
            RemoteError: If the query fails (the previous message is kept)
        """
        query = (
            self.table()
            .select("*")
            .gte("expires_at", self.clock().isoformat())
            .neq("sender_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
        )
        result = await self._execute(query, "fetch motivational message")
        messages = decode_rows(result.data, message_from_row)
        self.current = messages[0] if messages else None
        return self.current

    async def send(self, text: str, sender_id: str) -> LocallyApplied[MotivationalMessage]:
        """
        Send a message to the partner; it expires after the TTL

        The local current message is left alone since the sender never sees
        their own messages.

        Raises:
            RemoteError: If the insert fails
        """
        expires_at = self.clock() + self.ttl
        result = await self._execute(
            self.table().insert(message_to_row(text, sender_id, expires_at)),
            "send motivational message"
        )
        created = self._first(result)
        if created is None:
            raise RemoteError("Failed to send motivational message: store returned no row")
        logger.info(f"Motivational message sent by {sender_id}")
        return LocallyApplied[MotivationalMessage](data=message_from_row(created))

    def clear(self) -> None:
        self.current = None
