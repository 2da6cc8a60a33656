"""
Gateway base - shared plumbing for the Supabase-backed data gateways
Each gateway owns exactly one cached collection and is its only writer.
"""
import logging

from supabase import AsyncClient

from habit_duo.core.exceptions import RemoteError

logger = logging.getLogger(__name__)


class Gateway:
    """Wraps one table of the remote store"""

    table_name: str = ""

    def __init__(self, client: AsyncClient):
        self.client = client

    def table(self, name: str = None):
        return self.client.table(name or self.table_name)

    async def _execute(self, query, action: str):
        """
        Run a query builder

        Args:
            query: Supabase query builder, ready to execute
            action: Human description used in logs and errors ("fetch habits")

        Returns:
            The API response

        Raises:
            RemoteError: If the request fails for any reason
        """
        try:
            return await query.execute()
        except Exception as e:
            logger.error(f"Database error ({action}): {e}")
            raise RemoteError(f"Failed to {action}: {e}") from e

    @staticmethod
    def _first(response):
        data = getattr(response, "data", None) or []
        return data[0] if data else None
