"""
Users Repository - Profiles and partner resolution
"""
from typing import List, Optional
import logging

from habit_duo.core.exceptions import RemoteError
from habit_duo.models.user import AuthUser, Relationship, User
from habit_duo.services.gateway import Gateway
from habit_duo.utils.mappers import (
    decode_rows,
    relationship_from_row,
    user_from_row,
    user_to_row
)

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "User"


def default_profile_name(email: Optional[str]) -> str:
    """Display name for a new profile: the email local part, or "User" """
    if email:
        local_part = email.split("@")[0].strip()
        if local_part:
            return local_part
    return DEFAULT_PROFILE_NAME


class UsersGateway(Gateway):
    """
    Profiles of the couple

    Holds the profile list; current_user and partner are looked up in it.
    The partner is the other member of the caller's relationships row when
    one exists, otherwise any other profile the store lets us see.
    """

    table_name = "profiles"

    def __init__(self, client, use_relationships: bool = True):
        super().__init__(client)
        self.use_relationships = use_relationships
        self.users: List[User] = []
        self.current_user: Optional[User] = None
        self.partner: Optional[User] = None

    @property
    def partner_id(self) -> Optional[str]:
        return self.partner.id if self.partner else None

    async def fetch_all(self, user_id: str) -> List[User]:
        """
        Reload profiles and resolve the current user and partner

        A failed relationships lookup falls back to the other profile.

        Raises:
            RemoteError: If the profiles query fails (previous state is kept)
        """
        result = await self._execute(self.table().select("*"), "fetch profiles")
        users = decode_rows(result.data, user_from_row)

        partner_id = None
        if self.use_relationships:
            try:
                partner_id = await self._relationship_partner_id(user_id)
            except RemoteError as e:
                logger.warning(f"Partner lookup failed for {user_id}, using profiles: {e}")

        self.users = users
        self.current_user = next((u for u in users if u.id == user_id), None)
        if partner_id is not None:
            self.partner = next((u for u in users if u.id == partner_id), None)
        else:
            self.partner = next((u for u in users if u.id != user_id), None)
        return self.users

    async def _relationship_partner_id(self, user_id: str) -> Optional[str]:
        query = self.table("relationships").select("*").or_(
            f"user_id_1.eq.{user_id},user_id_2.eq.{user_id}"
        )
        result = await self._execute(query, "fetch relationships")
        for relationship in decode_rows(result.data, relationship_from_row):
            other = relationship.other(user_id)
            if other is not None:
                return other
        return None

    async def ensure_profile(self, auth_user: AuthUser) -> User:
        """
        Create the caller's profile on first sign-in

        Args:
            auth_user: Identity from the auth service

        Returns:
            Existing or newly created profile

        Raises:
            RemoteError: If the lookup or insert fails
        """
        query = self.table().select("*").eq("id", auth_user.id)
        existing = self._first(await self._execute(query, f"check profile {auth_user.id}"))
        if existing is not None:
            return user_from_row(existing)

        logger.info(f"Creating new profile for user {auth_user.id}")
        profile = User(id=auth_user.id, name=default_profile_name(auth_user.email))
        created = self._first(await self._execute(self.table().insert(user_to_row(profile)), "create profile"))
        if created is None:
            raise RemoteError("Failed to create profile: store returned no row")
        return user_from_row(created)

    def clear(self) -> None:
        self.users = []
        self.current_user = None
        self.partner = None
