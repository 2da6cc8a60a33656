"""
Pydantic models for users, the couple relationship and auth identities
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """Profile row of one member of the couple"""
    id: str
    name: str


class Relationship(BaseModel):
    """Links the two users of a couple"""
    id: str
    user_id_1: str
    user_id_2: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def other(self, user_id: str) -> Optional[str]:
        """Return the other member of the relationship, or None if user_id is not part of it"""
        if self.user_id_1 == user_id:
            return self.user_id_2
        if self.user_id_2 == user_id:
            return self.user_id_1
        return None


class AuthUser(BaseModel):
    """Identity resolved from an access token"""
    id: str
    email: Optional[str] = Field(None, description="Account email, used to name new profiles")
