"""
Pydantic models for motivational messages
"""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class MotivationalMessage(BaseModel):
    """Short-lived note from one partner to the other"""
    id: str
    text: str
    sender_id: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """True once now has reached expires_at"""
        return now >= self.expires_at


class SendMessageRequest(BaseModel):
    """Request model for sending a motivational message"""
    text: str = Field(..., min_length=1, max_length=500, description="Message text")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message must not be empty")
        return v.strip()
