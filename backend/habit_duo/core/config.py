"""
Application configuration and environment variables
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables"""

    # Database / auth
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")

    # Calendar day boundaries ("today") are computed in this timezone
    APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC")

    # Motivational messages
    MESSAGE_TTL_HOURS: int = int(os.getenv("MESSAGE_TTL_HOURS", "24"))

    # Per-user sessions
    SESSION_TIMEOUT_MINUTES: int = int(os.getenv("SESSION_TIMEOUT_MINUTES", "60"))

    # Resolve the partner through the relationships table before falling back to profiles
    USE_RELATIONSHIPS: bool = _env_bool("USE_RELATIONSHIPS", True)

    # Calendar view
    CALENDAR_DAYS: int = int(os.getenv("CALENDAR_DAYS", "7"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Create a global settings instance
settings = Settings()
