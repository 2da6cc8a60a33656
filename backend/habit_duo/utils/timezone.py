"""
Timezone Utilities - Centralized timezone handling
"""
from datetime import date, datetime
import pytz

from habit_duo.core.config import settings


def get_app_tz(name: str = None):
    """
    Get the application timezone object

    Args:
        name: Optional timezone name overriding APP_TIMEZONE

    Returns:
        pytz timezone used to decide calendar days
    """
    return pytz.timezone(name or settings.APP_TIMEZONE)


def get_utc_now() -> datetime:
    """
    Get current datetime in UTC

    Returns:
        Timezone-aware datetime object in UTC
    """
    return datetime.now(pytz.utc)


def get_local_now(name: str = None) -> datetime:
    """
    Get current datetime in the application timezone

    Returns:
        Timezone-aware datetime object
    """
    return datetime.now(get_app_tz(name))


def get_local_today_date(name: str = None) -> date:
    """
    Get today's calendar date in the application timezone

    Returns:
        date object for today
    """
    return get_local_now(name).date()
