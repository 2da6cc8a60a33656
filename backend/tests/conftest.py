import os

import pytest

# Set test environment variables before the app modules read them
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("APP_TIMEZONE", "UTC")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fakes import U1, U2, FakeSupabase, completion_row, habit_row  # noqa: E402


@pytest.fixture
def profiles():
    return [{"id": U1, "name": "alex"}, {"id": U2, "name": "sam"}]


@pytest.fixture
def db(profiles):
    """Store with a couple and a few habits"""
    return FakeSupabase({
        "profiles": profiles,
        "relationships": [{"id": "r1", "user_id_1": U1, "user_id_2": U2}],
        "habits": [
            habit_row("own", creator_id=U1),
            habit_row("shared", creator_id=U1, type="shared", completion_requirement="both"),
            habit_row("partner-visible", creator_id=U2),
            habit_row("partner-secret", creator_id=U2, visibility="secret"),
        ],
        "habit_completions": [
            completion_row("own", U1, "2024-01-01"),
            completion_row("shared", U2, "2024-01-01"),
        ],
        "motivational_messages": [],
    })
