"""
Tests for the Supabase gateways against the in-memory store
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from habit_duo.core.exceptions import RemoteError
from habit_duo.models.habit import HabitDraft, HabitType, RecurrenceType
from habit_duo.models.user import AuthUser
from habit_duo.services.habits.repository import CompletionsGateway, HabitsGateway
from habit_duo.services.messages.repository import MessagesGateway
from habit_duo.services.users.repository import UsersGateway, default_profile_name

from fakes import U1, U2, U3, FakeSupabase, habit_row

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


class TestHabitsGateway:

    @pytest.mark.asyncio
    async def test_fetch_all_replaces_cache(self, db):
        gateway = HabitsGateway(db)
        habits = await gateway.fetch_all()
        assert [h.id for h in habits] == ["own", "shared", "partner-visible", "partner-secret"]

        db.tables["habits"] = [habit_row("only")]
        await gateway.fetch_all()
        assert [h.id for h in gateway.habits] == ["only"]

    @pytest.mark.asyncio
    async def test_fetch_failure_keeps_previous_cache(self, db):
        gateway = HabitsGateway(db)
        await gateway.fetch_all()

        db.failing.add("habits")
        with pytest.raises(RemoteError):
            await gateway.fetch_all()
        assert len(gateway.habits) == 4

    @pytest.mark.asyncio
    async def test_create_appends_server_row(self, db):
        gateway = HabitsGateway(db)
        await gateway.fetch_all()

        result = await gateway.create(HabitDraft(title="Stretch", type=HabitType.PERSONAL), creator_id=U1)

        assert result.verified is False
        assert result.data.id
        assert result.data.created_at is not None
        assert result.data.creator_id == U1
        assert gateway.habits[-1] == result.data
        assert db.tables["habits"][-1]["title"] == "Stretch"

    @pytest.mark.asyncio
    async def test_create_failure_leaves_cache(self, db):
        gateway = HabitsGateway(db)
        db.failing.add("habits")
        with pytest.raises(RemoteError):
            await gateway.create(HabitDraft(title="Stretch", type=HabitType.PERSONAL), creator_id=U1)
        assert gateway.habits == []

    @pytest.mark.asyncio
    async def test_update_uses_client_value(self, db):
        gateway = HabitsGateway(db)
        await gateway.fetch_all()
        changed = gateway.get("own").model_copy(update={
            "title": "Run 5k",
            "recurrence": RecurrenceType.SPECIFIC_DAYS,
            "recurrence_days": [2, 4],
        })

        result = await gateway.update(changed)

        assert result.data == changed
        assert gateway.get("own").title == "Run 5k"
        stored = db.tables["habits"][0]
        assert stored["title"] == "Run 5k"
        assert stored["recurrence_days"] == [2, 4]
        # not re-read: the store's updated_at is whatever the client had
        assert gateway.get("own").updated_at == changed.updated_at

    @pytest.mark.asyncio
    async def test_delete(self, db):
        gateway = HabitsGateway(db)
        await gateway.fetch_all()

        await gateway.delete("own")

        assert gateway.get("own") is None
        assert all(r["id"] != "own" for r in db.tables["habits"])


class TestCompletionsGateway:

    @pytest.mark.asyncio
    async def test_first_toggle_creates_completed_row(self, db):
        gateway = CompletionsGateway(db)
        await gateway.fetch_all()

        result = await gateway.toggle("own", date(2024, 1, 2), U1)

        assert result.data.completed is True
        assert result.data.date == date(2024, 1, 2)
        assert len(db.tables["habit_completions"]) == 3

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_state(self, db):
        gateway = CompletionsGateway(db)
        await gateway.fetch_all()
        day = date(2024, 1, 1)

        first = await gateway.toggle("own", day, U1)
        second = await gateway.toggle("own", day, U1)

        assert first.data.completed is False
        assert second.data.completed is True
        rows = [r for r in db.tables["habit_completions"] if r["habit_id"] == "own" and r["user_id"] == U1]
        assert len(rows) == 1
        assert rows[0]["completed"] is True

    @pytest.mark.asyncio
    async def test_new_row_toggles_in_place(self, db):
        gateway = CompletionsGateway(db)
        day = date(2024, 2, 1)

        await gateway.toggle("shared", day, U1)
        await gateway.toggle("shared", day, U1)

        matching = [c for c in gateway.completions if c.habit_id == "shared" and c.date == day]
        assert len(matching) == 1
        assert matching[0].completed is False

    @pytest.mark.asyncio
    async def test_toggle_failure_leaves_local_state(self, db):
        gateway = CompletionsGateway(db)
        await gateway.fetch_all()
        db.failing.add("habit_completions")

        with pytest.raises(RemoteError):
            await gateway.toggle("own", date(2024, 1, 1), U1)
        assert gateway.completions[0].completed is True

    @pytest.mark.asyncio
    async def test_forget_habit(self, db):
        gateway = CompletionsGateway(db)
        await gateway.fetch_all()
        await gateway.toggle("own", date(2024, 1, 2), U1)

        assert gateway.forget_habit("own") == 2
        assert [c.habit_id for c in gateway.completions] == ["shared"]


class TestUsersGateway:

    @pytest.mark.asyncio
    async def test_partner_from_relationship(self, db):
        db.tables["profiles"].append({"id": U3, "name": "kim"})
        db.tables["profiles"].insert(0, db.tables["profiles"].pop())
        gateway = UsersGateway(db)

        await gateway.fetch_all(U1)

        assert gateway.current_user.name == "alex"
        assert gateway.partner_id == U2

    @pytest.mark.asyncio
    async def test_partner_falls_back_to_other_profile(self, db):
        db.tables["relationships"] = []
        gateway = UsersGateway(db)

        await gateway.fetch_all(U2)

        assert gateway.current_user.id == U2
        assert gateway.partner_id == U1

    @pytest.mark.asyncio
    async def test_relationships_failure_keeps_profiles(self, db):
        db.failing.add("relationships")
        gateway = UsersGateway(db)

        await gateway.fetch_all(U1)

        assert gateway.current_user.name == "alex"
        assert gateway.partner_id == U2
        assert len(gateway.users) == 2

    @pytest.mark.asyncio
    async def test_relationships_disabled(self, db):
        gateway = UsersGateway(db, use_relationships=False)
        await gateway.fetch_all(U1)
        assert gateway.partner_id == U2
        assert ("relationships", "select") not in db.calls

    @pytest.mark.asyncio
    async def test_no_partner_yet(self):
        db = FakeSupabase({"profiles": [{"id": U1, "name": "alex"}], "relationships": []})
        gateway = UsersGateway(db)

        await gateway.fetch_all(U1)

        assert gateway.partner is None
        assert gateway.partner_id is None

    @pytest.mark.asyncio
    async def test_ensure_profile_creates_from_email(self):
        db = FakeSupabase({"profiles": []})
        gateway = UsersGateway(db)

        user = await gateway.ensure_profile(AuthUser(id=U3, email="kim.lee@example.com"))

        assert user.name == "kim.lee"
        assert db.tables["profiles"] == [{"id": U3, "name": "kim.lee"}]

    @pytest.mark.asyncio
    async def test_ensure_profile_keeps_existing(self, db):
        gateway = UsersGateway(db)

        user = await gateway.ensure_profile(AuthUser(id=U1, email="someone@example.com"))

        assert user.name == "alex"
        assert len(db.tables["profiles"]) == 2

    def test_default_profile_name(self):
        assert default_profile_name("alex@example.com") == "alex"
        assert default_profile_name(None) == "User"
        assert default_profile_name("@example.com") == "User"


class TestMessagesGateway:

    def _message(self, id, sender_id, created_hours_ago, ttl_hours=24):
        created = NOW - timedelta(hours=created_hours_ago)
        return {
            "id": id,
            "text": f"message {id}",
            "sender_id": sender_id,
            "created_at": created.isoformat(),
            "expires_at": (created + timedelta(hours=ttl_hours)).isoformat(),
        }

    @pytest.mark.asyncio
    async def test_no_message_is_empty_state(self, db):
        gateway = MessagesGateway(db, clock=lambda: NOW)
        assert await gateway.fetch_all(U1) is None
        assert gateway.current is None

    @pytest.mark.asyncio
    async def test_newest_unexpired_partner_message(self, db):
        db.tables["motivational_messages"] = [
            self._message("old", U2, created_hours_ago=30),
            self._message("older", U2, created_hours_ago=5),
            self._message("newest", U2, created_hours_ago=1),
            self._message("mine", U1, created_hours_ago=0),
        ]
        gateway = MessagesGateway(db, clock=lambda: NOW)

        message = await gateway.fetch_all(U1)

        assert message.id == "newest"
        assert message.sender_id == U2

    @pytest.mark.asyncio
    async def test_fetch_failure_raises(self, db):
        db.failing.add("motivational_messages")
        gateway = MessagesGateway(db, clock=lambda: NOW)
        with pytest.raises(RemoteError):
            await gateway.fetch_all(U1)

    @pytest.mark.asyncio
    async def test_send_sets_expiry_and_keeps_local_message(self, db):
        gateway = MessagesGateway(db, ttl_hours=24, clock=lambda: NOW)

        result = await gateway.send("Keep going!", U1)

        assert gateway.current is None
        assert result.data.text == "Keep going!"
        assert result.data.expires_at == NOW + timedelta(hours=24)
        assert db.tables["motivational_messages"][0]["sender_id"] == U1
