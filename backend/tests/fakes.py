"""
In-memory stand-ins for the Supabase async client and row builders
"""
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

from habit_duo.services.habits.repository import CompletionsGateway, HabitsGateway
from habit_duo.services.messages.repository import MessagesGateway
from habit_duo.services.session import HabitSession
from habit_duo.services.users.repository import UsersGateway

U1 = "user-1"
U2 = "user-2"
U3 = "user-3"

TIMESTAMPED_TABLES = {"habits", "motivational_messages", "relationships"}


class FakeAuthError(Exception):
    def __init__(self, message, status):
        super().__init__(message)
        self.status = status


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Minimal stand-in for the postgrest query builder, backed by dict rows"""

    def __init__(self, db, table, action, payload=None):
        self.db = db
        self.table = table
        self.action = action
        self.payload = payload
        self.filters = []
        self._order = None
        self._limit = None

    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda r: r.get(column) != value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r.get(column) >= value)
        return self

    def or_(self, expression):
        clauses = []
        for part in expression.split(","):
            column, op, value = part.split(".", 2)
            assert op == "eq"
            clauses.append((column, value))
        self.filters.append(lambda r: any(r.get(c) == v for c, v in clauses))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    async def execute(self):
        self.db.calls.append((self.table, self.action))
        if self.table in self.db.failing:
            raise RuntimeError(f"{self.table} unavailable")

        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "select":
            data = [dict(r) for r in rows if self._matches(r)]
            if self._order:
                column, desc = self._order
                data.sort(key=lambda r: r.get(column) or "", reverse=desc)
            if self._limit is not None:
                data = data[:self._limit]
            return FakeResponse(data)

        if self.action == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for payload in payloads:
                row = dict(payload)
                row.setdefault("id", str(uuid.uuid4()))
                if self.table in TIMESTAMPED_TABLES:
                    now = datetime.now(timezone.utc).isoformat()
                    row.setdefault("created_at", now)
                    row.setdefault("updated_at", now)
                rows.append(row)
                created.append(dict(row))
            return FakeResponse(created)

        if self.action == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return FakeResponse(updated)

        if self.action == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            if self.table == "habits":
                removed_ids = {r["id"] for r in removed}
                self.db.tables["habit_completions"] = [
                    c for c in self.db.tables.get("habit_completions", [])
                    if c["habit_id"] not in removed_ids
                ]
            return FakeResponse([dict(r) for r in removed])

        raise AssertionError(f"Unknown action {self.action}")


class FakeTable:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def select(self, *columns):
        return FakeQuery(self.db, self.name, "select")

    def insert(self, payload):
        return FakeQuery(self.db, self.name, "insert", payload)

    def update(self, payload):
        return FakeQuery(self.db, self.name, "update", payload)

    def delete(self):
        return FakeQuery(self.db, self.name, "delete")


class FakeAuth:
    def __init__(self):
        self.tokens = {}

    async def get_user(self, token):
        if token not in self.tokens:
            raise FakeAuthError("invalid JWT", status=401)
        user_id, email = self.tokens[token]
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=email))


class FakeSupabase:
    """In-memory replacement for the Supabase AsyncClient used by the gateways"""

    def __init__(self, tables=None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.failing = set()
        self.calls = []
        self.auth = FakeAuth()

    def table(self, name):
        return FakeTable(self, name)


def habit_row(id="h1", creator_id=U1, type="personal", recurrence="daily", **overrides):
    row = {
        "id": id,
        "title": f"Habit {id}",
        "description": None,
        "type": type,
        "recurrence": recurrence,
        "recurrence_days": None,
        "visibility": "visible" if type == "personal" else None,
        "completion_requirement": "one" if type == "shared" else None,
        "creator_id": creator_id,
        "created_at": "2024-01-01T08:00:00+00:00",
        "updated_at": "2024-01-01T08:00:00+00:00",
    }
    row.update(overrides)
    return row


def completion_row(habit_id, user_id, day, completed=True, id=None):
    return {
        "id": id or f"c-{habit_id}-{user_id}-{day}",
        "habit_id": habit_id,
        "user_id": user_id,
        "date": day,
        "completed": completed,
    }


def build_test_session(db, today=None, clock=None):
    kwargs = {}
    if today is not None:
        kwargs["today"] = lambda: today
    if clock is not None:
        kwargs["clock"] = clock
    messages = MessagesGateway(db, clock=clock) if clock is not None else MessagesGateway(db)
    return HabitSession(
        habits=HabitsGateway(db),
        completions=CompletionsGateway(db),
        users=UsersGateway(db),
        messages=messages,
        **kwargs
    )


