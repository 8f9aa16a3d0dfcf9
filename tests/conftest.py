"""Test configuration: an in-memory stand-in for the Supabase client and an API client wired to it."""

import os
import re
import uuid
from types import SimpleNamespace

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest

from filmroom.modules.auth.service import clear_auth_cache


# ---------------------------------------------------------------------------
# Fake Supabase
# ---------------------------------------------------------------------------

def _like(pattern: str):
    parts = [re.escape(p) for p in pattern.split("%")]
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE)


def _compare(op, left, right):
    if left is None:
        return False
    return op(left, right)


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.order_by = []
        self.limit_count = None
        self.offset_count = 0

    # actions
    def select(self, columns="*", count=None):
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict="id"):
        self.action = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    # filters
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: _compare(lambda a, b: a >= b, row.get(column), value))
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: _compare(lambda a, b: a <= b, row.get(column), value))
        return self

    def gt(self, column, value):
        self.filters.append(lambda row: _compare(lambda a, b: a > b, row.get(column), value))
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: _compare(lambda a, b: a < b, row.get(column), value))
        return self

    def ilike(self, column, pattern):
        regex = _like(pattern)
        self.filters.append(lambda row: row.get(column) is not None and bool(regex.match(str(row.get(column)))))
        return self

    def is_(self, column, value):
        expected = None if value in ("null", None) else value
        self.filters.append(lambda row: row.get(column) is expected)
        return self

    def order(self, column, desc=False):
        self.order_by.append((column, desc))
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def offset(self, count):
        self.offset_count = count
        return self

    def _matching(self):
        rows = self.db.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(f(row) for f in self.filters)]

    def execute(self):
        rows = self.db.tables.setdefault(self.table_name, [])
        if self.action in ("insert", "upsert"):
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            written = []
            for item in payload:
                item = dict(item)
                existing = None
                if self.action == "upsert":
                    key = self.on_conflict
                    existing = next((r for r in rows if key in item and r.get(key) == item[key]), None)
                if existing is not None:
                    existing.update(item)
                    written.append(dict(existing))
                    continue
                item.setdefault("id", str(uuid.uuid4()))
                rows.append(item)
                written.append(dict(item))
            return SimpleNamespace(data=written, count=len(written))

        matched = self._matching()
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in matched], count=len(matched))
        if self.action == "delete":
            self.db.tables[self.table_name] = [r for r in rows if r not in matched]
            return SimpleNamespace(data=[dict(r) for r in matched], count=len(matched))

        for column, desc in reversed(self.order_by):
            matched.sort(key=lambda r: (r.get(column) is None, r.get(column) or 0), reverse=desc)
        matched = matched[self.offset_count:]
        if self.limit_count is not None:
            matched = matched[:self.limit_count]
        return SimpleNamespace(data=[dict(r) for r in matched], count=len(matched))


class FakeBucket:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def upload(self, path, content, file_options=None):
        self.db.storage_objects[f"{self.name}/{path}"] = content
        return SimpleNamespace(path=path)

    def remove(self, paths):
        for path in paths:
            self.db.storage_objects.pop(f"{self.name}/{path}", None)
        return [{"name": p} for p in paths]


class FakeAuth:
    def __init__(self, db):
        self.db = db

    def get_user(self, jwt=None):
        user = self.db.auth_users.get(jwt)
        if user is None:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(**user))


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.rpc_results = {}
        self.storage_objects = {}
        self.auth_users = {}
        self.auth = FakeAuth(self)
        self.storage = SimpleNamespace(from_=lambda bucket: FakeBucket(self, bucket))

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        result = self.rpc_results.get(name)
        return SimpleNamespace(execute=lambda: SimpleNamespace(data=result))

    def seed(self, table, *rows):
        stored = self.tables.setdefault(table, [])
        for row in rows:
            row = dict(row)
            row.setdefault("id", str(uuid.uuid4()))
            stored.append(row)
        return rows

    def rows(self, table, **match):
        return [r for r in self.tables.get(table, []) if all(r.get(k) == v for k, v in match.items())]


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def coach():
    return {"id": "user-coach", "email": "coach@example.com", "app_metadata": {}, "user_metadata": {}}


@pytest.fixture
def team(supabase, coach):
    """A team owned by the coach on an active basic plan with one team and one opponent upload token."""
    supabase.seed("teams", {"id": "team-1", "name": "Wildcats", "user_id": coach["id"]})
    supabase.seed("subscriptions", {"team_id": "team-1", "tier": "basic", "status": "active", "billing_waived": False})
    supabase.seed("token_balance", {
        "team_id": "team-1",
        "subscription_tokens_available": 2,
        "purchased_tokens_available": 0,
        "subscription_tokens_used_this_period": 0,
        "team_subscription_tokens_available": 1,
        "team_subscription_tokens_used_this_period": 0,
        "team_purchased_tokens_available": 0,
        "opponent_subscription_tokens_available": 1,
        "opponent_subscription_tokens_used_this_period": 0,
        "opponent_purchased_tokens_available": 0,
    })
    from filmroom.config.tier_config import DEFAULT_TIER_CONFIGS
    supabase.seed("tier_config", *DEFAULT_TIER_CONFIGS)
    return supabase.rows("teams", id="team-1")[0]


@pytest.fixture
def client(supabase, coach):
    from fastapi.testclient import TestClient
    from filmroom.core.dependencies import get_current_user_id
    from filmroom.database.supabase_client import get_service_supabase, get_supabase
    from filmroom.main import app

    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_service_supabase] = lambda: supabase
    app.dependency_overrides[get_current_user_id] = lambda: coach
    yield TestClient(app)
    app.dependency_overrides.clear()
    clear_auth_cache()
