# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

FakeSupabase stands in for the Supabase client: an in-memory table
store behind the same query-builder calls the app makes, plus the two
grant-replace functions reached through rpc().
"""

import copy

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch
from typing import Generator

from main import create_app
from dependencies.auth import CurrentUser, get_current_user


# ============================================================
# In-memory Supabase
# ============================================================
class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = None
        self.payload = None
        self.filters = []
        self.orders = []
        self.max_rows = None

    # -- builders ------------------------------------------------
    def select(self, columns="*"):
        self.op = "select"
        self.columns = None if columns.strip() == "*" else [c.strip() for c in columns.split(",")]
        return self

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self

    def update(self, data):
        self.op, self.payload = "update", data
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    # -- execution -----------------------------------------------
    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op))
        if self.table in self.db.failing_tables:
            raise Exception("connection to server was lost")
        if self.op in ("insert", "update") and self.table in self.db.write_errors:
            raise self.db.write_errors[self.table]

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in items:
                row = dict(item)
                pk = self.db.serial_columns.get(self.table)
                if pk and row.get(pk) is None:
                    row[pk] = max([r[pk] for r in rows] or [0]) + 1
                rows.append(row)
                inserted.append(dict(row))
            return FakeResponse(inserted)

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return FakeResponse(updated)

        if self.op == "delete":
            removed = [dict(r) for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse(removed)

        result = [dict(r) for r in rows if self._matches(r)]
        for column, desc in reversed(self.orders):
            result.sort(key=lambda r: r.get(column), reverse=desc)
        if self.max_rows is not None:
            result = result[: self.max_rows]
        if self.columns:
            result = [{c: r.get(c) for c in self.columns} for r in result]
        return FakeResponse(result)


class FakeRpc:
    def __init__(self, db, fn, params):
        self.db, self.fn, self.params = db, fn, params

    def execute(self):
        self.db.calls.append(("rpc", self.fn))
        if self.db.fail_rpc:
            raise Exception("canceling statement due to statement timeout")

        role_id = self.params["p_role_id"]
        grants = self.db.tables.setdefault("role_page_permissions", [])

        if self.fn == "replace_role_page_grants":
            page_id = self.params["p_page_id"]
            keep = [g for g in grants if not (g["role_id"] == role_id and g["page_id"] == page_id)]
            new = [
                {
                    "role_id": role_id,
                    "page_id": page_id,
                    "permission_type": g["permission_type"],
                    "is_granted": bool(g.get("is_granted")),
                }
                for g in self.params["p_grants"]
            ]
        elif self.fn == "replace_role_grants":
            keep = [g for g in grants if g["role_id"] != role_id]
            new = [
                {
                    "role_id": role_id,
                    "page_id": g["page_id"],
                    "permission_type": g["permission_type"],
                    "is_granted": True,
                }
                for g in self.params["p_grants"]
            ]
        else:
            raise Exception(f"function {self.fn} does not exist")

        # composite foreign key onto page_permissions; violation aborts
        # the whole function, leaving the table untouched
        catalog = {
            (c["page_id"], c["permission_type"])
            for c in self.db.tables.get("page_permissions", [])
        }
        for row in new:
            if (row["page_id"], row["permission_type"]) not in catalog:
                raise Exception("violates foreign key constraint")

        self.db.tables["role_page_permissions"] = keep + new
        return FakeResponse(len(new))


class FakeSupabase:
    serial_columns = {"sidebar_pages": "page_id"}

    def __init__(self, tables=None):
        self.tables = copy.deepcopy(tables or {})
        self.failing_tables = set()
        self.write_errors = {}
        self.fail_rpc = False
        self.calls = []

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, fn, params):
        return FakeRpc(self, fn, params)

    def grants_for(self, role_id):
        return sorted(
            (g["page_id"], g["permission_type"], g["is_granted"])
            for g in self.tables.get("role_page_permissions", [])
            if g["role_id"] == role_id
        )


# ============================================================
# Seed data
# ============================================================
def _catalog(page_id, *types):
    return [
        {
            "page_id": page_id,
            "permission_type": t,
            "permission_name": f"{t.capitalize()} page {page_id}",
            "description": None,
        }
        for t in types
    ]


SEED = {
    "sidebar_pages": [
        {"page_id": 1, "page_name": "Dashboard", "page_url": "/dashboard", "page_icon": "home", "display_order": 10, "description": None, "is_active": True},
        {"page_id": 2, "page_name": "Buildings", "page_url": "/buildings", "page_icon": "building", "display_order": 20, "description": None, "is_active": True},
        {"page_id": 3, "page_name": "Tenants", "page_url": "/tenants", "page_icon": "users", "display_order": 30, "description": None, "is_active": True},
        {"page_id": 4, "page_name": "Villas", "page_url": "/villas", "page_icon": "villa", "display_order": 25, "description": None, "is_active": True},
        {"page_id": 5, "page_name": "Permissions", "page_url": "/permissions", "page_icon": "lock", "display_order": 90, "description": None, "is_active": True},
        {"page_id": 6, "page_name": "Reports", "page_url": "/reports", "page_icon": "chart", "display_order": 40, "description": None, "is_active": False},
    ],
    "page_permissions": (
        _catalog(1, "view")
        + _catalog(2, "view", "create", "update", "delete")
        + _catalog(3, "view", "create", "update", "delete", "assign")
        + _catalog(4, "view")
        + _catalog(5, "view", "create", "update", "delete", "assign")
        + _catalog(6, "view")
    ),
    "role_page_permissions": [
        # owner (5)
        {"role_id": 5, "page_id": 2, "permission_type": "view", "is_granted": True},
        {"role_id": 5, "page_id": 3, "permission_type": "view", "is_granted": True},
        {"role_id": 5, "page_id": 4, "permission_type": "view", "is_granted": True},
        # manager (3)
        {"role_id": 3, "page_id": 2, "permission_type": "view", "is_granted": True},
        {"role_id": 3, "page_id": 3, "permission_type": "view", "is_granted": True},
        {"role_id": 3, "page_id": 5, "permission_type": "view", "is_granted": True},
        {"role_id": 3, "page_id": 5, "permission_type": "assign", "is_granted": False},
    ],
    "building_assigned": [{"user_id": 42, "building_id": 7}],
    "villa_assigned": [{"user_id": 42, "villa_id": 300}],
    "buildings": [
        {"building_id": 7, "name": "Harbor View"},
        {"building_id": 9, "name": "Palm Court"},
    ],
    "villas": [
        {"villa_id": 300, "name": "Villa Azure"},
        {"villa_id": 301, "name": "Villa Sol"},
    ],
    "floors": [
        {"floor_id": 70, "building_id": 7},
        {"floor_id": 90, "building_id": 9},
    ],
    "apartments": [
        {"apartment_id": 701, "floor_id": 70, "unit": "7-01"},
        {"apartment_id": 901, "floor_id": 90, "unit": "9-01"},
    ],
    "apartment_assigned": [
        {"tenant_id": 1001, "apartment_id": 701},
        {"tenant_id": 1002, "apartment_id": 901},
    ],
    "tenants": [
        {"tenant_id": 1001, "name": "Kai", "created_by": 1},
        {"tenant_id": 1002, "name": "Leilani", "created_by": 1},
        {"tenant_id": 1003, "name": "Noa", "created_by": 42},
    ],
}


# ============================================================
# Fixtures
# ============================================================
@pytest.fixture
def fake_db():
    """Seeded in-memory store wired in place of the Supabase client."""
    db = FakeSupabase(SEED)
    with patch("core.supabase_client.get_supabase_client", return_value=db):
        yield db


@pytest.fixture
def empty_db():
    db = FakeSupabase()
    with patch("core.supabase_client.get_supabase_client", return_value=db):
        yield db


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides = {}


@pytest.fixture
def login(app):
    """Authenticate the test client as the given user."""
    def _login(user: CurrentUser):
        app.dependency_overrides[get_current_user] = lambda: user
    return _login


@pytest.fixture
def admin_user():
    return CurrentUser(user_id=1, role_id=1, email="admin@example.com")


@pytest.fixture
def owner_user():
    """Owner assigned to building 7 and villa 300 only."""
    return CurrentUser(user_id=42, role_id=5, email="owner@example.com")


@pytest.fixture
def unassigned_owner():
    return CurrentUser(user_id=77, role_id=5, email="new-owner@example.com")


@pytest.fixture
def manager_user():
    return CurrentUser(user_id=3, role_id=3, email="manager@example.com")
