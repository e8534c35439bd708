"""Shared fixtures: an in-memory fake Supabase client and a wired TestClient."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
import sys
import threading
from typing import Any

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from Accounts import security  # noqa: E402
from Database.deps import get_db  # noqa: E402
from main import create_app  # noqa: E402

UNIQUE_COLUMNS = {"accounts": "email"}
# money columns are NUMERIC(_, 2) in migrations/0001_create_tables.sql
NUMERIC_COLUMNS = {"tickets": ("price",), "purchases": ("price", "total")}


class FakeSupabaseResponse:
    """Minimal Supabase-like response wrapper."""

    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data


def to_column_types(table: str, row: dict[str, Any]) -> dict[str, Any]:
    """Round money columns to the cent, half up, as Postgres NUMERIC does."""

    stored = dict(row)
    for column in NUMERIC_COLUMNS.get(table, ()):
        if stored.get(column) is not None:
            cents = Decimal(str(stored[column])).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            stored[column] = float(cents)
    return stored


def unique_violation(table: str) -> APIError:
    return APIError(
        {
            "message": f'duplicate key value violates unique constraint "{table}_email_key"',
            "code": "23505",
            "hint": None,
            "details": None,
        }
    )


class FakeTable:
    """In-memory table with a Supabase-like interface."""

    def __init__(self, db: "FakeDB", table_name: str) -> None:
        self._db = db
        self._store: list[dict[str, Any]] = db.tables[table_name]
        self._table_name = table_name
        self._action: str | None = None
        self._columns: list[str] | None = None
        self._filters: list[tuple[str, str]] = []
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None
        self._payload: dict[str, Any] | list[dict[str, Any]] | None = None

    def select(self, columns: str = "*") -> "FakeTable":
        self._action = "select"
        if columns.strip() != "*":
            self._columns = [column.strip() for column in columns.split(",")]
        return self

    def insert(self, payload: dict[str, Any] | list[dict[str, Any]]) -> "FakeTable":
        self._action = "insert"
        self._payload = payload
        return self

    def update(self, payload: dict[str, Any]) -> "FakeTable":
        self._action = "update"
        self._payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value: str) -> "FakeTable":
        self._filters.append((column, value))
        return self

    def order(self, column: str, *, desc: bool = False) -> "FakeTable":
        self._order = (column, desc)
        return self

    def limit(self, size: int) -> "FakeTable":
        self._limit = size
        return self

    def _filter_rows(self) -> list[dict[str, Any]]:
        return [
            row
            for row in self._store
            if all(str(row.get(column)) == str(value) for column, value in self._filters)
        ]

    def _project(self, row: dict[str, Any]) -> dict[str, Any]:
        if self._columns is None:
            return dict(row)
        return {column: row.get(column) for column in self._columns}

    def execute(self) -> FakeSupabaseResponse:
        if (self._table_name, self._action) in self._db.failures:
            raise RuntimeError(f"{self._action} on {self._table_name} failed")

        with self._db.lock:
            if self._action == "select":
                rows = self._filter_rows()
                if self._order:
                    column, desc = self._order
                    rows = sorted(rows, key=lambda row: str(row.get(column)), reverse=desc)
                if self._limit is not None:
                    rows = rows[: self._limit]
                data = [self._project(row) for row in rows]
            elif self._action == "insert":
                rows = self._payload if isinstance(self._payload, list) else [self._payload]  # type: ignore[list-item]
                unique_column = UNIQUE_COLUMNS.get(self._table_name)
                if unique_column:
                    for row in rows:
                        if any(str(existing.get(unique_column)) == str(row.get(unique_column)) for existing in self._store):
                            raise unique_violation(self._table_name)
                copies = [to_column_types(self._table_name, row) for row in rows]  # type: ignore[arg-type]
                self._store.extend(copies)
                data = [dict(row) for row in copies]
            elif self._action == "update":
                rows = self._filter_rows()
                for row in rows:
                    row.update(to_column_types(self._table_name, self._payload or {}))  # type: ignore[arg-type]
                data = [dict(row) for row in rows]
            elif self._action == "delete":
                rows = self._filter_rows()
                for row in rows:
                    self._store.remove(row)
                data = rows
            else:
                raise ValueError("Unsupported action for FakeTable.")

        return FakeSupabaseResponse(data)


class FakeRpc:
    """Emulates the reserve/release inventory functions as single atomic updates."""

    def __init__(self, db: "FakeDB", name: str, params: dict[str, Any]) -> None:
        self._db = db
        self._name = name
        self._params = params

    def execute(self) -> FakeSupabaseResponse:
        if self._name in self._db.rpc_failures:
            raise RuntimeError(f"rpc {self._name} failed")

        ticket_id = str(self._params["p_ticket_id"])
        quantity = int(self._params["p_quantity"])
        with self._db.lock:
            self._db.rpc_calls.append((self._name, ticket_id, quantity))
            matches = [row for row in self._db.tables["tickets"] if str(row["id"]) == ticket_id]
            if not matches or quantity <= 0:
                return FakeSupabaseResponse([])
            row = matches[0]
            if self._name == "reserve_ticket_inventory":
                if row["available"] < quantity:
                    return FakeSupabaseResponse([])
                row["available"] -= quantity
                row["sold"] += quantity
            elif self._name == "release_ticket_inventory":
                if row["sold"] < quantity:
                    return FakeSupabaseResponse([])
                row["available"] += quantity
                row["sold"] -= quantity
            else:
                raise ValueError(f"Unknown function {self._name}")
            return FakeSupabaseResponse([dict(row)])


class FakeDB:
    """Simplified Supabase client exposing the table(...) and rpc(...) API."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            "accounts": [],
            "facilities": [],
            "tickets": [],
            "purchases": [],
        }
        self.lock = threading.Lock()
        self.failures: set[tuple[str, str]] = set()
        self.rpc_failures: set[str] = set()
        self.rpc_calls: list[tuple[str, str, int]] = []

    @property
    def accounts(self) -> list[dict[str, Any]]:
        return self.tables["accounts"]

    @property
    def facilities(self) -> list[dict[str, Any]]:
        return self.tables["facilities"]

    @property
    def tickets(self) -> list[dict[str, Any]]:
        return self.tables["tickets"]

    @property
    def purchases(self) -> list[dict[str, Any]]:
        return self.tables["purchases"]

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            raise ValueError(f"Unknown table {name}")
        return FakeTable(self, name)

    def rpc(self, name: str, params: dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, name, params)

    def fail(self, table: str, action: str) -> None:
        self.failures.add((table, action))


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep bcrypt cheap in tests."""

    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


@pytest.fixture()
def fake_db() -> FakeDB:
    return FakeDB()


@pytest.fixture()
def client_and_db(fake_db: FakeDB) -> tuple[TestClient, FakeDB]:
    """Create a TestClient with a fake database dependency override."""

    app = create_app(use_lifespan=False)
    app.dependency_overrides[get_db] = lambda: fake_db  # type: ignore[assignment]
    return TestClient(app), fake_db
