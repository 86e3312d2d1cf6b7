"""
Pytest configuration and fixtures for registry tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from ashes.errors import GatewayUnavailable
from ashes.models.location import Location
from ashes.models.record import StorageRecord
from ashes.services.reconciler import Reconciler


class FakeGateway:
    """
    In-memory stand-in for TableGateway.

    Set `failing` to make every call raise GatewayUnavailable, as an
    unreachable backend would.
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failing = False
        self.calls: list[tuple[str, str]] = []
        self.closed = False
        self._next_id = 100

    def _call(self, op: str, table: str):
        self.calls.append((op, table))
        if self.failing:
            raise GatewayUnavailable("connection refused")

    async def select(self, table, order_by=None, descending=False, filters=None):
        self._call("select", table)
        rows = [dict(r) for r in self.tables.get(table, [])]
        for column, value in (filters or {}).items():
            rows = [r for r in rows if str(r.get(column)) == value]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or "", reverse=descending)
        return rows

    async def insert(self, table, rows):
        self._call("insert", table)
        stored = []
        for row in rows:
            self._next_id += 1
            new = {"id": str(self._next_id), "created_at": f"2025-01-01T00:00:{self._next_id % 60:02d}Z", **row}
            self.tables.setdefault(table, []).append(new)
            stored.append(dict(new))
        return stored

    async def update(self, table, row_id, fields):
        self._call("update", table)
        for row in self.tables.get(table, []):
            if row["id"] == row_id:
                row.update(fields)
                return [dict(row)]
        return []

    async def delete(self, table, row_id):
        self._call("delete", table)
        self.tables[table] = [r for r in self.tables.get(table, []) if r["id"] != row_id]

    async def close(self):
        self.closed = True


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def reconciler(gateway):
    return Reconciler(gateway)


@pytest.fixture
def make_record():
    """Factory for StorageRecord with sensible defaults."""

    def _make(id: str, **fields) -> StorageRecord:
        values = {
            "storage_number": f"S-{id}",
            "deceased_name": f"Person {id}",
            "created_at": "2024-06-01T00:00:00Z",
        }
        values.update(fields)
        return StorageRecord(id=id, **values)

    return _make


@pytest.fixture
def make_location():
    def _make(id: str, name: str, description: str | None = None) -> Location:
        return Location(id=id, name=name, description=description, created_at="2024-06-01T00:00:00Z")

    return _make
