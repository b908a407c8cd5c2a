"""Shared fixtures: an in-memory stand-in for the hosted books table."""

from __future__ import annotations

import itertools

import pytest

from prolibrary.core.catalog import CatalogController
from prolibrary.core.config import Settings
from prolibrary.core.store import RemoteTableError

TEST_COVER = "https://covers.example/placeholder.jpg"


class FakeTable:
    """Rows kept in memory; ids and timestamps assigned like the server does."""

    def __init__(self, rows: list[dict] | None = None) -> None:
        self.rows: list[dict] = list(rows or [])
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self._ids = itertools.count(100)
        self._clock = itertools.count(1)

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise RemoteTableError(f"{op} failed", status_code=500)

    async def list(self, order_by: str = "created_at", descending: bool = True) -> list[dict]:
        self.calls.append(("list", order_by, descending))
        self._maybe_fail("list")
        rows = sorted(self.rows, key=lambda r: r[order_by], reverse=descending)
        return [dict(r) for r in rows]

    async def insert(self, row: dict) -> None:
        self.calls.append(("insert", dict(row)))
        self._maybe_fail("insert")
        stored = {"isbn": None, "cover_url": None, "status": "available", **row}
        stored["id"] = next(self._ids)
        stored["created_at"] = f"2024-01-01T00:00:{next(self._clock):02d}"
        self.rows.append(stored)

    async def update(self, match: dict, patch: dict) -> None:
        self.calls.append(("update", dict(match), dict(patch)))
        self._maybe_fail("update")
        for row in self.rows:
            if all(str(row[k]) == str(v) for k, v in match.items()):
                row.update(patch)

    async def delete(self, match: dict) -> None:
        self.calls.append(("delete", dict(match)))
        self._maybe_fail("delete")
        self.rows = [
            r for r in self.rows if not all(str(r[k]) == str(v) for k, v in match.items())
        ]

    def ops(self) -> list[str]:
        return [call[0] for call in self.calls]


def make_row(id, title, author, status="available", created_at="2024-01-01T00:00:00", **extra):
    return {
        "id": id,
        "title": title,
        "author": author,
        "isbn": extra.get("isbn"),
        "cover_url": extra.get("cover_url"),
        "status": status,
        "created_at": created_at,
    }


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://db.example",
        supabase_key="test-key",
        default_cover_url=TEST_COVER,
    )


@pytest.fixture
def table():
    return FakeTable(
        [
            make_row(7, "Dune", "Frank Herbert", created_at="2023-05-01T10:00:00"),
            make_row(8, "1984", "George Orwell", status="borrowed", created_at="2023-06-01T10:00:00"),
        ]
    )


@pytest.fixture
def controller(table, settings):
    return CatalogController(table, settings)
