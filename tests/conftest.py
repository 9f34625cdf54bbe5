from __future__ import annotations

import copy
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Sequence

import pytest

from servicedesk.tickets.models import CreateTicketData
from servicedesk.tickets.repository import TicketRepository
from servicedesk.tickets.store import SEARCH_COLUMNS, TicketStoreError


class InMemoryTicketStore:
    """Dict-backed stand-in for the Postgres store.

    Timestamps come from a clock that advances one second per write so ordering
    is deterministic. Names listed in `fail_on` raise `TicketStoreError`.
    """

    def __init__(self) -> None:
        self.tickets: dict[str, dict[str, Any]] = {}
        self.history: dict[str, dict[str, Any]] = {}
        self.writes: list[str] = []
        self.fail_on: set[str] = set()
        self._now = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        self._in_transaction = False

    def _tick(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise TicketStoreError(f"{operation} failed")

    async def ensure_schema(self) -> None:
        return None

    @asynccontextmanager
    async def transaction(self):
        if self._in_transaction:
            yield
            return
        snapshot = (copy.deepcopy(self.tickets), copy.deepcopy(self.history))
        self._in_transaction = True
        try:
            yield
        except BaseException:
            self.tickets, self.history = snapshot
            raise
        finally:
            self._in_transaction = False

    async def select_tickets(self, *, status: str | None = None, search: str | None = None) -> Sequence[Mapping[str, Any]]:
        self._check("select_tickets")
        rows = list(self.tickets.values())
        if status is not None:
            rows = [row for row in rows if row["status"] == status]
        if search:
            needle = search.casefold()
            rows = [row for row in rows if any(needle in str(row[column]).casefold() for column in SEARCH_COLUMNS)]
        rows.sort(key=lambda row: row["updated_at"], reverse=True)
        return [dict(row) for row in rows]

    async def select_ticket(self, ticket_id: str) -> Mapping[str, Any] | None:
        self._check("select_ticket")
        row = self.tickets.get(ticket_id)
        return dict(row) if row else None

    async def select_history(self, ticket_ids: Sequence[str] | None = None) -> Sequence[Mapping[str, Any]]:
        self._check("select_history")
        rows = [
            row for row in self.history.values() if ticket_ids is None or row["ticket_id"] in set(ticket_ids)
        ]
        rows.sort(key=lambda row: row["timestamp"], reverse=True)
        return [dict(row) for row in rows]

    async def insert_ticket(self, values: Mapping[str, Any]) -> Mapping[str, Any]:
        self._check("insert_ticket")
        now = self._tick()
        row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **values}
        self.tickets[row["id"]] = row
        self.writes.append("insert_ticket")
        return dict(row)

    async def insert_history(self, values: Mapping[str, Any]) -> Mapping[str, Any]:
        self._check("insert_history")
        row = {"id": str(uuid.uuid4()), "timestamp": self._tick(), "status": None, **values}
        self.history[row["id"]] = row
        self.writes.append("insert_history")
        return dict(row)

    async def update_ticket(self, ticket_id: str, values: Mapping[str, Any]) -> Mapping[str, Any] | None:
        self._check("update_ticket")
        row = self.tickets.get(ticket_id)
        if row is None:
            return None
        row.update(values)
        row["updated_at"] = self._tick()
        self.writes.append("update_ticket")
        return dict(row)

    async def delete_ticket(self, ticket_id: str) -> bool:
        self._check("delete_ticket")
        self.writes.append("delete_ticket")
        return self.tickets.pop(ticket_id, None) is not None

    async def delete_history(self, ticket_id: str) -> int:
        self._check("delete_history")
        doomed = [key for key, row in self.history.items() if row["ticket_id"] == ticket_id]
        for key in doomed:
            del self.history[key]
        self.writes.append("delete_history")
        return len(doomed)


@pytest.fixture
def store() -> InMemoryTicketStore:
    return InMemoryTicketStore()


@pytest.fixture
def repository(store: InMemoryTicketStore) -> TicketRepository:
    return TicketRepository(store)


def make_create_data(**overrides: str) -> CreateTicketData:
    values = {
        "customer_name": "Jane Doe",
        "contact_number": "+1 555 0100",
        "product_category": "Printer",
        "product_model": "LX-200",
        "serial_number": "SN123",
        "problem": "Paper jam",
    }
    values.update(overrides)
    return CreateTicketData(**values)


@pytest.fixture
def ticket_data():
    return make_create_data
