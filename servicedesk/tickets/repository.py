from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from .models import (
    CREATED_ACTION,
    CREATED_DESCRIPTION,
    DEFAULT_UPDATE_DESCRIPTION,
    UPDATED_ACTION,
    CreateTicketData,
    Ticket,
    TicketHistoryEntry,
    status_changed_action,
)
from .search import filter_tickets
from .state import TicketStatus, parse_status_filter
from .store import TicketStore, TicketStoreError

logger = logging.getLogger(__name__)


class TicketServiceError(RuntimeError):
    """Base error for ticket repository issues."""


class TicketNotFoundError(TicketServiceError):
    """Raised when an update targets a non-existent ticket."""


class TicketUpdateNoOpError(TicketServiceError):
    """Raised when an update carries neither a status change nor a note."""


class TicketRepository:
    """Reads and mutates tickets, hiding the two-table layout from callers.

    Every write that touches both `tickets` and `ticket_history` runs inside a
    single store transaction, so a failed history insert never leaves a ticket
    row behind.
    """

    def __init__(self, store: TicketStore) -> None:
        self._store = store

    async def ensure_schema(self) -> None:
        await self._store.ensure_schema()

    async def list_all(self) -> list[Ticket]:
        try:
            ticket_rows = await self._store.select_tickets()
            history_rows = await self._store.select_history()
        except TicketStoreError:
            logger.exception("Error fetching tickets")
            raise
        return self._join(ticket_rows, history_rows)

    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        try:
            row = await self._store.select_ticket(ticket_id)
            if row is None:
                return None
            history_rows = await self._store.select_history([str(row["id"])])
        except TicketStoreError:
            logger.exception("Error fetching ticket %s", ticket_id)
            raise
        return self._row_to_ticket(row, [self._row_to_history(item) for item in history_rows])

    async def search(self, query: str) -> list[Ticket]:
        return await self.search_and_filter(query, None)

    async def list_by_status(self, status: TicketStatus | str | None) -> list[Ticket]:
        return await self.search_and_filter("", status)

    async def search_and_filter(self, query: str, status: TicketStatus | str | None) -> list[Ticket]:
        status_filter = parse_status_filter(status)
        text = (query or "").strip()
        try:
            ticket_rows = await self._store.select_tickets(
                status=status_filter.value if status_filter else None,
                search=text or None,
            )
            ids = [str(row["id"]) for row in ticket_rows]
            history_rows = await self._store.select_history(ids) if ids else []
        except TicketStoreError:
            logger.exception("Error searching tickets (query=%r, status=%s)", text, status)
            raise
        tickets = self._join(ticket_rows, history_rows)
        return filter_tickets(tickets, text, status_filter)

    async def create(self, data: CreateTicketData) -> Ticket:
        values = {
            "customer_name": data.customer_name,
            "contact_number": data.contact_number,
            "product_category": data.product_category,
            "product_model": data.product_model,
            "serial_number": data.serial_number,
            "problem": data.problem,
            "status": TicketStatus.OPEN.value,
        }
        try:
            async with self._store.transaction():
                ticket_row = await self._store.insert_ticket(values)
                history_row = await self._store.insert_history(
                    {
                        "ticket_id": str(ticket_row["id"]),
                        "action": CREATED_ACTION,
                        "description": CREATED_DESCRIPTION,
                        "status": TicketStatus.OPEN.value,
                    }
                )
        except TicketStoreError:
            logger.exception("Error creating ticket")
            raise

        ticket = self._row_to_ticket(ticket_row, [self._row_to_history(history_row)])
        logger.info("Created ticket %s", ticket.short_id)
        return ticket

    async def update(
        self,
        ticket_id: str,
        *,
        status: TicketStatus | str | None = None,
        note: str | None = None,
    ) -> Ticket:
        new_status = TicketStatus(status) if status is not None else None
        cleaned_note = (note or "").strip()
        if new_status is None and not cleaned_note:
            raise TicketUpdateNoOpError("Add a note or change the status to update the ticket")

        current = await self.get_by_id(ticket_id)
        if current is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")

        status_changed = new_status is not None and new_status != current.status
        if not status_changed and not cleaned_note:
            raise TicketUpdateNoOpError("Add a note or change the status to update the ticket")

        action = status_changed_action(new_status) if status_changed else UPDATED_ACTION
        description = cleaned_note or DEFAULT_UPDATE_DESCRIPTION

        updated_row: Mapping[str, Any] | None = None
        try:
            async with self._store.transaction():
                if status_changed:
                    updated_row = await self._store.update_ticket(current.id, {"status": new_status.value})
                    if updated_row is None:
                        raise TicketNotFoundError(f"Ticket {ticket_id} not found")
                history_row = await self._store.insert_history(
                    {
                        "ticket_id": current.id,
                        "action": action,
                        "description": description,
                        "status": new_status.value if status_changed else None,
                    }
                )
        except TicketStoreError:
            logger.exception("Error updating ticket %s", ticket_id)
            raise

        entry = self._row_to_history(history_row)
        history = [entry, *current.history]
        if updated_row is not None:
            ticket = self._row_to_ticket(updated_row, history)
        else:
            ticket = current
            ticket.history = history
        logger.info("Updated ticket %s: %s", ticket.short_id, action)
        return ticket

    async def delete_ticket(self, ticket_id: str) -> bool:
        try:
            async with self._store.transaction():
                await self._store.delete_history(ticket_id)
                deleted = await self._store.delete_ticket(ticket_id)
        except TicketStoreError:
            logger.exception("Error deleting ticket %s", ticket_id)
            raise
        if deleted:
            logger.info("Deleted ticket %s", ticket_id)
        return deleted

    def _join(self, ticket_rows: Sequence[Mapping[str, Any]], history_rows: Sequence[Mapping[str, Any]]) -> list[Ticket]:
        history_by_ticket: dict[str, list[TicketHistoryEntry]] = {}
        for row in history_rows:
            history_by_ticket.setdefault(str(row["ticket_id"]), []).append(self._row_to_history(row))
        return [
            self._row_to_ticket(row, history_by_ticket.get(str(row["id"]), []))
            for row in ticket_rows
        ]

    @staticmethod
    def _row_to_ticket(row: Mapping[str, Any], history: Sequence[TicketHistoryEntry]) -> Ticket:
        ordered = sorted(history, key=lambda entry: entry.timestamp, reverse=True)
        return Ticket(
            id=str(row["id"]),
            created_at=_ensure_datetime(row["created_at"]),
            updated_at=_ensure_datetime(row["updated_at"]),
            customer_name=str(row["customer_name"]),
            contact_number=str(row["contact_number"]),
            product_category=str(row["product_category"]),
            product_model=str(row["product_model"]),
            serial_number=str(row["serial_number"]),
            problem=str(row["problem"]),
            status=TicketStatus(row["status"]),
            history=ordered,
        )

    @staticmethod
    def _row_to_history(row: Mapping[str, Any]) -> TicketHistoryEntry:
        status = row["status"]
        return TicketHistoryEntry(
            id=str(row["id"]),
            timestamp=_ensure_datetime(row["timestamp"]),
            action=str(row["action"]),
            description=str(row["description"]),
            status=TicketStatus(status) if status else None,
        )


def _ensure_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime.fromisoformat(str(value))
