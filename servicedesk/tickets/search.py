from __future__ import annotations

from typing import Iterable

from .models import Ticket
from .state import TicketStatus

SEARCH_FIELDS: tuple[str, ...] = ("customer_name", "product_model", "serial_number", "id")


def matches_query(ticket: Ticket, query: str) -> bool:
    """Case-insensitive substring match over the searchable ticket fields."""

    needle = query.strip().casefold()
    if not needle:
        return True
    return any(needle in str(getattr(ticket, name)).casefold() for name in SEARCH_FIELDS)


def filter_tickets(tickets: Iterable[Ticket], query: str, status: TicketStatus | None) -> list[Ticket]:
    return [
        ticket
        for ticket in tickets
        if (status is None or ticket.status == status) and matches_query(ticket, query)
    ]
