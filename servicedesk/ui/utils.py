from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Mapping

from servicedesk.tickets.models import CreateTicketData, Ticket
from servicedesk.tickets.state import TicketStatus


class FormValidationError(ValueError):
    """Raised when required intake fields are empty."""

    def __init__(self, message: str, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = tuple(missing)


class NoChangesError(ValueError):
    """Raised when an update would neither change the status nor add a note."""


@dataclass(frozen=True, slots=True)
class StatusCounts:
    total: int
    open: int
    in_progress: int
    closed: int


@dataclass(frozen=True, slots=True)
class PendingUpdate:
    status: TicketStatus | None
    note: str | None


def validate_create_form(values: Mapping[str, str]) -> CreateTicketData:
    """Build intake data from raw form values, rejecting empty fields."""

    data = CreateTicketData(
        customer_name=values.get("customer_name", ""),
        contact_number=values.get("contact_number", ""),
        product_category=values.get("product_category", ""),
        product_model=values.get("product_model", ""),
        serial_number=values.get("serial_number", ""),
        problem=values.get("problem", ""),
    )
    missing = data.missing_fields()
    if missing:
        raise FormValidationError("Please fill in all required fields.", missing)
    return data.stripped()


def prepare_update(current: TicketStatus, selected: TicketStatus, note: str) -> PendingUpdate:
    """Only send the status when it changed; a blank note is dropped."""

    cleaned = note.strip()
    if selected == current and not cleaned:
        raise NoChangesError("Please add a note or change the status to update the ticket.")
    return PendingUpdate(status=selected if selected != current else None, note=cleaned or None)


def count_statuses(tickets: Iterable[Ticket]) -> StatusCounts:
    items = list(tickets)
    return StatusCounts(
        total=len(items),
        open=sum(1 for ticket in items if ticket.status is TicketStatus.OPEN),
        in_progress=sum(1 for ticket in items if ticket.status is TicketStatus.IN_PROGRESS),
        closed=sum(1 for ticket in items if ticket.status is TicketStatus.CLOSED),
    )


def format_age(moment: datetime, now: datetime | None = None) -> str:
    """Rough "x ago" text for ticket cards."""

    reference = now or datetime.now(timezone.utc)
    seconds = max(0, int((reference - moment).total_seconds()))
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            amount = seconds // size
            return f"{amount} {unit}{'s' if amount != 1 else ''} ago"
    return "just now"
