from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime

from .state import TicketStatus

CREATED_ACTION = "Created"
CREATED_DESCRIPTION = "Ticket created by customer service"
UPDATED_ACTION = "Updated"
DEFAULT_UPDATE_DESCRIPTION = "Ticket updated"

PRODUCT_CATEGORIES: tuple[str, ...] = ("Computer", "Laptop", "Printer", "UPS", "Other")


def status_changed_action(status: TicketStatus) -> str:
    return f"Status changed to {status.value}"


def short_ticket_id(ticket_id: str) -> str:
    """Human facing form of a ticket identifier."""

    return ticket_id[-6:].upper()


@dataclass(slots=True)
class TicketHistoryEntry:
    """Immutable audit record of one action taken on a ticket."""

    id: str
    timestamp: datetime
    action: str
    description: str
    status: TicketStatus | None = None


@dataclass(slots=True)
class Ticket:
    """Customer service request together with its history, newest entry first."""

    id: str
    created_at: datetime
    updated_at: datetime
    customer_name: str
    contact_number: str
    product_category: str
    product_model: str
    serial_number: str
    problem: str
    status: TicketStatus
    history: list[TicketHistoryEntry] = field(default_factory=list)

    @property
    def short_id(self) -> str:
        return short_ticket_id(self.id)


@dataclass(frozen=True, slots=True)
class CreateTicketData:
    """Intake fields collected when a ticket is opened."""

    customer_name: str
    contact_number: str
    product_category: str
    product_model: str
    serial_number: str
    problem: str

    def missing_fields(self) -> list[str]:
        return [item.name for item in fields(self) if not getattr(self, item.name).strip()]

    def stripped(self) -> CreateTicketData:
        return CreateTicketData(**{item.name: getattr(self, item.name).strip() for item in fields(self)})
