from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .models import CreateTicketData, Ticket, TicketHistoryEntry
from .state import TicketStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketHistoryModel(_CamelModel):
    id: str
    timestamp: datetime
    action: str
    description: str
    status: TicketStatus | None = None

    @classmethod
    def from_entity(cls, entry: TicketHistoryEntry) -> "TicketHistoryModel":
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            action=entry.action,
            description=entry.description,
            status=entry.status,
        )

    def to_entity(self) -> TicketHistoryEntry:
        return TicketHistoryEntry(
            id=self.id,
            timestamp=self.timestamp,
            action=self.action,
            description=self.description,
            status=self.status,
        )


class TicketModel(_CamelModel):
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
    history: list[TicketHistoryModel] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, ticket: Ticket) -> "TicketModel":
        return cls(
            id=ticket.id,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            customer_name=ticket.customer_name,
            contact_number=ticket.contact_number,
            product_category=ticket.product_category,
            product_model=ticket.product_model,
            serial_number=ticket.serial_number,
            problem=ticket.problem,
            status=ticket.status,
            history=[TicketHistoryModel.from_entity(entry) for entry in ticket.history],
        )

    def to_entity(self) -> Ticket:
        return Ticket(
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            customer_name=self.customer_name,
            contact_number=self.contact_number,
            product_category=self.product_category,
            product_model=self.product_model,
            serial_number=self.serial_number,
            problem=self.problem,
            status=self.status,
            history=[entry.to_entity() for entry in self.history],
        )


class TicketCreateRequest(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    customer_name: str = Field(..., min_length=1)
    contact_number: str = Field(..., min_length=1)
    product_category: str = Field(..., min_length=1)
    product_model: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=1)
    problem: str = Field(..., min_length=1)

    def to_data(self) -> CreateTicketData:
        return CreateTicketData(
            customer_name=self.customer_name,
            contact_number=self.contact_number,
            product_category=self.product_category,
            product_model=self.product_model,
            serial_number=self.serial_number,
            problem=self.problem,
        )


class TicketUpdateRequest(_CamelModel):
    status: TicketStatus | None = None
    note: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def _strip_note(self) -> "TicketUpdateRequest":
        if self.note is not None:
            self.note = self.note.strip() or None
        return self

    def has_changes(self) -> bool:
        return self.status is not None or self.note is not None
