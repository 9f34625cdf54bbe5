"""Ticket domain models, persistence and repository."""

from .models import CreateTicketData, Ticket, TicketHistoryEntry
from .repository import TicketNotFoundError, TicketRepository, TicketServiceError, TicketUpdateNoOpError
from .state import ALL_STATUSES, TicketStatus
from .store import PostgresTicketStore, TicketStore, TicketStoreError

__all__ = [
    "ALL_STATUSES",
    "CreateTicketData",
    "PostgresTicketStore",
    "Ticket",
    "TicketHistoryEntry",
    "TicketNotFoundError",
    "TicketRepository",
    "TicketServiceError",
    "TicketStatus",
    "TicketStore",
    "TicketStoreError",
    "TicketUpdateNoOpError",
]
