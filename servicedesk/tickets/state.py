from __future__ import annotations

from enum import Enum

ALL_STATUSES = "all"


class TicketStatus(str, Enum):
    """Supported states for a ticket. Any status may change to any other."""

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    CLOSED = "closed"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS: dict[TicketStatus, str] = {
    TicketStatus.OPEN: "Open",
    TicketStatus.IN_PROGRESS: "In Progress",
    TicketStatus.CLOSED: "Closed",
}


def parse_status_filter(value: TicketStatus | str | None) -> TicketStatus | None:
    """Translate a status filter into a status, `None` meaning "all"."""

    if value is None or isinstance(value, TicketStatus):
        return value
    cleaned = value.strip().lower()
    if not cleaned or cleaned == ALL_STATUSES:
        return None
    try:
        return TicketStatus(cleaned)
    except ValueError as exc:
        raise ValueError(f"Unknown ticket status filter: {value!r}") from exc
