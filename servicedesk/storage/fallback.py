"""Offline JSON snapshot of tickets, kept apart from the database repository."""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Protocol, Sequence

from pydantic import TypeAdapter, ValidationError

from servicedesk.tickets.models import Ticket
from servicedesk.tickets.schemas import TicketModel

logger = logging.getLogger(__name__)

STORAGE_KEY = "serviceTickets"
BACKUP_KEY = "serviceTickets_backup"
EXPORT_PREFIX = "service-tickets"

_TICKET_LIST = TypeAdapter(list[TicketModel])
_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class LocalStoreError(RuntimeError):
    """Raised when a snapshot cannot be written."""


class InvalidImportError(ValueError):
    """Raised when an imported document is not a ticket list."""


class KeyValueArea(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueArea:
    """Process-local area, mostly useful as a secondary copy or in tests."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class FileKeyValueArea:
    """Stores each key as `<key>.json` inside a directory."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self._directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)


def dump_tickets(tickets: Sequence[Ticket], *, indent: int | None = None) -> str:
    models = [TicketModel.from_entity(ticket) for ticket in tickets]
    return _TICKET_LIST.dump_json(models, by_alias=True, indent=indent).decode("utf-8")


def parse_tickets(text: str) -> list[Ticket]:
    return [model.to_entity() for model in _TICKET_LIST.validate_json(text)]


class LocalTicketStore:
    """Keeps the ticket list under a primary key, a backup key and a secondary area.

    Loading walks primary key, backup key, then the secondary area and returns
    the first copy found.
    """

    def __init__(self, primary: KeyValueArea, secondary: KeyValueArea) -> None:
        self._primary = primary
        self._secondary = secondary

    @classmethod
    def in_directory(cls, directory: str | Path) -> LocalTicketStore:
        root = Path(directory)
        return cls(FileKeyValueArea(root / "primary"), FileKeyValueArea(root / "secondary"))

    def save(self, tickets: Sequence[Ticket]) -> None:
        data = dump_tickets(tickets)
        try:
            self._primary.set(STORAGE_KEY, data)
            self._primary.set(BACKUP_KEY, data)
            self._secondary.set(STORAGE_KEY, data)
        except OSError as exc:
            logger.exception("Failed to save tickets")
            raise LocalStoreError(f"Failed to save tickets: {exc}") from exc

    def load(self) -> list[Ticket]:
        sources = (
            (self._primary, STORAGE_KEY),
            (self._primary, BACKUP_KEY),
            (self._secondary, STORAGE_KEY),
        )
        for area, key in sources:
            try:
                data = area.get(key)
                if data:
                    return parse_tickets(data)
            except (OSError, UnicodeDecodeError, ValidationError):
                logger.exception("Failed to load tickets from %s", key)
        return []

    def export_document(self, today: date | None = None) -> tuple[str, str]:
        """Return `(filename, json_text)` for a downloadable snapshot."""

        day = today or date.today()
        filename = f"{EXPORT_PREFIX}-{day.isoformat()}.json"
        return filename, dump_tickets(self.load(), indent=2)

    def export_to(self, directory: str | Path, today: date | None = None) -> Path:
        filename, text = self.export_document(today)
        target = Path(directory) / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        return target

    def import_document(self, text: str | bytes) -> list[Ticket]:
        """Replace the stored list with the tickets in `text`."""

        try:
            if isinstance(text, bytes):
                text = text.decode("utf-8")
            tickets = parse_tickets(text)
        except (UnicodeDecodeError, ValidationError) as exc:
            raise InvalidImportError("Invalid file format") from exc
        self.save(tickets)
        return tickets
