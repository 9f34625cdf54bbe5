"""Local, non-authoritative ticket persistence."""

from .fallback import (
    FileKeyValueArea,
    InvalidImportError,
    LocalStoreError,
    LocalTicketStore,
    MemoryKeyValueArea,
)

__all__ = [
    "FileKeyValueArea",
    "InvalidImportError",
    "LocalStoreError",
    "LocalTicketStore",
    "MemoryKeyValueArea",
]
