from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, AsyncContextManager, AsyncIterator, Mapping, Protocol, Sequence

import asyncpg

Row = Mapping[str, Any]

TICKET_COLUMNS: tuple[str, ...] = (
    "id",
    "created_at",
    "updated_at",
    "customer_name",
    "contact_number",
    "product_category",
    "product_model",
    "serial_number",
    "problem",
    "status",
)
HISTORY_COLUMNS: tuple[str, ...] = ("id", "ticket_id", "timestamp", "action", "description", "status")

# Columns matched by free-text search, OR-ed together.
SEARCH_COLUMNS: tuple[str, ...] = ("customer_name", "product_model", "serial_number", "id")

_UPDATABLE_COLUMNS = frozenset(
    {
        "customer_name",
        "contact_number",
        "product_category",
        "product_model",
        "serial_number",
        "problem",
        "status",
    }
)


class TicketStoreError(RuntimeError):
    """Raised when the backing store fails to read or write."""


class TicketStore(Protocol):
    """Tabular store holding the `tickets` and `ticket_history` collections."""

    async def ensure_schema(self) -> None:
        ...

    def transaction(self) -> AsyncContextManager[None]:
        ...

    async def select_tickets(self, *, status: str | None = None, search: str | None = None) -> Sequence[Row]:
        ...

    async def select_ticket(self, ticket_id: str) -> Row | None:
        ...

    async def select_history(self, ticket_ids: Sequence[str] | None = None) -> Sequence[Row]:
        ...

    async def insert_ticket(self, values: Mapping[str, Any]) -> Row:
        ...

    async def insert_history(self, values: Mapping[str, Any]) -> Row:
        ...

    async def update_ticket(self, ticket_id: str, values: Mapping[str, Any]) -> Row | None:
        ...

    async def delete_ticket(self, ticket_id: str) -> bool:
        ...

    async def delete_history(self, ticket_id: str) -> int:
        ...


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""

    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class PostgresTicketStore:
    """asyncpg implementation of :class:`TicketStore`."""

    _CREATE_TICKETS_SQL = """
    CREATE TABLE IF NOT EXISTS tickets (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        customer_name TEXT NOT NULL,
        contact_number TEXT NOT NULL,
        product_category TEXT NOT NULL,
        product_model TEXT NOT NULL,
        serial_number TEXT NOT NULL,
        problem TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'open' CHECK (status IN ('open', 'in-progress', 'closed'))
    )
    """

    _CREATE_HISTORY_SQL = """
    CREATE TABLE IF NOT EXISTS ticket_history (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        ticket_id UUID NOT NULL REFERENCES tickets(id) ON DELETE CASCADE,
        "timestamp" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        action TEXT NOT NULL,
        description TEXT NOT NULL,
        status TEXT NULL CHECK (status IN ('open', 'in-progress', 'closed'))
    )
    """

    _CREATE_HISTORY_INDEX_SQL = """
    CREATE INDEX IF NOT EXISTS ticket_history_ticket_id_idx
    ON ticket_history (ticket_id, "timestamp" DESC)
    """

    _TICKET_FIELDS = "id::text AS id, created_at, updated_at, customer_name, contact_number, product_category, product_model, serial_number, problem, status"
    _HISTORY_FIELDS = 'id::text AS id, ticket_id::text AS ticket_id, "timestamp", action, description, status'

    _INSERT_TICKET_SQL = f"""
    INSERT INTO tickets (customer_name, contact_number, product_category, product_model, serial_number, problem, status)
    VALUES ($1, $2, $3, $4, $5, $6, $7)
    RETURNING {_TICKET_FIELDS}
    """

    _INSERT_HISTORY_SQL = f"""
    INSERT INTO ticket_history (ticket_id, action, description, status)
    VALUES ($1, $2, $3, $4)
    RETURNING {_HISTORY_FIELDS}
    """

    _SELECT_TICKET_SQL = f"""
    SELECT {_TICKET_FIELDS}
    FROM tickets
    WHERE id = $1
    """

    _SELECT_HISTORY_SQL = f"""
    SELECT {_HISTORY_FIELDS}
    FROM ticket_history
    ORDER BY "timestamp" DESC
    """

    _SELECT_HISTORY_FOR_TICKETS_SQL = f"""
    SELECT {_HISTORY_FIELDS}
    FROM ticket_history
    WHERE ticket_id = ANY($1::uuid[])
    ORDER BY "timestamp" DESC
    """

    _DELETE_TICKET_SQL = """
    DELETE FROM tickets WHERE id = $1 RETURNING id
    """

    _DELETE_HISTORY_SQL = """
    DELETE FROM ticket_history WHERE ticket_id = $1
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool
        self._active: ContextVar[Any | None] = ContextVar(f"ticket_store_{id(self)}", default=None)

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[Any]:
        active = self._active.get()
        try:
            if active is not None:
                yield active
            else:
                async with self._pool.acquire() as connection:
                    yield connection
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            raise TicketStoreError(f"Ticket store operation failed: {exc}") from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._active.get() is not None:
            yield
            return
        async with self._connection() as connection:
            async with connection.transaction():
                token = self._active.set(connection)
                try:
                    yield
                finally:
                    self._active.reset(token)

    async def ensure_schema(self) -> None:
        async with self._connection() as connection:
            await connection.execute(self._CREATE_TICKETS_SQL)
            await connection.execute(self._CREATE_HISTORY_SQL)
            await connection.execute(self._CREATE_HISTORY_INDEX_SQL)

    async def select_tickets(self, *, status: str | None = None, search: str | None = None) -> Sequence[Row]:
        clauses: list[str] = []
        args: list[Any] = []
        if status is not None:
            args.append(status)
            clauses.append(f"status = ${len(args)}")
        if search:
            args.append(f"%{escape_like(search)}%")
            placeholder = f"${len(args)}"
            matches = [
                f"{'id::text' if column == 'id' else column} ILIKE {placeholder} ESCAPE '\\'"
                for column in SEARCH_COLUMNS
            ]
            clauses.append("(" + " OR ".join(matches) + ")")

        query = f"SELECT {self._TICKET_FIELDS} FROM tickets"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY updated_at DESC"

        async with self._connection() as connection:
            rows = await connection.fetch(query, *args)
        return list(rows)

    async def select_ticket(self, ticket_id: str) -> Row | None:
        key = _as_uuid(ticket_id)
        if key is None:
            return None
        async with self._connection() as connection:
            return await connection.fetchrow(self._SELECT_TICKET_SQL, key)

    async def select_history(self, ticket_ids: Sequence[str] | None = None) -> Sequence[Row]:
        async with self._connection() as connection:
            if ticket_ids is None:
                rows = await connection.fetch(self._SELECT_HISTORY_SQL)
            else:
                keys = [key for key in (_as_uuid(value) for value in ticket_ids) if key is not None]
                if not keys:
                    return []
                rows = await connection.fetch(self._SELECT_HISTORY_FOR_TICKETS_SQL, keys)
        return list(rows)

    async def insert_ticket(self, values: Mapping[str, Any]) -> Row:
        async with self._connection() as connection:
            row = await connection.fetchrow(
                self._INSERT_TICKET_SQL,
                values["customer_name"],
                values["contact_number"],
                values["product_category"],
                values["product_model"],
                values["serial_number"],
                values["problem"],
                values.get("status", "open"),
            )
        if row is None:
            raise TicketStoreError("Failed to insert ticket")
        return row

    async def insert_history(self, values: Mapping[str, Any]) -> Row:
        key = _as_uuid(values["ticket_id"])
        if key is None:
            raise TicketStoreError(f"Invalid ticket id {values['ticket_id']!r}")
        async with self._connection() as connection:
            row = await connection.fetchrow(
                self._INSERT_HISTORY_SQL,
                key,
                values["action"],
                values["description"],
                values.get("status"),
            )
        if row is None:
            raise TicketStoreError("Failed to insert ticket history")
        return row

    async def update_ticket(self, ticket_id: str, values: Mapping[str, Any]) -> Row | None:
        key = _as_uuid(ticket_id)
        if key is None:
            return None
        unknown = set(values) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns cannot be updated: {sorted(unknown)}")

        columns = sorted(values)
        assignments = [f"{column} = ${index}" for index, column in enumerate(columns, start=2)]
        assignments.append("updated_at = CURRENT_TIMESTAMP")
        query = (
            f"UPDATE tickets SET {', '.join(assignments)} "
            f"WHERE id = $1 RETURNING {self._TICKET_FIELDS}"
        )
        async with self._connection() as connection:
            return await connection.fetchrow(query, key, *(values[column] for column in columns))

    async def delete_ticket(self, ticket_id: str) -> bool:
        key = _as_uuid(ticket_id)
        if key is None:
            return False
        async with self._connection() as connection:
            row = await connection.fetchrow(self._DELETE_TICKET_SQL, key)
        return row is not None

    async def delete_history(self, ticket_id: str) -> int:
        key = _as_uuid(ticket_id)
        if key is None:
            return 0
        async with self._connection() as connection:
            result = await connection.execute(self._DELETE_HISTORY_SQL, key)
        if isinstance(result, str):
            count = result.strip().rpartition(" ")[2]
            return int(count) if count.isdigit() else 0
        return 0
