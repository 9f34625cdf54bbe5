from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from servicedesk.tickets.store import PostgresTicketStore, TicketStoreError, escape_like

TICKET_ID = str(uuid.uuid4())


class DummyAcquire:
    def __init__(self, connection):
        self._connection = connection

    async def __aenter__(self):
        return self._connection

    async def __aexit__(self, exc_type, exc, tb):
        return False


class DummyPool:
    def __init__(self, connection):
        self._connection = connection
        self.acquired = 0

    def acquire(self):
        self.acquired += 1
        return DummyAcquire(self._connection)


class DummyTransaction:
    def __init__(self):
        self.entered = False
        self.exit_type = None

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exit_type = exc_type
        return False


def _store(connection) -> tuple[PostgresTicketStore, DummyPool]:
    pool = DummyPool(connection)
    return PostgresTicketStore(pool), pool


def test_escape_like_escapes_wildcards():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


@pytest.mark.asyncio
async def test_ensure_schema_creates_tables():
    connection = AsyncMock()
    store, _ = _store(connection)

    await store.ensure_schema()

    assert connection.execute.await_count == 3
    executed = [call.args[0] for call in connection.execute.await_args_list]
    assert any("CREATE TABLE IF NOT EXISTS tickets" in stmt for stmt in executed)
    assert any("CREATE TABLE IF NOT EXISTS ticket_history" in stmt for stmt in executed)
    assert any("ON DELETE CASCADE" in stmt for stmt in executed)


@pytest.mark.asyncio
async def test_select_tickets_without_filters_orders_by_update():
    connection = AsyncMock()
    connection.fetch = AsyncMock(return_value=[])
    store, _ = _store(connection)

    rows = await store.select_tickets()

    assert rows == []
    query = connection.fetch.await_args.args[0]
    assert "WHERE" not in query
    assert query.endswith("ORDER BY updated_at DESC")
    assert connection.fetch.await_args.args[1:] == ()


@pytest.mark.asyncio
async def test_select_tickets_pushes_status_and_escaped_search():
    connection = AsyncMock()
    connection.fetch = AsyncMock(return_value=[{"id": TICKET_ID}])
    store, _ = _store(connection)

    rows = await store.select_tickets(status="open", search="50%_x")

    assert rows == [{"id": TICKET_ID}]
    query = connection.fetch.await_args.args[0]
    assert "status = $1" in query
    assert "customer_name ILIKE $2" in query
    assert "id::text ILIKE $2" in query
    assert "ESCAPE" in query
    assert connection.fetch.await_args.args[1:] == ("open", "%50\\%\\_x%")


@pytest.mark.asyncio
async def test_select_ticket_with_malformed_id_skips_query():
    connection = AsyncMock()
    store, pool = _store(connection)

    assert await store.select_ticket("not-a-uuid") is None
    assert await store.delete_ticket("not-a-uuid") is False
    assert await store.delete_history("not-a-uuid") == 0

    connection.fetchrow.assert_not_awaited()
    assert pool.acquired == 0


@pytest.mark.asyncio
async def test_select_history_for_tickets_passes_uuid_array():
    connection = AsyncMock()
    connection.fetch = AsyncMock(return_value=[])
    store, _ = _store(connection)

    await store.select_history([TICKET_ID, "bogus"])

    query, keys = connection.fetch.await_args.args
    assert "ANY($1::uuid[])" in query
    assert keys == [uuid.UUID(TICKET_ID)]


@pytest.mark.asyncio
async def test_update_ticket_sets_columns_and_touches_timestamp():
    connection = AsyncMock()
    connection.fetchrow = AsyncMock(return_value={"id": TICKET_ID, "status": "closed"})
    store, _ = _store(connection)

    row = await store.update_ticket(TICKET_ID, {"status": "closed"})

    assert row == {"id": TICKET_ID, "status": "closed"}
    query, key, value = connection.fetchrow.await_args.args
    assert "status = $2" in query
    assert "updated_at = CURRENT_TIMESTAMP" in query
    assert key == uuid.UUID(TICKET_ID)
    assert value == "closed"


@pytest.mark.asyncio
async def test_update_ticket_rejects_unknown_columns():
    store, _ = _store(AsyncMock())

    with pytest.raises(ValueError):
        await store.update_ticket(TICKET_ID, {"created_at": "now"})


@pytest.mark.asyncio
async def test_delete_history_parses_command_tag():
    connection = AsyncMock()
    connection.execute = AsyncMock(return_value="DELETE 3")
    store, _ = _store(connection)

    assert await store.delete_history(TICKET_ID) == 3


@pytest.mark.asyncio
async def test_driver_failures_become_store_errors():
    connection = AsyncMock()
    connection.fetch = AsyncMock(side_effect=ConnectionRefusedError("refused"))
    store, _ = _store(connection)

    with pytest.raises(TicketStoreError):
        await store.select_tickets()


@pytest.mark.asyncio
async def test_transaction_shares_one_connection():
    connection = AsyncMock()
    transaction = DummyTransaction()
    connection.transaction = MagicMock(return_value=transaction)
    connection.fetchrow = AsyncMock(return_value={"id": TICKET_ID})
    store, pool = _store(connection)

    async with store.transaction():
        await store.insert_ticket(
            {
                "customer_name": "Jane",
                "contact_number": "1",
                "product_category": "UPS",
                "product_model": "X",
                "serial_number": "S",
                "problem": "P",
            }
        )
        await store.insert_history({"ticket_id": TICKET_ID, "action": "Created", "description": "d", "status": "open"})

    assert pool.acquired == 1
    assert transaction.entered is True
    assert transaction.exit_type is None
    assert connection.fetchrow.await_count == 2


@pytest.mark.asyncio
async def test_transaction_sees_failure_and_reraises():
    connection = AsyncMock()
    transaction = DummyTransaction()
    connection.transaction = MagicMock(return_value=transaction)
    store, _ = _store(connection)

    with pytest.raises(TicketStoreError):
        async with store.transaction():
            raise TicketStoreError("boom")

    assert transaction.exit_type is TicketStoreError
