from datetime import datetime, timezone
from uuid import uuid4

from fastapi.testclient import TestClient
from unittest.mock import AsyncMock
import pytest

from servicedesk.dependencies import tickets as ticket_deps
from servicedesk.main import create_app
from servicedesk.tickets.models import CreateTicketData, Ticket, TicketHistoryEntry
from servicedesk.tickets.repository import TicketNotFoundError, TicketUpdateNoOpError
from servicedesk.tickets.state import TicketStatus
from servicedesk.tickets.store import TicketStoreError


def _make_ticket(*, status: TicketStatus = TicketStatus.OPEN, customer_name: str = "Jane Doe") -> Ticket:
    now = datetime.now(timezone.utc)
    return Ticket(
        id=str(uuid4()),
        created_at=now,
        updated_at=now,
        customer_name=customer_name,
        contact_number="+1 555 0100",
        product_category="Printer",
        product_model="LX-200",
        serial_number="SN123",
        problem="Paper jam",
        status=status,
        history=[
            TicketHistoryEntry(
                id=str(uuid4()),
                timestamp=now,
                action="Created",
                description="Ticket created by customer service",
                status=TicketStatus.OPEN,
            )
        ],
    )


@pytest.fixture
def ticket_client():
    app = create_app()
    repository = AsyncMock()

    async def override_repository():
        return repository

    app.dependency_overrides[ticket_deps.get_ticket_repository] = override_repository
    client = TestClient(app)
    try:
        yield client, repository
    finally:
        app.dependency_overrides.clear()


def test_ping_is_public():
    client = TestClient(create_app())

    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ping_database_reports_unreachable_database():
    app = create_app()
    postgres = AsyncMock()
    postgres.ping = AsyncMock(side_effect=OSError("refused"))
    app.dependency_overrides[ticket_deps.get_postgres] = lambda: postgres
    client = TestClient(app)

    response = client.get("/ping/database")

    assert response.status_code == 503


def test_routes_without_repository_return_service_unavailable():
    client = TestClient(create_app())

    response = client.get("/tickets")

    assert response.status_code == 503
    assert response.json()["detail"] == "Ticket storage is not configured"


def test_create_ticket_endpoint_returns_created(ticket_client):
    client, repository = ticket_client
    ticket = _make_ticket()
    repository.create = AsyncMock(return_value=ticket)

    response = client.post(
        "/tickets",
        json={
            "customerName": "  Jane Doe ",
            "contactNumber": "+1 555 0100",
            "productCategory": "Printer",
            "productModel": "LX-200",
            "serialNumber": "SN123",
            "problem": "Paper jam",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == ticket.id
    assert body["customerName"] == "Jane Doe"
    assert body["status"] == "open"
    assert body["history"][0]["action"] == "Created"
    repository.create.assert_awaited_once()
    data = repository.create.await_args.args[0]
    assert isinstance(data, CreateTicketData)
    assert data.customer_name == "Jane Doe"


def test_create_ticket_rejects_blank_fields(ticket_client):
    client, repository = ticket_client
    repository.create = AsyncMock()

    response = client.post(
        "/tickets",
        json={
            "customerName": "   ",
            "contactNumber": "1",
            "productCategory": "UPS",
            "productModel": "X",
            "serialNumber": "S",
            "problem": "P",
        },
    )

    assert response.status_code == 422
    repository.create.assert_not_awaited()


def test_list_tickets_endpoint_passes_query_and_status(ticket_client):
    client, repository = ticket_client
    ticket = _make_ticket(status=TicketStatus.CLOSED)
    repository.search_and_filter = AsyncMock(return_value=[ticket])

    response = client.get("/tickets", params={"q": "jane", "status": "closed"})

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 1
    assert body[0]["status"] == "closed"
    repository.search_and_filter.assert_awaited_with("jane", TicketStatus.CLOSED)


def test_list_tickets_defaults_to_all_statuses(ticket_client):
    client, repository = ticket_client
    repository.search_and_filter = AsyncMock(return_value=[])

    response = client.get("/tickets")

    assert response.status_code == 200
    assert response.json() == []
    repository.search_and_filter.assert_awaited_with("", None)


def test_list_tickets_rejects_unknown_status(ticket_client):
    client, repository = ticket_client
    repository.search_and_filter = AsyncMock()

    response = client.get("/tickets", params={"status": "archived"})

    assert response.status_code == 422
    repository.search_and_filter.assert_not_awaited()


def test_get_ticket_returns_not_found(ticket_client):
    client, repository = ticket_client
    repository.get_by_id = AsyncMock(return_value=None)

    response = client.get(f"/tickets/{uuid4()}")

    assert response.status_code == 404


def test_update_ticket_with_status_and_note(ticket_client):
    client, repository = ticket_client
    ticket = _make_ticket(status=TicketStatus.IN_PROGRESS)
    repository.update = AsyncMock(return_value=ticket)

    response = client.post(
        f"/tickets/{ticket.id}/updates",
        json={"status": "in-progress", "note": "  Technician assigned "},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "in-progress"
    repository.update.assert_awaited_with(ticket.id, status=TicketStatus.IN_PROGRESS, note="Technician assigned")


def test_update_ticket_without_changes_is_rejected(ticket_client):
    client, repository = ticket_client
    repository.update = AsyncMock()

    response = client.post(f"/tickets/{uuid4()}/updates", json={"note": "   "})

    assert response.status_code == 400
    repository.update.assert_not_awaited()


def test_update_ticket_maps_repository_errors(ticket_client):
    client, repository = ticket_client
    repository.update = AsyncMock(side_effect=TicketNotFoundError("missing"))

    missing = client.post(f"/tickets/{uuid4()}/updates", json={"note": "hello"})
    assert missing.status_code == 404

    repository.update = AsyncMock(side_effect=TicketUpdateNoOpError("nothing to do"))
    unchanged = client.post(f"/tickets/{uuid4()}/updates", json={"status": "open"})
    assert unchanged.status_code == 400


def test_update_ticket_rejects_unknown_status(ticket_client):
    client, _ = ticket_client

    response = client.post(f"/tickets/{uuid4()}/updates", json={"status": "archived"})

    assert response.status_code == 422


def test_delete_ticket(ticket_client):
    client, repository = ticket_client
    repository.delete_ticket = AsyncMock(side_effect=[True, False])
    ticket_id = str(uuid4())

    assert client.delete(f"/tickets/{ticket_id}").status_code == 204
    assert client.delete(f"/tickets/{ticket_id}").status_code == 404


def test_print_documents_are_html(ticket_client):
    client, repository = ticket_client
    ticket = _make_ticket(customer_name="<b>Jane</b>")
    repository.get_by_id = AsyncMock(return_value=ticket)

    document = client.get(f"/tickets/{ticket.id}/print/ticket")
    label = client.get(f"/tickets/{ticket.id}/print/label")

    assert document.status_code == 200
    assert document.headers["content-type"].startswith("text/html")
    assert ticket.short_id in document.text
    assert "&lt;b&gt;Jane&lt;/b&gt;" in document.text
    assert label.status_code == 200
    assert "100mm 50mm" in label.text


def test_store_failure_maps_to_service_unavailable(ticket_client):
    client, repository = ticket_client
    repository.search_and_filter = AsyncMock(side_effect=TicketStoreError("down"))

    response = client.get("/tickets")

    assert response.status_code == 503
    assert response.json()["detail"] == "Ticket storage is unavailable. Please try again."
