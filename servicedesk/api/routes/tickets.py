from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from servicedesk.dependencies.tickets import TicketRepositoryDep
from servicedesk.printing import render_label_document, render_ticket_document
from servicedesk.tickets.models import Ticket
from servicedesk.tickets.repository import TicketNotFoundError, TicketRepository, TicketUpdateNoOpError
from servicedesk.tickets.schemas import TicketCreateRequest, TicketModel, TicketUpdateRequest
from servicedesk.tickets.state import ALL_STATUSES, parse_status_filter

router = APIRouter(prefix="/tickets", tags=["tickets"])


def _to_model(ticket: Ticket) -> TicketModel:
    return TicketModel.from_entity(ticket)


async def _load_ticket(repository: TicketRepository, ticket_id: str) -> Ticket:
    ticket = await repository.get_by_id(ticket_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail=f"Ticket {ticket_id} not found")
    return ticket


@router.get("", response_model=list[TicketModel], summary="Search and filter tickets")
async def list_tickets(
    repository: TicketRepositoryDep,
    q: str = Query(default="", max_length=200),
    status_filter: str = Query(default=ALL_STATUSES, alias="status"),
) -> list[TicketModel]:
    try:
        parsed = parse_status_filter(status_filter)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    tickets = await repository.search_and_filter(q, parsed)
    return [_to_model(ticket) for ticket in tickets]


@router.post("", response_model=TicketModel, status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: TicketCreateRequest, repository: TicketRepositoryDep) -> TicketModel:
    ticket = await repository.create(payload.to_data())
    return _to_model(ticket)


@router.get("/{ticket_id}", response_model=TicketModel)
async def get_ticket(ticket_id: str, repository: TicketRepositoryDep) -> TicketModel:
    return _to_model(await _load_ticket(repository, ticket_id))


@router.post("/{ticket_id}/updates", response_model=TicketModel)
async def update_ticket(ticket_id: str, payload: TicketUpdateRequest, repository: TicketRepositoryDep) -> TicketModel:
    if not payload.has_changes():
        raise HTTPException(status_code=400, detail="No changes provided for update")
    try:
        ticket = await repository.update(ticket_id, status=payload.status, note=payload.note)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except TicketUpdateNoOpError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_model(ticket)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket(ticket_id: str, repository: TicketRepositoryDep) -> None:
    if not await repository.delete_ticket(ticket_id):
        raise HTTPException(status_code=404, detail=f"Ticket {ticket_id} not found")


@router.get("/{ticket_id}/print/ticket", response_class=HTMLResponse)
async def print_ticket_document(ticket_id: str, repository: TicketRepositoryDep) -> HTMLResponse:
    ticket = await _load_ticket(repository, ticket_id)
    return HTMLResponse(render_ticket_document(ticket))


@router.get("/{ticket_id}/print/label", response_class=HTMLResponse)
async def print_label_document(ticket_id: str, repository: TicketRepositoryDep) -> HTMLResponse:
    ticket = await _load_ticket(repository, ticket_id)
    return HTMLResponse(render_label_document(ticket))
