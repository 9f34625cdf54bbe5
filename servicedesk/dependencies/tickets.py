from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from servicedesk.services.postgres import PostgresPool
from servicedesk.tickets.repository import TicketRepository


async def get_ticket_repository(request: Request) -> TicketRepository:
    repository = getattr(request.app.state, "ticket_repository", None)
    if repository is None:
        raise HTTPException(status_code=503, detail="Ticket storage is not configured")
    return repository


async def get_postgres(request: Request) -> PostgresPool:
    postgres = getattr(request.app.state, "postgres", None)
    if postgres is None:
        raise HTTPException(status_code=503, detail="Database connection is not configured")
    return postgres


TicketRepositoryDep = Annotated[TicketRepository, Depends(get_ticket_repository)]
PostgresDep = Annotated[PostgresPool, Depends(get_postgres)]
