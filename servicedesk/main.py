import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from servicedesk.api.routes import ping, tickets
from servicedesk.core.config import get_settings
from servicedesk.core.logging import configure_logging, init_tracer, shutdown_tracer
from servicedesk.services.postgres import PostgresPool
from servicedesk.tickets.repository import TicketRepository
from servicedesk.tickets.store import PostgresTicketStore, TicketStoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    configure_logging(settings)
    tracer_provider = init_tracer(settings)

    postgres = PostgresPool(
        dsn=settings.postgres_dsn,
        min_size=settings.postgres_pool_min_size,
        max_size=settings.postgres_pool_max_size,
        command_timeout=settings.postgres_command_timeout,
    )
    app.state.postgres = postgres
    app.state.ticket_repository = None
    try:
        pool = await postgres.get()
        repository = TicketRepository(PostgresTicketStore(pool))
        await repository.ensure_schema()
        app.state.ticket_repository = repository
    except Exception:  # pragma: no cover - service initialisation best effort
        logger.exception("Ticket storage could not be initialised; ticket routes will return 503")
    try:
        yield
    finally:
        await postgres.close()
        shutdown_tracer(tracer_provider)


async def _store_error_handler(request: Request, exc: TicketStoreError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": "Ticket storage is unavailable. Please try again."})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_exception_handler(TicketStoreError, _store_error_handler)
    app.include_router(ping.router)
    app.include_router(tickets.router)
    return app


app = create_app()
