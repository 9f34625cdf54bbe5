"""Debounced ticket search for async front ends.

Streamlit reruns on submit rather than per keystroke, so its dashboard queries
the API directly. These helpers serve callers that run their own event loop
and receive every keystroke, such as an async widget or a terminal UI.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

from servicedesk.core.config import Settings, get_settings
from servicedesk.tickets.models import Ticket
from servicedesk.tickets.repository import TicketRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[str, str], Awaitable[T]]


class DebouncedSearch(Generic[T]):
    """Runs a search a fixed delay after the last keystroke.

    Every call to :meth:`schedule` takes a new token. A search only starts if its
    token is still the latest once the delay has passed, and its result is only
    delivered if no newer search was scheduled while it was in flight. A slow
    earlier response can therefore never overwrite a newer one.
    """

    def __init__(
        self,
        fetch: Fetcher[T],
        on_result: Callable[[T], None],
        *,
        delay: float = 0.3,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._fetch = fetch
        self._on_result = on_result
        self._on_error = on_error
        self._delay = delay
        self._token = 0
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def latest_token(self) -> int:
        return self._token

    def schedule(self, query: str, status: str = "all") -> int:
        self._token += 1
        token = self._token
        task = asyncio.get_running_loop().create_task(self._run(token, query, status))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return token

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _run(self, token: int, query: str, status: str) -> None:
        await asyncio.sleep(self._delay)
        if token != self._token:
            return
        try:
            result = await self._fetch(query, status)
        except Exception as exc:
            if token != self._token:
                return
            if self._on_error is None:
                raise
            logger.warning("Search failed (query=%r, status=%s): %s", query, status, exc)
            self._on_error(exc)
            return
        if token != self._token:
            logger.debug("Discarding stale search result for token %s", token)
            return
        self._on_result(result)


def debounced_ticket_search(
    repository: TicketRepository,
    on_result: Callable[[list[Ticket]], None],
    *,
    settings: Settings | None = None,
    on_error: Callable[[Exception], None] | None = None,
) -> DebouncedSearch[list[Ticket]]:
    """Debounced search over a repository, using the configured delay."""

    delay = (settings or get_settings()).search_debounce_seconds
    return DebouncedSearch(repository.search_and_filter, on_result, delay=delay, on_error=on_error)
