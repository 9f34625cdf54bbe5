from __future__ import annotations

import logging
import tempfile
import time
import webbrowser
from pathlib import Path
from typing import Callable, Protocol

from servicedesk.tickets.models import Ticket

from .formatters import render_label_document, render_ticket_document

logger = logging.getLogger(__name__)

# Mirrors the delay the browser needs to lay out the page before printing.
_PRINT_SCRIPT = """
<script>
    window.addEventListener("load", function () {
        setTimeout(function () {
            window.print();
            window.close();
        }, 250);
    });
</script>
"""


class RenderingSurfaceUnavailable(RuntimeError):
    """Raised when no window or viewer can be opened to print a document."""


class RenderingSurface(Protocol):
    def write(self, document: str) -> None:
        ...

    def print(self) -> None:
        ...

    def close(self) -> None:
        ...


_FILE_PREFIX = "servicedesk-print-"
_STALE_AFTER_SECONDS = 600.0

SurfaceOpener = Callable[[], "RenderingSurface | None"]


def _remove_stale_documents(directory: Path, max_age: float) -> None:
    cutoff = time.time() - max_age
    for path in directory.glob(f"{_FILE_PREFIX}*.html"):
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
        except OSError:
            logger.debug("Could not remove old print file %s", path)


class BrowserSurface:
    """Prints through the system web browser.

    The document is written to a temporary HTML file carrying a small script that
    opens the print dialog once the page has loaded and closes the tab afterwards.
    """

    def __init__(
        self,
        directory: str | Path | None = None,
        *,
        browser: webbrowser.BaseBrowser | None = None,
        max_age: float = _STALE_AFTER_SECONDS,
    ) -> None:
        self._directory = Path(directory) if directory is not None else Path(tempfile.gettempdir())
        self._browser = browser
        self._max_age = max_age
        self._path: Path | None = None
        self._opened = False

    @classmethod
    def open(cls) -> BrowserSurface:
        try:
            browser = webbrowser.get()
        except webbrowser.Error as exc:
            raise RenderingSurfaceUnavailable("No web browser is available") from exc
        return cls(browser=browser)

    @property
    def path(self) -> Path | None:
        return self._path

    def write(self, document: str) -> None:
        _remove_stale_documents(self._directory, self._max_age)
        marker = "</body>"
        if marker in document:
            document = document.replace(marker, _PRINT_SCRIPT + marker, 1)
        else:
            document = document + _PRINT_SCRIPT
        handle = tempfile.NamedTemporaryFile(
            "w", suffix=".html", prefix=_FILE_PREFIX, dir=self._directory, delete=False, encoding="utf-8"
        )
        with handle:
            handle.write(document)
        self._path = Path(handle.name)

    def print(self) -> None:
        if self._path is None:
            raise RuntimeError("Nothing has been written to the surface")
        browser = self._browser or webbrowser
        if not browser.open(self._path.as_uri(), new=1):
            raise RenderingSurfaceUnavailable("The browser refused to open the print window")
        self._opened = True

    def close(self) -> None:
        # An opened file is still being read by the browser; later writes prune it.
        if self._path is not None and not self._opened:
            self._path.unlink(missing_ok=True)
        self._path = None
        self._opened = False


def print_document(document: str, open_surface: SurfaceOpener) -> bool:
    """Send `document` to a freshly opened surface. Returns False when none is available."""

    try:
        surface = open_surface()
    except RenderingSurfaceUnavailable as exc:
        logger.warning("Unable to open print window: %s", exc)
        return False
    if surface is None:
        logger.warning("Unable to open print window. Please check popup blockers.")
        return False

    try:
        surface.write(document)
        surface.print()
    except (RenderingSurfaceUnavailable, OSError) as exc:
        logger.warning("Print aborted: %s", exc)
        return False
    finally:
        surface.close()
    return True


def print_ticket(ticket: Ticket, open_surface: SurfaceOpener = BrowserSurface.open) -> bool:
    return print_document(render_ticket_document(ticket), open_surface)


def print_label(ticket: Ticket, open_surface: SurfaceOpener = BrowserSurface.open) -> bool:
    return print_document(render_label_document(ticket), open_surface)
