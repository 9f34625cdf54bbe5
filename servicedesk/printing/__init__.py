"""Printable ticket and label documents."""

from .formatters import render_label_document, render_ticket_document, render_ticket_fragment
from .printer import BrowserSurface, RenderingSurfaceUnavailable, print_document, print_label, print_ticket

__all__ = [
    "BrowserSurface",
    "RenderingSurfaceUnavailable",
    "print_document",
    "print_label",
    "print_ticket",
    "render_label_document",
    "render_ticket_document",
    "render_ticket_fragment",
]
