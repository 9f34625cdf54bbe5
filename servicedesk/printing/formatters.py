from __future__ import annotations

from datetime import datetime

import jinja2

from servicedesk.tickets.models import Ticket, short_ticket_id
from servicedesk.tickets.state import TicketStatus

from .templates import TEMPLATES


def _status_text(status: TicketStatus) -> str:
    return status.value.replace("-", " ").upper()


def _datetime_long(value: datetime) -> str:
    return value.strftime("%b %d, %Y %H:%M")


def _date_short(value: datetime) -> str:
    return value.strftime("%b %d, %Y")


def _build_environment() -> jinja2.Environment:
    environment = jinja2.Environment(
        loader=jinja2.DictLoader(TEMPLATES),
        autoescape=jinja2.select_autoescape(enabled_extensions=("html",), default_for_string=True),
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
    )
    environment.filters["short_id"] = short_ticket_id
    environment.filters["status_text"] = _status_text
    environment.filters["datetime_long"] = _datetime_long
    environment.filters["date_short"] = _date_short
    return environment


_ENVIRONMENT = _build_environment()


def render_ticket_document(ticket: Ticket) -> str:
    """Full A6 ticket record, including the complete identifier for reference."""

    return _ENVIRONMENT.get_template("ticket.html").render(ticket=ticket)


def render_label_document(ticket: Ticket) -> str:
    """Compact 100mm x 50mm shipping label."""

    return _ENVIRONMENT.get_template("label.html").render(ticket=ticket)


def render_ticket_fragment(ticket: Ticket) -> str:
    sections = [
        ("Customer Information", [("Name", ticket.customer_name), ("Contact", ticket.contact_number)]),
        (
            "Product Information",
            [
                ("Category", ticket.product_category),
                ("Model", ticket.product_model),
                ("Serial", ticket.serial_number),
            ],
        ),
        ("Issue Details", [("Status", _status_text(ticket.status))]),
    ]
    return _ENVIRONMENT.get_template("ticket_fragment.html").render(ticket=ticket, sections=sections)
