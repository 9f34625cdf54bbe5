from __future__ import annotations

from typing import Callable

import streamlit as st

from servicedesk.core.config import get_settings
from servicedesk.printing import print_label, print_ticket, render_label_document, render_ticket_document
from servicedesk.storage import InvalidImportError, LocalStoreError, LocalTicketStore
from servicedesk.tickets.models import PRODUCT_CATEGORIES, Ticket
from servicedesk.tickets.state import ALL_STATUSES, TicketStatus
from servicedesk.ui.api import APIError, ServiceDeskAPIClient
from servicedesk.ui.utils import (
    FormValidationError,
    NoChangesError,
    count_statuses,
    format_age,
    prepare_update,
    validate_create_form,
)

PAGE_DASHBOARD = "dashboard"
PAGE_CREATE = "create"
PAGE_DETAIL = "detail"


def _get_base_url() -> str:
    base_url = st.session_state.get("base_url")
    if not base_url:
        base_url = get_settings().api_base_url
        st.session_state["base_url"] = base_url
    return str(base_url)


def _build_client() -> ServiceDeskAPIClient:
    return ServiceDeskAPIClient(base_url=_get_base_url(), timeout=get_settings().api_timeout)


def _local_store() -> LocalTicketStore:
    return LocalTicketStore.in_directory(get_settings().fallback_store_dir)


def _navigate(page: str, ticket_id: str | None = None) -> None:
    st.session_state["page"] = page
    if ticket_id is not None:
        st.session_state["ticket_id"] = ticket_id


def _handle_api_call(
    callback: Callable[[], object], failure_message: str, success_message: str | None = None
) -> tuple[bool, object | None]:
    try:
        result = callback()
    except APIError as exc:
        st.error(f"{failure_message} ({exc})")
        return False, None
    else:
        if success_message:
            st.success(success_message)
        return True, result


def _render_sidebar(client: ServiceDeskAPIClient) -> None:
    st.sidebar.header("Connection")
    base_url = st.sidebar.text_input("API Base URL", value=_get_base_url())
    st.session_state["base_url"] = base_url
    if st.sidebar.button("Check connection"):
        _handle_api_call(client.ping, "API is unreachable.", "API is reachable")

    st.sidebar.header("Offline backup")
    st.sidebar.caption("Local copy of the ticket list, independent from the database.")
    store = _local_store()
    if st.sidebar.button("Save snapshot"):
        success, tickets = _handle_api_call(client.list_tickets, "Failed to load tickets. Please try again.")
        if success and isinstance(tickets, list):
            try:
                store.save(tickets)
            except LocalStoreError as exc:
                st.sidebar.error(str(exc))
            else:
                st.sidebar.success(f"Saved {len(tickets)} tickets")

    filename, document = store.export_document()
    st.sidebar.download_button("Export snapshot", data=document, file_name=filename, mime="application/json")

    upload = st.sidebar.file_uploader("Import snapshot", type=["json"])
    if upload is not None and st.sidebar.button("Replace snapshot"):
        try:
            imported = store.import_document(upload.getvalue())
        except InvalidImportError as exc:
            st.sidebar.error(f"Import failed: {exc}")
        except LocalStoreError as exc:
            st.sidebar.error(str(exc))
        else:
            st.sidebar.success(f"Imported {len(imported)} tickets")


def _render_ticket_card(ticket: Ticket) -> None:
    with st.container(border=True):
        header, badge = st.columns([4, 1])
        header.markdown(f"**#{ticket.short_id}** · {ticket.product_category} - {ticket.product_model}")
        badge.markdown(f"`{ticket.status.label}`")
        st.write(f"👤 {ticket.customer_name} · 📞 {ticket.contact_number}")
        st.caption(ticket.problem)
        info, open_col = st.columns([4, 1])
        info.caption(f"{format_age(ticket.created_at)} · SN: {ticket.serial_number}")
        if open_col.button("Open", key=f"open-{ticket.id}"):
            _navigate(PAGE_DETAIL, ticket.id)
            st.rerun()


def _render_dashboard(client: ServiceDeskAPIClient) -> None:
    st.title("Service Tickets")
    st.caption("Manage and track service requests")
    if st.button("New ticket", type="primary"):
        _navigate(PAGE_CREATE)
        st.rerun()

    success, all_tickets = _handle_api_call(client.list_tickets, "Failed to load tickets. Please try again.")
    if not success or not isinstance(all_tickets, list):
        return

    counts = count_statuses(all_tickets)
    metrics = st.columns(4)
    metrics[0].metric("Total", counts.total)
    metrics[1].metric(TicketStatus.OPEN.label, counts.open)
    metrics[2].metric(TicketStatus.IN_PROGRESS.label, counts.in_progress)
    metrics[3].metric(TicketStatus.CLOSED.label, counts.closed)

    search_col, filter_col = st.columns([3, 1])
    query = search_col.text_input("Search", placeholder="Customer, model, serial or ticket ID")
    status_options = [ALL_STATUSES, *(status.value for status in TicketStatus)]
    status_filter = filter_col.selectbox("Status", options=status_options)

    if query.strip() or status_filter != ALL_STATUSES:
        success, tickets = _handle_api_call(
            lambda: client.list_tickets(query=query, status=status_filter),
            "Failed to filter tickets. Please try again.",
        )
        if not success or not isinstance(tickets, list):
            return
    else:
        tickets = all_tickets

    if not tickets:
        st.info("No tickets found")
        return
    for ticket in tickets:
        _render_ticket_card(ticket)


def _render_create(client: ServiceDeskAPIClient) -> None:
    st.title("Create Service Ticket")
    if st.button("Back to dashboard"):
        _navigate(PAGE_DASHBOARD)
        st.rerun()

    with st.form("create_ticket_form"):
        st.subheader("Customer Information")
        customer_name = st.text_input("Customer Name *")
        contact_number = st.text_input("Contact Number *")
        st.subheader("Product Information")
        product_category = st.selectbox("Product Category *", options=["", *PRODUCT_CATEGORIES])
        product_model = st.text_input("Product Model *")
        serial_number = st.text_input("Serial Number *")
        st.subheader("Issue Details")
        problem = st.text_area("Problem Description *", height=140)
        submitted = st.form_submit_button("Create Ticket")

    if not submitted:
        return
    try:
        data = validate_create_form(
            {
                "customer_name": customer_name,
                "contact_number": contact_number,
                "product_category": product_category,
                "product_model": product_model,
                "serial_number": serial_number,
                "problem": problem,
            }
        )
    except FormValidationError as exc:
        st.error(str(exc))
        return

    success, ticket = _handle_api_call(lambda: client.create_ticket(data), "Failed to create ticket. Please try again.")
    if success and isinstance(ticket, Ticket):
        st.success(f"Ticket #{ticket.short_id} has been created successfully.")
        _navigate(PAGE_DETAIL, ticket.id)
        st.rerun()


def _render_print_actions(ticket: Ticket) -> None:
    ticket_col, label_col = st.columns(2)
    if ticket_col.button("Print ticket"):
        if not print_ticket(ticket):
            ticket_col.warning("Unable to open print window. Please check popup blockers.")
    ticket_col.download_button(
        "Download ticket",
        data=render_ticket_document(ticket),
        file_name=f"ticket-{ticket.short_id}.html",
        mime="text/html",
    )
    if label_col.button("Print label"):
        if not print_label(ticket):
            label_col.warning("Unable to open print window. Please check popup blockers.")
    label_col.download_button(
        "Download label",
        data=render_label_document(ticket),
        file_name=f"label-{ticket.short_id}.html",
        mime="text/html",
    )


def _render_detail(client: ServiceDeskAPIClient) -> None:
    if st.button("Back to dashboard"):
        _navigate(PAGE_DASHBOARD)
        st.rerun()

    ticket_id = st.session_state.get("ticket_id")
    if not ticket_id:
        st.info("Select a ticket from the dashboard")
        return

    success, ticket = _handle_api_call(lambda: client.get_ticket(ticket_id), "Failed to load ticket. Please try again.")
    if not success:
        return
    if not isinstance(ticket, Ticket):
        st.subheader("Ticket Not Found")
        st.caption("The requested ticket could not be found.")
        return

    st.title(f"Ticket #{ticket.short_id}")
    st.caption(f"Status: {ticket.status.label} · Created {ticket.created_at:%b %d, %Y %H:%M}")
    _render_print_actions(ticket)

    customer_col, product_col = st.columns(2)
    customer_col.markdown(f"**Customer**  \n{ticket.customer_name}  \n{ticket.contact_number}")
    product_col.markdown(
        f"**Product**  \n{ticket.product_category} - {ticket.product_model}  \nSN: {ticket.serial_number}"
    )
    st.markdown("**Problem**")
    st.write(ticket.problem)

    st.markdown("#### Update Ticket")
    with st.form("update_ticket_form"):
        status_options = list(TicketStatus)
        new_status = st.selectbox(
            "Status",
            options=status_options,
            index=status_options.index(ticket.status),
            format_func=lambda status: status.label,
        )
        note = st.text_area("Add Note", height=100)
        submitted = st.form_submit_button("Update Ticket")
    if submitted:
        try:
            pending = prepare_update(ticket.status, new_status, note)
        except NoChangesError as exc:
            st.warning(str(exc))
        else:
            success, _ = _handle_api_call(
                lambda: client.update_ticket(ticket.id, status=pending.status, note=pending.note),
                "Failed to update ticket. Please try again.",
            )
            if success:
                st.rerun()

    st.markdown("#### History")
    for entry in ticket.history:
        suffix = f" → {entry.status.label}" if entry.status else ""
        st.write(f"**{entry.action}**{suffix} · {entry.timestamp:%b %d, %Y %H:%M}")
        st.caption(entry.description)

    with st.expander("Danger zone"):
        if st.button("Delete ticket"):
            success, _ = _handle_api_call(
                lambda: client.delete_ticket(ticket.id),
                "Failed to delete ticket. Please try again.",
                "Ticket deleted",
            )
            if success:
                _navigate(PAGE_DASHBOARD)
                st.session_state.pop("ticket_id", None)
                st.rerun()


def main() -> None:
    st.set_page_config(page_title="Service Desk", layout="wide")
    client = _build_client()
    _render_sidebar(client)

    pages: dict[str, Callable[[ServiceDeskAPIClient], None]] = {
        PAGE_DASHBOARD: _render_dashboard,
        PAGE_CREATE: _render_create,
        PAGE_DETAIL: _render_detail,
    }
    renderer = pages.get(st.session_state.get("page", PAGE_DASHBOARD), _render_dashboard)
    renderer(client)


if __name__ == "__main__":
    main()
