from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from servicedesk.tickets.models import CreateTicketData, Ticket
from servicedesk.tickets.schemas import TicketModel
from servicedesk.tickets.state import ALL_STATUSES, TicketStatus


class APIError(RuntimeError):
    """Failure reported by, or while reaching, the service desk API."""

    def __init__(self, message: str, *, status_code: int | None = None, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response

    def __str__(self) -> str:
        prefix = f"[{self.status_code}] " if self.status_code is not None else ""
        return f"{prefix}{super().__str__()}"


def _extract_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or "Unknown server error"

    if isinstance(data, Mapping):
        detail = data.get("detail")
        if isinstance(detail, str):
            return detail
        if isinstance(detail, list) and detail and isinstance(detail[0], Mapping) and "msg" in detail[0]:
            return str(detail[0]["msg"])
    return "The request could not be completed"


@dataclass(slots=True)
class ServiceDeskAPIClient:
    """Small synchronous client for the ticket API used by the Streamlit views."""

    base_url: str
    timeout: float = 10.0
    transport: httpx.BaseTransport | None = None

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers: dict[str, str] = {"Accept": "application/json"}
        headers.update(kwargs.pop("headers", {}))

        try:
            with httpx.Client(base_url=self.base_url.rstrip("/"), timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, path if path.startswith("/") else f"/{path}", headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise APIError(f"API request failed: {exc}") from exc

        if response.status_code >= 400:
            raise APIError(_extract_error_message(response), status_code=response.status_code, response=response)

        if response.status_code == 204 or not response.content:
            return None

        content_type = response.headers.get("Content-Type", "")
        if "application/json" in content_type:
            return response.json()
        return response.text

    def ping(self) -> Mapping[str, Any]:
        return self._request("GET", "/ping")

    def list_tickets(self, query: str = "", status: TicketStatus | str = ALL_STATUSES) -> list[Ticket]:
        status_value = status.value if isinstance(status, TicketStatus) else status
        params = {"q": query, "status": status_value}
        data = self._request("GET", "/tickets", params=params)
        return [TicketModel.model_validate(item).to_entity() for item in data or []]

    def get_ticket(self, ticket_id: str) -> Ticket | None:
        try:
            data = self._request("GET", f"/tickets/{ticket_id}")
        except APIError as exc:
            if exc.status_code == 404:
                return None
            raise
        return TicketModel.model_validate(data).to_entity()

    def create_ticket(self, data: CreateTicketData) -> Ticket:
        payload = {
            "customerName": data.customer_name,
            "contactNumber": data.contact_number,
            "productCategory": data.product_category,
            "productModel": data.product_model,
            "serialNumber": data.serial_number,
            "problem": data.problem,
        }
        return TicketModel.model_validate(self._request("POST", "/tickets", json=payload)).to_entity()

    def update_ticket(self, ticket_id: str, *, status: TicketStatus | None = None, note: str | None = None) -> Ticket:
        payload: dict[str, Any] = {}
        if status is not None:
            payload["status"] = status.value
        if note:
            payload["note"] = note
        data = self._request("POST", f"/tickets/{ticket_id}/updates", json=payload)
        return TicketModel.model_validate(data).to_entity()

    def delete_ticket(self, ticket_id: str) -> None:
        self._request("DELETE", f"/tickets/{ticket_id}")
