"""Async HTTP client for the BeachVillas API.

Wraps ``httpx.AsyncClient`` and keeps a :class:`ClientStore` in sync with the
responses, so scripts can drive the API the way the web app does::

    async with BeachVillasClient("http://localhost:3000") as api:
        await api.login("guest@example.com", "password123")
        results = await api.search()
"""

import logging
from typing import Any

import httpx

from beachvillas.client.store import ClientStore

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Raised for any non-2xx response; carries the server's ``message``."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class BeachVillasClient:
    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        store: ClientStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.store = store or ClientStore()
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "BeachVillasClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request with the stored bearer token and decode the JSON body.

        Raises:
            APIError: If the response status is not 2xx. The message is also
                kept on ``store.error_message``.
        """
        headers = kwargs.pop("headers", {})
        if self.store.auth_token is not None:
            headers.setdefault("Authorization", f"Bearer {self.store.auth_token.token}")

        response = await self._http.request(method, path, headers=headers, **kwargs)
        if response.is_error:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            self.store.error_message = message
            logger.debug("%s %s failed: %s %s", method, path, response.status_code, message)
            raise APIError(response.status_code, message)

        self.store.error_message = None
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()

    # -- Auth ----------------------------------------------------------------

    async def signup(self, name: str, email: str, password: str, role: str = "guest") -> dict:
        body = await self.request(
            "POST", "/auth/signup", json={"name": name, "email": email, "password": password, "role": role}
        )
        self.store.sign_in(body)
        return body

    async def login(self, email: str, password: str) -> dict:
        body = await self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.store.sign_in(body)
        return body

    async def logout(self) -> None:
        try:
            await self.request("POST", "/auth/logout")
        finally:
            self.store.clear_all()

    async def me(self) -> dict:
        self.store.user = await self.request("GET", "/me")
        return self.store.user

    # -- Villas & search -----------------------------------------------------

    async def search(self, **overrides: Any) -> dict:
        """Search with the stored query, overridden by keyword arguments."""
        params = {**self.store.search_query.as_params(), **overrides}
        return await self.request("GET", "/search", params=params)

    async def get_villa(self, villa_id: str, **params: Any) -> dict:
        return await self.request("GET", f"/villa/{villa_id}", params=params)

    # -- Bookings ------------------------------------------------------------

    async def submit_booking(self) -> dict:
        """Create a booking from ``store.booking_in_progress`` and clear the draft."""
        draft = self.store.booking_in_progress
        if draft is None:
            raise ValueError("No booking in progress")
        try:
            booking = await self.request("POST", "/booking", json=draft.to_payload())
        except APIError as exc:
            draft.error = exc.message
            raise
        self.store.booking_in_progress = None
        return booking

    async def pay(self, booking_id: str, payment_method: str = "credit_card") -> dict:
        return await self.request("POST", f"/booking/{booking_id}/payment", json={"payment_method": payment_method})

    async def bookings(self, tab: str = "upcoming") -> dict:
        return await self.request("GET", "/bookings", params={"tab": tab})

    # -- Notifications -------------------------------------------------------

    async def refresh_notifications(self, unread_only: bool = False) -> list[dict]:
        body = await self.request("GET", "/notifications", params={"unread_only": unread_only})
        self.store.set_notifications(body["notifications"])
        self.store.unread_notifications = body["unread_count"]
        return self.store.notifications

    async def mark_notification_read(self, notification_id: str) -> None:
        await self.request("POST", f"/notifications/{notification_id}/read")
        self.store.mark_notification_read(notification_id)

    # -- Admin ---------------------------------------------------------------

    async def admin_list(self, tab: str, **filters: Any) -> dict:
        """List ``users``, ``listings``, ``bookings`` or ``reviews`` and remember the filters."""
        self.store.admin_view_context.tab = tab
        self.store.admin_view_context.filters = dict(filters)
        params = {k: v for k, v in filters.items() if v is not None}
        return await self.request("GET", f"/admin/{tab}", params=params)
