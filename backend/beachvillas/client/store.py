"""Client-side session state shared by scripts and the API client.

Mirrors what the single-page app keeps between views: who is signed in,
their notifications, the booking being filled in and the admin panel filters.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

DEFAULT_SORT = "popularity"


@dataclass
class AuthToken:
    token: str
    expires_at: datetime | None = None
    refresh_token: str | None = None


@dataclass
class SearchQuery:
    location: str = ""
    check_in: str = ""
    check_out: str = ""
    number_of_guests: int = 1
    amenities: list[str] = field(default_factory=list)
    price_min: float | None = None
    price_max: float | None = None
    instant_book: bool | None = None
    rating: float | None = None
    sort: str = DEFAULT_SORT

    def as_params(self) -> dict[str, Any]:
        """Query parameters for ``GET /search``, blanks left out."""
        params: dict[str, Any] = {"number_of_guests": self.number_of_guests, "sort": self.sort}
        if self.location:
            params["location"] = self.location
        if self.check_in and self.check_out:
            params["check_in"] = self.check_in
            params["check_out"] = self.check_out
        if self.amenities:
            params["amenities"] = ",".join(self.amenities)
        for name in ("price_min", "price_max", "instant_book", "rating"):
            value = getattr(self, name)
            if value is not None:
                params[name] = value
        return params


@dataclass
class GuestInfo:
    name: str
    email: str
    phone: str
    special_requests: str | None = None


@dataclass
class BookingDraft:
    """A booking being filled in across the checkout steps."""

    villa_id: str
    check_in: str
    check_out: str
    number_of_guests: int
    step: int = 1
    guest_info: GuestInfo | None = None
    agreed_to_rules: bool = False
    total_price: float | None = None
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Body for ``POST /booking``.

        Raises:
            ValueError: If the guest details have not been filled in yet.
        """
        if self.guest_info is None:
            raise ValueError("Guest details are required before booking")
        return {
            "villa_id": self.villa_id,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "number_of_guests": self.number_of_guests,
            "guest_full_name": self.guest_info.name,
            "guest_email": self.guest_info.email,
            "guest_phone": self.guest_info.phone,
            "special_requests": self.guest_info.special_requests,
            "agreed_to_rules": self.agreed_to_rules,
        }


@dataclass
class AdminViewContext:
    tab: str = ""
    filters: dict[str, Any] = field(default_factory=dict)


@dataclass
class ClientStore:
    user: dict[str, Any] | None = None
    auth_token: AuthToken | None = None
    notifications: list[dict[str, Any]] = field(default_factory=list)
    unread_notifications: int = 0
    search_query: SearchQuery = field(default_factory=SearchQuery)
    booking_in_progress: BookingDraft | None = None
    error_message: str | None = None
    admin_view_context: AdminViewContext = field(default_factory=AdminViewContext)

    @property
    def is_authenticated(self) -> bool:
        return self.auth_token is not None and self.user is not None

    def sign_in(self, auth: dict[str, Any]) -> None:
        """Store the ``{token, refresh_token, expires_at, user}`` body from login or signup."""
        self.auth_token = AuthToken(
            token=auth["token"],
            expires_at=_parse_datetime(auth.get("expires_at")),
            refresh_token=auth.get("refresh_token"),
        )
        self.user = auth.get("user")

    def set_notifications(self, notifications: list[dict[str, Any]]) -> None:
        self.notifications = list(notifications)
        self._recount()

    def add_notification(self, notification: dict[str, Any]) -> None:
        """Prepend a notification unless it is already in the list."""
        if any(n["notification_id"] == notification["notification_id"] for n in self.notifications):
            return
        self.notifications.insert(0, notification)
        self._recount()

    def mark_notification_read(self, notification_id: str) -> None:
        for notification in self.notifications:
            if notification["notification_id"] == notification_id:
                notification["is_read"] = True
        self._recount()

    def clear_notifications(self) -> None:
        self.notifications = []
        self.unread_notifications = 0

    def reset_search_query(self) -> None:
        self.search_query = SearchQuery()

    def reset_admin_view_context(self) -> None:
        self.admin_view_context = AdminViewContext()

    def clear_all(self) -> None:
        """Forget everything, as on logout."""
        self.user = None
        self.auth_token = None
        self.clear_notifications()
        self.reset_search_query()
        self.booking_in_progress = None
        self.error_message = None
        self.reset_admin_view_context()

    def _recount(self) -> None:
        self.unread_notifications = sum(1 for n in self.notifications if not n.get("is_read"))


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
