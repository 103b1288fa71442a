"""Tests for the async API client, driven against the app in-process."""

from collections.abc import AsyncGenerator
from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from beachvillas.client.api import APIError, BeachVillasClient
from beachvillas.client.store import BookingDraft, GuestInfo
from beachvillas.main import app
from beachvillas.models.user import User
from beachvillas.models.villa import Villa


@pytest_asyncio.fixture
async def api(client: AsyncClient) -> AsyncGenerator[BeachVillasClient, None]:
    """A BeachVillasClient sharing the test database via the ``client`` fixture's override."""
    async with BeachVillasClient("http://testserver", transport=ASGITransport(app=app)) as api_client:
        yield api_client


class TestAuthFlow:
    async def test_login_and_logout(self, api: BeachVillasClient, guest_user: User):
        await api.login(guest_user.email, "testpass123")
        assert api.store.is_authenticated
        assert api.store.user["user_id"] == str(guest_user.id)

        me = await api.me()
        assert me["email"] == guest_user.email

        await api.logout()
        assert api.store.is_authenticated is False

    async def test_error_is_kept_on_store(self, api: BeachVillasClient, guest_user: User):
        with pytest.raises(APIError) as exc_info:
            await api.login(guest_user.email, "wrong-password")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid email or password"
        assert api.store.error_message == "Invalid email or password"
        assert api.store.is_authenticated is False


class TestBookingFlow:
    async def test_search_book_and_pay(self, api: BeachVillasClient, guest_user: User, instant_villa: Villa):
        await api.login(guest_user.email, "testpass123")

        api.store.search_query.location = "bali"
        results = await api.search()
        assert [v["villa_id"] for v in results["villas"]] == [str(instant_villa.id)]

        check_in = date.today() + timedelta(days=30)
        api.store.booking_in_progress = BookingDraft(
            villa_id=str(instant_villa.id),
            check_in=check_in.isoformat(),
            check_out=(check_in + timedelta(days=2)).isoformat(),
            number_of_guests=2,
            guest_info=GuestInfo(name="Jane Guest", email="jane@example.com", phone="+15550123"),
            agreed_to_rules=True,
        )
        booking = await api.submit_booking()
        assert booking["status"] == "confirmed"
        assert api.store.booking_in_progress is None

        paid = await api.pay(booking["booking_id"])
        assert paid["payment_status"] == "paid"

        upcoming = await api.bookings("upcoming")
        assert upcoming["total"] == 1

        notifications = await api.refresh_notifications()
        assert api.store.unread_notifications == 1
        await api.mark_notification_read(notifications[0]["notification_id"])
        assert api.store.unread_notifications == 0

    async def test_failed_booking_keeps_draft(self, api: BeachVillasClient, guest_user: User, villa: Villa):
        await api.login(guest_user.email, "testpass123")
        check_in = date.today() + timedelta(days=30)
        draft = BookingDraft(
            villa_id=str(villa.id),
            check_in=check_in.isoformat(),
            check_out=(check_in + timedelta(days=2)).isoformat(),
            number_of_guests=2,
            guest_info=GuestInfo(name="Jane Guest", email="jane@example.com", phone="+15550123"),
        )
        api.store.booking_in_progress = draft

        with pytest.raises(APIError):
            await api.submit_booking()
        assert api.store.booking_in_progress is draft
        assert draft.error == "You must agree to the house rules"

    async def test_submit_without_draft(self, api: BeachVillasClient):
        with pytest.raises(ValueError):
            await api.submit_booking()


class TestAdmin:
    async def test_admin_list_remembers_filters(self, api: BeachVillasClient, admin_user: User, host_user: User):
        await api.login(admin_user.email, "testpass123")
        body = await api.admin_list("users", role="host", search=None)
        assert [u["user_id"] for u in body["users"]] == [str(host_user.id)]
        assert api.store.admin_view_context.tab == "users"
        assert api.store.admin_view_context.filters == {"role": "host", "search": None}
