"""Tests for the client-side session store."""

from datetime import datetime, timezone

import pytest

from beachvillas.client.store import BookingDraft, ClientStore, GuestInfo, SearchQuery


def _note(notification_id: str, is_read: bool = False) -> dict:
    return {"notification_id": notification_id, "type": "message", "content": "hi", "is_read": is_read}


class TestSignIn:
    def test_sign_in_stores_token_and_user(self):
        store = ClientStore()
        assert store.is_authenticated is False

        store.sign_in(
            {
                "token": "access",
                "refresh_token": "refresh",
                "expires_at": "2026-11-01T12:00:00Z",
                "user": {"user_id": "u1", "role": "guest"},
            }
        )
        assert store.is_authenticated is True
        assert store.auth_token.token == "access"
        assert store.auth_token.refresh_token == "refresh"
        assert store.auth_token.expires_at == datetime(2026, 11, 1, 12, tzinfo=timezone.utc)

    def test_clear_all(self):
        store = ClientStore()
        store.sign_in({"token": "access", "user": {"user_id": "u1"}})
        store.set_notifications([_note("n1")])
        store.search_query.location = "Bali"
        store.booking_in_progress = BookingDraft("v1", "2027-01-10", "2027-01-13", 2)
        store.error_message = "boom"
        store.admin_view_context.tab = "users"

        store.clear_all()

        assert store.user is None
        assert store.auth_token is None
        assert store.notifications == []
        assert store.unread_notifications == 0
        assert store.search_query == SearchQuery()
        assert store.booking_in_progress is None
        assert store.error_message is None
        assert store.admin_view_context.tab == ""


class TestNotifications:
    def test_set_counts_unread(self):
        store = ClientStore()
        store.set_notifications([_note("n1"), _note("n2", is_read=True), _note("n3")])
        assert store.unread_notifications == 2

    def test_add_prepends_and_skips_duplicates(self):
        store = ClientStore()
        store.set_notifications([_note("n1")])
        store.add_notification(_note("n2"))
        store.add_notification(_note("n2"))
        assert [n["notification_id"] for n in store.notifications] == ["n2", "n1"]
        assert store.unread_notifications == 2

    def test_mark_read(self):
        store = ClientStore()
        store.set_notifications([_note("n1"), _note("n2")])
        store.mark_notification_read("n1")
        assert store.notifications[0]["is_read"] is True
        assert store.unread_notifications == 1


class TestSearchQuery:
    def test_defaults(self):
        assert SearchQuery().as_params() == {"number_of_guests": 1, "sort": "popularity"}

    def test_full_query(self):
        query = SearchQuery(
            location="Tulum",
            check_in="2027-01-10",
            check_out="2027-01-13",
            number_of_guests=4,
            amenities=["pool", "wifi"],
            price_max=300,
            instant_book=True,
            sort="price_asc",
        )
        assert query.as_params() == {
            "number_of_guests": 4,
            "sort": "price_asc",
            "location": "Tulum",
            "check_in": "2027-01-10",
            "check_out": "2027-01-13",
            "amenities": "pool,wifi",
            "price_max": 300,
            "instant_book": True,
        }

    def test_half_a_date_range_is_dropped(self):
        params = SearchQuery(check_in="2027-01-10").as_params()
        assert "check_in" not in params
        assert "check_out" not in params


class TestBookingDraft:
    def test_payload_requires_guest_info(self):
        draft = BookingDraft("v1", "2027-01-10", "2027-01-13", 2)
        with pytest.raises(ValueError):
            draft.to_payload()

    def test_payload(self):
        draft = BookingDraft(
            "v1",
            "2027-01-10",
            "2027-01-13",
            2,
            guest_info=GuestInfo(name="Jane", email="jane@example.com", phone="+15550123"),
            agreed_to_rules=True,
        )
        payload = draft.to_payload()
        assert payload["guest_full_name"] == "Jane"
        assert payload["agreed_to_rules"] is True
        assert payload["special_requests"] is None
