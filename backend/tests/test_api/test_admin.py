"""Tests for the admin panel: dashboard, user, listing, booking and review moderation."""

import uuid
from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from beachvillas.api.routes.admin import occupancy_rate
from beachvillas.models.review import Review
from beachvillas.models.user import User
from beachvillas.models.villa import Villa


class TestAccess:
    @pytest.mark.parametrize("path", ["/admin/dashboard", "/admin/users", "/admin/listings", "/admin/bookings"])
    async def test_non_admins_forbidden(self, client: AsyncClient, host_headers: dict, path: str):
        response = await client.get(path, headers=host_headers)
        assert response.status_code == 403
        assert response.json() == {"message": "Forbidden"}


class TestDashboard:
    async def test_counts(
        self, client: AsyncClient, admin_headers: dict, villa: Villa, guest_user: User, host_user: User,
        create_villa, create_booking,
    ):
        await create_villa(host_user, name="Awaiting approval", status="pending")
        today = date.today()
        await create_booking(villa, guest_user, today + timedelta(days=3), today + timedelta(days=6))
        await create_booking(
            villa, guest_user, today + timedelta(days=10), today + timedelta(days=12), status="pending"
        )

        response = await client.get("/admin/dashboard", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total_users"] == 3
        assert data["total_villas"] == 2
        assert data["pending_villas"] == 1
        assert data["active_bookings"] == 1
        assert data["pending_bookings"] == 1
        assert data["flagged_reviews"] == 0
        # 3 confirmed nights over one active villa and 30 days
        assert data["occupancy_rate"] == 10.0

    async def test_occupancy_clips_to_window(self, db_session, villa: Villa, guest_user: User, create_booking):
        today = date(2027, 6, 1)
        await create_booking(villa, guest_user, today - timedelta(days=5), today + timedelta(days=2))
        await create_booking(villa, guest_user, today + timedelta(days=28), today + timedelta(days=35))
        assert await occupancy_rate(db_session, today) == round(4 / 30 * 100, 2)

    async def test_occupancy_without_villas(self, db_session):
        assert await occupancy_rate(db_session) == 0.0


class TestUsers:
    async def test_filter_by_role_and_search(
        self, client: AsyncClient, admin_headers: dict, guest_user: User, host_user: User
    ):
        hosts = await client.get("/admin/users", params={"role": "host"}, headers=admin_headers)
        assert [u["user_id"] for u in hosts.json()["users"]] == [str(host_user.id)]

        found = await client.get("/admin/users", params={"search": guest_user.email[:10]}, headers=admin_headers)
        assert found.json()["total"] == 1
        assert found.json()["users"][0]["email"] == guest_user.email

    async def test_deactivate_user_and_audit(
        self, client: AsyncClient, admin_headers: dict, admin_user: User, guest_user: User, guest_headers: dict
    ):
        response = await client.patch(
            f"/admin/users/{guest_user.id}",
            json={"is_active": False, "notes": "Chargeback fraud"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        me = await client.get("/me", headers=guest_headers)
        assert me.status_code == 401

        actions = (await client.get("/admin/actions", headers=admin_headers)).json()["actions"]
        assert actions[0]["action_type"] == "update_user"
        assert actions[0]["target_id"] == str(guest_user.id)
        assert actions[0]["admin_id"] == str(admin_user.id)
        assert actions[0]["notes"] == "Chargeback fraud"

    async def test_verify_host_default_note(self, client: AsyncClient, admin_headers: dict, create_user):
        host = await create_user("host")
        response = await client.patch(
            f"/admin/users/{host.id}", json={"is_verified_host": True}, headers=admin_headers
        )
        assert response.json()["is_verified_host"] is True
        actions = (await client.get("/admin/actions", headers=admin_headers)).json()["actions"]
        assert actions[0]["notes"] == "is_verified_host=True"

    async def test_admin_cannot_lock_themselves_out(
        self, client: AsyncClient, admin_headers: dict, admin_user: User
    ):
        deactivate = await client.patch(
            f"/admin/users/{admin_user.id}", json={"is_active": False}, headers=admin_headers
        )
        assert deactivate.status_code == 400
        demote = await client.patch(f"/admin/users/{admin_user.id}", json={"role": "guest"}, headers=admin_headers)
        assert demote.status_code == 400
        delete = await client.delete(f"/admin/users/{admin_user.id}", headers=admin_headers)
        assert delete.status_code == 400

    async def test_delete_user_cascades(
        self, client: AsyncClient, admin_headers: dict, villa: Villa, host_user: User
    ):
        response = await client.delete(f"/admin/users/{host_user.id}", headers=admin_headers)
        assert response.status_code == 204

        assert (await client.get(f"/villa/{villa.id}")).status_code == 404
        users = await client.get("/admin/users", headers=admin_headers)
        assert str(host_user.id) not in [u["user_id"] for u in users.json()["users"]]

        actions = (await client.get("/admin/actions", headers=admin_headers)).json()["actions"]
        assert actions[0]["action_type"] == "delete_user"
        assert actions[0]["notes"] == host_user.email

    async def test_search_treats_wildcards_literally(
        self, client: AsyncClient, admin_headers: dict, guest_user: User, create_user
    ):
        odd = await create_user("guest", name="Ann_100%")
        for term, expected in (("%", [odd.id]), ("_", [odd.id]), ("n_1", [odd.id])):
            response = await client.get("/admin/users", params={"search": term}, headers=admin_headers)
            assert [u["user_id"] for u in response.json()["users"]] == [str(i) for i in expected], term

    async def test_delete_unknown_user(self, client: AsyncClient, admin_headers: dict):
        response = await client.delete(f"/admin/users/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404


class TestListings:
    async def test_approve_pending_listing(
        self, client: AsyncClient, admin_headers: dict, host_user: User, host_headers: dict, create_villa
    ):
        pending = await create_villa(host_user, name="Casa Nueva", status="pending")

        queue = await client.get("/admin/listings", params={"status": "pending"}, headers=admin_headers)
        assert [v["villa_id"] for v in queue.json()["villas"]] == [str(pending.id)]

        response = await client.patch(
            f"/admin/listings/{pending.id}",
            json={"status": "active", "admin_notes": "Photos checked"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "active"
        assert response.json()["admin_notes"] == "Photos checked"

        notes = (await client.get("/notifications", headers=host_headers)).json()["notifications"]
        assert notes[0]["type"] == "listing_status"
        assert "active" in notes[0]["content"]

    async def test_notes_only_does_not_notify(
        self, client: AsyncClient, admin_headers: dict, villa: Villa, host_headers: dict
    ):
        response = await client.patch(
            f"/admin/listings/{villa.id}", json={"admin_notes": "Looks good"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "active"
        notes = (await client.get("/notifications", headers=host_headers)).json()
        assert notes["notifications"] == []

    async def test_remove_listing(self, client: AsyncClient, admin_headers: dict, villa: Villa):
        response = await client.delete(f"/admin/listings/{villa.id}", headers=admin_headers)
        assert response.status_code == 204
        assert (await client.get(f"/villa/{villa.id}")).status_code == 404

        removed = await client.get("/admin/listings", params={"status": "removed"}, headers=admin_headers)
        assert removed.json()["total"] == 1


class TestBookings:
    async def test_list_by_status(
        self, client: AsyncClient, admin_headers: dict, villa: Villa, guest_user: User, create_booking
    ):
        today = date.today()
        pending = await create_booking(
            villa, guest_user, today + timedelta(days=3), today + timedelta(days=6), status="pending"
        )
        await create_booking(villa, guest_user, today + timedelta(days=10), today + timedelta(days=12))

        response = await client.get("/admin/bookings", params={"status": "pending"}, headers=admin_headers)
        assert [b["booking_id"] for b in response.json()["bookings"]] == [str(pending.id)]
        everything = await client.get("/admin/bookings", headers=admin_headers)
        assert everything.json()["total"] == 2

    async def test_confirm_notifies_both_parties(
        self, client: AsyncClient, admin_headers: dict, villa: Villa, guest_user: User, guest_headers: dict,
        host_headers: dict, create_booking,
    ):
        today = date.today()
        booking = await create_booking(
            villa, guest_user, today + timedelta(days=3), today + timedelta(days=6), status="pending"
        )
        response = await client.patch(
            f"/admin/bookings/{booking.id}", json={"status": "confirmed"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        assert response.json()["confirmed_at"] is not None

        for headers in (guest_headers, host_headers):
            notes = (await client.get("/notifications", headers=headers)).json()["notifications"]
            assert [n["type"] for n in notes] == ["booking_status"]

    async def test_reinstating_checks_overlap(
        self, client: AsyncClient, admin_headers: dict, villa: Villa, guest_user: User, other_user: User,
        create_booking,
    ):
        today = date.today()
        check_in, check_out = today + timedelta(days=3), today + timedelta(days=6)
        rejected = await create_booking(villa, guest_user, check_in, check_out, status="rejected")
        await create_booking(villa, other_user, check_in, check_out)

        response = await client.patch(
            f"/admin/bookings/{rejected.id}", json={"status": "confirmed"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Dates unavailable: conflict with an existing booking"}

    async def test_admin_cancel_refunds(
        self, client: AsyncClient, admin_headers: dict, villa: Villa, guest_user: User, create_booking
    ):
        today = date.today()
        booking = await create_booking(
            villa, guest_user, today + timedelta(days=3), today + timedelta(days=6), payment_status="paid"
        )
        response = await client.patch(
            f"/admin/bookings/{booking.id}",
            json={"status": "cancelled", "cancellation_reason": "Villa flooded"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "cancelled"
        assert data["payment_status"] == "refunded"

        actions = (await client.get("/admin/actions", headers=admin_headers)).json()["actions"]
        assert actions[0]["action_type"] == "update_booking"
        assert actions[0]["notes"] == "cancellation_reason=Villa flooded, status=cancelled"


class TestActions:
    async def test_filter_by_target(
        self, client: AsyncClient, admin_headers: dict, villa: Villa, guest_user: User, create_booking
    ):
        today = date.today()
        booking = await create_booking(
            villa, guest_user, today + timedelta(days=3), today + timedelta(days=6), status="pending"
        )
        await client.patch(f"/admin/listings/{villa.id}", json={"admin_notes": "Checked"}, headers=admin_headers)
        await client.patch(
            f"/admin/bookings/{booking.id}", json={"status": "confirmed"}, headers=admin_headers
        )

        everything = await client.get("/admin/actions", headers=admin_headers)
        assert everything.json()["total"] == 2

        for_booking = await client.get(
            "/admin/actions",
            params={"target_type": "booking", "target_id": str(booking.id)},
            headers=admin_headers,
        )
        data = for_booking.json()
        assert data["total"] == 1
        assert data["actions"][0]["action_type"] == "update_booking"

        villas = await client.get("/admin/actions", params={"target_type": "villa"}, headers=admin_headers)
        assert [a["target_id"] for a in villas.json()["actions"]] == [str(villa.id)]

        unknown = await client.get(
            "/admin/actions", params={"target_type": "booking", "target_id": "nope"}, headers=admin_headers
        )
        assert unknown.json() == {"actions": [], "total": 0}


class TestReviews:
    async def test_filter_flagged(
        self, client: AsyncClient, admin_headers: dict, db_session, villa: Villa, guest_user: User, create_booking
    ):
        check_out = date.today() - timedelta(days=2)
        first = await create_booking(villa, guest_user, check_out - timedelta(days=3), check_out)
        second = await create_booking(
            villa, guest_user, check_out - timedelta(days=30), check_out - timedelta(days=27)
        )
        for booking, flagged in ((first, True), (second, False)):
            db_session.add(
                Review(
                    booking_id=booking.id,
                    villa_id=villa.id,
                    reviewer_id=guest_user.id,
                    reviewee_id=villa.host_id,
                    rating=2 if flagged else 5,
                    review_text="Honest feedback",
                    review_type="guest_to_villa",
                    is_flagged=flagged,
                )
            )
        await db_session.flush()

        response = await client.get("/admin/reviews", params={"is_flagged": "true"}, headers=admin_headers)
        data = response.json()
        assert data["total"] == 1
        assert data["reviews"][0]["booking_id"] == str(first.id)

        dashboard = await client.get("/admin/dashboard", headers=admin_headers)
        assert dashboard.json()["flagged_reviews"] == 1
