"""Tests for the booking inbox: thread listing, reading and sending messages."""

from datetime import date, timedelta

import pytest_asyncio
from httpx import AsyncClient

from beachvillas.models.booking import Booking
from beachvillas.models.user import User
from beachvillas.models.villa import Villa


@pytest_asyncio.fixture
async def booking(villa: Villa, guest_user: User, create_booking) -> Booking:
    check_in = date.today() + timedelta(days=20)
    return await create_booking(villa, guest_user, check_in, check_in + timedelta(days=3))


async def _thread_id(client: AsyncClient, headers: dict) -> str:
    response = await client.get("/inbox", headers=headers)
    return response.json()["threads"][0]["thread_id"]


class TestInbox:
    async def test_both_parties_see_the_thread(
        self, client: AsyncClient, booking: Booking, guest_headers: dict, host_headers: dict, host_user: User
    ):
        guest_inbox = await client.get("/inbox", headers=guest_headers)
        assert guest_inbox.status_code == 200
        threads = guest_inbox.json()["threads"]
        assert len(threads) == 1
        assert threads[0]["booking_id"] == str(booking.id)
        assert threads[0]["villa"]["name"] == "Casa del Mar"
        assert threads[0]["other_participant"]["user_id"] == str(host_user.id)
        assert threads[0]["last_message"] is None

        host_inbox = await client.get("/inbox", headers=host_headers)
        assert [t["thread_id"] for t in host_inbox.json()["threads"]] == [threads[0]["thread_id"]]

    async def test_stranger_has_empty_inbox(self, client: AsyncClient, booking: Booking, other_headers: dict):
        response = await client.get("/inbox", headers=other_headers)
        assert response.json() == {"threads": []}


class TestMessaging:
    async def test_send_and_read(
        self, client: AsyncClient, booking: Booking, guest_headers: dict, host_headers: dict, guest_user: User
    ):
        thread_id = await _thread_id(client, guest_headers)

        sent = await client.post(
            f"/inbox/thread/{thread_id}/send", json={"content": "  What time is check-in?  "}, headers=guest_headers
        )
        assert sent.status_code == 201
        message = sent.json()
        assert message["content"] == "What time is check-in?"
        assert message["sender_id"] == str(guest_user.id)
        assert message["is_read"] is False

        host_inbox = await client.get("/inbox", headers=host_headers)
        summary = host_inbox.json()["threads"][0]
        assert summary["unread_count"] == 1
        assert summary["last_message"]["content"] == "What time is check-in?"

        opened = await client.get(f"/inbox/thread/{thread_id}", headers=host_headers)
        assert opened.status_code == 200
        assert [m["is_read"] for m in opened.json()["messages"]] == [True]
        assert opened.json()["unread_count"] == 0

    async def test_receiver_is_notified(
        self, client: AsyncClient, booking: Booking, guest_headers: dict, host_headers: dict
    ):
        thread_id = await _thread_id(client, guest_headers)
        await client.post(f"/inbox/thread/{thread_id}/send", json={"content": "Hello!"}, headers=guest_headers)

        notes = await client.get("/notifications", headers=host_headers)
        message_notes = [n for n in notes.json()["notifications"] if n["type"] == "message"]
        assert len(message_notes) == 1
        assert message_notes[0]["related_booking_id"] == str(booking.id)

    async def test_blank_message_rejected(self, client: AsyncClient, booking: Booking, guest_headers: dict):
        thread_id = await _thread_id(client, guest_headers)
        response = await client.post(
            f"/inbox/thread/{thread_id}/send", json={"content": "   "}, headers=guest_headers
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Message content is required"}

    async def test_stranger_cannot_read_or_send(
        self, client: AsyncClient, booking: Booking, guest_headers: dict, other_headers: dict
    ):
        thread_id = await _thread_id(client, guest_headers)
        read = await client.get(f"/inbox/thread/{thread_id}", headers=other_headers)
        assert read.status_code == 403
        send = await client.post(f"/inbox/thread/{thread_id}/send", json={"content": "hi"}, headers=other_headers)
        assert send.status_code == 403

    async def test_admin_reads_but_cannot_send(
        self, client: AsyncClient, booking: Booking, guest_headers: dict, admin_headers: dict
    ):
        thread_id = await _thread_id(client, guest_headers)
        read = await client.get(f"/inbox/thread/{thread_id}", headers=admin_headers)
        assert read.status_code == 200
        send = await client.post(f"/inbox/thread/{thread_id}/send", json={"content": "hi"}, headers=admin_headers)
        assert send.status_code == 403

    async def test_unknown_thread(self, client: AsyncClient, guest_headers: dict):
        response = await client.get("/inbox/thread/00000000-0000-0000-0000-000000000000", headers=guest_headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Thread not found"}
