"""Bookings API router: booking lifecycle for guests and hosts.

A booking holds its dates while ``pending`` or ``confirmed``. Instant-book
villas confirm immediately; other villas wait for the host to accept or
reject the request.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_current_user, get_db
from beachvillas.database import utcnow
from beachvillas.models.booking import Booking, BookingPayment
from beachvillas.models.message import MessageThread
from beachvillas.models.notification import Notification
from beachvillas.models.user import User
from beachvillas.models.villa import Villa
from beachvillas.schemas.auth import UserResponse
from beachvillas.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
    DashboardResponse,
    PaymentRequest,
    RejectRequest,
)
from beachvillas.services.bookings import (
    booking_detail,
    cancel_booking,
    count_unread,
    ensure_participant,
    get_booking_or_404,
    list_bookings_for,
)
from beachvillas.services.mailer import booking_vars, send_email
from beachvillas.services.notifications import notify
from beachvillas.services.pricing import quote, required_minimum_stay
from beachvillas.services.villas import blocked_dates, has_booking_conflict

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings"])


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _ensure_host(booking: Booking, user: User) -> None:
    if booking.host_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the host can do this")


# ---------------------------------------------------------------------------
# POST /booking
# ---------------------------------------------------------------------------


@router.post(
    "/booking",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book or request a stay",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    """Create a booking after validating the villa, party size, rules and dates.

    Validates that:
    - The villa exists and is active.
    - The caller is not the villa's host.
    - The party fits the villa and the stay meets the minimum length.
    - No night is blocked or held by another pending/confirmed booking.
    """
    villa = await db.get(Villa, body.villa_id)
    if villa is None or villa.status != "active":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Villa not found")

    if villa.host_id == current_user.id:
        raise _bad_request("You cannot book your own villa")
    if body.number_of_guests < 1:
        raise _bad_request("Number of guests must be at least 1")
    if body.number_of_guests > villa.max_occupancy:
        raise _bad_request(f"Number of guests exceeds maximum occupancy ({villa.max_occupancy})")
    if not body.agreed_to_rules:
        raise _bad_request("You must agree to the house rules")

    nights = (body.check_out - body.check_in).days
    minimum = await required_minimum_stay(db, villa, body.check_in)
    if nights < minimum:
        raise _bad_request(f"Minimum stay is {minimum} nights")

    if await blocked_dates(db, villa.id, body.check_in, body.check_out):
        raise _bad_request("Dates unavailable")
    if await has_booking_conflict(db, villa.id, body.check_in, body.check_out):
        raise _bad_request("Dates unavailable: conflict with an existing booking")

    price = await quote(db, villa, body.check_in, body.check_out)
    instant = villa.is_instant_book
    booking = Booking(
        villa=villa,
        guest=current_user,
        host=villa.host,
        check_in=body.check_in,
        check_out=body.check_out,
        number_of_guests=body.number_of_guests,
        status="confirmed" if instant else "pending",
        booking_type="instant" if instant else "request",
        nightly_subtotal=price["nightly_subtotal"],
        cleaning_fee=price["cleaning_fee"],
        service_fee=price["service_fee"],
        security_deposit=price["security_deposit"],
        total_price=price["total"],
        currency=price["currency"],
        special_requests=body.special_requests,
        guest_full_name=body.guest_full_name.strip(),
        guest_email=body.guest_email,
        guest_phone=body.guest_phone.strip(),
        confirmed_at=utcnow() if instant else None,
    )
    db.add(booking)
    await db.flush()

    db.add(
        MessageThread(
            booking_id=booking.id,
            villa_id=villa.id,
            guest_id=current_user.id,
            host_id=villa.host_id,
        )
    )

    if instant:
        await notify(db, villa.host_id, "booking_confirmed", f"New instant booking at {villa.name}", booking.id, villa.id)
        await notify(db, current_user.id, "booking_confirmed", f"Your stay at {villa.name} is confirmed", booking.id, villa.id)
    else:
        await notify(db, villa.host_id, "booking_request", f"New booking request for {villa.name}", booking.id, villa.id)
        await notify(db, current_user.id, "booking_request", f"Your request for {villa.name} was sent", booking.id, villa.id)

    send_email(booking.guest_email, "booking_confirmation" if instant else "booking_request", **booking_vars(booking))
    logger.info("Booking %s created for villa %s (%s)", booking.id, villa.id, booking.status)

    booking = await get_booking_or_404(db, booking.id)
    return BookingResponse.model_validate(booking)


# ---------------------------------------------------------------------------
# GET/PATCH /booking/{booking_id}
# ---------------------------------------------------------------------------


@router.get("/booking/{booking_id}", response_model=BookingDetailResponse, summary="Get booking detail")
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingDetailResponse:
    """Retrieve a booking with villa, parties, thread, payments and reviews."""
    booking = await get_booking_or_404(db, booking_id)
    ensure_participant(booking, current_user)
    return await booking_detail(db, booking)


@router.patch("/booking/{booking_id}", response_model=BookingDetailResponse, summary="Update or cancel a booking")
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingDetailResponse:
    """Guests edit contact details; guests and hosts cancel with ``status: cancelled``."""
    booking = await get_booking_or_404(db, booking_id)
    ensure_participant(booking, current_user)

    contact_data = body.model_dump(exclude_unset=True, exclude={"status", "cancellation_reason"})
    if not contact_data and body.status is None:
        raise _bad_request("No changes provided")

    if contact_data:
        if current_user.id != booking.guest_id and not current_user.is_admin:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the guest can edit these details")
        if booking.status in ("cancelled", "rejected"):
            raise _bad_request(f"Cannot modify a {booking.status} booking")
        for field, value in contact_data.items():
            if value is None and field != "special_requests":
                continue
            setattr(booking, field, value)

    if body.status == "cancelled":
        await cancel_booking(db, booking, current_user, body.cancellation_reason)

    await db.flush()
    booking = await get_booking_or_404(db, booking.id)
    return await booking_detail(db, booking)


# ---------------------------------------------------------------------------
# Host decisions
# ---------------------------------------------------------------------------


@router.post("/booking/{booking_id}/accept", response_model=BookingResponse, summary="Accept a booking request")
async def accept_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    booking = await get_booking_or_404(db, booking_id)
    _ensure_host(booking, current_user)
    if booking.status != "pending":
        raise _bad_request("Only pending bookings can be accepted")

    booking.status = "confirmed"
    booking.confirmed_at = utcnow()
    await notify(db, booking.guest_id, "booking_confirmed", f"Your stay at {booking.villa.name} is confirmed", booking.id, booking.villa_id)
    send_email(booking.guest_email, "booking_confirmation", **booking_vars(booking))
    await db.flush()

    logger.info("Booking %s accepted", booking.id)
    booking = await get_booking_or_404(db, booking.id)
    return BookingResponse.model_validate(booking)


@router.post("/booking/{booking_id}/reject", response_model=BookingResponse, summary="Reject a booking request")
async def reject_booking(
    booking_id: uuid.UUID,
    body: RejectRequest | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    booking = await get_booking_or_404(db, booking_id)
    _ensure_host(booking, current_user)
    if booking.status != "pending":
        raise _bad_request("Only pending bookings can be rejected")

    booking.status = "rejected"
    booking.cancelled_at = utcnow()
    booking.cancellation_reason = body.reason if body else None
    await notify(db, booking.guest_id, "booking_rejected", f"Your request for {booking.villa.name} was declined", booking.id, booking.villa_id)
    send_email(booking.guest_email, "booking_rejected", **booking_vars(booking))
    await db.flush()

    logger.info("Booking %s rejected", booking.id)
    booking = await get_booking_or_404(db, booking.id)
    return BookingResponse.model_validate(booking)


# ---------------------------------------------------------------------------
# POST /booking/{booking_id}/payment
# ---------------------------------------------------------------------------


@router.post("/booking/{booking_id}/payment", response_model=BookingDetailResponse, summary="Pay for a booking")
async def pay_booking(
    booking_id: uuid.UUID,
    body: PaymentRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingDetailResponse:
    """Mock payment: always succeeds for the full booking total."""
    booking = await get_booking_or_404(db, booking_id)
    if booking.guest_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the guest can pay for this booking")
    if booking.status in ("cancelled", "rejected"):
        raise _bad_request(f"Cannot pay for a {booking.status} booking")
    if booking.payment_status == "paid":
        raise _bad_request("Booking is already paid")

    now = utcnow()
    db.add(
        BookingPayment(
            booking_id=booking.id,
            payment_method=body.payment_method,
            status="success",
            amount_paid=booking.total_price,
            transaction_reference=f"MOCK-{uuid.uuid4().hex[:12].upper()}",
            paid_at=now,
        )
    )
    booking.payment_status = "paid"
    await notify(db, booking.host_id, "payment_received", f"Payment received for {booking.villa.name}", booking.id, booking.villa_id)
    await db.flush()

    logger.info("Booking %s paid via %s", booking.id, body.payment_method)
    booking = await get_booking_or_404(db, booking.id)
    return await booking_detail(db, booking)


# ---------------------------------------------------------------------------
# Guest dashboards
# ---------------------------------------------------------------------------


@router.get("/bookings", response_model=BookingListResponse, summary="List the caller's trips")
async def list_my_bookings(
    tab: str = Query("upcoming", description="upcoming, past, cancelled, pending or all"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingListResponse:
    return await list_bookings_for(db, Booking.guest_id, current_user.id, tab)


@router.get("/dashboard", response_model=DashboardResponse, summary="Guest dashboard")
async def dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DashboardResponse:
    return DashboardResponse(
        user=UserResponse.model_validate(current_user),
        bookings=await list_bookings_for(db, Booking.guest_id, current_user.id, "upcoming"),
        unread_notifications=await count_unread(db, Notification, Notification.user_id, current_user.id),
    )
