"""Booking lookups, access checks and dashboard tab queries."""

import logging
import uuid
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.database import utcnow
from beachvillas.models.booking import BLOCKING_STATUSES, Booking
from beachvillas.models.message import MessageThread
from beachvillas.models.review import Review
from beachvillas.models.user import User
from beachvillas.schemas.booking import BookingDetailResponse, BookingListItem, BookingListResponse
from beachvillas.schemas.review import ReviewResponse
from beachvillas.services.mailer import booking_vars, send_email
from beachvillas.services.notifications import notify

logger = logging.getLogger(__name__)

TABS = ("upcoming", "past", "cancelled", "pending", "all")


def tab_filters(tab: str, today: date | None = None) -> list:
    """Filters for a dashboard tab.

    ``upcoming`` holds stays that have not ended yet, ``past`` holds ended
    stays that were not cancelled or rejected.
    """
    today = today or date.today()
    if tab == "upcoming":
        return [Booking.status.in_(BLOCKING_STATUSES), Booking.check_out > today]
    if tab == "past":
        return [Booking.status.in_(BLOCKING_STATUSES), Booking.check_out <= today]
    if tab == "cancelled":
        return [Booking.status.in_(("cancelled", "rejected"))]
    if tab == "pending":
        return [Booking.status == "pending"]
    if tab == "all":
        return []
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Invalid tab '{tab}'. Must be one of: {', '.join(TABS)}",
    )


async def list_bookings_for(db: AsyncSession, owner_column, user_id: uuid.UUID, tab: str) -> BookingListResponse:
    """Bookings where ``owner_column`` (guest_id or host_id) is ``user_id``."""
    filters = [owner_column == user_id, *tab_filters(tab)]
    order = Booking.check_in.asc() if tab in ("upcoming", "pending") else Booking.check_in.desc()
    result = await db.execute(
        select(Booking)
        .where(*filters)
        .order_by(order, Booking.created_at.desc())
        .execution_options(populate_existing=True)
    )
    bookings = list(result.scalars().all())
    return BookingListResponse(
        bookings=[BookingListItem.model_validate(b) for b in bookings],
        total=len(bookings),
        tab=tab,
    )


async def get_booking_or_404(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    result = await db.execute(
        select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


def ensure_participant(booking: Booking, user: User) -> None:
    """Guest, host or an admin may see a booking."""
    if user.id not in (booking.guest_id, booking.host_id) and not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


async def booking_reviews(db: AsyncSession, booking_id: uuid.UUID) -> list[Review]:
    result = await db.execute(
        select(Review).where(Review.booking_id == booking_id).order_by(Review.created_at)
    )
    return list(result.scalars().all())


async def booking_detail(db: AsyncSession, booking: Booking) -> BookingDetailResponse:
    """Booking with parties, villa, thread id, payments and reviews."""
    thread_id = (
        await db.execute(select(MessageThread.id).where(MessageThread.booking_id == booking.id))
    ).scalar_one_or_none()
    reviews = await booking_reviews(db, booking.id)
    return BookingDetailResponse.model_validate(booking).model_copy(
        update={
            "thread_id": thread_id,
            "reviews": [ReviewResponse.model_validate(r) for r in reviews],
        }
    )


async def count_unread(db: AsyncSession, model, user_column, user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count()).select_from(model).where(user_column == user_id, model.is_read.is_(False))
    )
    return result.scalar_one()


async def cancel_booking(db: AsyncSession, booking: Booking, actor: User, reason: str | None) -> None:
    """Cancel a booking, refund a paid one and tell the other parties."""
    if booking.status in ("cancelled", "rejected"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Booking is already {booking.status}",
        )

    booking.status = "cancelled"
    booking.cancelled_at = utcnow()
    booking.cancellation_reason = reason
    if booking.payment_status == "paid":
        booking.payment_status = "refunded"
        for payment in booking.payments:
            payment.status = "refunded"

    villa_name = booking.villa.name
    if actor.id != booking.guest_id:
        await notify(db, booking.guest_id, "booking_cancelled", f"Your booking at {villa_name} was cancelled", booking.id, booking.villa_id)
    if actor.id != booking.host_id:
        await notify(db, booking.host_id, "booking_cancelled", f"A booking at {villa_name} was cancelled", booking.id, booking.villa_id)
    send_email(booking.guest_email, "booking_cancellation", **booking_vars(booking))
    logger.info("Booking %s cancelled by %s", booking.id, actor.id)
