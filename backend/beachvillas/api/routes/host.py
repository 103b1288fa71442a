"""Host dashboard API router: incoming bookings and earnings."""

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_db, require_host
from beachvillas.models.booking import Booking
from beachvillas.models.user import User
from beachvillas.schemas.booking import BookingListResponse, EarningsResponse, EarningsRow
from beachvillas.schemas.common import FlexibleDate
from beachvillas.services.bookings import list_bookings_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/host", tags=["host"])


@router.get("/bookings", response_model=BookingListResponse, summary="Bookings on the caller's villas")
async def list_host_bookings(
    tab: str = Query("upcoming", description="upcoming, past, cancelled, pending or all"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_host),
) -> BookingListResponse:
    return await list_bookings_for(db, Booking.host_id, current_user.id, tab)


def host_payout(booking: Booking) -> Decimal:
    """What the host earns: the booking total minus the refundable security deposit."""
    return booking.total_price - booking.security_deposit


@router.get("/earnings", response_model=EarningsResponse, summary="Paid earnings per booking")
async def host_earnings(
    start: FlexibleDate | None = Query(None, description="Earliest check-in date"),
    end: FlexibleDate | None = Query(None, description="Latest check-in date"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_host),
) -> EarningsResponse:
    """Confirmed, paid bookings on the caller's villas, optionally bounded by check-in date."""
    if start is not None and end is not None and end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end must not be before start")

    query = select(Booking).where(
        Booking.host_id == current_user.id,
        Booking.status == "confirmed",
        Booking.payment_status == "paid",
    )
    if start is not None:
        query = query.where(Booking.check_in >= start)
    if end is not None:
        query = query.where(Booking.check_in <= end)

    result = await db.execute(query.order_by(Booking.check_in.desc()))
    rows: list[EarningsRow] = []
    for booking in result.scalars().all():
        rows.append(
            EarningsRow(
                booking_id=booking.id,
                villa_id=booking.villa_id,
                villa_name=booking.villa.name,
                amount=host_payout(booking),
                currency=booking.currency,
                status=booking.payment_status,
                date=booking.check_in,
            )
        )

    total = sum((row.amount for row in rows), Decimal("0"))
    return EarningsResponse(earnings=rows, total_earnings=total)
