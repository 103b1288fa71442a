"""Admin API router: platform stats and moderation of users, listings, bookings and reviews.

Every mutation here writes an ``AdminAction`` audit row.
"""

import logging
import uuid
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_db, require_admin
from beachvillas.database import LIKE_ESCAPE, contains_pattern, utcnow
from beachvillas.models.booking import BLOCKING_STATUSES, Booking
from beachvillas.models.notification import AdminAction
from beachvillas.models.review import Review
from beachvillas.models.user import User
from beachvillas.models.villa import Villa
from beachvillas.schemas.admin import (
    AdminActionListResponse,
    AdminActionResponse,
    AdminBookingListResponse,
    AdminBookingUpdate,
    AdminDashboardResponse,
    AdminListingListResponse,
    AdminListingResponse,
    AdminListingUpdate,
    AdminUserListResponse,
    AdminUserUpdate,
)
from beachvillas.schemas.auth import UserResponse
from beachvillas.schemas.booking import BookingDetailResponse, BookingListItem
from beachvillas.schemas.review import ReviewListResponse, ReviewResponse
from beachvillas.services.bookings import booking_detail, cancel_booking, get_booking_or_404
from beachvillas.services.notifications import log_admin_action, notify
from beachvillas.services.villas import get_villa_or_404, has_booking_conflict, summaries

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

OCCUPANCY_WINDOW_DAYS = 30


async def _count(db: AsyncSession, model, *filters) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*filters))
    return result.scalar_one()


async def occupancy_rate(db: AsyncSession, today: date | None = None) -> float:
    """Percent of active-villa nights held by confirmed bookings over the next 30 days."""
    start = today or date.today()
    end = start + timedelta(days=OCCUPANCY_WINDOW_DAYS)

    active_villas = await _count(db, Villa, Villa.status == "active")
    if active_villas == 0:
        return 0.0

    result = await db.execute(
        select(Booking.check_in, Booking.check_out)
        .join(Villa, Villa.id == Booking.villa_id)
        .where(
            Villa.status == "active",
            Booking.status == "confirmed",
            Booking.check_in < end,
            Booking.check_out > start,
        )
    )
    booked_nights = sum((min(row.check_out, end) - max(row.check_in, start)).days for row in result.all())
    return round(booked_nights / (active_villas * OCCUPANCY_WINDOW_DAYS) * 100, 2)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_model=AdminDashboardResponse, summary="Platform statistics")
async def admin_dashboard(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminDashboardResponse:
    today = date.today()
    return AdminDashboardResponse(
        total_users=await _count(db, User),
        total_villas=await _count(db, Villa, Villa.status != "removed"),
        active_bookings=await _count(db, Booking, Booking.status == "confirmed", Booking.check_out > today),
        pending_bookings=await _count(db, Booking, Booking.status == "pending"),
        pending_villas=await _count(db, Villa, Villa.status == "pending"),
        flagged_reviews=await _count(db, Review, Review.is_flagged.is_(True)),
        occupancy_rate=await occupancy_rate(db, today),
    )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=AdminUserListResponse, summary="List users")
async def list_users(
    role: str | None = Query(None),
    search: str | None = Query(None, description="Matches name or email"),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminUserListResponse:
    filters = []
    if role is not None:
        filters.append(User.role == role)
    if search:
        pattern = contains_pattern(search)
        filters.append(
            or_(
                func.lower(User.name).like(pattern, escape=LIKE_ESCAPE),
                func.lower(User.email).like(pattern, escape=LIKE_ESCAPE),
            )
        )

    total = await _count(db, User, *filters)
    result = await db.execute(
        select(User).where(*filters).order_by(User.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
    )
    return AdminUserListResponse(
        users=[UserResponse.model_validate(u) for u in result.scalars().all()],
        total=total,
    )


@router.patch("/users/{user_id}", response_model=UserResponse, summary="Update a user's status or role")
async def update_user(
    user_id: uuid.UUID,
    body: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> UserResponse:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    update_data = body.model_dump(exclude_unset=True, exclude={"notes"})
    demoted = update_data.get("role") not in (None, "admin")
    if user.id == admin.id and (update_data.get("is_active") is False or demoted):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admins cannot deactivate or demote themselves")

    for field, value in update_data.items():
        if value is None:
            continue
        setattr(user, field, value)
    await db.flush()

    await log_admin_action(db, admin.id, "update_user", "user", user.id, body.notes or _describe(update_data))
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    summary="Delete a user and everything they own",
)
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> None:
    """Hard delete. Villas, bookings, threads and notifications go with the user."""
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admins cannot delete themselves")

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    email = user.email
    db.expunge(user)
    await db.execute(delete(User).where(User.id == user_id))
    await log_admin_action(db, admin.id, "delete_user", "user", user_id, email)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@router.get("/listings", response_model=AdminListingListResponse, summary="List villas for moderation")
async def list_listings(
    status_filter: str | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminListingListResponse:
    filters = [Villa.status == status_filter] if status_filter else []
    total = await _count(db, Villa, *filters)
    result = await db.execute(
        select(Villa).where(*filters).order_by(Villa.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
    )
    villas = list(result.scalars().all())
    return AdminListingListResponse(
        villas=await summaries(db, villas, AdminListingResponse),
        total=total,
    )


@router.patch("/listings/{villa_id}", response_model=AdminListingResponse, summary="Approve, deactivate or annotate a listing")
async def update_listing(
    villa_id: uuid.UUID,
    body: AdminListingUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminListingResponse:
    villa = await get_villa_or_404(db, villa_id, include_removed=True)
    update_data = body.model_dump(exclude_unset=True)
    if update_data.get("status") is None:
        update_data.pop("status", None)
    for field, value in update_data.items():
        setattr(villa, field, value)
    await db.flush()

    if "status" in update_data:
        await notify(
            db,
            villa.host_id,
            "listing_status",
            f"Your listing {villa.name} is now {villa.status}",
            villa_id=villa.id,
        )
    await log_admin_action(db, admin.id, "update_listing", "villa", villa.id, body.admin_notes or _describe(update_data))

    villa = await get_villa_or_404(db, villa.id, include_removed=True)
    return (await summaries(db, [villa], AdminListingResponse))[0]


@router.delete(
    "/listings/{villa_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    summary="Remove a listing",
)
async def delete_listing(
    villa_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> None:
    villa = await get_villa_or_404(db, villa_id, include_removed=True)
    villa.status = "removed"
    await db.flush()
    await notify(db, villa.host_id, "listing_status", f"Your listing {villa.name} was removed", villa_id=villa.id)
    await log_admin_action(db, admin.id, "remove_listing", "villa", villa.id)


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


@router.get("/bookings", response_model=AdminBookingListResponse, summary="List all bookings")
async def list_all_bookings(
    status_filter: str | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminBookingListResponse:
    filters = [Booking.status == status_filter] if status_filter else []
    total = await _count(db, Booking, *filters)
    result = await db.execute(
        select(Booking)
        .where(*filters)
        .order_by(Booking.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return AdminBookingListResponse(
        bookings=[BookingListItem.model_validate(b) for b in result.scalars().all()],
        total=total,
    )


@router.patch("/bookings/{booking_id}", response_model=BookingDetailResponse, summary="Override a booking's status")
async def update_any_booking(
    booking_id: uuid.UUID,
    body: AdminBookingUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> BookingDetailResponse:
    booking = await get_booking_or_404(db, booking_id)

    if body.status == "cancelled":
        await cancel_booking(db, booking, admin, body.cancellation_reason)
    elif body.status is not None and body.status != booking.status:
        if body.status in BLOCKING_STATUSES and booking.status not in BLOCKING_STATUSES:
            if await has_booking_conflict(db, booking.villa_id, booking.check_in, booking.check_out, booking.id):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Dates unavailable: conflict with an existing booking",
                )
        booking.status = body.status
        if body.status == "confirmed":
            booking.confirmed_at = utcnow()
        elif body.status == "rejected":
            booking.cancelled_at = utcnow()
        if body.cancellation_reason is not None:
            booking.cancellation_reason = body.cancellation_reason
        for user_id in (booking.guest_id, booking.host_id):
            await notify(db, user_id, "booking_status", f"Booking at {booking.villa.name} is now {body.status}", booking.id, booking.villa_id)
    elif body.cancellation_reason is not None:
        booking.cancellation_reason = body.cancellation_reason

    await db.flush()
    await log_admin_action(
        db,
        admin.id,
        "update_booking",
        "booking",
        booking.id,
        body.notes or _describe(body.model_dump(exclude_unset=True, exclude={"notes"})),
    )
    booking = await get_booking_or_404(db, booking.id)
    return await booking_detail(db, booking)


# ---------------------------------------------------------------------------
# Reviews & audit trail
# ---------------------------------------------------------------------------


@router.get("/reviews", response_model=ReviewListResponse, summary="List reviews for moderation")
async def list_all_reviews(
    is_flagged: bool | None = Query(None),
    is_visible: bool | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ReviewListResponse:
    filters = []
    if is_flagged is not None:
        filters.append(Review.is_flagged.is_(is_flagged))
    if is_visible is not None:
        filters.append(Review.is_visible.is_(is_visible))
    total = await _count(db, Review, *filters)
    result = await db.execute(
        select(Review).where(*filters).order_by(Review.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
    )
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in result.scalars().all()],
        total=total,
    )


@router.get("/actions", response_model=AdminActionListResponse, summary="Admin audit trail")
async def list_admin_actions(
    target_type: str | None = Query(None, description="e.g. user, villa, booking, review"),
    target_id: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminActionListResponse:
    filters = []
    if target_type is not None:
        filters.append(AdminAction.target_type == target_type)
    if target_id is not None:
        filters.append(AdminAction.target_id == target_id)
    total = await _count(db, AdminAction, *filters)
    result = await db.execute(
        select(AdminAction)
        .where(*filters)
        .order_by(AdminAction.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return AdminActionListResponse(
        actions=[AdminActionResponse.model_validate(a) for a in result.scalars().all()],
        total=total,
    )


def _describe(changes: dict) -> str | None:
    if not changes:
        return None
    return ", ".join(f"{key}={value}" for key, value in sorted(changes.items()))
