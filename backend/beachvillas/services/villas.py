"""Villa lookups shared by the villa, search, booking and admin routers."""

import logging
import uuid
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.models.booking import BLOCKING_STATUSES, Booking
from beachvillas.models.review import Review
from beachvillas.models.user import User
from beachvillas.models.villa import Amenity, Villa, VillaAvailability
from beachvillas.schemas.villa import VillaSummary

logger = logging.getLogger(__name__)


def rating_subquery():
    """Average rating and review count per villa over visible guest reviews."""
    return (
        select(
            Review.villa_id.label("villa_id"),
            func.avg(Review.rating).label("avg_rating"),
            func.count(Review.id).label("review_count"),
        )
        .where(Review.review_type == "guest_to_villa", Review.is_visible.is_(True))
        .group_by(Review.villa_id)
        .subquery()
    )


async def rating_stats(
    db: AsyncSession,
    villa_ids: list[uuid.UUID],
) -> dict[uuid.UUID, tuple[float, int]]:
    """Map villa id to ``(average rating, review count)``; unreviewed villas are omitted."""
    if not villa_ids:
        return {}
    ratings = rating_subquery()
    result = await db.execute(
        select(ratings.c.villa_id, ratings.c.avg_rating, ratings.c.review_count).where(
            ratings.c.villa_id.in_(villa_ids)
        )
    )
    return {row.villa_id: (round(float(row.avg_rating), 2), row.review_count) for row in result.all()}


def to_summary(villa: Villa, stats: dict[uuid.UUID, tuple[float, int]], schema=VillaSummary):
    """Build a listing card (or a subclass of it) with rating fields filled in."""
    rating, review_count = stats.get(villa.id, (0.0, 0))
    return schema.model_validate(villa).model_copy(update={"rating": rating, "review_count": review_count})


async def summaries(db: AsyncSession, villas: list[Villa], schema=VillaSummary) -> list:
    stats = await rating_stats(db, [villa.id for villa in villas])
    return [to_summary(villa, stats, schema) for villa in villas]


async def visible_reviews(db: AsyncSession, villa_id: uuid.UUID) -> list[Review]:
    """Visible guest reviews of a villa, newest first."""
    result = await db.execute(
        select(Review)
        .where(
            Review.villa_id == villa_id,
            Review.review_type == "guest_to_villa",
            Review.is_visible.is_(True),
        )
        .order_by(Review.created_at.desc())
    )
    return list(result.scalars().all())


async def get_villa_or_404(
    db: AsyncSession,
    villa_id: uuid.UUID,
    include_removed: bool = False,
) -> Villa:
    result = await db.execute(
        select(Villa).where(Villa.id == villa_id).execution_options(populate_existing=True)
    )
    villa = result.scalar_one_or_none()
    if villa is None or (villa.status == "removed" and not include_removed):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Villa not found")
    return villa


def ensure_can_manage(villa: Villa, user: User) -> None:
    """Only the villa's host or an admin may change a listing."""
    if villa.host_id != user.id and not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


async def resolve_amenities(db: AsyncSession, refs: list[str]) -> list[Amenity]:
    """Resolve amenity ids or keys. Unknown references raise 400."""
    if not refs:
        return []
    parsed: dict[str, uuid.UUID | str] = {}
    for ref in refs:
        try:
            parsed[ref] = uuid.UUID(str(ref))
        except ValueError:
            parsed[ref] = str(ref).strip().lower()

    ids = [value for value in parsed.values() if isinstance(value, uuid.UUID)]
    keys = [value for value in parsed.values() if isinstance(value, str)]
    result = await db.execute(
        select(Amenity).where(or_(Amenity.id.in_(ids), func.lower(Amenity.key).in_(keys)))
    )
    amenities = list(result.scalars().all())

    found = {a.id for a in amenities} | {a.key.lower() for a in amenities}
    missing = [ref for ref, value in parsed.items() if value not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown amenities: {', '.join(missing)}",
        )
    return amenities


def overlap_condition(villa_id, check_in: date, check_out: date):
    """SQL predicate for bookings holding any night of ``[check_in, check_out)``.

    ``villa_id`` may be a value or a correlated column such as ``Villa.id``.
    """
    return (
        (Booking.villa_id == villa_id)
        & Booking.status.in_(BLOCKING_STATUSES)
        & (Booking.check_in < check_out)
        & (Booking.check_out > check_in)
    )


def blocked_condition(villa_id, check_in: date, check_out: date):
    """SQL predicate for host-blocked calendar dates within a stay."""
    return (
        (VillaAvailability.villa_id == villa_id)
        & VillaAvailability.is_available.is_(False)
        & (VillaAvailability.date >= check_in)
        & (VillaAvailability.date < check_out)
    )


async def has_booking_conflict(
    db: AsyncSession,
    villa_id: uuid.UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: uuid.UUID | None = None,
) -> bool:
    query = select(Booking.id).where(overlap_condition(villa_id, check_in, check_out))
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)
    result = await db.execute(query.limit(1))
    return result.first() is not None


async def blocked_dates(db: AsyncSession, villa_id: uuid.UUID, check_in: date, check_out: date) -> list[date]:
    result = await db.execute(
        select(VillaAvailability.date)
        .where(blocked_condition(villa_id, check_in, check_out))
        .order_by(VillaAvailability.date)
    )
    return list(result.scalars().all())
