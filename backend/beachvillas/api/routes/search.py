"""Search API router: filtered, sorted and paginated listing search."""

import logging
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_db
from beachvillas.database import LIKE_ESCAPE, contains_pattern
from beachvillas.models.booking import Booking
from beachvillas.models.villa import Amenity, Villa, villa_amenities
from beachvillas.schemas.common import FlexibleDate
from beachvillas.schemas.villa import SuggestionsResponse, VillaListResponse
from beachvillas.services.villas import (
    blocked_condition,
    overlap_condition,
    rating_subquery,
    summaries,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

SortOption = Literal["popularity", "price_asc", "price_desc", "rating", "newest"]


def _parse_amenity_keys(raw: str | None) -> list[str]:
    if not raw:
        return []
    return sorted({key.strip().lower() for key in raw.split(",") if key.strip()})


@router.get("", response_model=VillaListResponse, summary="Search active villas")
async def search_villas(
    location: str | None = Query(None, description="Matches city, country or villa name"),
    check_in: FlexibleDate | None = Query(None),
    check_out: FlexibleDate | None = Query(None),
    number_of_guests: int | None = Query(None, ge=1),
    amenities: str | None = Query(None, description="Comma-separated amenity keys, all required"),
    price_min: Decimal | None = Query(None, ge=0),
    price_max: Decimal | None = Query(None, ge=0),
    instant_book: bool | None = Query(None),
    rating: float | None = Query(None, ge=0, le=5, description="Minimum average rating"),
    sort: SortOption = Query("popularity"),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> VillaListResponse:
    """Return a page of active villas matching every given filter."""
    if (check_in is None) != (check_out is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="check_in and check_out must be given together",
        )
    if check_in is not None and check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="check_out must be after check_in",
        )

    ratings = rating_subquery()
    avg_rating = func.coalesce(ratings.c.avg_rating, 0)

    # Build dynamic filters
    filters = [Villa.status == "active"]
    if location:
        pattern = contains_pattern(location)
        filters.append(
            or_(
                func.lower(Villa.city).like(pattern, escape=LIKE_ESCAPE),
                func.lower(Villa.country).like(pattern, escape=LIKE_ESCAPE),
                func.lower(Villa.name).like(pattern, escape=LIKE_ESCAPE),
            )
        )
    if number_of_guests is not None:
        filters.append(Villa.max_occupancy >= number_of_guests)
    if price_min is not None:
        filters.append(Villa.base_price_per_night >= price_min)
    if price_max is not None:
        filters.append(Villa.base_price_per_night <= price_max)
    if instant_book is not None:
        filters.append(Villa.is_instant_book.is_(instant_book))
    if rating is not None:
        filters.append(avg_rating >= rating)
    if check_in is not None:
        filters.append(~exists().where(overlap_condition(Villa.id, check_in, check_out)))
        filters.append(~exists().where(blocked_condition(Villa.id, check_in, check_out)))

    amenity_keys = _parse_amenity_keys(amenities)
    if amenity_keys:
        matched = (
            select(villa_amenities.c.villa_id)
            .join(Amenity, Amenity.id == villa_amenities.c.amenity_id)
            .where(func.lower(Amenity.key).in_(amenity_keys))
            .group_by(villa_amenities.c.villa_id)
            .having(func.count(func.distinct(Amenity.id)) == len(amenity_keys))
        )
        filters.append(Villa.id.in_(matched))

    base_query = select(Villa).outerjoin(ratings, ratings.c.villa_id == Villa.id).where(*filters)

    # Total count
    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    # Sort
    if sort == "price_asc":
        order = [Villa.base_price_per_night.asc()]
    elif sort == "price_desc":
        order = [Villa.base_price_per_night.desc()]
    elif sort == "rating":
        order = [avg_rating.desc(), func.coalesce(ratings.c.review_count, 0).desc()]
    elif sort == "newest":
        order = [Villa.created_at.desc()]
    else:
        booking_count = (
            select(func.count(Booking.id))
            .where(Booking.villa_id == Villa.id, Booking.status == "confirmed")
            .correlate(Villa)
            .scalar_subquery()
        )
        order = [booking_count.desc(), func.coalesce(ratings.c.review_count, 0).desc()]
    order.append(Villa.created_at.desc())

    # Fetch page
    result = await db.execute(
        base_query.order_by(*order).offset((page - 1) * page_size).limit(page_size)
    )
    villas = list(result.scalars().all())
    logger.debug("Search location=%r matched %d villas", location, total)

    return VillaListResponse(
        villas=await summaries(db, villas),
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/suggestions", response_model=SuggestionsResponse, summary="Location autocomplete")
async def search_suggestions(
    q: str = Query("", max_length=100),
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> SuggestionsResponse:
    """Distinct ``City, Country`` strings of active villas matching ``q``."""
    query = select(Villa.city, Villa.country).where(Villa.status == "active").distinct()
    if q.strip():
        pattern = contains_pattern(q)
        query = query.where(
            or_(
                func.lower(Villa.city).like(pattern, escape=LIKE_ESCAPE),
                func.lower(Villa.country).like(pattern, escape=LIKE_ESCAPE),
            )
        )
    result = await db.execute(query.order_by(Villa.city, Villa.country).limit(limit))
    return SuggestionsResponse(suggestions=[f"{row.city}, {row.country}" for row in result.all()])
