"""Villa listings API router: listing CRUD, calendar, pricing seasons and dashboards."""

import logging
import uuid
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_current_user, get_db, get_optional_user, require_host
from beachvillas.config import settings
from beachvillas.models.booking import BLOCKING_STATUSES, Booking
from beachvillas.models.user import User, UserProfile
from beachvillas.models.villa import (
    Amenity,
    Villa,
    VillaAvailability,
    VillaPhoto,
    VillaPricingSeason,
    VillaRule,
)
from beachvillas.schemas.common import FlexibleDate
from beachvillas.schemas.review import ReviewResponse
from beachvillas.schemas.villa import (
    AmenityResponse,
    AvailabilityEntry,
    AvailabilityResponse,
    AvailabilityUpdate,
    BookedRange,
    HostProfile,
    PriceBreakdown,
    SeasonCreate,
    SeasonResponse,
    VillaCreate,
    VillaListResponse,
    VillaResponse,
    VillaUpdate,
)
from beachvillas.services.pricing import quote
from beachvillas.services.villas import (
    ensure_can_manage,
    get_villa_or_404,
    rating_stats,
    rating_subquery,
    resolve_amenities,
    summaries,
    to_summary,
    visible_reviews,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["villas"])

CALENDAR_DEFAULT_DAYS = 90


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _all_amenities(db: AsyncSession) -> list[Amenity]:
    result = await db.execute(select(Amenity).order_by(Amenity.name))
    return list(result.scalars().all())


async def _host_profile(db: AsyncSession, host: User) -> HostProfile:
    profile = (
        await db.execute(select(UserProfile).where(UserProfile.user_id == host.id))
    ).scalar_one_or_none()
    return HostProfile.model_validate(host).model_copy(
        update={
            "about": profile.about if profile else None,
            "locale": profile.locale if profile else None,
        }
    )


async def _host_villas(db: AsyncSession, host_id: uuid.UUID) -> list:
    """The host's active listings, including the one being viewed."""
    result = await db.execute(
        select(Villa).where(Villa.host_id == host_id, Villa.status == "active").order_by(Villa.created_at.desc())
    )
    return await summaries(db, list(result.scalars().all()))


async def villa_detail(
    db: AsyncSession,
    villa: Villa,
    viewer: User | None,
    check_in: date | None = None,
    check_out: date | None = None,
) -> VillaResponse:
    """Full listing detail: ratings, reference amenities, a price quote, the
    upcoming calendar, visible reviews and the host's profile and other listings.
    """
    stats = await rating_stats(db, [villa.id])
    today = date.today()
    calendar = await _calendar(db, villa.id, today, today + timedelta(days=CALENDAR_DEFAULT_DAYS))
    updates: dict = {
        "all_amenities": [AmenityResponse.model_validate(a) for a in await _all_amenities(db)],
        "calendar": calendar.availability,
        "reviews": [ReviewResponse.model_validate(r) for r in await visible_reviews(db, villa.id)],
        "host_profile": await _host_profile(db, villa.host),
        "host_villas": await _host_villas(db, villa.host_id),
    }

    if check_in is not None and check_out is not None:
        if check_out <= check_in:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="check_out must be after check_in",
            )
        updates["price_breakdown"] = PriceBreakdown(**await quote(db, villa, check_in, check_out))
    else:
        example = await quote(db, villa, today, today + timedelta(days=villa.minimum_stay_nights))
        updates["price_breakdown_example"] = PriceBreakdown(**example)

    if viewer is None or (viewer.id != villa.host_id and not viewer.is_admin):
        updates["admin_notes"] = None

    return to_summary(villa, stats, VillaResponse).model_copy(update=updates)


def _photos(items) -> list[VillaPhoto]:
    return [VillaPhoto(**item.model_dump()) for item in items]


def _rules(items) -> list[VillaRule]:
    return [VillaRule(**item.model_dump()) for item in items]


async def _calendar(db: AsyncSession, villa_id: uuid.UUID, start: date, end: date) -> AvailabilityResponse:
    entries = await db.execute(
        select(VillaAvailability)
        .where(
            VillaAvailability.villa_id == villa_id,
            VillaAvailability.date >= start,
            VillaAvailability.date < end,
        )
        .order_by(VillaAvailability.date)
        .execution_options(populate_existing=True)
    )
    bookings = await db.execute(
        select(Booking.check_in, Booking.check_out)
        .where(
            Booking.villa_id == villa_id,
            Booking.status.in_(BLOCKING_STATUSES),
            Booking.check_in < end,
            Booking.check_out > start,
        )
        .order_by(Booking.check_in)
    )
    return AvailabilityResponse(
        villa_id=villa_id,
        availability=[AvailabilityEntry.model_validate(entry) for entry in entries.scalars().all()],
        booked_ranges=[BookedRange(check_in=row.check_in, check_out=row.check_out) for row in bookings.all()],
    )


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@router.get("/amenities", response_model=list[AmenityResponse], summary="List amenities")
async def list_amenities(db: AsyncSession = Depends(get_db)) -> list[AmenityResponse]:
    return [AmenityResponse.model_validate(a) for a in await _all_amenities(db)]


# ---------------------------------------------------------------------------
# Listing CRUD
# ---------------------------------------------------------------------------


@router.post(
    "/villa",
    response_model=VillaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new villa listing",
)
async def create_villa(
    body: VillaCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_host),
) -> VillaResponse:
    """Create a listing owned by the caller.

    Listings start ``pending`` until an admin approves them, unless the host
    is verified or explicitly sets ``active``/``inactive``.
    """
    data = body.model_dump(exclude={"photos", "amenities", "rules", "status"})
    if body.status is not None:
        initial_status = body.status
    elif current_user.is_verified_host or current_user.is_admin:
        initial_status = "active"
    else:
        initial_status = "pending"

    villa = Villa(
        host_id=current_user.id,
        status=initial_status,
        photos=_photos(body.photos),
        rules=_rules(body.rules),
        amenities=await resolve_amenities(db, body.amenities),
        **data,
    )
    db.add(villa)
    await db.flush()

    logger.info("Villa %s created by %s (%s)", villa.id, current_user.id, initial_status)
    villa = await get_villa_or_404(db, villa.id)
    return await villa_detail(db, villa, current_user)


@router.get("/villa/{villa_id}", response_model=VillaResponse, summary="Get villa detail")
async def get_villa(
    villa_id: uuid.UUID,
    check_in: FlexibleDate | None = Query(None),
    check_out: FlexibleDate | None = Query(None),
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> VillaResponse:
    """Public listing detail. Pass ``check_in``/``check_out`` to price a specific stay."""
    villa = await get_villa_or_404(db, villa_id)
    return await villa_detail(db, villa, viewer, check_in, check_out)


@router.patch("/villa/{villa_id}", response_model=VillaResponse, summary="Update a villa listing")
async def update_villa(
    villa_id: uuid.UUID,
    body: VillaUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> VillaResponse:
    """Partially update a listing. Photos, amenities and rules replace existing ones."""
    villa = await get_villa_or_404(db, villa_id)
    ensure_can_manage(villa, current_user)

    update_data = body.model_dump(exclude_unset=True, exclude={"photos", "amenities", "rules"})
    for field, value in update_data.items():
        if value is None:
            continue
        setattr(villa, field, value)

    if body.photos is not None:
        villa.photos = _photos(body.photos)
    if body.rules is not None:
        villa.rules = _rules(body.rules)
    if body.amenities is not None:
        villa.amenities = await resolve_amenities(db, body.amenities)

    await db.flush()
    villa = await get_villa_or_404(db, villa.id)
    return await villa_detail(db, villa, current_user)


@router.delete(
    "/villa/{villa_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    summary="Remove a villa listing",
)
async def delete_villa(
    villa_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    """Soft-delete: the listing is marked ``removed`` and disappears from search."""
    villa = await get_villa_or_404(db, villa_id)
    ensure_can_manage(villa, current_user)
    villa.status = "removed"
    await db.flush()
    logger.info("Villa %s removed by %s", villa.id, current_user.id)


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


@router.get("/villa/{villa_id}/availability", response_model=AvailabilityResponse)
async def get_availability(
    villa_id: uuid.UUID,
    start: FlexibleDate | None = Query(None),
    end: FlexibleDate | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    """Calendar entries and booked ranges in ``[start, end)``; defaults to the next 90 days."""
    villa = await get_villa_or_404(db, villa_id)
    start = start or date.today()
    end = end or start + timedelta(days=CALENDAR_DEFAULT_DAYS)
    if end <= start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end must be after start")
    return await _calendar(db, villa.id, start, end)


@router.put("/villa/{villa_id}/availability", response_model=AvailabilityResponse)
async def update_availability(
    villa_id: uuid.UUID,
    body: AvailabilityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AvailabilityResponse:
    """Upsert calendar entries by date."""
    villa = await get_villa_or_404(db, villa_id)
    ensure_can_manage(villa, current_user)

    entries = {entry.date: entry for entry in body.calendar}
    result = await db.execute(
        select(VillaAvailability).where(
            VillaAvailability.villa_id == villa.id,
            VillaAvailability.date.in_(list(entries)),
        )
    )
    existing = {row.date: row for row in result.scalars().all()}

    for day, entry in entries.items():
        row = existing.get(day)
        if row is None:
            row = VillaAvailability(villa_id=villa.id, date=day)
            db.add(row)
        row.is_available = entry.is_available
        row.price_override = entry.price_override
        row.minimum_stay_override = entry.minimum_stay_override
        row.note = entry.note

    await db.flush()
    start, end = min(entries), max(entries) + timedelta(days=1)
    return await _calendar(db, villa.id, start, end)


# ---------------------------------------------------------------------------
# Pricing seasons
# ---------------------------------------------------------------------------


@router.get("/villa/{villa_id}/seasons", response_model=list[SeasonResponse])
async def list_seasons(villa_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> list[SeasonResponse]:
    villa = await get_villa_or_404(db, villa_id)
    result = await db.execute(
        select(VillaPricingSeason)
        .where(VillaPricingSeason.villa_id == villa.id)
        .order_by(VillaPricingSeason.start_date)
    )
    return [SeasonResponse.model_validate(s) for s in result.scalars().all()]


@router.post(
    "/villa/{villa_id}/seasons",
    response_model=SeasonResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_season(
    villa_id: uuid.UUID,
    body: SeasonCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SeasonResponse:
    villa = await get_villa_or_404(db, villa_id)
    ensure_can_manage(villa, current_user)

    season = VillaPricingSeason(villa_id=villa.id, **body.model_dump())
    db.add(season)
    await db.flush()
    await db.refresh(season)
    return SeasonResponse.model_validate(season)


@router.delete(
    "/villa/{villa_id}/seasons/{season_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_season(
    villa_id: uuid.UUID,
    season_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    villa = await get_villa_or_404(db, villa_id)
    ensure_can_manage(villa, current_user)

    season = await db.get(VillaPricingSeason, season_id)
    if season is None or season.villa_id != villa.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Season not found")
    await db.delete(season)
    await db.flush()


# ---------------------------------------------------------------------------
# Listing collections
# ---------------------------------------------------------------------------


@router.get("/villas/host", response_model=VillaListResponse, summary="List the caller's villas")
async def list_host_villas(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> VillaListResponse:
    result = await db.execute(
        select(Villa)
        .where(Villa.host_id == current_user.id, Villa.status != "removed")
        .order_by(Villa.created_at.desc())
    )
    villas = list(result.scalars().all())
    cards = await summaries(db, villas)
    return VillaListResponse(villas=cards, total=len(cards), page=1, page_size=len(cards))


@router.get("/villas/featured", response_model=VillaListResponse, summary="Top rated active villas")
async def list_featured_villas(db: AsyncSession = Depends(get_db)) -> VillaListResponse:
    ratings = rating_subquery()
    result = await db.execute(
        select(Villa)
        .outerjoin(ratings, ratings.c.villa_id == Villa.id)
        .where(Villa.status == "active")
        .order_by(func.coalesce(ratings.c.avg_rating, 0).desc(), Villa.created_at.desc())
        .limit(settings.featured_villas_limit)
    )
    villas = list(result.scalars().all())
    cards = await summaries(db, villas)
    return VillaListResponse(villas=cards, total=len(cards), page=1, page_size=settings.featured_villas_limit)
