"""Reviews API router: guest reviews of villas, host reviews of guests, moderation."""

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_current_user, get_db, require_admin
from beachvillas.models.booking import Booking
from beachvillas.models.review import Review
from beachvillas.models.user import User
from beachvillas.schemas.review import (
    ReviewCreate,
    ReviewListResponse,
    ReviewModerate,
    ReviewResponse,
    VillaReviewsResponse,
)
from beachvillas.services.bookings import booking_reviews, ensure_participant, get_booking_or_404
from beachvillas.services.notifications import log_admin_action, notify
from beachvillas.services.villas import get_villa_or_404, visible_reviews

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


def _stay_completed(booking: Booking) -> bool:
    return booking.status == "confirmed" and booking.check_out <= date.today()


async def _get_review_or_404(db: AsyncSession, review_id: uuid.UUID) -> Review:
    review = await db.get(Review, review_id)
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    return review


async def _create_review(db: AsyncSession, **fields) -> Review:
    review = Review(**fields)
    db.add(review)
    await db.flush()
    await db.refresh(review)
    return review


# ---------------------------------------------------------------------------
# Villa reviews
# ---------------------------------------------------------------------------


@router.get("/villa/{villa_id}", response_model=VillaReviewsResponse, summary="Visible reviews of a villa")
async def list_villa_reviews(villa_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> VillaReviewsResponse:
    villa = await get_villa_or_404(db, villa_id)
    reviews = await visible_reviews(db, villa.id)
    average = round(sum(r.rating for r in reviews) / len(reviews), 2) if reviews else 0.0
    return VillaReviewsResponse(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        total=len(reviews),
        average_rating=average,
    )


@router.post(
    "/villa/{villa_id}",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a villa after a stay",
)
async def create_villa_review(
    villa_id: uuid.UUID,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ReviewResponse:
    """Guests may review a villa once per completed stay."""
    villa = await get_villa_or_404(db, villa_id, include_removed=True)

    result = await db.execute(
        select(Booking)
        .where(Booking.villa_id == villa.id, Booking.guest_id == current_user.id)
        .order_by(Booking.check_out.desc())
    )
    completed = [b for b in result.scalars().all() if _stay_completed(b)]
    if not completed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only review a villa after a completed stay",
        )

    reviewed = set(
        (
            await db.execute(
                select(Review.booking_id).where(
                    Review.booking_id.in_([b.id for b in completed]),
                    Review.review_type == "guest_to_villa",
                )
            )
        ).scalars().all()
    )
    booking = next((b for b in completed if b.id not in reviewed), None)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You have already reviewed your completed stay",
        )

    review = await _create_review(
        db,
        booking_id=booking.id,
        villa_id=villa.id,
        reviewer_id=current_user.id,
        reviewee_id=villa.host_id,
        rating=body.rating,
        review_text=body.review_text,
        review_type="guest_to_villa",
    )
    await notify(db, villa.host_id, "review", f"{current_user.name} reviewed {villa.name}", booking.id, villa.id)
    logger.info("Review %s posted for villa %s", review.id, villa.id)
    return ReviewResponse.model_validate(review)


# ---------------------------------------------------------------------------
# Booking reviews
# ---------------------------------------------------------------------------


@router.get("/booking/{booking_id}", response_model=ReviewListResponse, summary="Reviews left for a booking")
async def list_booking_reviews(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ReviewListResponse:
    booking = await get_booking_or_404(db, booking_id)
    ensure_participant(booking, current_user)
    reviews = await booking_reviews(db, booking.id)
    return ReviewListResponse(reviews=[ReviewResponse.model_validate(r) for r in reviews], total=len(reviews))


@router.post(
    "/booking/{booking_id}",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Host review of a guest",
)
async def create_guest_review(
    booking_id: uuid.UUID,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ReviewResponse:
    booking = await get_booking_or_404(db, booking_id)
    if booking.host_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the host can review this guest")
    if not _stay_completed(booking):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only review a guest after a completed stay",
        )

    existing = await db.execute(
        select(Review.id).where(Review.booking_id == booking.id, Review.review_type == "host_to_guest")
    )
    if existing.first() is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You have already reviewed this guest")

    review = await _create_review(
        db,
        booking_id=booking.id,
        villa_id=None,
        reviewer_id=current_user.id,
        reviewee_id=booking.guest_id,
        rating=body.rating,
        review_text=body.review_text,
        review_type="host_to_guest",
    )
    await notify(db, booking.guest_id, "review", f"{current_user.name} left you a review", booking.id)
    return ReviewResponse.model_validate(review)


# ---------------------------------------------------------------------------
# Flagging & moderation
# ---------------------------------------------------------------------------


@router.post("/{review_id}/flag", response_model=ReviewResponse, summary="Flag a review for moderation")
async def flag_review(
    review_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ReviewResponse:
    review = await _get_review_or_404(db, review_id)
    review.is_flagged = True
    await db.flush()
    logger.info("Review %s flagged by %s", review.id, current_user.id)
    return ReviewResponse.model_validate(review)


@router.patch("/{review_id}/moderate", response_model=ReviewResponse, summary="Moderate a review")
async def moderate_review(
    review_id: uuid.UUID,
    body: ReviewModerate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ReviewResponse:
    review = await _get_review_or_404(db, review_id)
    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field != "admin_notes":
            continue
        setattr(review, field, value)
    await db.flush()

    await log_admin_action(db, admin.id, "moderate_review", "review", review.id, body.admin_notes)
    return ReviewResponse.model_validate(review)
