"""Pydantic v2 request/response schemas for review endpoints."""

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from beachvillas.schemas.common import ORMModel, UserSummary, id_field


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review_text: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ReviewModerate(BaseModel):
    """Admin moderation. Only explicitly set fields are changed."""

    is_visible: bool | None = None
    is_flagged: bool | None = None
    admin_notes: str | None = None


class ReviewResponse(ORMModel):
    review_id: uuid.UUID = id_field("review_id")
    booking_id: uuid.UUID
    villa_id: uuid.UUID | None = None
    reviewer_id: uuid.UUID
    reviewee_id: uuid.UUID | None = None
    rating: int
    review_text: str
    review_type: str
    is_visible: bool
    is_flagged: bool
    admin_notes: str | None = None
    reviewer: UserSummary | None = None
    created_at: datetime


class VillaReviewsResponse(BaseModel):
    reviews: list[ReviewResponse]
    total: int
    average_rating: float


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    total: int
