"""Pydantic v2 request/response schemas for booking endpoints."""

import datetime as dt
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

from beachvillas.schemas.auth import UserResponse
from beachvillas.schemas.common import FlexibleDate, ORMModel, UserSummary, id_field
from beachvillas.schemas.review import ReviewResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for requesting or instantly booking a stay."""

    villa_id: uuid.UUID
    check_in: FlexibleDate
    check_out: FlexibleDate
    number_of_guests: int
    guest_full_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    guest_phone: str = Field(..., min_length=5, max_length=50)
    special_requests: str | None = None
    agreed_to_rules: bool = False

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingUpdate(BaseModel):
    """Guest contact edits, or a cancellation by guest or host."""

    status: Literal["cancelled"] | None = None
    cancellation_reason: str | None = None
    guest_full_name: str | None = Field(None, min_length=1, max_length=255)
    guest_email: EmailStr | None = None
    guest_phone: str | None = Field(None, min_length=5, max_length=50)
    special_requests: str | None = None


class RejectRequest(BaseModel):
    reason: str | None = None


class PaymentRequest(BaseModel):
    payment_method: str = Field("credit_card", min_length=1, max_length=50)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(ORMModel):
    """Standard booking response returned from lifecycle operations."""

    booking_id: uuid.UUID = id_field("booking_id")
    villa_id: uuid.UUID
    guest_id: uuid.UUID
    host_id: uuid.UUID
    check_in: date
    check_out: date
    nights: int
    number_of_guests: int
    status: str
    booking_type: str
    nightly_subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    security_deposit: Decimal
    total_price: Decimal
    currency: str
    payment_status: str
    cancellation_reason: str | None = None
    special_requests: str | None = None
    guest_full_name: str
    guest_email: str
    guest_phone: str
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class BookingVilla(ORMModel):
    villa_id: uuid.UUID = id_field("villa_id")
    name: str
    city: str
    country: str
    cover_photo_url: str | None = None
    status: str


class PaymentResponse(ORMModel):
    payment_id: uuid.UUID = id_field("payment_id")
    booking_id: uuid.UUID
    payment_method: str
    status: str
    amount_paid: Decimal
    transaction_reference: str | None = None
    paid_at: datetime | None = None


class BookingListItem(BookingResponse):
    """Booking row for dashboards, with the villa card attached."""

    villa: BookingVilla


class BookingDetailResponse(BookingListItem):
    """Extended booking response with parties, thread, payments and reviews.

    Used for the booking detail view where the client needs the full
    context without extra round-trips.
    """

    guest: UserSummary
    host: UserSummary
    thread_id: uuid.UUID | None = None
    payments: list[PaymentResponse] = Field(default_factory=list)
    reviews: list[ReviewResponse] = Field(default_factory=list)


class BookingListResponse(BaseModel):
    """Bookings for one dashboard tab."""

    bookings: list[BookingListItem]
    total: int
    tab: str


class DashboardResponse(BaseModel):
    user: UserResponse
    bookings: BookingListResponse
    unread_notifications: int


class EarningsRow(BaseModel):
    booking_id: uuid.UUID
    villa_id: uuid.UUID
    villa_name: str
    amount: Decimal
    currency: str
    status: str
    date: dt.date


class EarningsResponse(BaseModel):
    earnings: list[EarningsRow]
    total_earnings: Decimal
