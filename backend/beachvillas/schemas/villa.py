"""Pydantic v2 request/response schemas for villa, calendar and search endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from beachvillas.schemas.common import FlexibleDate, ORMModel, UserSummary, id_field
from beachvillas.schemas.review import ReviewResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PhotoInput(BaseModel):
    photo_url: str = Field(..., min_length=1, max_length=512)
    sort_order: int = 0
    caption: str | None = None


class RuleInput(BaseModel):
    rule_type: str = Field(..., min_length=1, max_length=50)
    value: str = Field(..., min_length=1, max_length=500)


class _CoordinatesMixin(BaseModel):
    @field_validator("latitude", "longitude", mode="before", check_fields=False)
    @classmethod
    def _coordinates_as_text(cls, value: Any) -> Any:
        """Coordinates are stored as text; accept numbers from clients too."""
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value


class VillaCreate(_CoordinatesMixin):
    """Schema for creating a new listing."""

    name: str = Field(..., min_length=1, max_length=255)
    short_description: str = Field(..., min_length=1, max_length=500)
    long_description: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    country: str = Field(..., min_length=1, max_length=120)
    latitude: str = Field(..., min_length=1, max_length=32)
    longitude: str = Field(..., min_length=1, max_length=32)
    max_occupancy: int = Field(..., ge=1)
    is_instant_book: bool = False
    base_price_per_night: Decimal = Field(..., ge=0)
    minimum_stay_nights: int = Field(..., ge=1)
    security_deposit: Decimal = Field(Decimal("0"), ge=0)
    cleaning_fee: Decimal = Field(Decimal("0"), ge=0)
    service_fee: Decimal = Field(Decimal("0"), ge=0)
    status: Literal["pending", "active", "inactive"] | None = None
    photos: list[PhotoInput] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list, description="Amenity ids or keys")
    rules: list[RuleInput] = Field(default_factory=list)


class VillaUpdate(_CoordinatesMixin):
    """Schema for partially updating a listing. Lists replace existing entries."""

    name: str | None = Field(None, min_length=1, max_length=255)
    short_description: str | None = Field(None, min_length=1, max_length=500)
    long_description: str | None = Field(None, min_length=1)
    address: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=120)
    country: str | None = Field(None, min_length=1, max_length=120)
    latitude: str | None = Field(None, min_length=1, max_length=32)
    longitude: str | None = Field(None, min_length=1, max_length=32)
    max_occupancy: int | None = Field(None, ge=1)
    is_instant_book: bool | None = None
    base_price_per_night: Decimal | None = Field(None, ge=0)
    minimum_stay_nights: int | None = Field(None, ge=1)
    security_deposit: Decimal | None = Field(None, ge=0)
    cleaning_fee: Decimal | None = Field(None, ge=0)
    service_fee: Decimal | None = Field(None, ge=0)
    status: Literal["active", "inactive"] | None = None
    photos: list[PhotoInput] | None = None
    amenities: list[str] | None = None
    rules: list[RuleInput] | None = None


class AvailabilityEntry(BaseModel):
    date: FlexibleDate
    is_available: bool = True
    price_override: Decimal | None = Field(None, ge=0)
    minimum_stay_override: int | None = Field(None, ge=1)
    note: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AvailabilityUpdate(BaseModel):
    """Calendar upsert. The SPA sends ``calendar``; ``availability`` is accepted too."""

    calendar: list[AvailabilityEntry] = Field(
        ..., min_length=1, validation_alias=AliasChoices("calendar", "availability")
    )


class SeasonCreate(BaseModel):
    season_name: str = Field(..., min_length=1, max_length=120)
    start_date: FlexibleDate
    end_date: FlexibleDate
    nightly_price: Decimal = Field(..., ge=0)
    minimum_stay_nights: int = Field(1, ge=1)

    @model_validator(mode="after")
    def check_dates(self) -> "SeasonCreate":
        """Seasons are inclusive ranges, so a single-day season is allowed."""
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AmenityResponse(ORMModel):
    amenity_id: uuid.UUID = id_field("amenity_id")
    name: str
    key: str
    icon_url: str | None = None


class PhotoResponse(ORMModel):
    photo_id: uuid.UUID = id_field("photo_id")
    photo_url: str
    sort_order: int
    caption: str | None = None
    uploaded_at: datetime


class RuleResponse(ORMModel):
    villa_rule_id: uuid.UUID = id_field("villa_rule_id")
    rule_type: str
    value: str


class SeasonResponse(ORMModel):
    season_id: uuid.UUID = id_field("season_id")
    villa_id: uuid.UUID
    season_name: str
    start_date: date
    end_date: date
    nightly_price: Decimal
    minimum_stay_nights: int
    created_at: datetime


class PriceBreakdown(BaseModel):
    """Cost of a stay. ``total`` includes the refundable security deposit."""

    check_in: date
    check_out: date
    nights: int
    nightly_subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    security_deposit: Decimal
    total: Decimal
    currency: str


class VillaSummary(ORMModel):
    """Listing card used by search, featured and host dashboards."""

    villa_id: uuid.UUID = id_field("villa_id")
    host_id: uuid.UUID
    name: str
    city: str
    country: str
    latitude: str
    longitude: str
    cover_photo_url: str | None = None
    short_description: str
    rating: float = 0.0
    review_count: int = 0
    price_per_night: Decimal
    is_instant_book: bool
    max_occupancy: int
    status: str
    amenities: list[AmenityResponse] = Field(default_factory=list)


class HostProfile(UserSummary):
    """Host card on the listing page."""

    is_verified_host: bool = False
    about: str | None = None
    locale: str | None = None
    created_at: datetime


class VillaResponse(VillaSummary):
    """Full listing detail."""

    long_description: str
    address: str
    base_price_per_night: Decimal
    minimum_stay_nights: int
    security_deposit: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    admin_notes: str | None = None
    host: UserSummary
    photos: list[PhotoResponse] = Field(default_factory=list)
    rules: list[RuleResponse] = Field(default_factory=list)
    all_amenities: list[AmenityResponse] = Field(default_factory=list)
    price_breakdown: PriceBreakdown | None = None
    price_breakdown_example: PriceBreakdown | None = None
    calendar: list[AvailabilityEntry] = Field(default_factory=list)
    reviews: list[ReviewResponse] = Field(default_factory=list)
    host_profile: HostProfile | None = None
    host_villas: list[VillaSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class VillaListResponse(BaseModel):
    """Paginated list of listing cards."""

    villas: list[VillaSummary]
    total: int
    page: int = 1
    page_size: int


class BookedRange(BaseModel):
    check_in: date
    check_out: date


class AvailabilityResponse(BaseModel):
    villa_id: uuid.UUID
    availability: list[AvailabilityEntry]
    booked_ranges: list[BookedRange]

    @computed_field
    @property
    def calendar(self) -> list[AvailabilityEntry]:
        return self.availability


class SuggestionsResponse(BaseModel):
    suggestions: list[str]
