"""Pydantic v2 schemas for the admin panel."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from beachvillas.schemas.auth import UserResponse
from beachvillas.schemas.booking import BookingListItem
from beachvillas.schemas.common import ORMModel, id_field
from beachvillas.schemas.villa import VillaSummary

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AdminUserUpdate(BaseModel):
    is_active: bool | None = None
    role: Literal["guest", "host", "guest_host", "admin"] | None = None
    is_verified_host: bool | None = None
    notes: str | None = None


class AdminListingUpdate(BaseModel):
    status: Literal["pending", "active", "inactive", "removed"] | None = None
    admin_notes: str | None = None


class AdminBookingUpdate(BaseModel):
    status: Literal["pending", "confirmed", "rejected", "cancelled"] | None = None
    cancellation_reason: str | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AdminDashboardResponse(BaseModel):
    total_users: int
    total_villas: int
    active_bookings: int
    pending_bookings: int
    pending_villas: int
    flagged_reviews: int
    occupancy_rate: float = Field(..., description="Percent of active-villa nights booked in the next 30 days")


class AdminUserListResponse(BaseModel):
    users: list[UserResponse]
    total: int


class AdminListingResponse(VillaSummary):
    admin_notes: str | None = None
    created_at: datetime


class AdminListingListResponse(BaseModel):
    villas: list[AdminListingResponse]
    total: int


class AdminBookingListResponse(BaseModel):
    bookings: list[BookingListItem]
    total: int


class AdminActionResponse(ORMModel):
    admin_action_id: uuid.UUID = id_field("admin_action_id")
    admin_id: uuid.UUID
    action_type: str
    target_type: str
    target_id: str
    notes: str | None = None
    created_at: datetime


class AdminActionListResponse(BaseModel):
    actions: list[AdminActionResponse]
    total: int
