"""Pydantic v2 schemas for in-app notifications."""

import uuid
from datetime import datetime

from pydantic import BaseModel

from beachvillas.schemas.common import ORMModel, id_field


class NotificationResponse(ORMModel):
    notification_id: uuid.UUID = id_field("notification_id")
    type: str
    content: str
    is_read: bool
    related_booking_id: uuid.UUID | None = None
    related_villa_id: uuid.UUID | None = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
