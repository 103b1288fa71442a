"""Pydantic v2 schemas for the booking inbox."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from beachvillas.schemas.common import ORMModel, UserSummary, id_field


class MessageSend(BaseModel):
    content: str = Field(..., max_length=5000)


class ChatMessageResponse(ORMModel):
    message_id: uuid.UUID = id_field("message_id")
    thread_id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    content: str
    is_read: bool
    sent_at: datetime


class ThreadVilla(ORMModel):
    villa_id: uuid.UUID = id_field("villa_id")
    name: str
    city: str
    cover_photo_url: str | None = None


class ThreadSummary(BaseModel):
    """Inbox row: the thread, the other participant and its latest message."""

    thread_id: uuid.UUID
    booking_id: uuid.UUID
    villa: ThreadVilla
    guest_id: uuid.UUID
    host_id: uuid.UUID
    other_participant: UserSummary | None = None
    last_message: ChatMessageResponse | None = None
    unread_count: int = 0
    created_at: datetime


class ThreadListResponse(BaseModel):
    threads: list[ThreadSummary]


class ThreadDetail(ThreadSummary):
    messages: list[ChatMessageResponse]
