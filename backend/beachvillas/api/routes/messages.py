"""Inbox API router: booking message threads between guest and host."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_current_user, get_db
from beachvillas.models.message import Message, MessageThread
from beachvillas.models.user import User
from beachvillas.schemas.common import UserSummary
from beachvillas.schemas.message import (
    ChatMessageResponse,
    MessageSend,
    ThreadDetail,
    ThreadListResponse,
    ThreadSummary,
    ThreadVilla,
)
from beachvillas.services.notifications import notify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inbox", tags=["inbox"])


async def _get_thread(db: AsyncSession, thread_id: uuid.UUID, user: User) -> MessageThread:
    """Fetch a thread the caller participates in (admins may read any)."""
    result = await db.execute(
        select(MessageThread).where(MessageThread.id == thread_id).execution_options(populate_existing=True)
    )
    thread = result.scalar_one_or_none()
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    if user.id not in thread.participant_ids() and not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return thread


async def _summary(db: AsyncSession, thread: MessageThread, user: User) -> ThreadSummary:
    other = await db.get(User, thread.other_participant(user.id))
    last = thread.messages[-1] if thread.messages else None
    unread = sum(1 for m in thread.messages if m.receiver_id == user.id and not m.is_read)
    return ThreadSummary(
        thread_id=thread.id,
        booking_id=thread.booking_id,
        villa=ThreadVilla.model_validate(thread.villa),
        guest_id=thread.guest_id,
        host_id=thread.host_id,
        other_participant=UserSummary.model_validate(other) if other else None,
        last_message=ChatMessageResponse.model_validate(last) if last else None,
        unread_count=unread,
        created_at=thread.created_at,
    )


@router.get("", response_model=ThreadListResponse, summary="List the caller's threads")
async def list_threads(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ThreadListResponse:
    """Threads ordered by latest activity, newest first."""
    last_activity = (
        select(func.max(Message.sent_at))
        .where(Message.thread_id == MessageThread.id)
        .correlate(MessageThread)
        .scalar_subquery()
    )
    result = await db.execute(
        select(MessageThread)
        .where(or_(MessageThread.guest_id == current_user.id, MessageThread.host_id == current_user.id))
        .order_by(func.coalesce(last_activity, MessageThread.created_at).desc())
        .execution_options(populate_existing=True)
    )
    threads = list(result.scalars().all())
    return ThreadListResponse(threads=[await _summary(db, t, current_user) for t in threads])


@router.get("/thread/{thread_id}", response_model=ThreadDetail, summary="Read a thread")
async def get_thread(
    thread_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ThreadDetail:
    """Return the thread with its messages and mark those addressed to the caller as read."""
    thread = await _get_thread(db, thread_id, current_user)

    await db.execute(
        update(Message)
        .where(
            Message.thread_id == thread.id,
            Message.receiver_id == current_user.id,
            Message.is_read.is_(False),
        )
        .values(is_read=True)
    )
    thread = await _get_thread(db, thread_id, current_user)

    summary = await _summary(db, thread, current_user)
    return ThreadDetail(
        **summary.model_dump(),
        messages=[ChatMessageResponse.model_validate(m) for m in thread.messages],
    )


@router.post(
    "/thread/{thread_id}/send",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(
    thread_id: uuid.UUID,
    body: MessageSend,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ChatMessageResponse:
    thread = await _get_thread(db, thread_id, current_user)
    if current_user.id not in thread.participant_ids():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    content = body.content.strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message content is required")

    receiver_id = thread.other_participant(current_user.id)
    message = Message(
        thread_id=thread.id,
        sender_id=current_user.id,
        receiver_id=receiver_id,
        content=content,
    )
    db.add(message)
    await db.flush()
    await db.refresh(message)

    await notify(
        db,
        receiver_id,
        "message",
        f"New message from {current_user.name} about {thread.villa.name}",
        thread.booking_id,
        thread.villa_id,
    )
    logger.info("Message %s sent in thread %s", message.id, thread.id)
    return ChatMessageResponse.model_validate(message)
