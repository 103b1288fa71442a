"""Message thread and message models for guest/host conversations."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from beachvillas.database import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class MessageThread(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """A conversation between the guest and the host of one booking."""

    __tablename__ = "message_threads"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Relationships
    villa: Mapped["Villa"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    messages: Mapped[list["Message"]] = relationship(
        back_populates="thread",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="Message.sent_at",
    )

    def participant_ids(self) -> tuple[uuid.UUID, uuid.UUID]:
        return self.guest_id, self.host_id

    def other_participant(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.host_id if user_id == self.guest_id else self.guest_id

    def __repr__(self) -> str:
        return f"<MessageThread(id={self.id}, booking_id={self.booking_id})>"


class Message(UUIDPrimaryKeyMixin, Base):
    """A single message within a thread. Messages are immutable apart from the read flag."""

    __tablename__ = "messages"

    thread_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("message_threads.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(server_default=func.now())

    thread: Mapped["MessageThread"] = relationship(back_populates="messages")

    __table_args__ = (Index("ix_messages_thread_id_sent_at", "thread_id", "sent_at"),)

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, thread_id={self.thread_id}, sender_id={self.sender_id})>"
