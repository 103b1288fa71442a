"""In-app notification and admin audit models."""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from beachvillas.database import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Notification(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """A message shown in a user's notification tray."""

    __tablename__ = "notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    related_booking_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=True,
    )
    related_villa_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=True,
    )

    __table_args__ = (Index("ix_notifications_user_id_created_at", "user_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, type={self.type!r})>"


class AdminAction(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Audit trail entry for an admin moderation action."""

    __tablename__ = "admin_actions"

    admin_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_type: Mapped[str] = mapped_column(String(30), nullable=False)  # user, villa, booking, review
    # Plain string: targets may be hard-deleted after the action is logged.
    target_id: Mapped[str] = mapped_column(String(64), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<AdminAction(action_type={self.action_type!r}, target={self.target_type}:{self.target_id})>"
