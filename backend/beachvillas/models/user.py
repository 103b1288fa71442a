"""User model: authentication, role and profile."""

import uuid
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from beachvillas.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

ROLES = ("guest", "host", "guest_host", "admin")
HOST_ROLES = ("host", "guest_host", "admin")


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Marketplace account. One account can be a guest, a host or both."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_photo_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(String(50), default="guest", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notification_settings: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    payout_method_details: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_verified_host: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    profile: Mapped["UserProfile | None"] = relationship(
        back_populates="user",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_host(self) -> bool:
        return self.role in HOST_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"


class UserProfile(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Optional free-form profile details, created on first profile write."""

    __tablename__ = "user_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    about: Mapped[str | None] = mapped_column(Text, nullable=True)
    locale: Mapped[str | None] = mapped_column(String(20), nullable=True)

    user: Mapped["User"] = relationship(back_populates="profile")

    def __repr__(self) -> str:
        return f"<UserProfile(user_id={self.user_id}, locale={self.locale!r})>"
