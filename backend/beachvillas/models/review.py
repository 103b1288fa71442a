"""Review model: guest-to-villa and host-to-guest reviews."""

import uuid

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from beachvillas.database import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

REVIEW_TYPES = ("guest_to_villa", "host_to_guest")


class Review(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """A review left after a completed stay. Hidden reviews stay in the table."""

    __tablename__ = "reviews"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    villa_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    reviewee_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review_text: Mapped[str] = mapped_column(Text, nullable=False)
    review_type: Mapped[str] = mapped_column(String(30), nullable=False)
    is_visible: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_flagged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    reviewer: Mapped["User"] = relationship(foreign_keys=[reviewer_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        UniqueConstraint("booking_id", "review_type", name="uq_reviews_booking_type"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, booking_id={self.booking_id}, rating={self.rating})>"
