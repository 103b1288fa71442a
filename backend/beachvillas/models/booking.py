"""Booking model: tracks villa reservations and their mocked payments."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from beachvillas.database import Base, CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending", "confirmed", "rejected", "cancelled")
# Bookings in these states hold their dates on the villa calendar.
BLOCKING_STATUSES = ("pending", "confirmed")
PAYMENT_STATUSES = ("pending", "paid", "refunded")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of a villa for a date range by a guest."""

    __tablename__ = "bookings"

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
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="pending", nullable=False, index=True)
    booking_type: Mapped[str] = mapped_column(String(20), nullable=False)  # instant, request

    # Price breakdown
    nightly_subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    service_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)

    payment_status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    guest_full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    villa: Mapped["Villa"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    guest: Mapped["User"] = relationship(foreign_keys=[guest_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    host: Mapped["User"] = relationship(foreign_keys=[host_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    payments: Mapped[list["BookingPayment"]] = relationship(
        back_populates="booking",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="BookingPayment.created_at",
    )

    __table_args__ = (Index("ix_bookings_villa_dates", "villa_id", "check_in", "check_out"),)

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, villa_id={self.villa_id}, guest_id={self.guest_id}, status={self.status})>"


class BookingPayment(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """A (mocked) payment recorded against a booking."""

    __tablename__ = "booking_payments"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # success, failed, refunded
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    transaction_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    booking: Mapped["Booking"] = relationship(back_populates="payments")
