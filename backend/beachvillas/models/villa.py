"""Villa listing models: villas, photos, amenities, rules, calendar and seasons."""

import datetime as dt
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from beachvillas.database import Base, CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin

VILLA_STATUSES = ("pending", "active", "inactive", "removed")

villa_amenities = Table(
    "villa_amenities",
    Base.metadata,
    Column("villa_id", ForeignKey("villas.id", ondelete="CASCADE"), primary_key=True),
    Column("amenity_id", ForeignKey("amenities.id", ondelete="CASCADE"), primary_key=True),
)


class Amenity(UUIDPrimaryKeyMixin, Base):
    """Reference list of amenities a villa can offer."""

    __tablename__ = "amenities"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    key: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    icon_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:
        return f"<Amenity(key={self.key!r})>"


class Villa(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable property listing owned by a host."""

    __tablename__ = "villas"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_description: Mapped[str] = mapped_column(String(500), nullable=False)
    long_description: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(120), nullable=False)
    latitude: Mapped[str] = mapped_column(String(32), nullable=False)
    longitude: Mapped[str] = mapped_column(String(32), nullable=False)
    max_occupancy: Mapped[int] = mapped_column(Integer, nullable=False)
    is_instant_book: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="pending", nullable=False, index=True)
    base_price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    minimum_stay_nights: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    service_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    host: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    photos: Mapped[list["VillaPhoto"]] = relationship(
        back_populates="villa",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="VillaPhoto.sort_order",
    )
    amenities: Mapped[list["Amenity"]] = relationship(
        secondary=villa_amenities,
        lazy="selectin",
        order_by="Amenity.name",
    )
    rules: Mapped[list["VillaRule"]] = relationship(
        back_populates="villa",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def cover_photo_url(self) -> str | None:
        return self.photos[0].photo_url if self.photos else None

    @property
    def price_per_night(self) -> Decimal:
        return self.base_price_per_night

    def __repr__(self) -> str:
        return f"<Villa(id={self.id}, name={self.name!r}, status={self.status!r})>"


class VillaPhoto(UUIDPrimaryKeyMixin, Base):
    """A listing photo. The lowest sort_order is the cover photo."""

    __tablename__ = "villa_photos"

    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    photo_url: Mapped[str] = mapped_column(String(512), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(server_default=func.now())

    villa: Mapped["Villa"] = relationship(back_populates="photos")


class VillaRule(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """House rule, e.g. ``pets_allowed=no`` or a free-text ``custom`` rule."""

    __tablename__ = "villa_rules"

    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rule_type: Mapped[str] = mapped_column(String(50), nullable=False)
    value: Mapped[str] = mapped_column(String(500), nullable=False)

    villa: Mapped["Villa"] = relationship(back_populates="rules")


class VillaAvailability(UUIDPrimaryKeyMixin, Base):
    """Per-date calendar entry: blocks a date or overrides its price/minimum stay."""

    __tablename__ = "villa_availability"

    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Annotated via the module so the attribute name does not shadow the type.
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    price_override: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    minimum_stay_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (UniqueConstraint("villa_id", "date", name="uq_villa_availability_villa_date"),)


class VillaPricingSeason(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Seasonal nightly price covering an inclusive date range."""

    __tablename__ = "villa_pricing_seasons"

    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    season_name: Mapped[str] = mapped_column(String(120), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    nightly_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    minimum_stay_nights: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
