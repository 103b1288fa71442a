"""initial schema

Revision ID: 4f1c2b7e9a10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2b7e9a10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _money(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(10, 2), nullable=nullable)


def _fk(name: str, target: str, nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(name, sa.UUID(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    # Accounts
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("profile_photo_url", sa.String(512), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("notification_settings", sa.JSON(), nullable=False),
        sa.Column("payout_method_details", sa.String(255), nullable=True),
        sa.Column("is_verified_host", sa.Boolean(), nullable=False),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("user_id", "users.id"),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("locale", sa.String(20), nullable=True),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("user_id"),
    )

    # Listings
    op.create_table(
        "amenities",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("key", sa.String(50), nullable=False),
        sa.Column("icon_url", sa.String(512), nullable=True),
    )
    op.create_index("ix_amenities_key", "amenities", ["key"], unique=True)

    op.create_table(
        "villas",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("host_id", "users.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("short_description", sa.String(500), nullable=False),
        sa.Column("long_description", sa.Text(), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("country", sa.String(120), nullable=False),
        sa.Column("latitude", sa.String(32), nullable=False),
        sa.Column("longitude", sa.String(32), nullable=False),
        sa.Column("max_occupancy", sa.Integer(), nullable=False),
        sa.Column("is_instant_book", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        _money("base_price_per_night"),
        sa.Column("minimum_stay_nights", sa.Integer(), nullable=False),
        _money("security_deposit"),
        _money("cleaning_fee"),
        _money("service_fee"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_villas_host_id", "villas", ["host_id"])
    op.create_index("ix_villas_city", "villas", ["city"])
    op.create_index("ix_villas_status", "villas", ["status"])

    op.create_table(
        "villa_amenities",
        sa.Column("villa_id", sa.UUID(), sa.ForeignKey("villas.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("amenity_id", sa.UUID(), sa.ForeignKey("amenities.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "villa_photos",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("villa_id", "villas.id"),
        sa.Column("photo_url", sa.String(512), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_villa_photos_villa_id", "villa_photos", ["villa_id"])

    op.create_table(
        "villa_rules",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("villa_id", "villas.id"),
        sa.Column("rule_type", sa.String(50), nullable=False),
        sa.Column("value", sa.String(500), nullable=False),
        _created_at(),
    )
    op.create_index("ix_villa_rules_villa_id", "villa_rules", ["villa_id"])

    op.create_table(
        "villa_availability",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("villa_id", "villas.id"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        _money("price_override", nullable=True),
        sa.Column("minimum_stay_override", sa.Integer(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.UniqueConstraint("villa_id", "date", name="uq_villa_availability_villa_date"),
    )
    op.create_index("ix_villa_availability_villa_id", "villa_availability", ["villa_id"])

    op.create_table(
        "villa_pricing_seasons",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("villa_id", "villas.id"),
        sa.Column("season_name", sa.String(120), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        _money("nightly_price"),
        sa.Column("minimum_stay_nights", sa.Integer(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_villa_pricing_seasons_villa_id", "villa_pricing_seasons", ["villa_id"])

    # Bookings
    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("villa_id", "villas.id"),
        _fk("guest_id", "users.id"),
        _fk("host_id", "users.id"),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("booking_type", sa.String(20), nullable=False),
        _money("nightly_subtotal"),
        _money("cleaning_fee"),
        _money("service_fee"),
        _money("security_deposit"),
        _money("total_price"),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("guest_full_name", sa.String(255), nullable=False),
        sa.Column("guest_email", sa.String(255), nullable=False),
        sa.Column("guest_phone", sa.String(50), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_bookings_villa_id", "bookings", ["villa_id"])
    op.create_index("ix_bookings_guest_id", "bookings", ["guest_id"])
    op.create_index("ix_bookings_host_id", "bookings", ["host_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_villa_dates", "bookings", ["villa_id", "check_in", "check_out"])

    op.create_table(
        "booking_payments",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("booking_id", "bookings.id"),
        sa.Column("payment_method", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        _money("amount_paid"),
        sa.Column("transaction_reference", sa.String(100), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_booking_payments_booking_id", "booking_payments", ["booking_id"])

    # Messaging
    op.create_table(
        "message_threads",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("booking_id", "bookings.id"),
        _fk("villa_id", "villas.id"),
        _fk("guest_id", "users.id"),
        _fk("host_id", "users.id"),
        _created_at(),
        sa.UniqueConstraint("booking_id"),
    )
    op.create_index("ix_message_threads_villa_id", "message_threads", ["villa_id"])
    op.create_index("ix_message_threads_guest_id", "message_threads", ["guest_id"])
    op.create_index("ix_message_threads_host_id", "message_threads", ["host_id"])

    op.create_table(
        "messages",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("thread_id", "message_threads.id"),
        _fk("sender_id", "users.id"),
        _fk("receiver_id", "users.id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_messages_receiver_id", "messages", ["receiver_id"])
    op.create_index("ix_messages_thread_id_sent_at", "messages", ["thread_id", "sent_at"])

    # Reviews, notifications, audit trail
    op.create_table(
        "reviews",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("booking_id", "bookings.id"),
        _fk("villa_id", "villas.id", nullable=True),
        _fk("reviewer_id", "users.id"),
        _fk("reviewee_id", "users.id", nullable=True, ondelete="SET NULL"),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("review_text", sa.Text(), nullable=False),
        sa.Column("review_type", sa.String(30), nullable=False),
        sa.Column("is_visible", sa.Boolean(), nullable=False),
        sa.Column("is_flagged", sa.Boolean(), nullable=False),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("booking_id", "review_type", name="uq_reviews_booking_type"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_booking_id", "reviews", ["booking_id"])
    op.create_index("ix_reviews_villa_id", "reviews", ["villa_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("user_id", "users.id"),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        _fk("related_booking_id", "bookings.id", nullable=True),
        _fk("related_villa_id", "villas.id", nullable=True),
        _created_at(),
    )
    op.create_index("ix_notifications_user_id_created_at", "notifications", ["user_id", "created_at"])

    op.create_table(
        "admin_actions",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("admin_id", "users.id"),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("target_type", sa.String(30), nullable=False),
        sa.Column("target_id", sa.String(64), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_admin_actions_admin_id", "admin_actions", ["admin_id"])


def downgrade() -> None:
    for table in (
        "admin_actions",
        "notifications",
        "reviews",
        "messages",
        "message_threads",
        "booking_payments",
        "bookings",
        "villa_pricing_seasons",
        "villa_availability",
        "villa_rules",
        "villa_photos",
        "villa_amenities",
        "villas",
        "amenities",
        "user_profiles",
        "users",
    ):
        op.drop_table(table)
