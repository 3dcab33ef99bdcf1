"""Initial schema: users, events, bookings and wishlist entries.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("profile_image", sa.String(500), nullable=True),
        sa.Column("bio", sa.String(1000), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("preferred_categories", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("notifications_enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('user', 'organizer', 'admin')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("time", sa.String(20), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("images", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("organizer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("organizer_name", sa.String(100), nullable=False, server_default=sa.text("''")),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("total_seats", sa.Integer(), nullable=False),
        sa.Column("available_seats", sa.Integer(), nullable=False),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("rating", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("admin_note", sa.String(1000), nullable=False, server_default=sa.text("''")),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("available_seats >= 0", name="check_available_seats_non_negative"),
        sa.CheckConstraint("total_seats > 0", name="check_total_seats_positive"),
        sa.CheckConstraint("available_seats <= total_seats", name="check_available_lte_total"),
        sa.CheckConstraint("price >= 0", name="check_price_non_negative"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="check_event_status"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])
    # Every public read filters on status and is_active
    op.create_index("ix_events_status_active", "events", ["status", "is_active"])
    op.create_index("ix_events_date", "events", ["date"])
    op.create_index("ix_events_category", "events", ["category"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_ref", sa.String(40), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="SET NULL"), nullable=True),
        sa.Column("number_of_seats", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'confirmed'")),
        sa.Column("payment_id", sa.String(255), nullable=True),
        sa.Column("notes", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("number_of_seats > 0", name="check_booking_seats_positive"),
        sa.CheckConstraint("total_price >= 0", name="check_booking_price_non_negative"),
        sa.CheckConstraint("status IN ('pending', 'confirmed', 'cancelled')", name="check_booking_status"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_booking_ref", "bookings", ["booking_ref"], unique=True)
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_event_id", "bookings", ["event_id"])

    op.create_table(
        "wishlist_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        # No foreign key: entries outlive deleted events
        sa.Column("event_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "event_id", name="uq_wishlist_user_event"),
    )
    op.create_index("ix_wishlist_entries_id", "wishlist_entries", ["id"])
    op.create_index("ix_wishlist_entries_user_id", "wishlist_entries", ["user_id"])
    op.create_index("ix_wishlist_entries_event_id", "wishlist_entries", ["event_id"])


def downgrade() -> None:
    op.drop_table("wishlist_entries")
    op.drop_table("bookings")
    op.drop_table("events")
    op.drop_table("users")
