"""Initial schema: users with tourist/business profiles, events, price categories, bookings.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
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
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("contact_no", sa.String(32), nullable=True),
        sa.Column("image_url", sa.String(1024), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('TOURIST', 'BUSINESS')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Profile tables share the user's primary key
    op.create_table(
        "tourists",
        sa.Column("id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        *_timestamps(),
    )
    op.create_table(
        "businesses",
        sa.Column("id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        *_timestamps(),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("maximum_count", sa.Integer(), nullable=False),
        sa.Column("banner_url", sa.String(1024), nullable=True),
        sa.Column("hashtag", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        *_timestamps(),
        sa.CheckConstraint("maximum_count > 0", name="check_event_maximum_count_positive"),
        sa.CheckConstraint("status IN ('active', 'inactive', 'cancelled')", name="check_event_status"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_business_id", "events", ["business_id"])
    # Listing query: WHERE status = 'active' ORDER BY date
    op.create_index("ix_events_status_date", "events", ["status", "date"])

    op.create_table(
        "price_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="check_price_non_negative"),
    )
    op.create_index("ix_price_categories_id", "price_categories", ["id"])
    op.create_index("ix_price_categories_event_id", "price_categories", ["event_id"])

    op.create_table(
        "tourist_event_bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tourist_id", sa.Integer(), sa.ForeignKey("tourists.id"), nullable=False),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("price_category_id", sa.Integer(), sa.ForeignKey("price_categories.id"), nullable=False),
        sa.Column("ticket_count", sa.Integer(), nullable=False),
        sa.Column("payment_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'success'")),
        *_timestamps(),
        # One booking per tourist per event, enforced by the store as well as the service
        sa.UniqueConstraint("tourist_id", "event_id", name="uq_tourist_event_booking"),
        sa.CheckConstraint("ticket_count > 0", name="check_booking_ticket_count_positive"),
    )
    op.create_index("ix_tourist_event_bookings_id", "tourist_event_bookings", ["id"])
    op.create_index("ix_tourist_event_bookings_tourist_id", "tourist_event_bookings", ["tourist_id"])
    op.create_index("ix_tourist_event_bookings_event_id", "tourist_event_bookings", ["event_id"])
    op.create_index("ix_bookings_tourist_payment_date", "tourist_event_bookings", ["tourist_id", "payment_date"])


def downgrade() -> None:
    op.drop_table("tourist_event_bookings")
    op.drop_table("price_categories")
    op.drop_table("events")
    op.drop_table("businesses")
    op.drop_table("tourists")
    op.drop_table("users")
