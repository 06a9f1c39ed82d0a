"""
Event catalog: events and their priced ticket tiers.

Key design decisions:
- `maximum_count` is the ceiling on the sum of booked tickets; booked counts
  are always derived from the bookings table, never denormalized here
- Prices are fixed-point NUMERIC(10, 2) so payment checks compare exactly
- Index on (status, date) backs the active-events listing
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin

EVENT_STATUS_ACTIVE = "active"
EVENT_STATUSES = ("active", "inactive", "cancelled")


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    category = Column(String(100), nullable=False)
    location = Column(String(255), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    maximum_count = Column(Integer, nullable=False)
    banner_url = Column(String(1024), nullable=True)
    hashtag = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=EVENT_STATUS_ACTIVE)

    # Relationships
    business = relationship("Business", back_populates="events")
    price_categories = relationship(
        "PriceCategory",
        back_populates="event",
        order_by="PriceCategory.price",
        cascade="all, delete-orphan",
    )
    bookings = relationship("TouristEventBooking", back_populates="event")

    __table_args__ = (
        CheckConstraint("maximum_count > 0", name="check_event_maximum_count_positive"),
        CheckConstraint(
            "status IN ('active', 'inactive', 'cancelled')",
            name="check_event_status",
        ),
        Index("ix_events_status_date", "status", "date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, max={self.maximum_count}, status={self.status})>"


class PriceCategory(Base, TimestampMixin):
    __tablename__ = "price_categories"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    event = relationship("Event", back_populates="price_categories")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<PriceCategory(id={self.id}, event={self.event_id}, price={self.price})>"
