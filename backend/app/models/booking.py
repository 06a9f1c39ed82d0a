"""
A tourist's purchase of tickets in one price category of one event.

Key design decisions:
- Unique constraint on (tourist_id, event_id): one booking per tourist per event
- Bookings are immutable once written; there is no cancellation flow
- `payment_date` is set application-side so listings order deterministically
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin

BOOKING_STATUS_SUCCESS = "success"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TouristEventBooking(Base, TimestampMixin):
    __tablename__ = "tourist_event_bookings"

    id = Column(Integer, primary_key=True, index=True)
    tourist_id = Column(Integer, ForeignKey("tourists.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    price_category_id = Column(Integer, ForeignKey("price_categories.id"), nullable=False)
    ticket_count = Column(Integer, nullable=False)
    payment_amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    status = Column(String(20), nullable=False, default=BOOKING_STATUS_SUCCESS)

    # Relationships
    tourist = relationship("Tourist", back_populates="bookings")
    event = relationship("Event", back_populates="bookings")
    price_category = relationship("PriceCategory")

    __table_args__ = (
        UniqueConstraint("tourist_id", "event_id", name="uq_tourist_event_booking"),
        CheckConstraint("ticket_count > 0", name="check_booking_ticket_count_positive"),
        Index("ix_bookings_tourist_payment_date", "tourist_id", "payment_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<TouristEventBooking(id={self.id}, tourist={self.tourist_id}, "
            f"event={self.event_id}, tickets={self.ticket_count})>"
        )
