"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from pydantic import Field

from app.schemas.base import APIModel, PageMeta
from app.schemas.event import EventResponse, PriceCategoryResponse
from app.schemas.user import PublicProfile


class BookingCreate(APIModel):
    event_id: int
    price_category_id: int
    ticket_count: int = Field(..., gt=0)
    # Range and precision are left to the exact-amount check in book_event
    payment_amount: Decimal


class BookingResponse(APIModel):
    id: int
    tourist_id: int
    event_id: int
    price_category_id: int
    ticket_count: int
    payment_amount: float
    payment_date: datetime
    status: str


class BookingWithEvent(BookingResponse):
    event: EventResponse
    price_category: PriceCategoryResponse


class TouristWithUser(APIModel):
    id: int
    user: PublicProfile


class BookingDetail(BookingWithEvent):
    tourist: TouristWithUser


class BookingListResponse(PageMeta):
    bookings: list[BookingResponse]


class BookingDetailResponse(APIModel):
    status: bool = True
    booking: BookingDetail


class TouristBookingsResponse(APIModel):
    status: bool = True
    bookings: list[BookingWithEvent]
