"""
Tourist booking endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.base import StatusResponse
from app.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingListResponse,
    BookingDetail,
    BookingDetailResponse,
    BookingWithEvent,
    TouristBookingsResponse,
)
from app.services.booking_service import (
    book_event,
    list_bookings_for_caller,
    get_booking_by_id,
    get_bookings_by_tourist_id,
)
from app.services.event_service import total_pages
from app.services.notification_service import EmailNotifier, get_notifier
from app.core.errors import AppError
from app.core.metrics import booking_latency, record_booking_attempt
from app.core.security import get_current_user, get_current_user_id

router = APIRouter(prefix="/tourist", tags=["Bookings"])


@router.post("/eventBooking", response_model=StatusResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """
    Book tickets in one price category of an event.

    Rejected when the caller is not a tourist (403), already booked this
    event (409), the event is missing (404), capacity would be exceeded,
    the price category is foreign to the event or the payment amount is not
    exactly price x tickets (400).

    The confirmation email goes out only after the booking is committed.
    """
    with booking_latency.time():
        try:
            _, confirmation = await book_event(db, user_id, booking_data)
            await db.commit()
        except AppError as e:
            record_booking_attempt(e.kind)
            raise
        except SQLAlchemyError:
            record_booking_attempt("internal")
            raise
    record_booking_attempt("success")
    notifier.dispatch(confirmation.to, confirmation.subject, confirmation.content)
    return StatusResponse(message="Booking Success")


@router.get("/getBookings", response_model=BookingListResponse)
async def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's own bookings, newest payment first."""
    bookings, total = await list_bookings_for_caller(db, user_id, page, limit)
    return BookingListResponse(
        current_page=page,
        total_pages=total_pages(total, limit),
        total=total,
        bookings=[BookingResponse.model_validate(b) for b in bookings],
    )


@router.get(
    "/getBooking/{booking_id}",
    response_model=BookingDetailResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_booking(booking_id: str, db: AsyncSession = Depends(get_db)):
    """Single booking with its event, price category and tourist."""
    booking = await get_booking_by_id(db, booking_id)
    return BookingDetailResponse(booking=BookingDetail.model_validate(booking))


@router.get(
    "/getBookingByTouristId/{tourist_id}",
    response_model=TouristBookingsResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_tourist_bookings(tourist_id: str, db: AsyncSession = Depends(get_db)):
    """Every booking of a tourist. 404 when there are none."""
    bookings = await get_bookings_by_tourist_id(db, tourist_id)
    return TouristBookingsResponse(
        bookings=[BookingWithEvent.model_validate(b) for b in bookings],
    )
