"""
Booking service: a tourist buys tickets in one price category of an event.

BOOKING RULES
=============

A request {eventId, priceCategoryId, ticketCount, paymentAmount} is accepted
only when, in this order:

  1. the caller is a tourist                          -> else 403
  2. the tourist has no booking for this event yet    -> else 409
  3. the event exists                                 -> else 404
  4. booked + ticketCount <= event.maximum_count      -> else 400 "Only N left."
  5. the price category belongs to the event          -> else 400
  6. paymentAmount == price * ticketCount, exactly    -> else 400

Every step before the insert is a read, so a rejected request writes nothing.

CONCURRENCY
===========

Steps 2-4 and the insert are a check-then-write sequence. Two requests for
the same event could both pass the capacity check before either inserts.
Two guards close that window without changing the rules above:

  - The event row is read with SELECT ... FOR UPDATE, so concurrent bookings
    for one event queue behind each other until the first transaction commits
    (the session commits when the request finishes). SQLite ignores the
    clause; PostgreSQL honours it.
  - uq_tourist_event_booking rejects a second row for (tourist, event) even if
    two requests from the same tourist race past step 2. The IntegrityError is
    reported with the same 409 message.
"""

from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.user import User, Tourist, ROLE_TOURIST
from app.models.event import Event, PriceCategory
from app.models.booking import TouristEventBooking, BOOKING_STATUS_SUCCESS
from app.schemas.booking import BookingCreate
from app.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.services.event_service import parse_id
from app.services.notification_service import OutgoingEmail, booking_confirmation_email

logger = get_logger(__name__)

ALREADY_BOOKED = "Event already booked by this user"
_CENTS = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Two decimal places, or every digit given when the amount is finer than cents."""
    amount = Decimal(amount)
    cents = amount.quantize(_CENTS)
    return format(cents if cents == amount else amount, "f")


async def _get_tourist_user(db: AsyncSession, user_id: int, message: str) -> User:
    result = await db.execute(
        select(User).options(selectinload(User.tourist)).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()
    if not user or user.role != ROLE_TOURIST or user.tourist is None:
        raise AuthorizationError(message)
    return user


async def _has_booking(db: AsyncSession, tourist_id: int, event_id: int) -> bool:
    result = await db.execute(
        select(TouristEventBooking.id).where(
            TouristEventBooking.tourist_id == tourist_id,
            TouristEventBooking.event_id == event_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def book_event(
    db: AsyncSession,
    user_id: int,
    booking_data: BookingCreate,
) -> tuple[TouristEventBooking, OutgoingEmail]:
    """
    Validate and record a booking. See module docstring for the rules.

    Returns the booking and its confirmation email; the caller sends the email
    after the transaction commits.
    """
    event_id = booking_data.event_id
    ticket_count = booking_data.ticket_count

    # Step 1: caller must be a tourist
    user = await _get_tourist_user(db, user_id, "Only tourist users can book events")
    tourist_id = user.tourist.id

    # Step 2: one booking per tourist per event
    if await _has_booking(db, tourist_id, event_id):
        logger.warning("booking_rejected", reason="already_booked", tourist_id=tourist_id, event_id=event_id)
        raise ConflictError(ALREADY_BOOKED)

    # Step 3: lock the event row and sum what is already booked
    result = await db.execute(select(Event).where(Event.id == event_id).with_for_update())
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError("Event not found")

    current_count = (
        await db.execute(
            select(func.coalesce(func.sum(TouristEventBooking.ticket_count), 0)).where(
                TouristEventBooking.event_id == event_id
            )
        )
    ).scalar()

    # Step 4: capacity
    if current_count + ticket_count > event.maximum_count:
        remaining = event.maximum_count - current_count
        logger.warning(
            "booking_rejected",
            reason="capacity",
            event_id=event_id,
            requested=ticket_count,
            remaining=remaining,
        )
        raise ValidationError(f"Not enough tickets available. Only {remaining} left.")

    # Step 5: price category must belong to this event
    result = await db.execute(
        select(PriceCategory).where(
            PriceCategory.id == booking_data.price_category_id,
            PriceCategory.event_id == event_id,
        )
    )
    price_category = result.scalar_one_or_none()
    if not price_category:
        raise ValidationError("Invalid price category for the selected event.")

    # Step 6: exact payment
    expected_amount = Decimal(price_category.price) * ticket_count
    if expected_amount != booking_data.payment_amount:
        logger.warning(
            "booking_rejected",
            reason="amount_mismatch",
            event_id=event_id,
            expected=format_amount(expected_amount),
            received=format_amount(booking_data.payment_amount),
        )
        raise ValidationError(
            f"Incorrect payment amount. Expected {format_amount(expected_amount)}, "
            f"got {format_amount(booking_data.payment_amount)}"
        )

    # Step 7: persist
    booking = TouristEventBooking(
        tourist_id=tourist_id,
        event_id=event_id,
        price_category_id=price_category.id,
        ticket_count=ticket_count,
        payment_amount=booking_data.payment_amount,
        status=BOOKING_STATUS_SUCCESS,
    )
    db.add(booking)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("booking_rejected", reason="unique_violation", tourist_id=tourist_id, event_id=event_id)
        raise ConflictError(ALREADY_BOOKED) from e
    await db.refresh(booking)

    logger.info(
        "booking_created",
        booking_id=booking.id,
        tourist_id=tourist_id,
        event_id=event_id,
        tickets=ticket_count,
        booked_total=current_count + ticket_count,
        maximum_count=event.maximum_count,
    )

    subject, content = booking_confirmation_email(
        user.name, event.name, ticket_count, format_amount(booking.payment_amount)
    )
    return booking, OutgoingEmail(user.email, subject, content)


async def list_bookings_for_caller(
    db: AsyncSession,
    user_id: int,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[TouristEventBooking], int]:
    """A page of the caller's own bookings, newest payment first."""
    user = await _get_tourist_user(db, user_id, "Only tourists can view bookings.")
    where = TouristEventBooking.tourist_id == user.tourist.id

    result = await db.execute(
        select(TouristEventBooking)
        .where(where)
        .order_by(TouristEventBooking.payment_date.desc(), TouristEventBooking.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    bookings = list(result.scalars().all())

    total = (
        await db.execute(select(func.count()).select_from(TouristEventBooking).where(where))
    ).scalar() or 0

    return bookings, total


async def get_booking_by_id(db: AsyncSession, raw_booking_id: str) -> TouristEventBooking:
    booking_id = parse_id(raw_booking_id, "booking")

    result = await db.execute(
        select(TouristEventBooking)
        .options(
            selectinload(TouristEventBooking.event),
            selectinload(TouristEventBooking.price_category),
            selectinload(TouristEventBooking.tourist).selectinload(Tourist.user),
        )
        .where(TouristEventBooking.id == booking_id)
    )
    booking = result.scalar_one_or_none()

    if not booking:
        raise NotFoundError("Booking not found")
    return booking


async def get_bookings_by_tourist_id(db: AsyncSession, raw_tourist_id: str) -> list[TouristEventBooking]:
    """
    All bookings of one tourist with event and price category.
    An empty result is reported as 404 rather than an empty list.
    """
    tourist_id = parse_id(raw_tourist_id, "tourist")

    result = await db.execute(
        select(TouristEventBooking)
        .options(
            selectinload(TouristEventBooking.event),
            selectinload(TouristEventBooking.price_category),
        )
        .where(TouristEventBooking.tourist_id == tourist_id)
        .order_by(TouristEventBooking.payment_date.desc(), TouristEventBooking.id.desc())
    )
    bookings = list(result.scalars().all())

    if not bookings:
        raise NotFoundError("No bookings found for this tourist")
    return bookings
