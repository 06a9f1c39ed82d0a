"""
Event service handling catalog listing, creation and updates.
"""

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.event import Event, PriceCategory, EVENT_STATUS_ACTIVE
from app.models.booking import TouristEventBooking
from app.models.user import ROLE_BUSINESS
from app.schemas.event import EventCreate, EventUpdate, EventResponse
from app.core.errors import AuthorizationError, NotFoundError, ValidationError
from app.core.security import TokenPayload
from app.core.logging import get_logger

logger = get_logger(__name__)


def parse_id(raw_id: str, label: str) -> int:
    """Path ids arrive as strings so malformed ones get a 400, not a 402."""
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} ID") from None


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


async def get_event(db: AsyncSession, event_id: int, with_price_categories: bool = False) -> Event:
    query = select(Event).where(Event.id == event_id)
    if with_price_categories:
        query = query.options(selectinload(Event.price_categories))
    result = await db.execute(query.execution_options(populate_existing=True))
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError("Event not found")
    return event


async def create_event(db: AsyncSession, event_data: EventCreate, caller: TokenPayload) -> Event:
    """Create an active event with its price categories."""
    if caller.role != ROLE_BUSINESS:
        raise AuthorizationError("Only business users can create events")

    if event_data.date <= datetime.now(timezone.utc):
        raise ValidationError("Event date must be in the future")

    event = Event(
        business_id=caller.user_id,
        name=event_data.name,
        description=event_data.description,
        category=event_data.category,
        location=event_data.location,
        date=event_data.date,
        maximum_count=event_data.maximum_count,
        banner_url=event_data.banner_url,
        hashtag=event_data.hashtag,
        status=EVENT_STATUS_ACTIVE,
    )
    db.add(event)
    await db.flush()

    for category in event_data.price_categories:
        db.add(PriceCategory(event_id=event.id, name=category.name, price=category.price))
    await db.flush()

    logger.info(
        "event_created",
        event_id=event.id,
        business_id=caller.user_id,
        maximum_count=event.maximum_count,
        price_categories=len(event_data.price_categories),
    )
    return await get_event(db, event.id, with_price_categories=True)


async def update_event(
    db: AsyncSession,
    raw_event_id: str,
    update_data: EventUpdate,
    caller: TokenPayload,
) -> Event:
    """Rename or relocate an event owned by the calling business."""
    event_id = parse_id(raw_event_id, "event")

    if caller.role != ROLE_BUSINESS:
        raise AuthorizationError("Only business users can update events")

    event = await get_event(db, event_id)
    if event.business_id != caller.user_id:
        raise AuthorizationError("You can only update your own events")

    changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(event, field, value)

    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, fields=sorted(changes))
    return event


async def list_events(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[dict], int]:
    """
    List active events by date, each annotated with its booked ticket count
    and its cheapest price category (0 when it has none).
    """
    booked = (
        select(
            TouristEventBooking.event_id.label("event_id"),
            func.sum(TouristEventBooking.ticket_count).label("booked"),
        )
        .group_by(TouristEventBooking.event_id)
        .subquery()
    )
    cheapest = (
        select(
            PriceCategory.event_id.label("event_id"),
            func.min(PriceCategory.price).label("min_price"),
        )
        .group_by(PriceCategory.event_id)
        .subquery()
    )

    where = Event.status == EVENT_STATUS_ACTIVE

    total = (await db.execute(select(func.count()).select_from(Event).where(where))).scalar() or 0

    query = (
        select(
            Event,
            func.coalesce(booked.c.booked, 0).label("current_booking_count"),
            cheapest.c.min_price,
        )
        .outerjoin(booked, booked.c.event_id == Event.id)
        .outerjoin(cheapest, cheapest.c.event_id == Event.id)
        .where(where)
        .order_by(Event.date.asc(), Event.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(query)

    events = []
    for event, current_booking_count, min_price in result.all():
        events.append({
            **EventResponse.model_validate(event).model_dump(),
            "current_booking_count": int(current_booking_count or 0),
            "price": _as_decimal(min_price),
        })

    return events, total


def _as_decimal(value: Optional[object]) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))
