"""
Event catalog endpoints: public listing plus business-side create/update.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventDetail,
    EventEnvelope,
    EventListItem,
    EventListResponse,
    EventUpdateResponse,
)
from app.services.event_service import create_event, update_event, list_events, total_pages
from app.core.security import TokenPayload, get_current_user
from app.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["Events"])


@router.get("/tourist/getAllEvents", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """
    Active events ordered by date, with the number of tickets already booked
    and the cheapest price category of each.
    """
    events, total = await list_events(db, page, limit)
    logger.debug("events_listed", page=page, limit=limit, total=total)
    return EventListResponse(
        current_page=page,
        total_pages=total_pages(total, limit),
        total=total,
        events=[EventListItem.model_validate(e) for e in events],
    )


@router.post("/business/createEvent", response_model=EventEnvelope, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create an event with its price categories. Business accounts only."""
    event = await create_event(db, event_data, current_user)
    return EventEnvelope(message="Event created", event=EventDetail.model_validate(event))


@router.put("/business/updateEvent/{event_id}", response_model=EventUpdateResponse)
async def update_event_endpoint(
    event_id: str,
    update_data: EventUpdate,
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change an owned event's name and/or location."""
    event = await update_event(db, event_id, update_data, current_user)
    return EventUpdateResponse(event=EventResponse.model_validate(event))
