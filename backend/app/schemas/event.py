"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import AwareDatetime, Field

from app.schemas.base import APIModel, PageMeta


class PriceCategoryCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class PriceCategoryResponse(APIModel):
    id: int
    event_id: int
    name: str
    price: float


class EventCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    category: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=255)
    date: AwareDatetime
    maximum_count: int = Field(..., gt=0, le=1_000_000)
    banner_url: Optional[str] = Field(None, max_length=1024)
    hashtag: Optional[str] = Field(None, max_length=100)
    price_categories: list[PriceCategoryCreate] = Field(..., min_length=1)


class EventUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)


class EventResponse(APIModel):
    id: int
    business_id: int
    name: str
    description: Optional[str] = None
    category: str
    location: str
    date: datetime
    maximum_count: int
    banner_url: Optional[str] = None
    hashtag: Optional[str] = None
    status: Literal["active", "inactive", "cancelled"]


class EventDetail(EventResponse):
    price_categories: list[PriceCategoryResponse] = []


class EventListItem(EventResponse):
    current_booking_count: int
    price: float


class EventListResponse(PageMeta):
    events: list[EventListItem]


class EventEnvelope(APIModel):
    status: bool = True
    message: Optional[str] = None
    event: EventDetail


class EventUpdateResponse(APIModel):
    status: bool = True
    event: EventResponse
