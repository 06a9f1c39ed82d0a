from app.schemas.base import APIModel, StatusResponse, PageMeta
from app.schemas.user import (
    SignupRequest, SigninRequest, SigninResponse, ProfileUpdate, ProfileUpdateResponse,
    UserProfile, PublicProfile, TouristProfileResponse, UserDetailsResponse,
)
from app.schemas.event import (
    EventCreate, EventUpdate, EventResponse, EventDetail, EventListResponse,
    EventEnvelope, EventUpdateResponse,
)
from app.schemas.booking import (
    BookingCreate, BookingResponse, BookingListResponse, BookingDetailResponse,
    TouristBookingsResponse,
)

__all__ = [
    "APIModel", "StatusResponse", "PageMeta",
    "SignupRequest", "SigninRequest", "SigninResponse", "ProfileUpdate", "ProfileUpdateResponse",
    "UserProfile", "PublicProfile", "TouristProfileResponse", "UserDetailsResponse",
    "EventCreate", "EventUpdate", "EventResponse", "EventDetail", "EventListResponse",
    "EventEnvelope", "EventUpdateResponse",
    "BookingCreate", "BookingResponse", "BookingListResponse", "BookingDetailResponse",
    "TouristBookingsResponse",
]
