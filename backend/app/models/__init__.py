from app.models.user import User, Tourist, Business
from app.models.event import Event, PriceCategory
from app.models.booking import TouristEventBooking

__all__ = ["User", "Tourist", "Business", "Event", "PriceCategory", "TouristEventBooking"]
