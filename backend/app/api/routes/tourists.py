"""
Profile lookups: public tourist profile and the caller's own details.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.user import PublicProfile, TouristProfileResponse, UserDetails, UserDetailsResponse
from app.services.event_service import parse_id
from app.services.user_service import get_tourist_profile, get_user_details
from app.core.security import get_current_user_id

router = APIRouter(prefix="/tourist", tags=["Profiles"])


@router.get("/touristProfile/{tourist_id}", response_model=TouristProfileResponse)
async def tourist_profile(tourist_id: str, db: AsyncSession = Depends(get_db)):
    user = await get_tourist_profile(db, parse_id(tourist_id, "tourist"))
    return TouristProfileResponse(tourist=PublicProfile.model_validate(user))


@router.get("/userDetails", response_model=UserDetailsResponse)
async def user_details(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Id, name and email of the authenticated caller."""
    user = await get_user_details(db, user_id)
    return UserDetailsResponse(user=UserDetails.model_validate(user))
