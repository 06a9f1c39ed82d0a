"""
Account endpoints: signup, signin and profile updates.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.base import StatusResponse
from app.schemas.user import (
    SignupRequest,
    SigninRequest,
    SigninResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    UserProfile,
)
from app.services.auth_service import signup_user, signin_user
from app.services.user_service import update_profile
from app.services.notification_service import EmailNotifier, get_notifier
from app.core.config import Settings, get_settings
from app.core.security import TokenIssuer, TokenPayload, get_current_user, get_token_issuer

router = APIRouter(prefix="/user", tags=["Account"])


@router.post("/signup", response_model=StatusResponse, status_code=status.HTTP_200_OK)
async def signup(
    user_data: SignupRequest,
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """Register a tourist or business account. The welcome email is sent after commit."""
    _, welcome = await signup_user(db, user_data)
    await db.commit()
    notifier.dispatch(welcome.to, welcome.subject, welcome.content)
    return StatusResponse(message="Signup successful")


@router.post("/signin", response_model=SigninResponse)
async def signin(
    login_data: SigninRequest,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Authenticate and receive a bearer token with its expiry."""
    user, issued = await signin_user(db, login_data, issuer)
    return SigninResponse(
        message="Signin successful",
        token=issued.token,
        role=user.role,
        expiry=issued.expires_at,
    )


@router.put("/updateProfile/{user_id}", response_model=ProfileUpdateResponse)
async def update_profile_endpoint(
    user_id: int,
    update_data: ProfileUpdate,
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Update the caller's own profile. Changing the password needs currentPassword."""
    user = await update_profile(db, user_id, current_user, update_data, settings)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserProfile.model_validate(user),
    )
