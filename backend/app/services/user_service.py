"""
Profile reads and updates for existing accounts.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from fastapi import status

from app.models.user import User, Tourist
from app.schemas.user import ProfileUpdate
from app.core.config import Settings
from app.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.security import TokenPayload, hash_password, verify_password
from app.core.logging import get_logger

logger = get_logger(__name__)


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found")
    return user


async def update_profile(
    db: AsyncSession,
    user_id: int,
    caller: TokenPayload,
    update_data: ProfileUpdate,
    settings: Settings,
) -> User:
    """
    Update name/email/contact fields and optionally the password.

    A password change needs the current password. The email may not collide
    with another account.
    """
    if caller.user_id != user_id:
        raise AuthorizationError("You can only update your own profile")

    user = await get_user(db, user_id)
    changes = update_data.model_dump(exclude_unset=True)
    new_password = changes.pop("password", None)
    current_password = changes.pop("current_password", None)

    new_email = changes.get("email")
    if new_email and new_email != user.email:
        result = await db.execute(select(User.id).where(User.email == new_email, User.id != user_id))
        if result.scalar_one_or_none() is not None:
            logger.warning("profile_update_failed", reason="email_exists", user_id=user_id)
            raise ConflictError("Email already exists", status_code=status.HTTP_400_BAD_REQUEST)

    if new_password is not None:
        if not current_password:
            raise ValidationError("Current password is required to change password")
        if not verify_password(current_password, user.hashed_password):
            logger.warning("profile_update_failed", reason="bad_current_password", user_id=user_id)
            raise AuthenticationError("Current password is incorrect")
        if len(new_password) < settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
            )
        user.hashed_password = hash_password(new_password)

    for field, value in changes.items():
        if value is not None:
            setattr(user, field, value)

    await db.flush()
    await db.refresh(user)

    logger.info(
        "profile_updated",
        user_id=user.id,
        fields=sorted(changes),
        password_changed=new_password is not None,
    )
    return user


async def get_tourist_profile(db: AsyncSession, tourist_id: int) -> User:
    """Public projection of a tourist's account."""
    result = await db.execute(
        select(Tourist)
        .options(selectinload(Tourist.user))
        .where(Tourist.id == tourist_id)
    )
    tourist = result.scalar_one_or_none()
    if not tourist:
        raise NotFoundError("Tourist not found")
    return tourist.user


async def get_user_details(db: AsyncSession, user_id: int) -> User:
    return await get_user(db, user_id)
