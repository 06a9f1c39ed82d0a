"""
Authentication service handling signup and signin.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import status

from app.models.user import User, Tourist, Business, ROLE_TOURIST
from app.schemas.user import SignupRequest, SigninRequest
from app.core.errors import AuthenticationError, ConflictError
from app.core.metrics import record_signin
from app.core.security import IssuedToken, TokenIssuer, hash_password, verify_password
from app.core.logging import get_logger
from app.services.notification_service import OutgoingEmail, welcome_email

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
EMAIL_EXISTS = "Email already exists"


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def signup_user(db: AsyncSession, user_data: SignupRequest) -> tuple[User, OutgoingEmail]:
    """
    Create a user and its role profile row in the same transaction.
    Raises 400 if the email is already registered, including when a concurrent
    signup wins the users.email unique constraint.

    Returns the welcome email for the caller to send once the transaction commits.
    """
    if await get_user_by_email(db, user_data.email):
        logger.warning("signup_failed", reason="email_exists", email=user_data.email)
        raise ConflictError(EMAIL_EXISTS, status_code=status.HTTP_400_BAD_REQUEST)

    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        role=user_data.role,
        contact_no=user_data.contact_no,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("signup_failed", reason="unique_violation", email=user_data.email)
        raise ConflictError(EMAIL_EXISTS, status_code=status.HTTP_400_BAD_REQUEST) from e

    # Profile rows share the user's primary key
    profile = Tourist(id=user.id) if user.role == ROLE_TOURIST else Business(id=user.id)
    db.add(profile)
    await db.flush()
    await db.refresh(user)

    logger.info("user_signed_up", user_id=user.id, role=user.role)

    subject, content = welcome_email(user.name, user.role)
    return user, OutgoingEmail(user.email, subject, content)


async def signin_user(db: AsyncSession, login_data: SigninRequest, issuer: TokenIssuer) -> tuple[User, IssuedToken]:
    """
    Verify credentials and issue an access token.
    Unknown email and wrong password produce the same 400 response.
    """
    user = await get_user_by_email(db, login_data.email)

    if not user or not verify_password(login_data.password, user.hashed_password):
        record_signin(False)
        logger.warning("signin_failed", email=login_data.email)
        raise AuthenticationError(INVALID_CREDENTIALS, status_code=status.HTTP_400_BAD_REQUEST)

    issued = issuer.issue(user_id=user.id, name=user.name, role=user.role)
    record_signin(True)
    logger.info("user_signed_in", user_id=user.id, role=user.role)
    return user, issued
