"""
Password hashing, JWT issuing/verification and the bearer-token dependency.

Passwords are stored as PBKDF2-SHA256 hashes in the form
`pbkdf2:sha256:<iterations>$<salt>$<hex digest>`.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import Settings, get_settings
from app.core.errors import AuthenticationError
from app.core.logging import get_logger

logger = get_logger(__name__)

PBKDF2_ITERATIONS = 150_000
_HASH_PREFIX = "pbkdf2:sha256:"


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{_HASH_PREFIX}{PBKDF2_ITERATIONS}${salt}${dk.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored PBKDF2 hash."""
    if not password_hash or not password_hash.startswith(_HASH_PREFIX):
        return False
    parts = password_hash.split("$")
    if len(parts) != 3:
        return False
    header, salt, stored_hash = parts
    try:
        iterations = int(header.split(":")[2])
    except (IndexError, ValueError):
        return False
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return hmac.compare_digest(dk.hex(), stored_hash)


@dataclass(frozen=True)
class TokenPayload:
    """Identity asserted by a bearer token."""

    user_id: int
    name: str
    role: str


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenIssuer:
    """Signs and verifies access tokens using the configured secret and lifetime."""

    def __init__(self, settings: Settings) -> None:
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        self.lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def issue(self, user_id: int, name: str, role: str, now: Optional[datetime] = None) -> IssuedToken:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self.lifetime
        claims = {
            "sub": str(user_id),
            "name": name,
            "role": role,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def decode(self, token: str) -> TokenPayload:
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc

        try:
            return TokenPayload(
                user_id=int(claims["sub"]),
                name=claims.get("name", ""),
                role=claims["role"],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthenticationError("Invalid token") from exc


@lru_cache()
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(get_settings())


bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenPayload:
    """Resolve the caller's identity from the `Authorization: Bearer` header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    payload = issuer.decode(credentials.credentials)
    return payload


async def get_current_user_id(current_user: TokenPayload = Depends(get_current_user)) -> int:
    return current_user.user_id
