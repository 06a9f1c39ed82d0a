"""
Pydantic schemas for signup, signin and profile payloads.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from app.core.config import get_settings
from app.schemas.base import APIModel, StatusResponse


class SignupRequest(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., max_length=128)
    role: Literal["TOURIST", "BUSINESS"]
    contact_no: Optional[str] = Field(None, max_length=32)

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, value: str) -> str:
        # Same floor as profile password changes
        min_length = get_settings().PASSWORD_MIN_LENGTH
        if len(value) < min_length:
            raise ValueError(f"Password must be at least {min_length} characters long")
        return value


class SigninRequest(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SigninResponse(StatusResponse):
    token: str
    role: str
    expiry: datetime


class ProfileUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    contact_no: Optional[str] = Field(None, max_length=32)
    image_url: Optional[str] = Field(None, max_length=1024)
    password: Optional[str] = Field(None, max_length=128)
    current_password: Optional[str] = None


class UserProfile(APIModel):
    id: int
    name: str
    email: str
    role: str
    contact_no: Optional[str] = None
    image_url: Optional[str] = None


class ProfileUpdateResponse(StatusResponse):
    user: UserProfile


class PublicProfile(APIModel):
    id: int
    name: str
    email: str
    contact_no: Optional[str] = None
    image_url: Optional[str] = None


class TouristProfileResponse(APIModel):
    status: bool = True
    tourist: PublicProfile


class UserDetails(APIModel):
    id: int
    name: str
    email: str


class UserDetailsResponse(APIModel):
    status: bool = True
    user: UserDetails
