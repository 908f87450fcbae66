"""
Pydantic schemas for User request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from store_ratings.models.user import UserRole

PASSWORD_SPECIAL_CHARACTERS = "!@#$%^&*"

NameField = Field(..., min_length=3, max_length=20)
AddressField = Field("", max_length=400)
PasswordField = Field(..., min_length=8, max_length=16)


def check_password_strength(v: str) -> str:
    """Require at least one uppercase letter and one special character."""
    if not any(c.isupper() for c in v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not any(c in PASSWORD_SPECIAL_CHARACTERS for c in v):
        raise ValueError(
            f"Password must contain at least one special character ({PASSWORD_SPECIAL_CHARACTERS})"
        )
    return v


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class UserRegister(BaseModel):
    """Self-service registration; the role is always USER."""

    name: str = NameField
    email: EmailStr
    password: str = PasswordField
    address: str = AddressField

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class UserCreate(UserRegister):
    """Admin-created account; any role may be assigned."""

    role: UserRole = UserRole.USER


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=400)


class PasswordUpdate(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = PasswordField

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class RoleUpdate(BaseModel):
    role: UserRole


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    address: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OwnedStoreStats(BaseModel):
    """Compact view of the store an OWNER account runs."""

    id: int
    name: str
    average_rating: float
    total_ratings: int


class AdminUserResponse(UserResponse):
    store: Optional[OwnedStoreStats] = None


class UserRatingStats(BaseModel):
    count: int
    average_rating: float


class ProfileRecentRating(BaseModel):
    id: int
    value: int
    comment: Optional[str]
    created_at: datetime
    store_id: int
    store_name: str


class ProfileResponse(UserResponse):
    rating_stats: UserRatingStats
    recent_ratings: list[ProfileRecentRating]


class MessageResponse(BaseModel):
    message: str
