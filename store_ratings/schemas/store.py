"""
Pydantic schemas for Store request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from store_ratings.schemas.rating import RatingResponse, RecentRatingResponse
from store_ratings.schemas.user import UserRegister, UserResponse

StoreNameField = Field(..., min_length=1, max_length=100)
StoreAddressField = Field(..., min_length=1, max_length=400)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class StoreCreate(BaseModel):
    """Create a store for an existing user account."""

    name: str = StoreNameField
    address: str = StoreAddressField
    contact_email: EmailStr
    owner_id: int


class StoreWithOwnerCreate(BaseModel):
    """Create a store together with a brand-new owner account."""

    name: str = StoreNameField
    address: str = StoreAddressField
    contact_email: EmailStr
    owner: UserRegister


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=400)
    contact_email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def at_least_one_field(self) -> "StoreUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class StoreResponse(BaseModel):
    id: int
    name: str
    address: str
    contact_email: str
    owner_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StoreOwner(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


class RatingSummaryResponse(BaseModel):
    count: int
    average: float
    distribution: dict[int, int]


class StoreRatingStats(BaseModel):
    count: int
    average: float


class AdminStoreResponse(StoreResponse):
    owner: StoreOwner
    average_rating: float
    total_ratings: int


class StoreWithOwnerResponse(BaseModel):
    store: StoreResponse
    owner: UserResponse


class StoreListItem(BaseModel):
    id: int
    name: str
    address: str
    contact_email: str
    created_at: datetime
    owner: StoreOwner
    rating_stats: StoreRatingStats
    user_rating: Optional[RatingResponse] = None


class StoreListResponse(BaseModel):
    total_count: int
    page: int
    total_pages: int
    stores: list[StoreListItem]
    available_sorts: list[str]


class StoreDetailResponse(StoreResponse):
    owner: StoreOwner
    rating_stats: RatingSummaryResponse
    recent_ratings: list[RecentRatingResponse]
    user_rating: Optional[RatingResponse] = None
