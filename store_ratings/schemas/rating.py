"""
Pydantic schemas for Rating request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

ValueField = Field(..., ge=1, le=5, strict=True)
CommentField = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class RatingCreate(BaseModel):
    value: int = ValueField
    comment: Optional[str] = CommentField


class RatingUpdate(BaseModel):
    """Partial update: only the fields sent by the client are applied."""

    value: Optional[int] = Field(None, ge=1, le=5, strict=True)
    comment: Optional[str] = CommentField

    @model_validator(mode="after")
    def at_least_one_field(self) -> "RatingUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one of 'value' or 'comment' must be provided")
        if "value" in self.model_fields_set and self.value is None:
            raise ValueError("'value' cannot be null")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class RatingResponse(BaseModel):
    id: int
    value: int
    comment: Optional[str]
    user_id: int
    store_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RatingAuthor(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


class RecentRatingResponse(BaseModel):
    """A rating as shown on a store page, with the visible author fields."""

    id: int
    value: int
    comment: Optional[str]
    created_at: datetime
    user: RatingAuthor


class RatedStore(BaseModel):
    id: int
    name: str
    address: str
    contact_email: Optional[str] = None


class RatingWithStoreResponse(RatingResponse):
    store: RatedStore


class RatingPageResponse(BaseModel):
    total_count: int
    page: int
    total_pages: int
    ratings: list[RatingWithStoreResponse]
    available_sorts: list[str] = []


class RatingMutationResponse(BaseModel):
    message: str
    rating: RatingResponse


class MyRatingResponse(BaseModel):
    """The caller's rating for a store; ``rating`` is null when none exists."""

    rating: Optional[RatingResponse]
