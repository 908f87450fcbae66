"""
Pydantic schemas for the admin and owner dashboards.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from store_ratings.schemas.rating import RecentRatingResponse
from store_ratings.schemas.store import RatingSummaryResponse, StoreOwner, StoreResponse


class AdminDashboardResponse(BaseModel):
    total_users: int
    total_stores: int
    total_ratings: int


class TrendPointResponse(BaseModel):
    month: str
    month_index: int
    year: int
    average: float
    count: int


class RecentActivity(BaseModel):
    latest_ratings: list[RecentRatingResponse]
    rating_trend: list[TrendPointResponse]


class OwnerDashboardResponse(BaseModel):
    store_info: StoreResponse
    rating_stats: RatingSummaryResponse
    recent_activity: RecentActivity


class OwnerStoreResponse(StoreResponse):
    owner: StoreOwner
    total_ratings: int
    average_rating: float


class OwnerRatingFilters(BaseModel):
    min_rating: Optional[int] = None
    max_rating: Optional[int] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None
    sort: str


class OwnerRatingsResponse(BaseModel):
    total_count: int
    average_rating: float
    page: int
    total_pages: int
    ratings: list[RecentRatingResponse]
    filters: OwnerRatingFilters
    available_sorts: list[str]
