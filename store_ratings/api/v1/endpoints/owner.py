"""
Owner portal endpoints (OWNER accounts that have a store):
  GET /owner/dashboard   – Store info, rating summary, latest ratings, monthly trend
  GET /owner/store       – Store details with rating count and average
  GET /owner/ratings     – Paginated, filterable ratings of the owner's store
"""
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
import logging

from store_ratings.core.config import settings
from store_ratings.core.dependencies import OwnerContext, db_dependency, require_store_owner
from store_ratings.core.exceptions import ValidationFailedError
from store_ratings.models.timestamps import as_utc
from store_ratings.schemas.stats import (
    OwnerDashboardResponse,
    OwnerRatingsResponse,
    OwnerStoreResponse,
)
from store_ratings.services.owner_service import OwnerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/owner", tags=["Owner"])


@router.get(
    "/dashboard",
    response_model=OwnerDashboardResponse,
    summary="Dashboard for the caller's store",
)
def dashboard(
    conn=Depends(db_dependency),
    ctx: OwnerContext = Depends(require_store_owner),
):
    """
    Returns the store, its rating summary with the 1-5 distribution, the
    latest ratings and the per-month averages for the trailing months.
    """
    return OwnerService(conn).dashboard(ctx.store)


@router.get(
    "/store",
    response_model=OwnerStoreResponse,
    summary="Details of the caller's store",
)
def store_details(
    conn=Depends(db_dependency),
    ctx: OwnerContext = Depends(require_store_owner),
):
    return OwnerService(conn).store_details(ctx.store)


@router.get(
    "/ratings",
    response_model=OwnerRatingsResponse,
    summary="Ratings of the caller's store",
)
def list_ratings(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort: Literal["date_newest", "date_oldest", "rating_highest", "rating_lowest"] = Query(
        "date_newest"
    ),
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    max_rating: Optional[int] = Query(None, ge=1, le=5),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, description="Rater name, case-insensitive"),
    conn=Depends(db_dependency),
    ctx: OwnerContext = Depends(require_store_owner),
):
    if min_rating is not None and max_rating is not None and min_rating > max_rating:
        logger.warning("Invalid rating range min=%s max=%s", min_rating, max_rating)
        raise ValidationFailedError("min_rating cannot be greater than max_rating")
    if date_from is not None and date_to is not None and as_utc(date_from) > as_utc(date_to):
        logger.warning("Invalid date range from=%s to=%s", date_from, date_to)
        raise ValidationFailedError("date_from cannot be after date_to")
    return OwnerService(conn).ratings(
        ctx.store,
        page=page,
        limit=limit,
        sort=sort,
        min_rating=min_rating,
        max_rating=max_rating,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
