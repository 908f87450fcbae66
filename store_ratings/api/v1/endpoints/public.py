"""
Public catalogue endpoints (no authentication required):
  GET /public/stores        – Paginated store list with search, sort and rating filters
  GET /public/stores/{id}   – Store detail with rating summary and recent ratings
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
import logging

from store_ratings.core.config import settings
from store_ratings.core.dependencies import allow_public, db_dependency
from store_ratings.models.user import User
from store_ratings.schemas.store import StoreDetailResponse, StoreListResponse
from store_ratings.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["Public"])


@router.get(
    "/stores",
    response_model=StoreListResponse,
    summary="Browse stores",
)
def list_stores(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, description="Matches store name or address"),
    sort: Literal["name_asc", "name_desc", "rating_highest", "rating_lowest", "newest"] = Query(
        "name_asc"
    ),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    max_rating: Optional[float] = Query(None, ge=0, le=5),
    conn=Depends(db_dependency),
    _: Optional[User] = Depends(allow_public),
):
    """Rating filters apply to the store average before the page is cut."""
    return CatalogService(conn).list_stores(
        page=page,
        limit=limit,
        search=search,
        sort=sort,
        min_rating=min_rating,
        max_rating=max_rating,
    )


@router.get(
    "/stores/{store_id}",
    response_model=StoreDetailResponse,
    summary="Store detail",
)
def get_store(
    store_id: int,
    conn=Depends(db_dependency),
    _: Optional[User] = Depends(allow_public),
):
    return CatalogService(conn).get_store_detail(store_id)
