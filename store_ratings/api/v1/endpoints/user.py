"""
Rating endpoints for regular USER accounts:
  GET    /user/activity                – The caller's rating history, newest first
  GET    /user/stores                  – Store catalogue with the caller's own ratings
  GET    /user/stores/{id}             – Store detail with the caller's own rating
  POST   /user/stores/{id}/ratings     – Rate a store (once per store)
  GET    /user/ratings                 – The caller's ratings, paginated and sorted
  GET    /user/ratings/{id}            – One of the caller's ratings
  PATCH  /user/ratings/{id}            – Change value and/or comment
  DELETE /user/ratings/{id}            – Remove a rating
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
import logging

from store_ratings.core.config import settings
from store_ratings.core.dependencies import db_dependency, require_rater
from store_ratings.models.user import User
from store_ratings.schemas.rating import (
    RatingCreate,
    RatingMutationResponse,
    RatingPageResponse,
    RatingUpdate,
    RatingWithStoreResponse,
)
from store_ratings.schemas.store import StoreDetailResponse, StoreListResponse
from store_ratings.services.catalog_service import CatalogService
from store_ratings.services.rating_service import RatingService
from store_ratings.services.views import rating_with_store_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["User"])

PageQuery = Query(1, ge=1)
LimitQuery = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)


@router.get(
    "/activity",
    response_model=RatingPageResponse,
    summary="The caller's rating history",
)
def activity(
    page: int = PageQuery,
    limit: int = LimitQuery,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_rater),
):
    return RatingService(conn).activity(current_user.id, page=page, limit=limit)


@router.get(
    "/stores",
    response_model=StoreListResponse,
    summary="Browse stores with the caller's own ratings",
)
def list_stores(
    page: int = PageQuery,
    limit: int = LimitQuery,
    search: Optional[str] = Query(None, description="Matches store name or address"),
    sort: Literal["name_asc", "name_desc", "rating_highest", "rating_lowest", "newest"] = Query(
        "name_asc"
    ),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    max_rating: Optional[float] = Query(None, ge=0, le=5),
    conn=Depends(db_dependency),
    current_user: User = Depends(require_rater),
):
    return CatalogService(conn).list_stores(
        page=page,
        limit=limit,
        search=search,
        sort=sort,
        min_rating=min_rating,
        max_rating=max_rating,
        actor=current_user,
    )


@router.get(
    "/stores/{store_id}",
    response_model=StoreDetailResponse,
    summary="Store detail with the caller's own rating",
)
def get_store(
    store_id: int,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_rater),
):
    return CatalogService(conn).get_store_detail(store_id, actor=current_user)


@router.post(
    "/stores/{store_id}/ratings",
    response_model=RatingMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Rate a store",
)
def create_rating(
    store_id: int,
    data: RatingCreate,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_rater),
):
    """A user can rate each store once; a second rating returns 409."""
    rating = RatingService(conn).create(current_user, store_id, data.value, data.comment)
    return {"message": "Rating submitted successfully", "rating": rating}


@router.get(
    "/ratings",
    response_model=RatingPageResponse,
    summary="The caller's ratings",
)
def list_ratings(
    page: int = PageQuery,
    limit: int = LimitQuery,
    sort: Literal["newest", "oldest", "highest", "lowest"] = Query("newest"),
    conn=Depends(db_dependency),
    current_user: User = Depends(require_rater),
):
    return RatingService(conn).list_for_user(current_user.id, page=page, limit=limit, sort=sort)


@router.get(
    "/ratings/{rating_id}",
    response_model=RatingWithStoreResponse,
    summary="One of the caller's ratings",
)
def get_rating(
    rating_id: int,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_rater),
):
    return rating_with_store_view(RatingService(conn).get(rating_id, current_user))


@router.patch(
    "/ratings/{rating_id}",
    response_model=RatingMutationResponse,
    summary="Update one of the caller's ratings",
)
def update_rating(
    rating_id: int,
    data: RatingUpdate,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_rater),
):
    """Only the fields present in the body are changed."""
    rating = RatingService(conn).update(rating_id, data, current_user)
    return {"message": "Rating updated successfully", "rating": rating}


@router.delete(
    "/ratings/{rating_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete one of the caller's ratings",
)
def delete_rating(
    rating_id: int,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_rater),
):
    RatingService(conn).delete(rating_id, current_user)
