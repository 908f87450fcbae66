"""
Store lookups available to any signed-in account:
  GET /stores/{id}/my-rating   – The caller's rating of a store, or null
"""
from fastapi import APIRouter, Depends

from store_ratings.core.dependencies import db_dependency, require_operation
from store_ratings.models.user import User
from store_ratings.schemas.rating import MyRatingResponse
from store_ratings.services.access_control import Operation
from store_ratings.services.rating_service import RatingService

router = APIRouter(prefix="/stores", tags=["Stores"])


@router.get(
    "/{store_id}/my-rating",
    response_model=MyRatingResponse,
    summary="The caller's rating of a store",
)
def my_rating(
    store_id: int,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_operation(Operation.MY_RATING_LOOKUP)),
):
    """Returns `{"rating": null}` when the caller has not rated the store."""
    return {"rating": RatingService(conn).get_for_store(current_user, store_id)}
