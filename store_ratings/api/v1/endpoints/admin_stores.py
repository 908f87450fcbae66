"""
Admin store management endpoints:
  GET    /admin/stores              – Filterable store list with averages (Admin)
  POST   /admin/stores              – Create a store for an existing user (Admin)
  POST   /admin/stores/with-owner   – Create a store and its owner account (Admin)
  GET    /admin/stores/{id}         – Store details (Admin or the store's owner)
  PATCH  /admin/stores/{id}         – Update a store (Admin or the store's owner)
  DELETE /admin/stores/{id}         – Delete a store and its ratings (Admin)
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
import logging

from store_ratings.core.dependencies import db_dependency, get_current_user, require_admin
from store_ratings.models.user import User
from store_ratings.schemas.store import (
    AdminStoreResponse,
    StoreCreate,
    StoreResponse,
    StoreUpdate,
    StoreWithOwnerCreate,
    StoreWithOwnerResponse,
)
from store_ratings.services.admin_service import AdminService
from store_ratings.services.store_service import StoreService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/stores", tags=["Admin Stores"])


@router.get(
    "",
    response_model=list[AdminStoreResponse],
    summary="List stores (Admin only)",
)
def list_stores(
    name: Optional[str] = Query(None, description="Case-insensitive substring"),
    address: Optional[str] = Query(None, description="Case-insensitive substring"),
    email: Optional[str] = Query(None, description="Owner email, case-insensitive substring"),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    max_rating: Optional[float] = Query(None, ge=0, le=5),
    sort: Optional[Literal["name", "address", "created_at"]] = Query(None),
    order: Literal["asc", "desc"] = Query("asc"),
    conn=Depends(db_dependency),
    _: User = Depends(require_admin),
):
    return AdminService(conn).list_stores(
        name=name,
        address=address,
        email=email,
        min_rating=min_rating,
        max_rating=max_rating,
        sort=sort,
        order=order,
    )


@router.post(
    "",
    response_model=StoreResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a store for an existing user (Admin only)",
)
def create_store(
    data: StoreCreate,
    conn=Depends(db_dependency),
    _: User = Depends(require_admin),
):
    """The owner is promoted to OWNER. A user can own only one store."""
    return StoreService(conn).create_store(data)


@router.post(
    "/with-owner",
    response_model=StoreWithOwnerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a store together with a new owner account (Admin only)",
)
def create_store_with_owner(
    data: StoreWithOwnerCreate,
    conn=Depends(db_dependency),
    _: User = Depends(require_admin),
):
    store, owner = StoreService(conn).create_store_with_owner(data)
    return {"store": store, "owner": owner}


@router.get(
    "/{store_id}",
    response_model=AdminStoreResponse,
    summary="Get a store (Admin or the store's owner)",
)
def get_store(
    store_id: int,
    conn=Depends(db_dependency),
    current_user: User = Depends(get_current_user),
):
    return AdminService(conn).get_store(store_id, current_user)


@router.patch(
    "/{store_id}",
    response_model=StoreResponse,
    summary="Update a store (Admin or the store's owner)",
)
def update_store(
    store_id: int,
    data: StoreUpdate,
    conn=Depends(db_dependency),
    current_user: User = Depends(get_current_user),
):
    return StoreService(conn).update_store(store_id, data, current_user)


@router.delete(
    "/{store_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a store (Admin only)",
)
def delete_store(
    store_id: int,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_admin),
):
    """Deletes every rating of the store and reverts a non-admin owner to USER."""
    logger.info("Admin id=%s deleting store id=%s", current_user.id, store_id)
    StoreService(conn).delete_store(store_id)
