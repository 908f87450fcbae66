"""
Admin endpoints for platform statistics and user management:
  GET    /admin/dashboard         – User, store and rating totals
  GET    /admin/users             – Filterable, sortable user list
  POST   /admin/users             – Create a user with any role
  GET    /admin/users/{id}        – A user, with store stats for owners
  PATCH  /admin/users/{id}/role   – Change a user's role
  DELETE /admin/users/{id}        – Delete a user and their ratings
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
import logging

from store_ratings.core.dependencies import db_dependency, require_admin
from store_ratings.models.user import User, UserRole
from store_ratings.schemas.stats import AdminDashboardResponse
from store_ratings.schemas.user import AdminUserResponse, RoleUpdate, UserCreate, UserResponse
from store_ratings.services.admin_service import AdminService
from store_ratings.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/dashboard",
    response_model=AdminDashboardResponse,
    summary="Platform totals (Admin only)",
)
def dashboard(conn=Depends(db_dependency), _: User = Depends(require_admin)):
    return AdminService(conn).dashboard()


@router.get(
    "/users",
    response_model=list[AdminUserResponse],
    summary="List users (Admin only)",
)
def list_users(
    name: Optional[str] = Query(None, description="Case-insensitive substring"),
    email: Optional[str] = Query(None, description="Case-insensitive substring"),
    address: Optional[str] = Query(None, description="Case-insensitive substring"),
    role: Optional[UserRole] = Query(None),
    sort: Optional[Literal["name", "email", "address", "role", "created_at"]] = Query(None),
    order: Literal["asc", "desc"] = Query("asc"),
    conn=Depends(db_dependency),
    _: User = Depends(require_admin),
):
    """
    Return every user matching the filters. OWNER rows carry their store's
    average rating and rating count. Without `sort`, newest accounts come first.
    """
    return UserService(conn).list_users(
        name=name, email=email, address=address, role=role, sort=sort, order=order
    )


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user with any role (Admin only)",
)
def create_user(
    data: UserCreate,
    conn=Depends(db_dependency),
    _: User = Depends(require_admin),
):
    return UserService(conn).create_user(data)


@router.get(
    "/users/{user_id}",
    response_model=AdminUserResponse,
    summary="Get a user (Admin only)",
)
def get_user(
    user_id: int,
    conn=Depends(db_dependency),
    _: User = Depends(require_admin),
):
    return UserService(conn).get_user_detail(user_id)


@router.patch(
    "/users/{user_id}/role",
    response_model=UserResponse,
    summary="Change a user's role (Admin only)",
)
def update_role(
    user_id: int,
    data: RoleUpdate,
    conn=Depends(db_dependency),
    _: User = Depends(require_admin),
):
    """A user who owns a store cannot be demoted to USER; delete the store first."""
    return UserService(conn).update_role(user_id, data.role)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user (Admin only)",
)
def delete_user(
    user_id: int,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_admin),
):
    """Fails with 409 while the user owns a store. Their ratings are deleted too."""
    logger.info("Admin id=%s deleting user id=%s", current_user.id, user_id)
    UserService(conn).delete_user(user_id)
