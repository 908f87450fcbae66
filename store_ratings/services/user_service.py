"""
User management service: admin account management and the caller's profile.

Business rules enforced here:
- Emails are unique (case-insensitive); a duplicate is a Conflict.
- A user who owns a store can be neither deleted nor demoted to USER until
  the store is deleted.
- Deleting a user hard-deletes the row and every rating they wrote.
"""
import sqlite3
from typing import Optional
import logging

from store_ratings.core.config import settings
from store_ratings.core.exceptions import ConflictError, NotFoundError
from store_ratings.core.security import hash_password
from store_ratings.db.database import atomic
from store_ratings.models.user import User, UserRole
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.repositories.store_repository import StoreRepository
from store_ratings.repositories.user_repository import UserRepository
from store_ratings.schemas.user import UserCreate, UserProfileUpdate
from store_ratings.services.aggregation import compute_summary
from store_ratings.services.views import user_view

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing UserService")
        self._conn = conn
        self._repo = UserRepository(conn)
        self._store_repo = StoreRepository(conn)
        self._rating_repo = RatingRepository(conn)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User:
        """Return a user or raise 404."""
        logger.info("Fetching user id=%s", user_id)
        user = self._repo.get_by_id(user_id)
        if user is None:
            logger.warning("User id=%s not found", user_id)
            raise NotFoundError(f"User with id={user_id} not found")
        return user

    def _owned_store_stats(self, user: User) -> Optional[dict]:
        if user.role != UserRole.OWNER:
            return None
        store = self._store_repo.get_by_owner_id(user.id)
        if store is None:
            return None
        summary = compute_summary(self._rating_repo.list_by_store(store.id))
        return {
            "id": store.id,
            "name": store.name,
            "average_rating": summary.average,
            "total_ratings": summary.count,
        }

    def get_user_detail(self, user_id: int) -> dict:
        """A user with their store's rating stats when they are an OWNER."""
        user = self.get_user(user_id)
        return {**user_view(user), "store": self._owned_store_stats(user)}

    def list_users(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        role: Optional[UserRole] = None,
        sort: Optional[str] = None,
        order: str = "asc",
    ) -> list[dict]:
        logger.info("Listing users role=%s sort=%s order=%s", role, sort, order)
        users = self._repo.list_filtered(
            name=name, email=email, address=address, role=role, sort=sort, order=order
        )
        return [{**user_view(u), "store": self._owned_store_stats(u)} for u in users]

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    def create_user(self, data: UserCreate) -> User:
        """Create an account with any role (admin action)."""
        logger.info("Creating user %s role=%s", data.email, data.role.value)
        if self._repo.get_by_email(data.email):
            logger.warning("Duplicate email registration attempt: %s", data.email)
            raise ConflictError("Email is already registered")
        try:
            user = self._repo.create(
                name=data.name,
                email=data.email,
                hashed_password=hash_password(data.password),
                address=data.address,
                role=data.role,
            )
        except sqlite3.IntegrityError:
            logger.warning("User insert violated email uniqueness: %s", data.email)
            raise ConflictError("Email is already registered")
        logger.info("User created id=%s", user.id)
        return user

    def update_role(self, user_id: int, role: UserRole) -> User:
        user = self.get_user(user_id)
        if role == UserRole.USER and self._store_repo.get_by_owner_id(user_id):
            logger.warning("Refusing to demote store owner id=%s to USER", user_id)
            raise ConflictError(
                "User owns a store. Delete the store before changing the role to USER"
            )
        logger.info("Changing role of user id=%s from %s to %s", user_id, user.role.value, role.value)
        return self._repo.set_role(user_id, role)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_user(self, user_id: int) -> None:
        """Hard-delete a user and their ratings; refused while they own a store."""
        self.get_user(user_id)
        if self._store_repo.get_by_owner_id(user_id):
            logger.warning("Refusing to delete user id=%s who owns a store", user_id)
            raise ConflictError(
                "Cannot delete user who owns a store. Please delete the store first."
            )
        with atomic(self._conn):
            self._rating_repo.delete_by_user(user_id)
            self._repo.delete(user_id)
        logger.info("User deleted id=%s", user_id)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self, user: User) -> dict:
        """The caller's account plus a summary of the ratings they have given."""
        summary = compute_summary(self._rating_repo.list_by_user(user.id))
        recent = self._rating_repo.list_by_user_with_store(
            user.id, sort="newest", limit=settings.RECENT_RATINGS_LIMIT
        )
        return {
            **user_view(user),
            "rating_stats": {"count": summary.count, "average_rating": summary.average},
            "recent_ratings": [
                {
                    "id": item.rating.id,
                    "value": item.rating.value,
                    "comment": item.rating.comment,
                    "created_at": item.rating.created_at,
                    "store_id": item.rating.store_id,
                    "store_name": item.store_name,
                }
                for item in recent
            ],
        }

    def update_profile(self, user: User, data: UserProfileUpdate) -> User:
        fields = data.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in fields:
            existing = self._repo.get_by_email(fields["email"])
            if existing and existing.id != user.id:
                logger.warning("Duplicate email update attempt: %s", fields["email"])
                raise ConflictError("Email is already in use")
        logger.info("Updating profile of user id=%s fields=%s", user.id, sorted(fields))
        try:
            return self._repo.update(user.id, **fields)  # type: ignore[return-value]
        except sqlite3.IntegrityError:
            raise ConflictError("Email is already in use")
