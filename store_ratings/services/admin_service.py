"""
Read models for the admin surface: platform counts and the store directory.
"""
import sqlite3
from typing import Optional
import logging

from store_ratings.core.exceptions import NotFoundError
from store_ratings.models.rating import Rating
from store_ratings.models.store import StoreWithOwner
from store_ratings.models.user import UserRole
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.repositories.store_repository import StoreRepository
from store_ratings.repositories.user_repository import UserRepository
from store_ratings.services.access_control import AccessControl, Actor, Operation
from store_ratings.services.aggregation import compute_summary
from store_ratings.services.views import store_owner_view, store_view

logger = logging.getLogger(__name__)


def _store_row(item: StoreWithOwner, ratings: list[Rating], audience) -> dict:
    summary = compute_summary(ratings)
    return {
        **store_view(item.store),
        "owner": store_owner_view(item, audience),
        "average_rating": summary.average,
        "total_ratings": summary.count,
    }


class AdminService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing AdminService")
        self._user_repo = UserRepository(conn)
        self._store_repo = StoreRepository(conn)
        self._rating_repo = RatingRepository(conn)
        self._access = AccessControl(conn)

    def dashboard(self) -> dict:
        """Total number of users, stores and ratings on the platform."""
        stats = {
            "total_users": self._user_repo.count(),
            "total_stores": self._store_repo.count(),
            "total_ratings": self._rating_repo.count(),
        }
        logger.info("Admin dashboard stats %s", stats)
        return stats

    def list_stores(
        self,
        name: Optional[str] = None,
        address: Optional[str] = None,
        email: Optional[str] = None,
        min_rating: Optional[float] = None,
        max_rating: Optional[float] = None,
        sort: Optional[str] = None,
        order: str = "asc",
    ) -> list[dict]:
        """
        Every store with its owner and rating average.

        *min_rating* / *max_rating* bound the store average, inclusive.
        """
        logger.info(
            "Listing stores for admin sort=%s order=%s min=%s max=%s",
            sort,
            order,
            min_rating,
            max_rating,
        )
        items = self._store_repo.list_with_owners(
            name=name, address=address, owner_email=email, sort=sort, order=order
        )
        grouped = self._rating_repo.list_by_store_ids(item.store.id for item in items)
        rows = [_store_row(item, grouped.get(item.store.id, []), UserRole.ADMIN) for item in items]
        if min_rating is not None:
            rows = [row for row in rows if row["average_rating"] >= min_rating]
        if max_rating is not None:
            rows = [row for row in rows if row["average_rating"] <= max_rating]
        return rows

    def get_store(self, store_id: int, actor: Actor) -> dict:
        """One store with its rating average; open to admins and the store's owner."""
        item = self._store_repo.get_with_owner(store_id)
        if item is None:
            logger.warning("Store id=%s not found", store_id)
            raise NotFoundError(f"Store with id={store_id} not found")
        self._access.enforce(actor, Operation.STORE_MANAGE, store=item.store)
        return _store_row(item, self._rating_repo.list_by_store(store_id), actor.role)
