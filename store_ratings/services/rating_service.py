"""
Rating lifecycle: submit, read, update and delete a user's store ratings.

Business rules enforced here:
- A user holds at most one rating per store. The UNIQUE(user_id, store_id)
  constraint is the final arbiter; a constraint violation is a Conflict.
- Only the author of a rating may read it by id, change it or delete it.
- Updates change only the fields the client sent and keep the same row.
- Deleting twice yields NotFound the second time.
"""
import sqlite3
from typing import Optional
import logging

from store_ratings.core.exceptions import ConflictError, NotFoundError
from store_ratings.db.database import atomic
from store_ratings.models.rating import Rating, RatingWithStore
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.repositories.store_repository import StoreRepository
from store_ratings.schemas.rating import RatingUpdate
from store_ratings.services.access_control import AccessControl, Actor, Operation
from store_ratings.services.pagination import page_envelope, page_offset
from store_ratings.services.views import rating_with_store_view

logger = logging.getLogger(__name__)

USER_RATING_SORTS = ("newest", "oldest", "highest", "lowest")


class RatingService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing RatingService")
        self._conn = conn
        self._repo = RatingRepository(conn)
        self._store_repo = StoreRepository(conn)
        self._access = AccessControl(conn)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_rating(self, rating_id: int) -> Rating:
        rating = self._repo.get_by_id(rating_id)
        if rating is None:
            logger.warning("Rating id=%s not found", rating_id)
            raise NotFoundError(f"Rating with id={rating_id} not found")
        return rating

    def _ensure_store(self, store_id: int) -> None:
        if self._store_repo.get_by_id(store_id) is None:
            logger.warning("Store id=%s not found", store_id)
            raise NotFoundError(f"Store with id={store_id} not found")

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(
        self,
        actor: Actor,
        store_id: int,
        value: int,
        comment: Optional[str] = None,
    ) -> Rating:
        """Submit *actor*'s rating for a store (Absent -> Active)."""
        self._access.enforce(actor, Operation.RATING_SUBMIT)
        logger.info("Submitting rating user_id=%s store_id=%s", actor.id, store_id)
        self._ensure_store(store_id)

        if self._repo.get_by_user_and_store(actor.id, store_id):
            logger.warning(
                "Duplicate rating attempt user_id=%s store_id=%s", actor.id, store_id
            )
            raise ConflictError("You have already rated this store")

        try:
            with atomic(self._conn):
                rating = self._repo.create(actor.id, store_id, value, comment)
        except sqlite3.IntegrityError:
            logger.warning(
                "Rating insert lost a race user_id=%s store_id=%s", actor.id, store_id
            )
            raise ConflictError("You have already rated this store")

        logger.info("Rating created id=%s", rating.id)
        return rating

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, rating_id: int, actor: Actor) -> RatingWithStore:
        """Return one of *actor*'s ratings together with its store."""
        self._access.enforce(actor, Operation.RATING_VIEW)
        item = self._repo.get_with_store(rating_id)
        if item is None:
            logger.warning("Rating id=%s not found", rating_id)
            raise NotFoundError(f"Rating with id={rating_id} not found")
        self._access.enforce(actor, Operation.RATING_VIEW, rating=item.rating)
        return item

    def get_for_store(self, actor: Actor, store_id: int) -> Optional[Rating]:
        """Return *actor*'s rating of a store, or None when they have not rated it."""
        self._access.enforce(actor, Operation.MY_RATING_LOOKUP)
        self._ensure_store(store_id)
        return self._repo.get_by_user_and_store(actor.id, store_id)

    def list_for_user(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        sort: str = "newest",
    ) -> dict:
        """One page of a user's ratings with store details."""
        logger.info("Listing ratings of user id=%s page=%s sort=%s", user_id, page, sort)
        total = self._repo.count_by_user(user_id)
        items = self._repo.list_by_user_with_store(
            user_id, sort=sort, limit=limit, offset=page_offset(page, limit)
        )
        return {
            **page_envelope(total, page, limit),
            "ratings": [rating_with_store_view(item) for item in items],
            "available_sorts": list(USER_RATING_SORTS),
        }

    def activity(self, user_id: int, page: int = 1, limit: int = 10) -> dict:
        """A user's rating history, newest first."""
        return self.list_for_user(user_id, page=page, limit=limit, sort="newest")

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    def update(self, rating_id: int, patch: RatingUpdate, actor: Actor) -> Rating:
        """Apply the fields present in *patch* to the author's rating."""
        self._access.enforce(actor, Operation.RATING_MODIFY)
        rating = self._get_rating(rating_id)
        self._access.enforce(actor, Operation.RATING_MODIFY, rating=rating)

        fields = patch.model_dump(exclude_unset=True)
        logger.info("Updating rating id=%s fields=%s", rating_id, sorted(fields))
        return self._repo.update(rating_id, **fields)  # type: ignore[return-value]

    def delete(self, rating_id: int, actor: Actor) -> None:
        """Remove the author's rating (Active -> Absent)."""
        self._access.enforce(actor, Operation.RATING_MODIFY)
        rating = self._get_rating(rating_id)
        self._access.enforce(actor, Operation.RATING_MODIFY, rating=rating)

        if not self._repo.delete(rating_id):
            logger.warning("Rating id=%s vanished before delete", rating_id)
            raise NotFoundError(f"Rating with id={rating_id} not found")
        logger.info("Rating deleted id=%s", rating_id)
