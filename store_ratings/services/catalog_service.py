"""
Store catalogue for anonymous visitors and signed-in users.

Listings are built from every matching store so that rating filters are
applied before the page is cut; page counts therefore always reflect the
filtered total.
"""
import sqlite3
from typing import Optional
import logging

from store_ratings.core.config import settings
from store_ratings.core.exceptions import NotFoundError
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.repositories.store_repository import StoreRepository
from store_ratings.services.access_control import Actor
from store_ratings.services.aggregation import compute_summary
from store_ratings.services.pagination import page_envelope, page_offset
from store_ratings.services.views import (
    rating_author_view,
    rating_view,
    store_owner_view,
    store_view,
    summary_view,
)

logger = logging.getLogger(__name__)

CATALOG_SORTS = {
    "name_asc": (lambda row: row["name"].lower(), False),
    "name_desc": (lambda row: row["name"].lower(), True),
    "rating_highest": (lambda row: row["rating_stats"]["average"], True),
    "rating_lowest": (lambda row: row["rating_stats"]["average"], False),
    "newest": (lambda row: (row["created_at"], row["id"]), True),
}


class CatalogService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing CatalogService")
        self._store_repo = StoreRepository(conn)
        self._rating_repo = RatingRepository(conn)

    def _own_ratings(self, actor: Optional[Actor]) -> dict:
        if actor is None:
            return {}
        return {r.store_id: r for r in self._rating_repo.list_by_user(actor.id)}

    def list_stores(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        sort: str = "name_asc",
        min_rating: Optional[float] = None,
        max_rating: Optional[float] = None,
        actor: Optional[Actor] = None,
    ) -> dict:
        """
        One page of stores with their rating count and average.

        When *actor* is given each store also carries the actor's own rating.
        """
        logger.info(
            "Listing catalogue page=%s limit=%s sort=%s search=%s", page, limit, sort, search
        )
        items = self._store_repo.list_with_owners(search=search)
        grouped = self._rating_repo.list_by_store_ids(item.store.id for item in items)
        audience = actor.role if actor is not None else None

        rows = []
        for item in items:
            summary = compute_summary(grouped.get(item.store.id, []))
            if min_rating is not None and summary.average < min_rating:
                continue
            if max_rating is not None and summary.average > max_rating:
                continue
            rows.append({
                **store_view(item.store),
                "owner": store_owner_view(item, audience),
                "rating_stats": {"count": summary.count, "average": summary.average},
            })

        key, reverse = CATALOG_SORTS.get(sort, CATALOG_SORTS["name_asc"])
        rows.sort(key=key, reverse=reverse)

        offset = page_offset(page, limit)
        page_rows = rows[offset:offset + limit]
        own = self._own_ratings(actor)
        if actor is not None:
            for row in page_rows:
                row["user_rating"] = rating_view(own.get(row["id"]))

        return {
            **page_envelope(len(rows), page, limit),
            "stores": page_rows,
            "available_sorts": list(CATALOG_SORTS),
        }

    def get_store_detail(self, store_id: int, actor: Optional[Actor] = None) -> dict:
        """A store with its rating summary and most recent ratings."""
        item = self._store_repo.get_with_owner(store_id)
        if item is None:
            logger.warning("Store id=%s not found", store_id)
            raise NotFoundError(f"Store with id={store_id} not found")

        summary = compute_summary(self._rating_repo.list_by_store(store_id))
        recent = self._rating_repo.list_recent_for_store(
            store_id, settings.STORE_DETAIL_RATINGS_LIMIT
        )
        detail = {
            **store_view(item.store),
            "owner": store_owner_view(item, actor.role if actor is not None else None),
            "rating_stats": summary_view(summary),
            "recent_ratings": [rating_author_view(r) for r in recent],
        }
        if actor is not None:
            detail["user_rating"] = rating_view(
                self._rating_repo.get_by_user_and_store(actor.id, store_id)
            )
        return detail
