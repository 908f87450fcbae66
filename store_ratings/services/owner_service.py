"""
Read models for the owner portal.

Every method takes the store the access layer resolved for the calling
OWNER, so an owner only ever sees their own store.
"""
import sqlite3
from dataclasses import asdict
from datetime import datetime
from typing import Optional
import logging

from store_ratings.core.config import settings
from store_ratings.models.store import Store
from store_ratings.models.user import UserRole
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.repositories.store_repository import StoreRepository
from store_ratings.services.access_control import Operation
from store_ratings.services.aggregation import compute_monthly_trend, compute_summary
from store_ratings.services.pagination import page_envelope, page_offset
from store_ratings.services.views import (
    rating_author_view,
    store_owner_view,
    store_view,
    summary_view,
)

logger = logging.getLogger(__name__)

OWNER_RATING_SORTS = ("date_newest", "date_oldest", "rating_highest", "rating_lowest")


class OwnerService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing OwnerService")
        self._store_repo = StoreRepository(conn)
        self._rating_repo = RatingRepository(conn)

    def dashboard(self, store: Store, now: Optional[datetime] = None) -> dict:
        """Store info, rating summary, latest ratings and the monthly trend."""
        logger.info("Building owner dashboard for store id=%s", store.id)
        ratings = self._rating_repo.list_by_store(store.id)
        latest = self._rating_repo.list_recent_for_store(
            store.id, settings.RECENT_RATINGS_LIMIT
        )
        return {
            "store_info": store_view(store),
            "rating_stats": summary_view(compute_summary(ratings)),
            "recent_activity": {
                "latest_ratings": [
                    rating_author_view(item, Operation.OWNER_PORTAL) for item in latest
                ],
                "rating_trend": [
                    asdict(point)
                    for point in compute_monthly_trend(ratings, settings.TREND_MONTHS, now=now)
                ],
            },
        }

    def store_details(self, store: Store) -> dict:
        item = self._store_repo.get_with_owner(store.id)
        summary = compute_summary(self._rating_repo.list_by_store(store.id))
        return {
            **store_view(store),
            "owner": store_owner_view(item, UserRole.OWNER),
            "total_ratings": summary.count,
            "average_rating": summary.average,
        }

    def ratings(
        self,
        store: Store,
        page: int = 1,
        limit: int = 10,
        sort: str = "date_newest",
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
    ) -> dict:
        """One filtered page of the store's ratings, with rater names and emails."""
        filters = {
            "min_value": min_rating,
            "max_value": max_rating,
            "date_from": date_from,
            "date_to": date_to,
            "search": search,
        }
        logger.info("Listing ratings of store id=%s page=%s sort=%s", store.id, page, sort)
        total = self._rating_repo.count_for_store(store.id, **filters)
        items = self._rating_repo.search_for_store(
            store.id, sort=sort, limit=limit, offset=page_offset(page, limit), **filters
        )
        summary = compute_summary(self._rating_repo.list_by_store(store.id))
        return {
            **page_envelope(total, page, limit),
            "average_rating": summary.average,
            "ratings": [rating_author_view(item, Operation.OWNER_PORTAL) for item in items],
            "filters": {
                "min_rating": min_rating,
                "max_rating": max_rating,
                "date_from": date_from,
                "date_to": date_to,
                "search": search,
                "sort": sort,
            },
            "available_sorts": list(OWNER_RATING_SORTS),
        }
