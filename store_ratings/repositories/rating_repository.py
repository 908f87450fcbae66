"""
Repository layer for Rating persistence.
All SQL for the `ratings` table lives here.
"""
import sqlite3
from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional
import logging

from store_ratings.core.logging_config import log_db_timing
from store_ratings.models.rating import Rating, RatingWithStore, RatingWithUser
from store_ratings.models.timestamps import as_utc, utc_now_iso

logger = logging.getLogger(__name__)

# Public sort keys -> ORDER BY clauses. Ties fall back to id for stable pages.
SORT_ORDERS = {
    "date_newest": "r.created_at DESC, r.id DESC",
    "date_oldest": "r.created_at ASC, r.id ASC",
    "rating_highest": "r.value DESC, r.created_at DESC, r.id DESC",
    "rating_lowest": "r.value ASC, r.created_at DESC, r.id DESC",
    "newest": "r.created_at DESC, r.id DESC",
    "oldest": "r.created_at ASC, r.id ASC",
    "highest": "r.value DESC, r.created_at DESC, r.id DESC",
    "lowest": "r.value ASC, r.created_at DESC, r.id DESC",
}

_SELECT_WITH_USER = """
    SELECT r.*, u.name AS user_name, u.email AS user_email
      FROM ratings r
      JOIN users u ON u.id = r.user_id
"""

_SELECT_WITH_STORE = """
    SELECT r.*, s.name AS store_name, s.address AS store_address,
           s.contact_email AS store_contact_email
      FROM ratings r
      JOIN stores s ON s.id = r.store_id
"""


def _to_utc_iso(value: datetime) -> str:
    return as_utc(value).astimezone(timezone.utc).isoformat()


class RatingRepository:
    """Data access layer for rating records."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Store the database connection for query execution."""
        logger.trace("Initializing RatingRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read: single rows
    # ------------------------------------------------------------------

    @log_db_timing
    def get_by_id(self, rating_id: int) -> Optional[Rating]:
        """Return a rating by id or None if missing."""
        logger.trace("Fetching rating by id=%s", rating_id)
        row = self._conn.execute(
            "SELECT * FROM ratings WHERE id = ?", (rating_id,)
        ).fetchone()
        return Rating.from_row(row) if row else None

    @log_db_timing
    def get_by_user_and_store(self, user_id: int, store_id: int) -> Optional[Rating]:
        """Return the rating *user_id* gave *store_id*, or None."""
        logger.trace("Fetching rating user_id=%s store_id=%s", user_id, store_id)
        row = self._conn.execute(
            "SELECT * FROM ratings WHERE user_id = ? AND store_id = ?",
            (user_id, store_id),
        ).fetchone()
        return Rating.from_row(row) if row else None

    @log_db_timing
    def get_with_store(self, rating_id: int) -> Optional[RatingWithStore]:
        """Return a rating joined with its store details."""
        row = self._conn.execute(
            f"{_SELECT_WITH_STORE} WHERE r.id = ?", (rating_id,)
        ).fetchone()
        return RatingWithStore.from_row(row) if row else None

    # ------------------------------------------------------------------
    # Read: collections
    # ------------------------------------------------------------------

    @log_db_timing
    def list_by_store(self, store_id: int) -> list[Rating]:
        """Return every rating of a store, oldest first."""
        rows = self._conn.execute(
            "SELECT * FROM ratings WHERE store_id = ? ORDER BY created_at, id",
            (store_id,),
        ).fetchall()
        return [Rating.from_row(r) for r in rows]

    @log_db_timing
    def list_by_store_ids(self, store_ids: Iterable[int]) -> dict[int, list[Rating]]:
        """Return ratings grouped by store id for the given stores."""
        ids = list(store_ids)
        grouped: dict[int, list[Rating]] = defaultdict(list)
        if not ids:
            return grouped
        placeholders = ", ".join("?" for _ in ids)
        rows = self._conn.execute(
            f"SELECT * FROM ratings WHERE store_id IN ({placeholders})", ids
        ).fetchall()
        for row in rows:
            rating = Rating.from_row(row)
            grouped[rating.store_id].append(rating)
        return grouped

    @log_db_timing
    def list_recent_for_store(self, store_id: int, limit: int) -> list[RatingWithUser]:
        """Return the *limit* most recent ratings of a store with their authors."""
        rows = self._conn.execute(
            f"{_SELECT_WITH_USER} WHERE r.store_id = ? ORDER BY {SORT_ORDERS['newest']} LIMIT ?",
            (store_id, limit),
        ).fetchall()
        return [RatingWithUser.from_row(r) for r in rows]

    @log_db_timing
    def list_by_user(self, user_id: int) -> list[Rating]:
        """Return every rating written by a user."""
        rows = self._conn.execute(
            "SELECT * FROM ratings WHERE user_id = ? ORDER BY created_at, id",
            (user_id,),
        ).fetchall()
        return [Rating.from_row(r) for r in rows]

    @log_db_timing
    def list_by_user_with_store(
        self,
        user_id: int,
        sort: str = "newest",
        limit: int = 10,
        offset: int = 0,
    ) -> list[RatingWithStore]:
        """Return one page of a user's ratings joined with store details."""
        order_by = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])
        rows = self._conn.execute(
            f"{_SELECT_WITH_STORE} WHERE r.user_id = ? ORDER BY {order_by} LIMIT ? OFFSET ?",
            (user_id, limit, offset),
        ).fetchall()
        return [RatingWithStore.from_row(r) for r in rows]

    @log_db_timing
    def count_by_user(self, user_id: int) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM ratings WHERE user_id = ?", (user_id,)
        ).fetchone()[0]

    @log_db_timing
    def count(self) -> int:
        """Return the total number of ratings."""
        return self._conn.execute("SELECT COUNT(*) FROM ratings").fetchone()[0]

    # ------------------------------------------------------------------
    # Read: filtered store ratings (owner portal)
    # ------------------------------------------------------------------

    @staticmethod
    def _store_filters(
        store_id: int,
        min_value: Optional[int],
        max_value: Optional[int],
        date_from: Optional[datetime],
        date_to: Optional[datetime],
        search: Optional[str],
    ) -> tuple[str, list]:
        clauses = ["r.store_id = ?"]
        params: list = [store_id]
        if min_value is not None:
            clauses.append("r.value >= ?")
            params.append(min_value)
        if max_value is not None:
            clauses.append("r.value <= ?")
            params.append(max_value)
        if date_from is not None:
            clauses.append("r.created_at >= ?")
            params.append(_to_utc_iso(date_from))
        if date_to is not None:
            clauses.append("r.created_at <= ?")
            params.append(_to_utc_iso(date_to))
        if search:
            clauses.append("u.name LIKE ? COLLATE NOCASE")
            params.append(f"%{search}%")
        return " AND ".join(clauses), params

    @log_db_timing
    def search_for_store(
        self,
        store_id: int,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
        sort: str = "date_newest",
        limit: int = 10,
        offset: int = 0,
    ) -> list[RatingWithUser]:
        """Return one page of a store's ratings matching the filters."""
        where, params = self._store_filters(
            store_id, min_value, max_value, date_from, date_to, search
        )
        order_by = SORT_ORDERS.get(sort, SORT_ORDERS["date_newest"])
        rows = self._conn.execute(
            f"{_SELECT_WITH_USER} WHERE {where} ORDER BY {order_by} LIMIT ? OFFSET ?",
            params + [limit, offset],
        ).fetchall()
        return [RatingWithUser.from_row(r) for r in rows]

    @log_db_timing
    def count_for_store(
        self,
        store_id: int,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
    ) -> int:
        """Count a store's ratings matching the same filters as search_for_store()."""
        where, params = self._store_filters(
            store_id, min_value, max_value, date_from, date_to, search
        )
        return self._conn.execute(
            f"SELECT COUNT(*) FROM ratings r JOIN users u ON u.id = r.user_id WHERE {where}",
            params,
        ).fetchone()[0]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def create(
        self,
        user_id: int,
        store_id: int,
        value: int,
        comment: Optional[str] = None,
    ) -> Rating:
        """
        Insert a new rating and return it.
        Raises sqlite3.IntegrityError if the (user_id, store_id) pair exists.
        """
        logger.info("Creating rating user_id=%s store_id=%s", user_id, store_id)
        now = utc_now_iso()
        cursor = self._conn.execute(
            """
            INSERT INTO ratings (value, comment, user_id, store_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (value, comment, user_id, store_id, now, now),
        )
        return self.get_by_id(cursor.lastrowid)  # type: ignore[return-value]

    @log_db_timing
    def update(self, rating_id: int, **fields) -> Optional[Rating]:
        """Update rating fields in place and return the updated row."""
        if not fields:
            logger.trace("No rating fields to update id=%s", rating_id)
            return self.get_by_id(rating_id)

        logger.info("Updating rating id=%s fields=%s", rating_id, sorted(fields))
        fields["updated_at"] = utc_now_iso()
        set_clause = ", ".join(f"{col} = ?" for col in fields)
        values = list(fields.values()) + [rating_id]
        self._conn.execute(
            f"UPDATE ratings SET {set_clause} WHERE id = ?", values
        )
        return self.get_by_id(rating_id)

    @log_db_timing
    def delete(self, rating_id: int) -> bool:
        """Remove a rating. Returns True if a row was deleted."""
        logger.info("Deleting rating id=%s", rating_id)
        cursor = self._conn.execute("DELETE FROM ratings WHERE id = ?", (rating_id,))
        return cursor.rowcount > 0

    @log_db_timing
    def delete_by_user(self, user_id: int) -> int:
        """Remove every rating written by a user and return the count."""
        cursor = self._conn.execute("DELETE FROM ratings WHERE user_id = ?", (user_id,))
        logger.info("Deleted %s ratings of user id=%s", cursor.rowcount, user_id)
        return cursor.rowcount

    @log_db_timing
    def delete_by_store(self, store_id: int) -> int:
        """Remove every rating of a store and return the count."""
        cursor = self._conn.execute("DELETE FROM ratings WHERE store_id = ?", (store_id,))
        logger.info("Deleted %s ratings of store id=%s", cursor.rowcount, store_id)
        return cursor.rowcount
