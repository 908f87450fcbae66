"""
Repository layer for Store persistence.
All SQL for the `stores` table lives here.
"""
import sqlite3
from typing import Optional
import logging

from store_ratings.core.logging_config import log_db_timing
from store_ratings.models.store import Store, StoreWithOwner
from store_ratings.models.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "name": "s.name",
    "address": "s.address",
    "created_at": "s.created_at",
}

_SELECT_WITH_OWNER = """
    SELECT s.*, u.name AS owner_name, u.email AS owner_email
      FROM stores s
      JOIN users u ON u.id = s.owner_id
"""


class StoreRepository:
    """Data access layer for store records."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Store the database connection for query execution."""
        logger.trace("Initializing StoreRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @log_db_timing
    def get_by_id(self, store_id: int) -> Optional[Store]:
        """Return a store by id or None if missing."""
        logger.trace("Fetching store by id=%s", store_id)
        row = self._conn.execute(
            "SELECT * FROM stores WHERE id = ?", (store_id,)
        ).fetchone()
        return Store.from_row(row) if row else None

    @log_db_timing
    def get_by_owner_id(self, owner_id: int) -> Optional[Store]:
        """Return the store owned by *owner_id*, or None."""
        logger.trace("Fetching store by owner id=%s", owner_id)
        row = self._conn.execute(
            "SELECT * FROM stores WHERE owner_id = ?", (owner_id,)
        ).fetchone()
        return Store.from_row(row) if row else None

    @log_db_timing
    def get_with_owner(self, store_id: int) -> Optional[StoreWithOwner]:
        """Return a store joined with its owner's name and email."""
        logger.trace("Fetching store with owner id=%s", store_id)
        row = self._conn.execute(
            f"{_SELECT_WITH_OWNER} WHERE s.id = ?", (store_id,)
        ).fetchone()
        return StoreWithOwner.from_row(row) if row else None

    @log_db_timing
    def list_with_owners(
        self,
        name: Optional[str] = None,
        address: Optional[str] = None,
        owner_email: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        order: str = "asc",
    ) -> list[StoreWithOwner]:
        """
        Return stores with owner details matching the case-insensitive filters.
        *search* matches either the store name or the store address.
        Without an explicit sort, newest stores come first.
        """
        logger.trace(
            "Listing stores name=%s address=%s owner_email=%s search=%s",
            name,
            address,
            owner_email,
            search,
        )
        clauses: list[str] = []
        params: list = []
        for column, value in (("s.name", name), ("s.address", address), ("u.email", owner_email)):
            if value:
                clauses.append(f"{column} LIKE ? COLLATE NOCASE")
                params.append(f"%{value}%")
        if search:
            clauses.append("(s.name LIKE ? COLLATE NOCASE OR s.address LIKE ? COLLATE NOCASE)")
            params.extend([f"%{search}%", f"%{search}%"])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        if sort in SORTABLE_COLUMNS:
            direction = "DESC" if order == "desc" else "ASC"
            order_by = f"{SORTABLE_COLUMNS[sort]} {direction}, s.id ASC"
        else:
            order_by = "s.created_at DESC, s.id DESC"

        rows = self._conn.execute(
            f"{_SELECT_WITH_OWNER} {where} ORDER BY {order_by}", params
        ).fetchall()
        return [StoreWithOwner.from_row(r) for r in rows]

    @log_db_timing
    def count(self) -> int:
        """Return the total number of stores."""
        return self._conn.execute("SELECT COUNT(*) FROM stores").fetchone()[0]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def create(
        self,
        name: str,
        address: str,
        contact_email: str,
        owner_id: int,
    ) -> Store:
        """
        Insert a new store and return it.
        Raises sqlite3.IntegrityError if *owner_id* already owns a store.
        """
        logger.info("Creating store name=%s owner_id=%s", name, owner_id)
        now = utc_now_iso()
        cursor = self._conn.execute(
            """
            INSERT INTO stores (name, address, contact_email, owner_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (name, address, contact_email, owner_id, now, now),
        )
        return self.get_by_id(cursor.lastrowid)  # type: ignore[return-value]

    @log_db_timing
    def update(self, store_id: int, **fields) -> Optional[Store]:
        """Update store fields and return the updated row."""
        if not fields:
            logger.trace("No store fields to update id=%s", store_id)
            return self.get_by_id(store_id)

        logger.info("Updating store id=%s fields=%s", store_id, sorted(fields))
        fields["updated_at"] = utc_now_iso()
        set_clause = ", ".join(f"{col} = ?" for col in fields)
        values = list(fields.values()) + [store_id]
        self._conn.execute(
            f"UPDATE stores SET {set_clause} WHERE id = ?", values
        )
        return self.get_by_id(store_id)

    @log_db_timing
    def delete(self, store_id: int) -> bool:
        """Remove the store row. Returns True if a row was deleted."""
        logger.info("Deleting store id=%s", store_id)
        cursor = self._conn.execute("DELETE FROM stores WHERE id = ?", (store_id,))
        logger.info("Store delete affected %s rows", cursor.rowcount)
        return cursor.rowcount > 0
