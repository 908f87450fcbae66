"""
Repository layer for User persistence.
All SQL for the `users` table lives here.
"""
import sqlite3
from typing import Optional
import logging

from store_ratings.core.logging_config import log_db_timing
from store_ratings.models.timestamps import utc_now_iso
from store_ratings.models.user import User, UserRole

logger = logging.getLogger(__name__)

# Whitelisted ORDER BY columns for list_filtered().
SORTABLE_COLUMNS = {
    "name": "name",
    "email": "email",
    "address": "address",
    "role": "role",
    "created_at": "created_at",
}


class UserRepository:
    """Data access layer for user records."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Store the database connection for query execution."""
        logger.trace("Initializing UserRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @log_db_timing
    def get_by_id(self, user_id: int) -> Optional[User]:
        """Return a user by id or None if missing."""
        logger.trace("Fetching user by id=%s", user_id)
        row = self._conn.execute(
            "SELECT * FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return User.from_row(row) if row else None

    @log_db_timing
    def get_by_email(self, email: str) -> Optional[User]:
        """Return a user by email (case-insensitive) or None."""
        logger.trace("Fetching user by email=%s", email)
        row = self._conn.execute(
            "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email,)
        ).fetchone()
        return User.from_row(row) if row else None

    @log_db_timing
    def list_filtered(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        role: Optional[UserRole] = None,
        sort: Optional[str] = None,
        order: str = "asc",
    ) -> list[User]:
        """
        Return users matching the case-insensitive substring filters.
        Without an explicit sort, newest accounts come first.
        """
        logger.trace(
            "Listing users name=%s email=%s address=%s role=%s", name, email, address, role
        )
        clauses: list[str] = []
        params: list = []
        for column, value in (("name", name), ("email", email), ("address", address)):
            if value:
                clauses.append(f"{column} LIKE ? COLLATE NOCASE")
                params.append(f"%{value}%")
        if role is not None:
            clauses.append("role = ?")
            params.append(role.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        if sort in SORTABLE_COLUMNS:
            direction = "DESC" if order == "desc" else "ASC"
            order_by = f"{SORTABLE_COLUMNS[sort]} {direction}, id ASC"
        else:
            order_by = "created_at DESC, id DESC"

        rows = self._conn.execute(
            f"SELECT * FROM users {where} ORDER BY {order_by}", params
        ).fetchall()
        return [User.from_row(r) for r in rows]

    @log_db_timing
    def count(self) -> int:
        """Return the total number of user accounts."""
        return self._conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def create(
        self,
        name: str,
        email: str,
        hashed_password: str,
        address: str,
        role: UserRole,
    ) -> User:
        """
        Insert a new user row and return the created user.
        Raises sqlite3.IntegrityError if the email is already taken.
        """
        logger.info("Creating user record email=%s role=%s", email, role.value)
        now = utc_now_iso()
        cursor = self._conn.execute(
            """
            INSERT INTO users (name, email, hashed_password, address, role, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (name, email, hashed_password, address, role.value, now, now),
        )
        return self.get_by_id(cursor.lastrowid)  # type: ignore[return-value]

    @log_db_timing
    def update(self, user_id: int, **fields) -> Optional[User]:
        """Update user fields and return the updated row."""
        if not fields:
            logger.trace("No user fields to update id=%s", user_id)
            return self.get_by_id(user_id)

        logger.info("Updating user record id=%s fields=%s", user_id, sorted(fields))
        fields["updated_at"] = utc_now_iso()
        set_clause = ", ".join(f"{col} = ?" for col in fields)
        values = list(fields.values()) + [user_id]
        self._conn.execute(
            f"UPDATE users SET {set_clause} WHERE id = ?", values
        )
        return self.get_by_id(user_id)

    @log_db_timing
    def set_role(self, user_id: int, role: UserRole) -> Optional[User]:
        """Change the role of a user and return the updated row."""
        logger.info("Setting role of user id=%s to %s", user_id, role.value)
        return self.update(user_id, role=role.value)

    @log_db_timing
    def delete(self, user_id: int) -> bool:
        """Physically remove the user row. Returns True if a row was deleted."""
        logger.info("Deleting user id=%s", user_id)
        cursor = self._conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        logger.info("User delete affected %s rows", cursor.rowcount)
        return cursor.rowcount > 0
