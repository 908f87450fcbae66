"""
Domain model representing a stored refresh token row.
"""
from dataclasses import dataclass
from datetime import datetime

from store_ratings.models.timestamps import parse_timestamp


@dataclass
class RefreshToken:
    id: int
    user_id: int
    token: str
    expires_at: datetime
    revoked: bool
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> "RefreshToken":
        """Build a RefreshToken from a sqlite3.Row object."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            token=row["token"],
            expires_at=parse_timestamp(row["expires_at"]),
            revoked=bool(row["revoked"]),
            created_at=parse_timestamp(row["created_at"]),
        )
