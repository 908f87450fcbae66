"""
Domain models representing a Rating row and the joined views built on it.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from store_ratings.models.timestamps import parse_timestamp


@dataclass
class Rating:
    id: int
    value: int
    comment: Optional[str]
    user_id: int
    store_id: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row) -> "Rating":
        """Build a Rating from a sqlite3.Row object."""
        return cls(
            id=row["id"],
            value=row["value"],
            comment=row["comment"],
            user_id=row["user_id"],
            store_id=row["store_id"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


@dataclass
class RatingWithUser:
    """A rating joined with the name and email of the user who wrote it."""

    rating: Rating
    user_name: str
    user_email: str

    @classmethod
    def from_row(cls, row) -> "RatingWithUser":
        return cls(
            rating=Rating.from_row(row),
            user_name=row["user_name"],
            user_email=row["user_email"],
        )


@dataclass
class RatingWithStore:
    """A rating joined with the store it was written for."""

    rating: Rating
    store_name: str
    store_address: str
    store_contact_email: str

    @classmethod
    def from_row(cls, row) -> "RatingWithStore":
        return cls(
            rating=Rating.from_row(row),
            store_name=row["store_name"],
            store_address=row["store_address"],
            store_contact_email=row["store_contact_email"],
        )
