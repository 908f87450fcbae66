"""
Domain model representing a Store row from the DB.
"""
from dataclasses import dataclass
from datetime import datetime

from store_ratings.models.timestamps import parse_timestamp


@dataclass
class Store:
    id: int
    name: str
    address: str
    contact_email: str
    owner_id: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row) -> "Store":
        """Build a Store from a sqlite3.Row object."""
        return cls(
            id=row["id"],
            name=row["name"],
            address=row["address"],
            contact_email=row["contact_email"],
            owner_id=row["owner_id"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


@dataclass
class StoreWithOwner:
    """A store joined with the name, email and role of its owner."""

    store: Store
    owner_name: str
    owner_email: str

    @classmethod
    def from_row(cls, row) -> "StoreWithOwner":
        return cls(
            store=Store.from_row(row),
            owner_name=row["owner_name"],
            owner_email=row["owner_email"],
        )
