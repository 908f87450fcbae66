"""
Domain model (plain Python dataclass) representing a User row from the DB.
This is the internal representation used across service and repository layers.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from store_ratings.models.timestamps import parse_timestamp


class UserRole(str, Enum):
    USER = "USER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"


@dataclass
class User:
    id: int
    name: str
    email: str
    hashed_password: str
    address: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row) -> "User":
        """Build a User from a sqlite3.Row object."""
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            hashed_password=row["hashed_password"],
            address=row["address"],
            role=UserRole(row["role"]),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )
