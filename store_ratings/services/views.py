"""
Shape domain objects into the plain dicts the response schemas validate.

Related-person fields go through the visibility table in access_control so
an owner's or author's email only appears to audiences allowed to see it.
"""
from dataclasses import asdict
from typing import Optional

from store_ratings.models.rating import Rating, RatingWithStore, RatingWithUser
from store_ratings.models.store import Store, StoreWithOwner
from store_ratings.models.user import User
from store_ratings.services.access_control import project, visible_fields
from store_ratings.services.aggregation import RatingSummary


def user_view(user: User) -> dict:
    """Public attributes of a user (the password hash is never included)."""
    data = asdict(user)
    data.pop("hashed_password")
    return data


def store_view(store: Store) -> dict:
    return asdict(store)


def rating_view(rating: Optional[Rating]) -> Optional[dict]:
    return asdict(rating) if rating is not None else None


def summary_view(summary: RatingSummary) -> dict:
    return asdict(summary)


def store_owner_view(item: StoreWithOwner, audience=None) -> dict:
    owner = {"id": item.store.owner_id, "name": item.owner_name, "email": item.owner_email}
    return project(owner, visible_fields("store_owner", audience))


def rating_author_view(item: RatingWithUser, audience=None) -> dict:
    """A rating with the author fields *audience* may see."""
    author = {"id": item.rating.user_id, "name": item.user_name, "email": item.user_email}
    return {
        "id": item.rating.id,
        "value": item.rating.value,
        "comment": item.rating.comment,
        "created_at": item.rating.created_at,
        "user": project(author, visible_fields("rating_author", audience)),
    }


def rating_with_store_view(item: RatingWithStore) -> dict:
    data = asdict(item.rating)
    data["store"] = {
        "id": item.rating.store_id,
        "name": item.store_name,
        "address": item.store_address,
        "contact_email": item.store_contact_email,
    }
    return data
