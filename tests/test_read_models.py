from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from store_ratings.models.user import UserRole
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.services.admin_service import AdminService
from store_ratings.services.catalog_service import CatalogService
from store_ratings.services.owner_service import OwnerService
from store_ratings.services.user_service import UserService

UTC = timezone.utc


@pytest.fixture
def rated_store(conn, make_user, make_store):
    """A store with three ratings written at fixed times."""
    owner = make_user(UserRole.OWNER)
    store = make_store(owner, name="Harbour Cafe")
    repo = RatingRepository(conn)
    raters = [make_user(name=n) for n in ("Alice", "Bob", "Carol")]
    for rater, value, created in zip(
        raters,
        (5, 2, 4),
        (
            datetime(2024, 12, 3, tzinfo=UTC),
            datetime(2025, 1, 10, tzinfo=UTC),
            datetime(2025, 1, 20, tzinfo=UTC),
        ),
    ):
        rating = repo.create(rater.id, store.id, value)
        conn.execute(
            "UPDATE ratings SET created_at = ? WHERE id = ?", (created.isoformat(), rating.id)
        )
    conn.commit()
    return SimpleNamespace(owner=owner, store=store, raters=raters)


def test_owner_dashboard(conn, rated_store):
    dashboard = OwnerService(conn).dashboard(
        rated_store.store, now=datetime(2025, 2, 1, tzinfo=UTC)
    )

    assert dashboard["rating_stats"]["count"] == 3
    assert dashboard["rating_stats"]["average"] == 3.7
    assert [r["user"]["name"] for r in dashboard["recent_activity"]["latest_ratings"]] == [
        "Carol",
        "Bob",
        "Alice",
    ]
    trend = dashboard["recent_activity"]["rating_trend"]
    assert [(p["month"], p["average"], p["count"]) for p in trend] == [
        ("December", 5.0, 1),
        ("January", 3.0, 2),
    ]


def test_owner_ratings_filters(conn, rated_store):
    service = OwnerService(conn)

    high = service.ratings(rated_store.store, min_rating=4, sort="rating_lowest")
    assert high["total_count"] == 2
    assert [r["value"] for r in high["ratings"]] == [4, 5]
    assert high["average_rating"] == 3.7

    january = service.ratings(
        rated_store.store,
        date_from=datetime(2025, 1, 1, tzinfo=UTC),
        date_to=datetime(2025, 1, 31, tzinfo=UTC),
    )
    assert [r["user"]["name"] for r in january["ratings"]] == ["Carol", "Bob"]

    by_name = service.ratings(rated_store.store, search="ali")
    assert [r["user"]["email"] for r in by_name["ratings"]] == [rated_store.raters[0].email]


def test_catalog_detail_includes_callers_rating(conn, rated_store):
    alice = rated_store.raters[0]

    detail = CatalogService(conn).get_store_detail(rated_store.store.id, actor=alice)

    assert detail["rating_stats"]["distribution"] == {1: 0, 2: 1, 3: 0, 4: 1, 5: 1}
    assert detail["user_rating"]["value"] == 5
    assert "email" not in detail["owner"]


def test_admin_lists_owner_email_and_average(conn, rated_store):
    rows = AdminService(conn).list_stores(min_rating=3.5)

    assert [row["name"] for row in rows] == ["Harbour Cafe"]
    assert rows[0]["owner"]["email"] == rated_store.owner.email
    assert rows[0]["total_ratings"] == 3

    assert AdminService(conn).list_stores(min_rating=4) == []


def test_admin_user_list_carries_owner_store_stats(conn, rated_store):
    rows = UserService(conn).list_users(role=UserRole.OWNER)

    assert len(rows) == 1
    assert rows[0]["store"] == {
        "id": rated_store.store.id,
        "name": "Harbour Cafe",
        "average_rating": 3.7,
        "total_ratings": 3,
    }
    assert "hashed_password" not in rows[0]


def test_profile_summarises_given_ratings(conn, rated_store):
    bob = rated_store.raters[1]

    profile = UserService(conn).get_profile(bob)

    assert profile["rating_stats"] == {"count": 1, "average_rating": 2.0}
    assert profile["recent_ratings"][0]["store_name"] == "Harbour Cafe"
