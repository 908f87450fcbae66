from store_ratings.core.config import settings
from store_ratings.core.security import hash_password
from store_ratings.models.user import UserRole
from store_ratings.repositories.rating_repository import RatingRepository

from conftest import auth_headers

API = "/api/v1"


def test_root_and_router_registration(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Welcome" in response.json()["message"]

    paths = set(client.app.openapi()["paths"])
    assert {
        f"{API}/auth/login",
        f"{API}/admin/users/{{user_id}}/role",
        f"{API}/admin/stores/with-owner",
        f"{API}/owner/dashboard",
        f"{API}/user/stores/{{store_id}}/ratings",
        f"{API}/stores/{{store_id}}/my-rating",
        f"{API}/public/stores",
    }.issubset(paths)


def test_register_then_login_and_me(client):
    payload = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "password": "Secret@123",
        "address": "1 Elm Street",
    }
    registered = client.post(f"{API}/auth/register", json=payload)
    assert registered.status_code == 201
    body = registered.json()
    assert body["user"]["role"] == "USER"
    assert "hashed_password" not in body["user"]

    duplicate = client.post(f"{API}/auth/register", json=payload)
    assert duplicate.status_code == 409

    login = client.post(
        f"{API}/auth/login", data={"username": "jane@example.com", "password": "Secret@123"}
    )
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "jane@example.com"


def test_register_rejects_weak_password(client):
    response = client.post(
        f"{API}/auth/register",
        json={"name": "Weak Pass", "email": "weak@example.com", "password": "password", "address": ""},
    )

    assert response.status_code == 422


def test_login_with_wrong_password_is_unauthorized(client, make_user):
    make_user(email="sam@example.com", hashed_password=hash_password("Secret@123"))

    response = client.post(
        f"{API}/auth/login", data={"username": "sam@example.com", "password": "Wrong@123"}
    )

    assert response.status_code == 401


def test_seeded_admin_can_log_in(client):
    response = client.post(
        f"{API}/auth/login",
        data={"username": settings.SEED_ADMIN_EMAIL, "password": settings.SEED_ADMIN_PASSWORD},
    )

    assert response.status_code == 200


def test_user_cannot_reach_admin_routes(client, make_user):
    headers = auth_headers(make_user(UserRole.USER))

    assert client.get(f"{API}/admin/dashboard", headers=headers).status_code == 403
    assert client.get(f"{API}/admin/users", headers=headers).status_code == 403


def test_missing_token_is_unauthorized(client):
    assert client.get(f"{API}/admin/dashboard").status_code == 401


def test_owner_without_store_is_forbidden(client, make_user):
    response = client.get(f"{API}/owner/dashboard", headers=auth_headers(make_user(UserRole.OWNER)))

    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied. No store associated with this owner account."


def test_admin_store_lifecycle(client, make_user):
    admin = make_user(UserRole.ADMIN)
    candidate = make_user(UserRole.USER)
    headers = auth_headers(admin)

    created = client.post(
        f"{API}/admin/stores",
        json={
            "name": "Book Nook",
            "address": "3 Library Way",
            "contact_email": "nook@example.com",
            "owner_id": candidate.id,
        },
        headers=headers,
    )
    assert created.status_code == 201
    store_id = created.json()["id"]
    assert client.get(f"{API}/admin/users/{candidate.id}", headers=headers).json()["role"] == "OWNER"

    blocked = client.delete(f"{API}/admin/users/{candidate.id}", headers=headers)
    assert blocked.status_code == 409

    assert client.delete(f"{API}/admin/stores/{store_id}", headers=headers).status_code == 204
    assert client.get(f"{API}/admin/users/{candidate.id}", headers=headers).json()["role"] == "USER"
    assert client.delete(f"{API}/admin/users/{candidate.id}", headers=headers).status_code == 204


def test_rating_flow_and_owner_dashboard(client, make_user, make_store):
    owner = make_user(UserRole.OWNER)
    store = make_store(owner)
    rater = make_user(UserRole.USER)
    rater_headers = auth_headers(rater)

    my_rating = client.get(f"{API}/stores/{store.id}/my-rating", headers=rater_headers)
    assert my_rating.status_code == 200
    assert my_rating.json() == {"rating": None}

    created = client.post(
        f"{API}/user/stores/{store.id}/ratings",
        json={"value": 4, "comment": "Great service"},
        headers=rater_headers,
    )
    assert created.status_code == 201
    rating_id = created.json()["rating"]["id"]

    again = client.post(
        f"{API}/user/stores/{store.id}/ratings", json={"value": 2}, headers=rater_headers
    )
    assert again.status_code == 409

    patched = client.patch(
        f"{API}/user/ratings/{rating_id}", json={"value": 5}, headers=rater_headers
    )
    assert patched.status_code == 200
    assert patched.json()["rating"]["comment"] == "Great service"

    empty_patch = client.patch(f"{API}/user/ratings/{rating_id}", json={}, headers=rater_headers)
    assert empty_patch.status_code == 422

    dashboard = client.get(f"{API}/owner/dashboard", headers=auth_headers(owner))
    assert dashboard.status_code == 200
    stats = dashboard.json()
    assert stats["rating_stats"]["count"] == 1
    assert stats["rating_stats"]["average"] == 5.0
    assert stats["recent_activity"]["latest_ratings"][0]["user"]["email"] == rater.email
    assert len(stats["recent_activity"]["rating_trend"]) == 1

    owner_rating = client.get(f"{API}/stores/{store.id}/my-rating", headers=auth_headers(owner))
    assert owner_rating.json() == {"rating": None}

    assert client.delete(f"{API}/user/ratings/{rating_id}", headers=rater_headers).status_code == 204
    assert client.delete(f"{API}/user/ratings/{rating_id}", headers=rater_headers).status_code == 404


def test_owner_cannot_submit_ratings(client, make_user, make_store):
    owner = make_user(UserRole.OWNER)
    store = make_store(owner)

    response = client.post(
        f"{API}/user/stores/{store.id}/ratings", json={"value": 5}, headers=auth_headers(owner)
    )

    assert response.status_code == 403


def test_public_browse_filters_before_paginating(client, conn, make_user, make_store):
    ratings = RatingRepository(conn)
    raters = [make_user() for _ in range(2)]
    for name, value in (("Alpha", 5), ("Bravo", 1), ("Charlie", 4), ("Delta", 2)):
        store = make_store(make_user(UserRole.OWNER), name=name)
        for rater in raters:
            ratings.create(rater.id, store.id, value)
    conn.commit()

    response = client.get(
        f"{API}/public/stores", params={"min_rating": 4, "limit": 1, "sort": "rating_highest"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total_count"] == 2
    assert body["total_pages"] == 2
    assert [s["name"] for s in body["stores"]] == ["Alpha"]
    assert body["stores"][0]["owner"].get("email") is None

    detail = client.get(f"{API}/public/stores/{body['stores'][0]['id']}")
    assert detail.status_code == 200
    assert detail.json()["rating_stats"]["distribution"]["5"] == 2
    assert all(r["user"].get("email") is None for r in detail.json()["recent_ratings"])


def test_public_store_not_found(client):
    assert client.get(f"{API}/public/stores/999").status_code == 404


def test_owner_ratings_accepts_mixed_timezone_range(client, make_user, make_store):
    owner = make_user(UserRole.OWNER)
    make_store(owner)

    response = client.get(
        f"{API}/owner/ratings",
        params={"date_from": "2024-01-01T00:00:00Z", "date_to": "2024-02-01T00:00:00"},
        headers=auth_headers(owner),
    )

    assert response.status_code == 200
    assert response.json()["total_count"] == 0


def test_owner_ratings_rejects_inverted_ranges(client, make_user, make_store):
    owner = make_user(UserRole.OWNER)
    make_store(owner)
    headers = auth_headers(owner)

    dates = client.get(
        f"{API}/owner/ratings",
        params={"date_from": "2024-02-01T00:00:00", "date_to": "2024-01-01T00:00:00+00:00"},
        headers=headers,
    )
    assert dates.status_code == 422
    assert dates.json()["detail"] == "date_from cannot be after date_to"

    values = client.get(
        f"{API}/owner/ratings", params={"min_rating": 4, "max_rating": 2}, headers=headers
    )
    assert values.status_code == 422
