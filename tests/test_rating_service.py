import pytest

from store_ratings.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from store_ratings.models.user import UserRole
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.schemas.rating import RatingUpdate
from store_ratings.services.rating_service import RatingService


@pytest.fixture
def service(conn):
    return RatingService(conn)


@pytest.fixture
def store(make_user, make_store):
    return make_store(make_user(UserRole.OWNER))


def test_create_then_duplicate_is_conflict(service, make_user, store):
    rater = make_user()

    rating = service.create(rater, store.id, 4, "Friendly staff")
    assert (rating.value, rating.comment, rating.user_id, rating.store_id) == (
        4,
        "Friendly staff",
        rater.id,
        store.id,
    )

    with pytest.raises(ConflictError) as exc:
        service.create(rater, store.id, 2, None)
    assert exc.value.status_code == 409


def test_create_for_missing_store_is_not_found(service, make_user):
    with pytest.raises(NotFoundError) as exc:
        service.create(make_user(), 9999, 3)
    assert exc.value.status_code == 404


def test_only_users_may_rate(service, make_user, store):
    with pytest.raises(ForbiddenError):
        service.create(make_user(UserRole.ADMIN), store.id, 5)


def test_unique_constraint_is_final_arbiter(conn, service, make_user, store, monkeypatch):
    rater = make_user()
    RatingRepository(conn).create(rater.id, store.id, 5)
    monkeypatch.setattr(RatingRepository, "get_by_user_and_store", lambda self, u, s: None)

    with pytest.raises(ConflictError):
        service.create(rater, store.id, 3)


def test_update_changes_only_sent_fields(service, make_user, store):
    rater = make_user()
    rating = service.create(rater, store.id, 2, "Slow checkout")

    updated = service.update(rating.id, RatingUpdate(value=4), rater)

    assert updated.id == rating.id
    assert updated.value == 4
    assert updated.comment == "Slow checkout"


def test_update_by_someone_else_is_forbidden(service, make_user, store):
    author = make_user()
    rating = service.create(author, store.id, 3)

    with pytest.raises(ForbiddenError) as exc:
        service.update(rating.id, RatingUpdate(comment="hijacked"), make_user())
    assert exc.value.status_code == 403


def test_update_missing_rating_is_not_found(service, make_user):
    with pytest.raises(NotFoundError):
        service.update(12345, RatingUpdate(value=1), make_user())


def test_delete_twice_yields_not_found(service, make_user, store):
    rater = make_user()
    rating = service.create(rater, store.id, 5)

    service.delete(rating.id, rater)

    with pytest.raises(NotFoundError):
        service.delete(rating.id, rater)
    assert service.get_for_store(rater, store.id) is None


def test_delete_by_someone_else_is_forbidden(service, make_user, store):
    rating = service.create(make_user(), store.id, 1)

    with pytest.raises(ForbiddenError):
        service.delete(rating.id, make_user())


def test_rating_again_after_delete(service, make_user, store):
    rater = make_user()
    first = service.create(rater, store.id, 1)
    service.delete(first.id, rater)

    second = service.create(rater, store.id, 5)

    assert second.value == 5


def test_get_returns_store_details_for_author_only(service, make_user, store):
    rater = make_user()
    rating = service.create(rater, store.id, 4)

    item = service.get(rating.id, rater)
    assert item.store_name == store.name

    with pytest.raises(ForbiddenError):
        service.get(rating.id, make_user())


def test_list_for_user_paginates_and_sorts(service, make_user, make_store):
    rater = make_user()
    stores = [make_store(make_user(UserRole.OWNER)) for _ in range(3)]
    for store, value in zip(stores, (3, 5, 1)):
        service.create(rater, store.id, value)

    first_page = service.list_for_user(rater.id, page=1, limit=2, sort="highest")
    assert first_page["total_count"] == 3
    assert first_page["total_pages"] == 2
    assert [r["value"] for r in first_page["ratings"]] == [5, 3]

    second_page = service.list_for_user(rater.id, page=2, limit=2, sort="highest")
    assert [r["value"] for r in second_page["ratings"]] == [1]
    assert second_page["ratings"][0]["store"]["name"] == stores[2].name
