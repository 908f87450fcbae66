import pytest

from store_ratings.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from store_ratings.models.user import UserRole
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.repositories.store_repository import StoreRepository
from store_ratings.repositories.user_repository import UserRepository
from store_ratings.schemas.store import StoreCreate, StoreUpdate, StoreWithOwnerCreate
from store_ratings.schemas.user import UserRegister
from store_ratings.services.store_service import StoreService
from store_ratings.services.user_service import UserService


@pytest.fixture
def service(conn):
    return StoreService(conn)


def _store_data(owner_id, name="Corner Shop"):
    return StoreCreate(
        name=name, address="12 High Street", contact_email="shop@example.com", owner_id=owner_id
    )


def _with_owner_data(email):
    return StoreWithOwnerCreate(
        name="Green Grocer",
        address="7 Orchard Lane",
        contact_email="grocer@example.com",
        owner=UserRegister(
            name="Grace Hopper", email=email, password="Secret@123", address="7 Orchard Lane"
        ),
    )


def test_create_store_promotes_owner(conn, service, make_user):
    user = make_user(UserRole.USER)

    store = service.create_store(_store_data(user.id))

    assert store.owner_id == user.id
    assert UserRepository(conn).get_by_id(user.id).role == UserRole.OWNER


def test_create_store_for_missing_user_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.create_store(_store_data(4242))


def test_second_store_for_same_owner_is_conflict(service, make_user):
    user = make_user()
    service.create_store(_store_data(user.id))

    with pytest.raises(ConflictError) as exc:
        service.create_store(_store_data(user.id, name="Second Shop"))
    assert exc.value.status_code == 409


def test_delete_store_cascades_and_reverts_role(conn, service, make_user):
    owner = make_user()
    store = service.create_store(_store_data(owner.id))
    ratings = RatingRepository(conn)
    for _ in range(3):
        ratings.create(make_user().id, store.id, 4)

    service.delete_store(store.id)

    assert StoreRepository(conn).get_by_id(store.id) is None
    assert ratings.list_by_store(store.id) == []
    assert UserRepository(conn).get_by_id(owner.id).role == UserRole.USER


def test_delete_store_keeps_admin_role(conn, service, make_user, make_store):
    admin = make_user(UserRole.ADMIN)
    store = make_store(admin)

    service.delete_store(store.id)

    assert UserRepository(conn).get_by_id(admin.id).role == UserRole.ADMIN


def test_delete_missing_store_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.delete_store(777)


def test_create_store_with_owner(conn, service):
    store, owner = service.create_store_with_owner(_with_owner_data("grace@example.com"))

    assert owner.role == UserRole.OWNER
    assert owner.hashed_password != "Secret@123"
    assert store.owner_id == owner.id


def test_create_store_with_existing_email_creates_nothing(conn, service, make_user):
    make_user(email="taken@example.com")
    users_before = UserRepository(conn).count()

    with pytest.raises(ConflictError):
        service.create_store_with_owner(_with_owner_data("taken@example.com"))

    assert UserRepository(conn).count() == users_before
    assert StoreRepository(conn).count() == 0


def test_create_store_with_owner_rolls_back_owner_on_store_failure(conn, service, monkeypatch):
    def broken_create(self, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(StoreRepository, "create", broken_create)

    with pytest.raises(RuntimeError):
        service.create_store_with_owner(_with_owner_data("atomic@example.com"))

    assert UserRepository(conn).get_by_email("atomic@example.com") is None


def test_update_store_by_owner_or_admin_only(service, make_user):
    owner = make_user()
    store = service.create_store(_store_data(owner.id))
    owner.role = UserRole.OWNER

    updated = service.update_store(store.id, StoreUpdate(name="Renamed"), owner)
    assert updated.name == "Renamed"
    assert updated.address == store.address

    with pytest.raises(ForbiddenError):
        service.update_store(store.id, StoreUpdate(address="Elsewhere"), make_user(UserRole.OWNER))

    admin = make_user(UserRole.ADMIN)
    assert service.update_store(store.id, StoreUpdate(address="Elsewhere"), admin).address == "Elsewhere"


def test_delete_user_who_owns_store_is_conflict(conn, service, make_user):
    owner = make_user()
    service.create_store(_store_data(owner.id))

    with pytest.raises(ConflictError) as exc:
        UserService(conn).delete_user(owner.id)
    assert exc.value.status_code == 409


def test_delete_user_cascades_ratings(conn, make_user, make_store):
    rater = make_user()
    store = make_store(make_user(UserRole.OWNER))
    ratings = RatingRepository(conn)
    ratings.create(rater.id, store.id, 2)

    UserService(conn).delete_user(rater.id)

    assert UserRepository(conn).get_by_id(rater.id) is None
    assert ratings.list_by_store(store.id) == []


def test_demoting_store_owner_to_user_is_conflict(conn, service, make_user):
    owner = make_user()
    service.create_store(_store_data(owner.id))

    with pytest.raises(ConflictError):
        UserService(conn).update_role(owner.id, UserRole.USER)
    assert UserService(conn).update_role(owner.id, UserRole.ADMIN).role == UserRole.ADMIN
