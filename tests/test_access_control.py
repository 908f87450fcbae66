from types import SimpleNamespace

import pytest

from store_ratings.core.exceptions import ForbiddenError, UnauthenticatedError
from store_ratings.models.user import UserRole
from store_ratings.services.access_control import AccessControl, Operation, visible_fields


def _actor(user_id, role):
    return SimpleNamespace(id=user_id, role=role)


@pytest.fixture
def access(conn):
    return AccessControl(conn)


@pytest.mark.parametrize(
    "role, operation, allowed",
    [
        (UserRole.ADMIN, Operation.ADMIN_MANAGE, True),
        (UserRole.OWNER, Operation.ADMIN_MANAGE, False),
        (UserRole.USER, Operation.ADMIN_MANAGE, False),
        (UserRole.USER, Operation.RATING_SUBMIT, True),
        (UserRole.ADMIN, Operation.RATING_SUBMIT, False),
        (UserRole.OWNER, Operation.RATING_SUBMIT, False),
        (UserRole.USER, Operation.RATING_VIEW, True),
        (UserRole.OWNER, Operation.MY_RATING_LOOKUP, True),
        (UserRole.ADMIN, Operation.MY_RATING_LOOKUP, True),
        (UserRole.ADMIN, Operation.OWNER_PORTAL, False),
        (UserRole.USER, Operation.OWNER_PORTAL, False),
    ],
)
def test_role_policy(access, role, operation, allowed):
    assert access.evaluate(_actor(1, role), operation).allowed is allowed


def test_public_browse_allows_anonymous(access):
    decision = access.evaluate(None, Operation.PUBLIC_BROWSE)

    assert decision.allowed
    assert decision.reason == "public"


def test_anonymous_actor_is_unauthenticated(access):
    assert access.evaluate(None, Operation.RATING_SUBMIT).reason == "unauthenticated"

    with pytest.raises(UnauthenticatedError) as exc:
        access.enforce(None, Operation.ADMIN_MANAGE)

    assert exc.value.status_code == 401


def test_owner_portal_resolves_owned_store(access, make_user, make_store):
    owner = make_user(UserRole.OWNER)
    store = make_store(owner)

    decision = access.evaluate(owner, Operation.OWNER_PORTAL)

    assert decision.allowed
    assert decision.store.id == store.id


def test_owner_without_store_is_denied_not_errored(access, make_user):
    owner = make_user(UserRole.OWNER)

    decision = access.evaluate(owner, Operation.OWNER_PORTAL)
    assert not decision.allowed
    assert decision.reason == "no_store"

    with pytest.raises(ForbiddenError) as exc:
        access.enforce(owner, Operation.OWNER_PORTAL)
    assert exc.value.status_code == 403
    assert exc.value.detail == "Access denied. No store associated with this owner account."


def test_admin_with_store_still_needs_owner_role(access, make_user, make_store):
    admin = make_user(UserRole.ADMIN)
    make_store(admin)

    assert access.evaluate(admin, Operation.OWNER_PORTAL).reason == "role_denied"


def test_store_manage_admin_or_store_owner(access, make_user, make_store):
    owner = make_user(UserRole.OWNER)
    other_owner = make_user(UserRole.OWNER)
    store = make_store(owner)

    assert access.evaluate(_actor(99, UserRole.ADMIN), Operation.STORE_MANAGE, store=store).allowed
    assert access.evaluate(owner, Operation.STORE_MANAGE, store=store).allowed
    denied = access.evaluate(other_owner, Operation.STORE_MANAGE, store=store)
    assert not denied.allowed
    assert denied.reason == "not_store_owner"


def test_store_manage_requires_target(access):
    with pytest.raises(ValueError):
        access.evaluate(_actor(1, UserRole.ADMIN), Operation.STORE_MANAGE)


def test_rating_modify_requires_authorship(access):
    rating = SimpleNamespace(id=5, user_id=1)

    assert access.evaluate(_actor(1, UserRole.USER), Operation.RATING_MODIFY, rating=rating).allowed

    with pytest.raises(ForbiddenError) as exc:
        access.enforce(_actor(2, UserRole.USER), Operation.RATING_MODIFY, rating=rating)
    assert exc.value.detail == "Access denied. You can only access your own ratings."


def test_visible_fields():
    assert visible_fields("store_owner", UserRole.ADMIN) == ("id", "name", "email")
    assert visible_fields("store_owner", UserRole.USER) == ("id", "name")
    assert visible_fields("store_owner") == ("id", "name")
    assert visible_fields("rating_author", Operation.OWNER_PORTAL) == ("id", "name", "email")
    assert visible_fields("rating_author") == ("id", "name")
