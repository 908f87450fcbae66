"""
Central policy decision point for every role-gated operation.

Routes never compare roles themselves: they name an ``Operation`` and ask
``AccessControl`` whether the actor may perform it. The policy table below
is the single place where roles are mapped to capabilities.

Role checks are exact-match. ADMIN is not implicitly granted the OWNER
portal or the USER rating operations; STORE_MANAGE is the only operation
that admits "ADMIN or the store's owner".
"""
from dataclasses import dataclass
from enum import Enum
import logging
import sqlite3
from typing import Optional, Protocol

from store_ratings.core.exceptions import ForbiddenError, UnauthenticatedError
from store_ratings.models.rating import Rating
from store_ratings.models.store import Store
from store_ratings.models.user import UserRole
from store_ratings.repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)


class Actor(Protocol):
    id: int
    role: UserRole


class Operation(str, Enum):
    ADMIN_MANAGE = "admin_manage"
    OWNER_PORTAL = "owner_portal"
    RATING_SUBMIT = "rating_submit"
    RATING_VIEW = "rating_view"
    RATING_MODIFY = "rating_modify"
    STORE_MANAGE = "store_manage"
    PUBLIC_BROWSE = "public_browse"
    MY_RATING_LOOKUP = "my_rating_lookup"


ALL_ROLES = frozenset(UserRole)

# Roles admitted by each operation. None means anonymous callers are allowed.
ROLE_POLICY: dict[Operation, Optional[frozenset]] = {
    Operation.ADMIN_MANAGE: frozenset({UserRole.ADMIN}),
    Operation.OWNER_PORTAL: frozenset({UserRole.OWNER}),
    Operation.RATING_SUBMIT: frozenset({UserRole.USER}),
    Operation.RATING_VIEW: frozenset({UserRole.USER}),
    Operation.RATING_MODIFY: frozenset({UserRole.USER}),
    Operation.STORE_MANAGE: ALL_ROLES,
    Operation.PUBLIC_BROWSE: None,
    Operation.MY_RATING_LOOKUP: ALL_ROLES,
}

ROLE_DENIAL_MESSAGES = {
    Operation.ADMIN_MANAGE: "Admin access required",
    Operation.OWNER_PORTAL: "Access denied. User is not a store owner.",
    Operation.RATING_SUBMIT: "Access denied. Regular user role required.",
    Operation.RATING_VIEW: "Access denied. Regular user role required.",
    Operation.RATING_MODIFY: "Access denied. Regular user role required.",
}

DENIAL_MESSAGES = {
    "no_store": "Access denied. No store associated with this owner account.",
    "not_store_owner": "You do not have permission to modify this store",
    "not_rating_author": "Access denied. You can only access your own ratings.",
}

# Which attributes of a related person each audience may see.
FIELD_VISIBILITY = {
    "store_owner": {
        UserRole.ADMIN: ("id", "name", "email"),
        None: ("id", "name"),
    },
    "rating_author": {
        Operation.OWNER_PORTAL: ("id", "name", "email"),
        None: ("id", "name"),
    },
}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str
    store: Optional[Store] = None


def visible_fields(resource: str, audience=None) -> tuple[str, ...]:
    """
    Return the attribute names of *resource* the given audience may see.

    *audience* is a role (for store owners) or an operation (for rating
    authors); unknown audiences get the public subset.
    """
    table = FIELD_VISIBILITY[resource]
    return table.get(audience, table[None])


def project(source: dict, fields: tuple[str, ...]) -> dict:
    """Keep only *fields* of *source*."""
    return {name: source[name] for name in fields if name in source}


class AccessControl:
    """Evaluate the policy table for an actor, operation and target resource."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing AccessControl")
        self._store_repo = StoreRepository(conn)

    def evaluate(
        self,
        actor: Optional[Actor],
        operation: Operation,
        *,
        store: Optional[Store] = None,
        rating: Optional[Rating] = None,
    ) -> AccessDecision:
        """Decide whether *actor* may perform *operation*; never raises."""
        allowed_roles = ROLE_POLICY[operation]
        if allowed_roles is None:
            return AccessDecision(True, "public")
        if actor is None:
            return AccessDecision(False, "unauthenticated")
        if actor.role not in allowed_roles:
            return AccessDecision(False, "role_denied")

        if operation is Operation.OWNER_PORTAL:
            owned = self._store_repo.get_by_owner_id(actor.id)
            if owned is None:
                return AccessDecision(False, "no_store")
            return AccessDecision(True, "store_owner", store=owned)

        if operation is Operation.STORE_MANAGE:
            if store is None:
                raise ValueError("STORE_MANAGE requires a target store")
            if actor.role == UserRole.ADMIN:
                return AccessDecision(True, "admin", store=store)
            if store.owner_id == actor.id:
                return AccessDecision(True, "store_owner", store=store)
            return AccessDecision(False, "not_store_owner")

        if operation in (Operation.RATING_VIEW, Operation.RATING_MODIFY) and rating is not None:
            if rating.user_id != actor.id:
                return AccessDecision(False, "not_rating_author")
            return AccessDecision(True, "rating_author")

        return AccessDecision(True, "role")

    def enforce(
        self,
        actor: Optional[Actor],
        operation: Operation,
        *,
        store: Optional[Store] = None,
        rating: Optional[Rating] = None,
    ) -> AccessDecision:
        """Evaluate and raise Unauthenticated/Forbidden on a deny."""
        decision = self.evaluate(actor, operation, store=store, rating=rating)
        if decision.allowed:
            logger.trace(
                "Access granted op=%s actor=%s reason=%s",
                operation.value,
                getattr(actor, "id", None),
                decision.reason,
            )
            return decision

        logger.warning(
            "Access denied (%s): op=%s actor_id=%s actor_role=%s",
            decision.reason,
            operation.value,
            getattr(actor, "id", None),
            getattr(actor, "role", None),
        )
        if decision.reason == "unauthenticated":
            raise UnauthenticatedError("Authentication required")
        if decision.reason == "role_denied":
            raise ForbiddenError(ROLE_DENIAL_MESSAGES[operation])
        raise ForbiddenError(DENIAL_MESSAGES[decision.reason])
