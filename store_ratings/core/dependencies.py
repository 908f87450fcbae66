"""
FastAPI dependency injection helpers for authentication and authorisation.

Routes never compare roles themselves: they depend on ``require_operation``
or ``require_store_owner``, which defer to the AccessControl policy table.
"""
from dataclasses import dataclass
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
import logging

from store_ratings.core.exceptions import UnauthenticatedError
from store_ratings.core.security import decode_token
from store_ratings.db.database import get_db
from store_ratings.models.store import Store
from store_ratings.models.user import User
from store_ratings.repositories.user_repository import UserRepository
from store_ratings.services.access_control import AccessControl, Operation

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


# ---------------------------------------------------------------------------
# DB dependency
# ---------------------------------------------------------------------------

def db_dependency() -> Generator:
    """Yield a database connection for the duration of a request."""
    logger.trace("Creating database dependency connection")
    with get_db() as conn:
        yield conn


# ---------------------------------------------------------------------------
# Auth dependencies
# ---------------------------------------------------------------------------

def _user_from_token(token: str, conn) -> User:
    try:
        payload = decode_token(token)
    except JWTError:
        logger.warning("Failed to decode access token")
        raise UnauthenticatedError()
    if payload.get("type") != "access":
        logger.warning("Access token type mismatch")
        raise UnauthenticatedError()
    user_id = payload.get("sub")
    if user_id is None:
        logger.warning("Access token missing subject")
        raise UnauthenticatedError()

    user = UserRepository(conn).get_by_id(int(user_id))
    if user is None:
        logger.warning("User id=%s from token no longer exists", user_id)
        raise UnauthenticatedError()
    logger.info("Authenticated user id=%s", user.id)
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    conn=Depends(db_dependency),
) -> User:
    """
    Decode the Bearer access token and return the corresponding User.
    Raises HTTP 401 if the token is invalid, expired, or the user is gone.
    """
    return _user_from_token(token, conn)


def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    conn=Depends(db_dependency),
) -> Optional[User]:
    """The authenticated user, or None for anonymous requests."""
    if token is None:
        return None
    return _user_from_token(token, conn)


# ---------------------------------------------------------------------------
# Policy-based access control
# ---------------------------------------------------------------------------

def require_operation(operation: Operation):
    """
    Factory that returns a dependency enforcing *operation* for the caller.

    Usage::
        @router.post("/stores/{store_id}/ratings")
        def rate(user: User = Depends(require_operation(Operation.RATING_SUBMIT))):
            ...
    """
    def _check(
        current_user: User = Depends(get_current_user),
        conn=Depends(db_dependency),
    ) -> User:
        AccessControl(conn).enforce(current_user, operation)
        return current_user
    return _check


@dataclass
class OwnerContext:
    user: User
    store: Store


def require_store_owner(
    current_user: User = Depends(get_current_user),
    conn=Depends(db_dependency),
) -> OwnerContext:
    """Resolve the caller's own store; OWNER accounts without one are refused."""
    decision = AccessControl(conn).enforce(current_user, Operation.OWNER_PORTAL)
    return OwnerContext(user=current_user, store=decision.store)


def allow_public(
    current_user: Optional[User] = Depends(get_optional_user),
    conn=Depends(db_dependency),
) -> Optional[User]:
    """Anonymous-friendly access; a supplied token must still be valid."""
    AccessControl(conn).enforce(current_user, Operation.PUBLIC_BROWSE)
    return current_user


# Convenience shortcuts
require_admin = require_operation(Operation.ADMIN_MANAGE)
require_rater = require_operation(Operation.RATING_SUBMIT)
