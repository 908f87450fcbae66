"""
Authentication service: orchestrates registration, login, token refresh,
logout and password change.
"""
import sqlite3
from datetime import datetime, timedelta, timezone
import logging

from jose import JWTError

from store_ratings.core.config import settings
from store_ratings.core.exceptions import ConflictError, UnauthenticatedError
from store_ratings.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from store_ratings.models.user import User, UserRole
from store_ratings.repositories.token_repository import TokenRepository
from store_ratings.repositories.user_repository import UserRepository
from store_ratings.schemas.token import AccessToken, Token
from store_ratings.schemas.user import PasswordUpdate, UserRegister

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing AuthService")
        self._user_repo = UserRepository(conn)
        self._token_repo = TokenRepository(conn)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, data: UserRegister) -> tuple[User, Token]:
        """Create a USER account and sign it in."""
        logger.info("Registering user %s", data.email)
        if self._user_repo.get_by_email(data.email):
            logger.warning("Duplicate email registration attempt: %s", data.email)
            raise ConflictError("User with this email already exists")
        try:
            user = self._user_repo.create(
                name=data.name,
                email=data.email,
                hashed_password=hash_password(data.password),
                address=data.address,
                role=UserRole.USER,
            )
        except sqlite3.IntegrityError:
            logger.warning("User insert violated email uniqueness: %s", data.email)
            raise ConflictError("User with this email already exists")
        logger.info("User registered id=%s", user.id)
        return user, self._issue_token_pair(user)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> Token:
        """Validate credentials and issue a new access + refresh token pair."""
        logger.info("Authenticating user '%s'", email)
        user = self._user_repo.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Invalid login attempt for '%s'", email)
            raise UnauthenticatedError("Invalid email or password")
        logger.info("Login successful for user id=%s", user.id)
        return self._issue_token_pair(user)

    # ------------------------------------------------------------------
    # Token refresh
    # ------------------------------------------------------------------

    def refresh(self, refresh_token_str: str) -> AccessToken:
        """Validate the refresh token and issue a new access token."""
        invalid_exc = UnauthenticatedError("Invalid or expired refresh token")

        try:
            payload = decode_token(refresh_token_str)
        except JWTError:
            logger.warning("Refresh token decode failed")
            raise invalid_exc

        if payload.get("type") != "refresh":
            logger.warning("Refresh token type mismatch")
            raise invalid_exc

        stored = self._token_repo.get_by_token(refresh_token_str)
        if stored is None or stored.revoked:
            logger.warning("Refresh token revoked or missing")
            raise invalid_exc

        if stored.expires_at < datetime.now(tz=timezone.utc):
            logger.warning("Refresh token expired in database")
            raise invalid_exc

        user = self._user_repo.get_by_id(int(payload["sub"]))
        if user is None:
            logger.warning("Refresh token user not found")
            raise invalid_exc

        logger.info("Refresh token validated for user id=%s", user.id)
        return AccessToken(access_token=create_access_token(user.id, user.role.value))

    # ------------------------------------------------------------------
    # Logout
    # ------------------------------------------------------------------

    def logout(self, refresh_token_str: str) -> None:
        """Revoke the provided refresh token."""
        revoked = self._token_repo.revoke(refresh_token_str)
        logger.info("Refresh token revoked=%s", revoked)

    def logout_all(self, user_id: int) -> None:
        """Revoke every refresh token belonging to *user_id*."""
        count = self._token_repo.revoke_all_for_user(user_id)
        logger.info("Revoked %s refresh tokens for user id=%s", count, user_id)

    # ------------------------------------------------------------------
    # Password
    # ------------------------------------------------------------------

    def change_password(self, user: User, data: PasswordUpdate) -> None:
        """Replace the password after verifying the current one."""
        if not verify_password(data.current_password, user.hashed_password):
            logger.warning("Wrong current password for user id=%s", user.id)
            raise UnauthenticatedError("Current password is incorrect")
        self._user_repo.update(user.id, hashed_password=hash_password(data.new_password))
        self.logout_all(user.id)
        logger.info("Password changed for user id=%s", user.id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _issue_token_pair(self, user: User) -> Token:
        access_token = create_access_token(user.id, user.role.value)
        refresh_token_str = create_refresh_token(user.id, user.role.value)

        expires_at = datetime.now(tz=timezone.utc) + timedelta(
            days=settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
        self._token_repo.create(user.id, refresh_token_str, expires_at)
        logger.info("Issued token pair for user id=%s", user.id)

        return Token(access_token=access_token, refresh_token=refresh_token_str)
