"""
Authentication endpoints:
  POST  /auth/register      – Self-service sign-up (role USER), returns user + tokens
  POST  /auth/login         – OAuth2 password flow (email as username)
  POST  /auth/refresh       – Exchange a valid refresh token for a new access token
  POST  /auth/logout        – Revoke the provided refresh token
  POST  /auth/logout-all    – Revoke all refresh tokens for the current user
  GET   /auth/me            – The currently authenticated user
  PATCH /auth/password      – Change password (current password required)
  GET   /auth/profile       – Account details plus rating statistics
  PATCH /auth/profile       – Update name, email or address
"""
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
import logging

from store_ratings.core.dependencies import db_dependency, get_current_user
from store_ratings.models.user import User
from store_ratings.schemas.token import AccessToken, RefreshTokenRequest, RegisterResponse, Token
from store_ratings.schemas.user import (
    MessageResponse,
    PasswordUpdate,
    ProfileResponse,
    UserProfileUpdate,
    UserRegister,
    UserResponse,
)
from store_ratings.services.auth_service import AuthService
from store_ratings.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
def register(data: UserRegister, conn=Depends(db_dependency)):
    """
    Create a **USER** account and sign it in.

    Password rules: 8-16 characters, at least one uppercase letter and one
    special character (`!@#$%^&*`).
    """
    user, tokens = AuthService(conn).register(data)
    return {"user": user, "tokens": tokens}


@router.post(
    "/login",
    response_model=Token,
    summary="Login with email and password (OAuth2 Password Flow)",
)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    conn=Depends(db_dependency),
):
    """
    Standard OAuth2 Password Flow endpoint.
    - **username**: your email address
    - **password**: your password
    """
    logger.info("Login requested for email=%s", form_data.username)
    return AuthService(conn).login(form_data.username, form_data.password)


@router.post(
    "/refresh",
    response_model=AccessToken,
    summary="Obtain a new access token using a valid refresh token",
)
def refresh_token(body: RefreshTokenRequest, conn=Depends(db_dependency)):
    logger.info("Refreshing access token")
    return AuthService(conn).refresh(body.refresh_token)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke the provided refresh token",
)
def logout(
    body: RefreshTokenRequest,
    conn=Depends(db_dependency),
    _: User = Depends(get_current_user),
):
    logger.info("Logout requested")
    AuthService(conn).logout(body.refresh_token)


@router.post(
    "/logout-all",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke all refresh tokens for the current user",
)
def logout_all(
    conn=Depends(db_dependency),
    current_user: User = Depends(get_current_user),
):
    """Sign out everywhere."""
    logger.info("Logout all requested for user id=%s", current_user.id)
    AuthService(conn).logout_all(current_user.id)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user",
)
def get_me(current_user: User = Depends(get_current_user)):
    logger.info("Returning account for user id=%s", current_user.id)
    return current_user


@router.patch(
    "/password",
    response_model=MessageResponse,
    summary="Change the current user's password",
)
def change_password(
    data: PasswordUpdate,
    conn=Depends(db_dependency),
    current_user: User = Depends(get_current_user),
):
    """Verifies the current password, then revokes every refresh token."""
    AuthService(conn).change_password(current_user, data)
    return {"message": "Password updated successfully"}


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get the current user's profile and rating statistics",
)
def get_profile(
    conn=Depends(db_dependency),
    current_user: User = Depends(get_current_user),
):
    return UserService(conn).get_profile(current_user)


@router.patch(
    "/profile",
    response_model=UserResponse,
    summary="Update the current user's profile",
)
def update_profile(
    data: UserProfileUpdate,
    conn=Depends(db_dependency),
    current_user: User = Depends(get_current_user),
):
    return UserService(conn).update_profile(current_user, data)
