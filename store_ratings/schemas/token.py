"""
Pydantic schemas for token request/response validation.
"""
from pydantic import BaseModel

from store_ratings.schemas.user import UserResponse


class Token(BaseModel):
    """Response schema returned after successful login."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccessToken(BaseModel):
    """Response schema for access-token-only responses."""
    access_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    """Request body for the /auth/refresh and /auth/logout endpoints."""
    refresh_token: str


class RegisterResponse(BaseModel):
    """A freshly registered account and its first token pair."""
    user: UserResponse
    tokens: Token
