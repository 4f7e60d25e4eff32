"""Authentication schemas for request/response models."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tessera.application.dtos import TokenPair, UserProfile
from tessera.domain.audit import AuditLog


class RegisterRequest(BaseModel):
    """Request schema for user registration.

    Password length and complexity are checked by the password policy,
    so that every rejection carries the WEAK_PASSWORD code.
    """

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="Password (8-128 characters)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "Correct-Horse-9",
            },
        },
    )


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: str
    password: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "Correct-Horse-9",
            },
        },
    )


class RefreshRequest(BaseModel):
    """Request schema for token refresh.

    The refresh_token field is optional - if not provided in the request body,
    the server will read it from the HttpOnly cookie instead.
    """

    refresh_token: str | None = Field(
        default=None,
        description="Refresh token (optional - can also be sent via HttpOnly cookie)",
    )


class LogoutRequest(BaseModel):
    """Request schema for logout. The refresh token may also come as cookie."""

    refresh_token: str | None = None


class ChangePasswordRequest(BaseModel):
    """Request schema for changing a user's password."""

    old_password: str
    new_password: str


class UserResponse(BaseModel):
    """Response schema for user data."""

    id: UUID
    email: str
    role: str
    is_verified: bool
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserResponse":
        return cls.model_validate(profile)


class TokenResponse(BaseModel):
    """Response schema for token data.

    The refresh token is returned in the body and also set as an
    HttpOnly cookie.
    """

    access_token: str
    refresh_token: str
    token_type: str = Field(default="bearer")
    expires_in: int

    @classmethod
    def from_pair(cls, tokens: TokenPair) -> "TokenResponse":
        return cls(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            expires_in=tokens.expires_in,
        )


class AuthResponse(TokenResponse):
    """Response schema for login."""

    user: UserResponse

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user": {
                    "id": "550e8400-e29b-41d4-a716-446655440000",
                    "email": "user@example.com",
                    "role": "user",
                    "is_verified": False,
                    "is_active": True,
                    "created_at": "2024-12-05T10:30:00Z",
                },
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "refresh_token": "kq3v0n1p9...",
                "token_type": "bearer",
                "expires_in": 900,
            },
        },
    )


class MessageResponse(BaseModel):
    message: str


class AuditEntryResponse(BaseModel):
    """One security event of the current user."""

    id: UUID
    action: str
    ip_address: str | None
    user_agent: str | None
    metadata: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: AuditLog) -> "AuditEntryResponse":
        return cls(
            id=entry.id,
            action=entry.action.value,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            metadata=entry.metadata,
            created_at=entry.created_at,
        )


class AuditListResponse(BaseModel):
    entries: list[AuditEntryResponse]
    limit: int
    offset: int


class PublicKeyResponse(BaseModel):
    """Public key for verifying access tokens outside this service."""

    algorithm: str
    public_key: str
