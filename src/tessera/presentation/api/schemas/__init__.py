"""Pydantic schemas for API request/response models."""

from tessera.presentation.api.schemas.auth import (
    AuditEntryResponse,
    AuditListResponse,
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    PublicKeyResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

__all__ = [
    "AuditEntryResponse",
    "AuditListResponse",
    "AuthResponse",
    "ChangePasswordRequest",
    "LoginRequest",
    "LogoutRequest",
    "MessageResponse",
    "PublicKeyResponse",
    "RefreshRequest",
    "RegisterRequest",
    "TokenResponse",
    "UserResponse",
]
