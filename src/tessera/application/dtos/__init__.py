"""Data Transfer Objects for the presentation layer.

DTOs decouple the presentation layer from domain models,
providing stable interfaces for API endpoints and the CLI.
"""

from tessera.application.dtos.auth_dto import AuthResult, TokenPair, UserProfile
from tessera.application.dtos.maintenance_dto import CleanupReport

__all__ = [
    "AuthResult",
    "CleanupReport",
    "TokenPair",
    "UserProfile",
]
