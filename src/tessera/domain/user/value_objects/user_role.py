from enum import Enum


class UserRole(str, Enum):
    """User roles carried in access tokens."""

    USER = "user"
    ADMIN = "admin"
