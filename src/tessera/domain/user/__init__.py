"""User domain: identity, credentials and account lockout.

This domain handles:
- User aggregate (id, email, role, password hash, lockout state)
- Lockout policy (max failed attempts, lock duration)
"""

from tessera.domain.user.aggregates import User
from tessera.domain.user.exceptions import InvalidEmailError
from tessera.domain.user.repositories import UserRepository
from tessera.domain.user.value_objects import (
    Email,
    LockoutPolicy,
    UserRole,
)

__all__ = [
    "Email",
    "InvalidEmailError",
    "LockoutPolicy",
    "User",
    "UserRepository",
    "UserRole",
]
