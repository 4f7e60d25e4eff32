"""Value objects for the user domain."""

from tessera.domain.user.value_objects.email import Email
from tessera.domain.user.value_objects.lockout_policy import LockoutPolicy
from tessera.domain.user.value_objects.user_role import UserRole

__all__ = [
    "Email",
    "LockoutPolicy",
    "UserRole",
]
