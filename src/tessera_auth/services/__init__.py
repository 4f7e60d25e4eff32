"""Authentication services.

Provides password hashing, JWT token management and gateway trust checks.
"""

from tessera_auth.services.gateway import TrustedGatewayAssertion
from tessera_auth.services.jwt_service import JWTService, SigningKey
from tessera_auth.services.password_service import PasswordHashingService

__all__ = [
    "PasswordHashingService",
    "JWTService",
    "SigningKey",
    "TrustedGatewayAssertion",
]
