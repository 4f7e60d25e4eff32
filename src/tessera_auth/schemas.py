"""Auth schemas and data structures.

These are simple data classes used for transferring token data
between components.
"""

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims carried by an access token.

    Attributes
    ----------
    subject
        The user id (the ``sub`` claim), as issued
    email
        The user's email address
    role
        The user's role name ("user" or "admin")
    issued_at
        Token issue timestamp, when known
    expires_at
        Token expiration timestamp, when known
    """

    subject: str
    email: str
    role: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None

    def is_expired(self) -> bool:
        """Check if the token has expired."""
        if self.expires_at is None:
            return False
        return datetime.now(tz=timezone.utc) > self.expires_at
