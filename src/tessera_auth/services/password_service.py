"""Password hashing service using bcrypt.

Provides secure password hashing and verification together with the
password strength policy.
"""

import logging
import unicodedata

import bcrypt

from tessera_auth.exceptions import (
    InternalServerError,
    InvalidPasswordError,
    WeakPasswordError,
)

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72

# Matched as case-sensitive substrings
COMMON_PASSWORDS = ("password", "12345678", "qwerty", "abc123", "password123")


class PasswordHashingService:
    """Service for secure password hashing and verification.

    Uses bcrypt for password hashing with a fixed work factor.
    Also provides password strength validation.

    Examples
    --------
    >>> service = PasswordHashingService()
    >>> hashed = service.hash("Sup3r-Secret")
    >>> service.verify("Sup3r-Secret", hashed)
    >>> service.verify("wrong", hashed)
    Traceback (most recent call last):
    ...
    InvalidPasswordError: Invalid password
    """

    # Password requirements
    MIN_LENGTH = 8
    MAX_LENGTH = 128

    def __init__(self, rounds: int = 12):
        """Initialize the password hashing service.

        Parameters
        ----------
        rounds
            The bcrypt work factor (log2 of iterations). Default is 12,
            which is a good balance of security and performance.
            Higher values are more secure but slower.
        """
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Strength is not checked here; callers run validate_strength first.

        Parameters
        ----------
        password
            The plaintext password to hash

        Returns
        -------
        The bcrypt hash as a string

        Raises
        ------
        InternalServerError
            If bcrypt fails to produce a hash
        """
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            hashed = bcrypt.hashpw(self._encode(password), salt)
        except (ValueError, TypeError) as e:
            logger.error("Password hashing failed: %s", e)
            raise InternalServerError from e
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> None:
        """Verify a password against a hash.

        Parameters
        ----------
        password
            The plaintext password to check
        password_hash
            The bcrypt hash to verify against

        Raises
        ------
        InvalidPasswordError
            If the password does not match or the hash is malformed
        """
        try:
            matches = bcrypt.checkpw(
                self._encode(password),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError) as e:
            # Invalid hash format
            raise InvalidPasswordError from e

        if not matches:
            raise InvalidPasswordError

    def validate_strength(self, password: str) -> None:
        """Validate that a password meets strength requirements.

        Requirements:
        - 8 to 128 characters
        - at least one uppercase letter, one lowercase letter, one digit
          and one punctuation or symbol character
        - no common password as a substring

        Every failed rule raises the same error so that callers cannot
        tell which rule was violated.

        Parameters
        ----------
        password
            The password to validate

        Raises
        ------
        WeakPasswordError
            If password doesn't meet requirements
        """
        reason = self._find_weakness(password)
        if reason is not None:
            logger.debug("Password rejected by strength policy: %s", reason)
            raise WeakPasswordError

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if a password hash needs to be rehashed.

        This is useful when upgrading the work factor. After changing
        the rounds setting, existing hashes can be identified for
        rehashing on next login.

        Parameters
        ----------
        password_hash
            The existing hash to check

        Returns
        -------
        True if the hash should be regenerated
        """
        try:
            # bcrypt format: $2b$XX$...
            parts = password_hash.split("$")
            if len(parts) >= 3:
                current_rounds = int(parts[2])
                return current_rounds != self._rounds
        except (ValueError, IndexError):
            pass
        return True

    def _find_weakness(self, password: str) -> str | None:
        if not password or len(password) < self.MIN_LENGTH:
            return "too short"
        if len(password) > self.MAX_LENGTH:
            return "too long"

        has_upper = has_lower = has_digit = has_special = False
        for char in password:
            if char.isupper():
                has_upper = True
            elif char.islower():
                has_lower = True
            elif char.isnumeric():
                has_digit = True
            elif unicodedata.category(char)[0] in ("P", "S"):
                has_special = True

        if not (has_upper and has_lower and has_digit and has_special):
            return "missing character class"

        for common in COMMON_PASSWORDS:
            if common in password:
                return "contains a common password"

        return None

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]
