"""Authentication exceptions.

These exceptions are raised by the tessera_auth package and by the
application layer (AuthenticationService). Each carries a stable
ErrorCode that the transport layer maps to its own status codes.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes for API clients.

    These codes are part of the public API contract. Should not be changed.
    """

    INVALID_INPUT = "INVALID_INPUT"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_REVOKED = "TOKEN_REVOKED"
    MISSING_TOKEN = "MISSING_TOKEN"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class AuthError(Exception):
    """Base exception for all authentication errors."""

    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, code={self.code.value!r})"
        )


class InvalidInputError(AuthError):
    """Raised when a request value is malformed (e.g. a bad user id)."""

    code = ErrorCode.INVALID_INPUT

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class UserNotFoundError(AuthError):
    """Raised when the referenced user does not exist."""

    code = ErrorCode.USER_NOT_FOUND

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class UserAlreadyExistsError(AuthError):
    """Raised when registering an email that is already taken."""

    code = ErrorCode.USER_ALREADY_EXISTS

    def __init__(self, email: str | None = None):
        self.email = email
        super().__init__("User already exists")


class InvalidCredentialsError(AuthError):
    """Raised when email or password is incorrect during login."""

    code = ErrorCode.INVALID_CREDENTIALS

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InvalidPasswordError(AuthError):
    """Raised when a password does not match the stored hash."""

    code = ErrorCode.INVALID_PASSWORD

    def __init__(self, message: str = "Invalid password"):
        super().__init__(message)


class WeakPasswordError(AuthError):
    """Raised when a password doesn't meet strength requirements."""

    code = ErrorCode.WEAK_PASSWORD

    def __init__(self, message: str = "Password does not meet requirements"):
        super().__init__(message)


class AccountLockedError(AuthError):
    """Raised when an account is locked due to too many failed login attempts."""

    code = ErrorCode.ACCOUNT_LOCKED

    def __init__(
        self,
        message: str = "Account is locked due to too many failed login attempts",
        locked_until: str | None = None,
    ):
        self.locked_until = locked_until
        if locked_until:
            message = f"{message}. Try again after {locked_until}"
        super().__init__(message)


class AccountInactiveError(AuthError):
    """Raised when a deactivated account tries to log in."""

    code = ErrorCode.ACCOUNT_INACTIVE

    def __init__(self, message: str = "Account is inactive"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Raised when a token is invalid, expired, or malformed."""

    code = ErrorCode.INVALID_TOKEN

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class TokenExpiredError(AuthError):
    """Raised when a token has expired."""

    code = ErrorCode.TOKEN_EXPIRED

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class TokenRevokedError(AuthError):
    """Raised when a token has been revoked (blacklisted)."""

    code = ErrorCode.TOKEN_REVOKED

    def __init__(self, message: str = "Token has been revoked"):
        super().__init__(message)


class MissingTokenError(AuthError):
    """Raised when a required token was not presented."""

    code = ErrorCode.MISSING_TOKEN

    def __init__(self, message: str = "Missing token"):
        super().__init__(message)


class DatabaseError(AuthError):
    """Raised when the storage layer fails. Safe to retry."""

    code = ErrorCode.DATABASE_ERROR

    def __init__(self, message: str = "Database error"):
        super().__init__(message)


class InternalServerError(AuthError):
    """Raised on unexpected internal failures (hashing, signing)."""

    code = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
