"""Operations exposed over HTTP and their authentication requirement.

Each route in the auth router is registered from this table. The router
adds the principal check to every operation with ``requires_auth`` set,
before the handler runs.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Operation:
    name: str
    method: str
    path: str
    requires_auth: bool
    summary: str


AUTH_OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        Operation("register", "POST", "/register", False, "Register a new user"),
        Operation("login", "POST", "/login", False, "Authenticate user"),
        Operation("refresh", "POST", "/refresh", False, "Rotate refresh token"),
        Operation("logout", "POST", "/logout", True, "Logout current session"),
        Operation("logout_all", "POST", "/logout-all", True, "Logout all sessions"),
        Operation("me", "GET", "/me", True, "Get current user"),
        Operation(
            "change_password",
            "PUT",
            "/change-password",
            True,
            "Change password",
        ),
        Operation("audit", "GET", "/audit", True, "List own security events"),
        Operation("public_key", "GET", "/public-key", False, "Get token public key"),
    )
}
