"""Tests for the mapping of errors to HTTP responses."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from tessera.presentation.api.exception_handlers import (
    ERROR_CODE_TO_STATUS,
    get_status_for_error,
    setup_exception_handlers,
)
from tessera_auth import (
    AccountInactiveError,
    AccountLockedError,
    DatabaseError,
    ErrorCode,
    InvalidCredentialsError,
    InvalidPasswordError,
    TokenRevokedError,
    UserAlreadyExistsError,
    UserNotFoundError,
    WeakPasswordError,
)


class _Payload(BaseModel):
    email: str


def _app_raising(exc: Exception) -> TestClient:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise exc

    @app.post("/validate")
    async def validate(payload: _Payload):
        return payload

    return TestClient(app, raise_server_exceptions=False)


class TestStatusMapping:
    """Tests for ERROR_CODE_TO_STATUS."""

    def test_every_error_code_is_mapped(self):
        assert set(ERROR_CODE_TO_STATUS) == set(ErrorCode)

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (WeakPasswordError(), 400),
            (InvalidPasswordError(), 400),
            (InvalidCredentialsError(), 401),
            (TokenRevokedError(), 401),
            (AccountLockedError(), 403),
            (AccountInactiveError(), 403),
            (UserNotFoundError(), 404),
            (UserAlreadyExistsError("a@example.com"), 409),
            (DatabaseError(), 503),
        ],
    )
    def test_status_for_error(self, exc, expected):
        assert get_status_for_error(exc) == expected


class TestExceptionHandlers:
    """Tests for the registered handlers."""

    def test_auth_error_body_has_detail_and_code(self):
        client = _app_raising(UserNotFoundError())

        response = client.get("/boom")

        assert response.status_code == 404
        assert response.json() == {"detail": "User not found", "code": "USER_NOT_FOUND"}

    def test_unauthorized_carries_bearer_challenge(self):
        client = _app_raising(InvalidCredentialsError())

        response = client.get("/boom")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_forbidden_has_no_bearer_challenge(self):
        client = _app_raising(AccountInactiveError())

        response = client.get("/boom")

        assert response.status_code == 403
        assert "WWW-Authenticate" not in response.headers

    def test_locked_account_exposes_lock_end(self):
        client = _app_raising(AccountLockedError(locked_until="2030-01-01T00:00:00"))

        response = client.get("/boom")

        assert response.status_code == 403
        assert response.json()["code"] == "ACCOUNT_LOCKED"
        assert response.headers["X-Locked-Until"] == "2030-01-01T00:00:00"

    def test_validation_error_is_invalid_input(self):
        client = _app_raising(RuntimeError())

        response = client.post("/validate", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_INPUT"
        assert body["detail"].startswith("body.email")

    def test_unhandled_error_hides_details(self):
        client = _app_raising(RuntimeError("connection string with password"))

        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {
            "detail": "Internal server error",
            "code": "INTERNAL_SERVER_ERROR",
        }
