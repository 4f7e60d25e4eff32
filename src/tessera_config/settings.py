"""Tessera configuration.

Every field maps to an upper-case environment variable of the same name
(``jwt_secret_key`` -> ``JWT_SECRET_KEY``). Real environment variables win
over the first ``.env`` file found among:

- the path in ``TESSERA_ENV_FILE`` (relative paths start at the repo root)
- ``config/.env.dev`` for local development
- ``config/.env`` inside containers
"""

from __future__ import annotations

import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_VARIABLE = "TESSERA_ENV_FILE"
ENV_FILE_CANDIDATES = (".env.dev", ".env")

# Marker directories, checked from this file upwards
_ROOT_MARKERS = ("config", ".git")
_CONTAINER_ROOT = Path("/app")


def _repo_root() -> Path:
    here = Path(__file__).resolve()
    for candidate in here.parents:
        if any((candidate / marker).is_dir() for marker in _ROOT_MARKERS):
            return candidate
        if candidate == _CONTAINER_ROOT:
            return candidate
    return here.parents[2]


def get_config_dir() -> Path:
    """Directory holding the ``.env`` files and RSA key material."""
    return _repo_root() / "config"


def _locate_env_file() -> Path | None:
    explicit = os.environ.get(ENV_FILE_VARIABLE)
    if explicit:
        path = Path(explicit)
        if not path.is_absolute():
            path = _repo_root() / path
        if path.exists():
            return path

    for name in ENV_FILE_CANDIDATES:
        candidate = get_config_dir() / name
        if candidate.exists():
            return candidate
    return None


class Settings(BaseSettings):
    """Runtime configuration of the Tessera service.

    Token signing needs either ``JWT_SECRET_KEY`` (HS256) or both RSA key
    paths (RS256); construction fails otherwise.
    """

    model_config = SettingsConfigDict(
        env_file=_locate_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Tessera"

    # Token signing
    jwt_algorithm: Literal["HS256", "RS256"] = "HS256"
    jwt_secret_key: SecretStr | None = None
    jwt_private_key_path: Path | None = None
    jwt_public_key_path: Path | None = None
    jwt_issuer: str = "tessera-auth"
    jwt_access_token_expire_minutes: int = 15
    jwt_refresh_token_expire_hours: int = 720

    # Lockout and hashing
    security_max_login_attempts: int = 5
    security_account_lock_minutes: int = 15
    security_bcrypt_rounds: int = 12

    audit_retention_days: int = 90

    # Storage; DATABASE_URL_OVERRIDE replaces the postgres_* parts
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr = SecretStr("")
    postgres_db: str = "auth_db"
    database_url_override: str | None = None

    # HTTP
    api_debug: bool = False
    api_cors_origins: str = ""
    api_cookie_secure: bool = True
    api_cookie_samesite: Literal["lax", "strict", "none"] = "strict"
    api_cookie_domain: str | None = None
    api_refresh_cookie_name: str = "tessera_refresh_token"
    api_trust_proxy_headers: bool = False

    # Requests pre-verified by an upstream gateway
    gateway_trust_enabled: bool = False
    gateway_shared_secret: SecretStr | None = None

    log_level: str = "INFO"

    @field_validator("api_cors_origins", mode="before")
    @classmethod
    def _join_cors_origins(cls, v: Any) -> str:
        # Accept a JSON list as well as "a,b"
        if isinstance(v, (list, tuple)):
            return ",".join(str(item) for item in v)
        return str(v) if v else ""

    @model_validator(mode="after")
    def _validate_signing_material(self) -> Settings:
        if self.jwt_algorithm == "HS256":
            if not _has_secret(self.jwt_secret_key):
                msg = "JWT_SECRET_KEY is required when JWT_ALGORITHM is HS256"
                raise ValueError(msg)
        elif self.jwt_private_key_path is None or self.jwt_public_key_path is None:
            msg = (
                "JWT_PRIVATE_KEY_PATH and JWT_PUBLIC_KEY_PATH are required "
                "when JWT_ALGORITHM is RS256"
            )
            raise ValueError(msg)

        if self.gateway_trust_enabled and not _has_secret(self.gateway_shared_secret):
            msg = "GATEWAY_SHARED_SECRET is required when GATEWAY_TRUST_ENABLED is set"
            raise ValueError(msg)
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """SQLAlchemy URL, asyncpg unless overridden."""
        if self.database_url_override:
            return self.database_url_override
        password = self.postgres_password.get_secret_value()
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        """Allowed origins; empty means cross-origin requests are refused."""
        return [
            origin.strip()
            for origin in self.api_cors_origins.split(",")
            if origin.strip()
        ]

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.jwt_access_token_expire_minutes)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(hours=self.jwt_refresh_token_expire_hours)

    @property
    def account_lock_duration(self) -> timedelta:
        return timedelta(minutes=self.security_account_lock_minutes)


def _has_secret(value: SecretStr | None) -> bool:
    return value is not None and bool(value.get_secret_value())


@lru_cache()
def get_settings() -> Settings:
    """Load the settings once per process."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
