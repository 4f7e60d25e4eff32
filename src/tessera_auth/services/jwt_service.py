"""JWT token service.

Provides access token signing and verification, opaque refresh token
generation, and the one-way hash used for token lookups.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from tessera_auth.exceptions import InternalServerError, InvalidTokenError
from tessera_auth.schemas import TokenClaims
from tessera_auth.services.gateway import TrustedGatewayAssertion

logger = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES = 32

RSA_ALGORITHMS = ("RS256", "RS384", "RS512")


@dataclass(frozen=True)
class SigningKey:
    """Key material for signing access tokens.

    Either a shared HMAC secret or an RSA keypair. Use the ``hmac`` or
    ``rsa`` constructors rather than instantiating directly.
    """

    algorithm: str
    signing_key: Any
    verifying_key: Any
    public_key_pem: str | None = None

    @classmethod
    def hmac(cls, secret: str) -> SigningKey:
        """Create an HS256 key from a shared secret.

        Raises
        ------
        ValueError
            If the secret is empty
        """
        if not secret:
            msg = "JWT secret key cannot be empty"
            raise ValueError(msg)
        return cls(algorithm="HS256", signing_key=secret, verifying_key=secret)

    @classmethod
    def rsa(
        cls,
        private_pem: str | bytes,
        public_pem: str | bytes,
        algorithm: str = "RS256",
    ) -> SigningKey:
        """Create an RSA key from PEM encoded private and public keys.

        Raises
        ------
        ValueError
            If either key cannot be parsed or is not an RSA key
        """
        if algorithm not in RSA_ALGORITHMS:
            msg = f"Unsupported RSA algorithm: {algorithm}"
            raise ValueError(msg)

        private_bytes = (
            private_pem.encode("utf-8") if isinstance(private_pem, str) else private_pem
        )
        public_bytes = (
            public_pem.encode("utf-8") if isinstance(public_pem, str) else public_pem
        )

        try:
            private_key = serialization.load_pem_private_key(
                private_bytes,
                password=None,
            )
            public_key = serialization.load_pem_public_key(public_bytes)
        except (ValueError, TypeError) as e:
            msg = f"Failed to parse RSA key: {e}"
            raise ValueError(msg) from e

        if not isinstance(private_key, rsa.RSAPrivateKey):
            msg = "Private key is not an RSA key"
            raise ValueError(msg)
        if not isinstance(public_key, rsa.RSAPublicKey):
            msg = "Public key is not an RSA key"
            raise ValueError(msg)

        return cls(
            algorithm=algorithm,
            signing_key=private_key,
            verifying_key=public_key,
            public_key_pem=public_bytes.decode("utf-8"),
        )

    @classmethod
    def rsa_from_files(
        cls,
        private_key_path: Path,
        public_key_path: Path,
        algorithm: str = "RS256",
    ) -> SigningKey:
        """Load an RSA keypair from PEM files."""
        try:
            private_pem = Path(private_key_path).read_bytes()
            public_pem = Path(public_key_path).read_bytes()
        except OSError as e:
            msg = f"Failed to read RSA key file: {e}"
            raise ValueError(msg) from e
        return cls.rsa(private_pem, public_pem, algorithm=algorithm)

    @property
    def is_asymmetric(self) -> bool:
        return self.public_key_pem is not None


class JWTService:
    """Service for JWT access tokens and opaque refresh tokens.

    Access tokens are short-lived signed JWTs. Refresh tokens are random
    secrets; only their hash is ever stored.

    Examples
    --------
    >>> service = JWTService(SigningKey.hmac("your-secret-key"))
    >>> token = service.generate_access_token(
    ...     TokenClaims(subject=str(user_id), email="a@b.com", role="user")
    ... )
    >>> claims = service.validate_access_token(token)
    >>> print(claims.subject)
    """

    DEFAULT_ACCESS_EXPIRE = timedelta(minutes=15)
    DEFAULT_REFRESH_EXPIRE = timedelta(hours=720)
    DEFAULT_ISSUER = "tessera-auth"

    def __init__(
        self,
        key: SigningKey,
        access_token_expire: timedelta = DEFAULT_ACCESS_EXPIRE,
        refresh_token_expire: timedelta = DEFAULT_REFRESH_EXPIRE,
        issuer: str = DEFAULT_ISSUER,
    ):
        """Initialize the JWT service.

        Parameters
        ----------
        key
            Signing key material (HMAC secret or RSA keypair)
        access_token_expire
            Lifetime of access tokens (default 15 minutes)
        refresh_token_expire
            Lifetime of refresh tokens (default 30 days)
        issuer
            Value of the ``iss`` claim
        """
        self._key = key
        self._access_expire = access_token_expire
        self._refresh_expire = refresh_token_expire
        self._issuer = issuer

    @property
    def access_token_expiry(self) -> timedelta:
        return self._access_expire

    @property
    def refresh_token_expiry(self) -> timedelta:
        return self._refresh_expire

    @property
    def algorithm(self) -> str:
        return self._key.algorithm

    @property
    def public_key(self) -> str | None:
        """PEM encoded public key, or None when signing with HMAC."""
        return self._key.public_key_pem

    def generate_access_token(self, claims: TokenClaims) -> str:
        """Create a signed access token.

        Parameters
        ----------
        claims
            Subject, email and role of the token holder

        Returns
        -------
        The encoded JWT token string

        Raises
        ------
        InternalServerError
            If the token cannot be signed
        """
        now = datetime.now(tz=timezone.utc)
        payload = {
            "sub": claims.subject,
            "email": claims.email,
            "role": claims.role,
            "iss": self._issuer,
            "iat": now,
            "nbf": now,
            "exp": now + self._access_expire,
            "jti": uuid.uuid4().hex,
        }

        try:
            return jwt.encode(
                payload,
                self._key.signing_key,
                algorithm=self._key.algorithm,
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            logger.error("Failed to sign access token: %s", e)
            raise InternalServerError("Failed to generate access token") from e

    def generate_refresh_token(self) -> tuple[str, str]:
        """Create an opaque refresh token.

        Returns
        -------
        Tuple of (plaintext token, lookup hash). Only the hash is stored.
        """
        plaintext = secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
        return plaintext, self.hash_token(plaintext)

    def validate_access_token(self, token: str) -> TokenClaims:
        """Verify and decode an access token.

        Parameters
        ----------
        token
            The JWT token string to verify

        Returns
        -------
        TokenClaims containing the decoded data

        Raises
        ------
        InvalidTokenError
            If token is invalid, expired, or malformed. The reason is
            only logged.
        """
        try:
            payload = jwt.decode(
                token,
                self._key.verifying_key,
                algorithms=[self._key.algorithm],
                options={"require": ["sub", "exp", "iat", "nbf"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.debug("Access token rejected: expired")
            raise InvalidTokenError from e
        except jwt.ImmatureSignatureError as e:
            logger.debug("Access token rejected: not yet valid")
            raise InvalidTokenError from e
        except jwt.InvalidTokenError as e:
            logger.debug("Access token rejected: %s", e)
            raise InvalidTokenError from e

        return self._to_claims(payload)

    def extract_claims_without_validation(
        self,
        token: str,
        assertion: TrustedGatewayAssertion,
    ) -> TokenClaims:
        """Decode an access token without checking signature or expiry.

        Only for requests whose token was already verified by a trusted
        upstream gateway. The assertion proves that check happened.

        Parameters
        ----------
        token
            The JWT token string
        assertion
            Proof of gateway trust from TrustedGatewayAssertion.verify

        Raises
        ------
        InvalidTokenError
            If no valid assertion is given or the token is malformed
        """
        if not isinstance(assertion, TrustedGatewayAssertion):
            raise InvalidTokenError

        try:
            payload = jwt.decode(
                token,
                options={"verify_signature": False, "verify_exp": False},
            )
        except jwt.InvalidTokenError as e:
            logger.debug("Gateway token rejected: %s", e)
            raise InvalidTokenError from e

        logger.debug(
            "Claims extracted without validation for consumer %s",
            assertion.consumer_id,
        )
        return self._to_claims(payload)

    @staticmethod
    def hash_token(token: str) -> str:
        """Hash a token for storage and lookup (SHA-256, URL-safe base64)."""
        digest = hashlib.sha256(token.encode("utf-8")).digest()
        return base64.urlsafe_b64encode(digest).decode("ascii")

    @staticmethod
    def _to_claims(payload: dict[str, Any]) -> TokenClaims:
        try:
            subject = payload["sub"]
            email = payload.get("email", "")
            role = payload.get("role", "")
            issued_at = payload.get("iat")
            expires_at = payload.get("exp")
            return TokenClaims(
                subject=str(subject),
                email=str(email),
                role=str(role),
                issued_at=(
                    datetime.fromtimestamp(issued_at, tz=timezone.utc)
                    if issued_at is not None
                    else None
                ),
                expires_at=(
                    datetime.fromtimestamp(expires_at, tz=timezone.utc)
                    if expires_at is not None
                    else None
                ),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            logger.debug("Malformed token payload: %s", e)
            raise InvalidTokenError from e
