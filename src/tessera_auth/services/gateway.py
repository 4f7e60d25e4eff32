"""Upstream gateway trust.

An API gateway in front of the service may verify access tokens itself
and forward the consumer id together with a shared secret. Only a
request carrying the correct secret may skip local signature checks.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field

from tessera_auth.exceptions import InvalidTokenError

_ASSERTION_GUARD = object()


@dataclass(frozen=True)
class TrustedGatewayAssertion:
    """Proof that the current request was authenticated by the gateway.

    Instances can only be obtained via ``verify``.
    """

    consumer_id: str
    _guard: object = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._guard is not _ASSERTION_GUARD:
            msg = "Use TrustedGatewayAssertion.verify() to create an assertion"
            raise TypeError(msg)

    @classmethod
    def verify(
        cls,
        consumer_id: str | None,
        presented_secret: str | None,
        expected_secret: str | None,
    ) -> TrustedGatewayAssertion:
        """Check the gateway headers and return an assertion.

        Parameters
        ----------
        consumer_id
            Consumer id forwarded by the gateway
        presented_secret
            Shared secret presented with the request
        expected_secret
            Shared secret configured for this service

        Raises
        ------
        InvalidTokenError
            If any value is missing or the secret does not match
        """
        if not consumer_id or not presented_secret or not expected_secret:
            raise InvalidTokenError("Untrusted gateway request")

        if not hmac.compare_digest(
            presented_secret.encode("utf-8"),
            expected_secret.encode("utf-8"),
        ):
            raise InvalidTokenError("Untrusted gateway request")

        return cls(consumer_id=consumer_id, _guard=_ASSERTION_GUARD)
