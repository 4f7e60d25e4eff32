"""Unit tests for TrustedGatewayAssertion."""

import pytest

from tessera_auth.exceptions import InvalidTokenError
from tessera_auth.services import TrustedGatewayAssertion

SECRET = "gateway-shared-secret"  # NOQA: S105


class TestTrustedGatewayAssertion:
    def test_verify_with_matching_secret(self):
        assertion = TrustedGatewayAssertion.verify("consumer-1", SECRET, SECRET)

        assert assertion.consumer_id == "consumer-1"

    def test_verify_rejects_wrong_secret(self):
        with pytest.raises(InvalidTokenError, match="Untrusted gateway"):
            TrustedGatewayAssertion.verify("consumer-1", "wrong-secret", SECRET)

    @pytest.mark.parametrize(
        ("consumer_id", "presented", "expected"),
        [
            (None, SECRET, SECRET),
            ("", SECRET, SECRET),
            ("consumer-1", None, SECRET),
            ("consumer-1", SECRET, None),
            ("consumer-1", "", ""),
        ],
    )
    def test_verify_rejects_missing_values(self, consumer_id, presented, expected):
        with pytest.raises(InvalidTokenError):
            TrustedGatewayAssertion.verify(consumer_id, presented, expected)

    def test_cannot_be_constructed_directly(self):
        with pytest.raises(TypeError, match="verify"):
            TrustedGatewayAssertion(consumer_id="consumer-1", _guard=object())

    def test_secret_is_not_part_of_repr(self):
        assertion = TrustedGatewayAssertion.verify("consumer-1", SECRET, SECRET)

        assert SECRET not in repr(assertion)
