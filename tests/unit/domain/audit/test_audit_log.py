"""Unit tests for the AuditLog entity."""

from uuid import uuid4

import pytest

from tessera.domain.audit import AuditAction, AuditLog


class TestAuditLog:
    def test_defaults(self):
        log = AuditLog(action=AuditAction.LOGIN)

        assert log.user_id is None
        assert log.ip_address is None
        assert log.user_agent is None
        assert log.metadata == {}
        assert log.created_at.tzinfo is not None

    def test_action_accepts_string_value(self):
        assert AuditLog(action="login_failed").action == AuditAction.LOGIN_FAILED

    def test_unknown_action_raises(self):
        with pytest.raises(ValueError):
            AuditLog(action="made_up")

    def test_empty_client_fields_become_none(self):
        log = AuditLog(action=AuditAction.LOGIN, ip_address="", user_agent="")

        assert log.ip_address is None
        assert log.user_agent is None

    def test_metadata_is_copied(self):
        source = {"email": "alice@example.com"}
        log = AuditLog(action=AuditAction.LOGIN_FAILED, metadata=source)

        source["email"] = "changed@example.com"
        log.metadata["injected"] = True

        assert log.metadata == {"email": "alice@example.com"}

    def test_add_metadata(self):
        log = AuditLog(action=AuditAction.LOGOUT, user_id=uuid4())

        log.add_metadata("logout_all", True)

        assert log.metadata == {"logout_all": True}
