"""Unit tests for the User aggregate."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from tessera.domain.user import (
    InvalidEmailError,
    LockoutPolicy,
    User,
    UserRole,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
POLICY = LockoutPolicy(max_attempts=3, lock_duration=timedelta(minutes=15))


class TestUserCreation:
    def test_create_sets_defaults(self):
        user = User.create("Alice@Example.com", "hash")

        assert isinstance(user.id, UUID)
        assert user.email == "alice@example.com"
        assert user.role == UserRole.USER
        assert user.is_active is True
        assert user.is_verified is False
        assert user.failed_login_attempts == 0
        assert user.locked_until is None
        assert user.last_login_at is None
        assert user.created_at == user.updated_at

    def test_create_with_invalid_email_raises(self):
        with pytest.raises(InvalidEmailError):
            User.create("not-an-email", "hash")

    def test_role_accepts_string(self):
        user = User(email="a@example.com", password_hash="hash", role="admin")

        assert user.role == UserRole.ADMIN
        assert user.is_admin is True

    def test_reconstitute_keeps_all_state(self):
        user_id = UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")
        locked_until = NOW + timedelta(minutes=5)

        user = User.reconstitute(
            id=user_id,
            email="alice@example.com",
            password_hash="hash",
            role="user",
            is_verified=True,
            is_active=False,
            failed_login_attempts=4,
            locked_until=locked_until,
            last_login_at=NOW,
            last_login_ip="203.0.113.7",
            created_at=NOW - timedelta(days=1),
            updated_at=NOW,
        )

        assert user.id == user_id
        assert user.is_verified is True
        assert user.is_active is False
        assert user.failed_login_attempts == 4
        assert user.locked_until == locked_until
        assert user.last_login_ip == "203.0.113.7"

    def test_equality_is_by_id(self):
        user = User.create("alice@example.com", "hash")
        same = User(id=user.id, email="other@example.com", password_hash="x")

        assert user == same
        assert hash(user) == hash(same)
        assert user != User.create("alice@example.com", "hash")

    def test_repr_does_not_leak_password_hash(self):
        user = User.create("alice@example.com", "super-secret-hash")

        assert "super-secret-hash" not in repr(user)


class TestFailedLogins:
    def setup_method(self):
        self.user = User.create("alice@example.com", "hash")

    def test_failures_below_maximum_do_not_lock(self):
        assert self.user.register_failed_login(POLICY, now=NOW) is False
        assert self.user.register_failed_login(POLICY, now=NOW) is False

        assert self.user.failed_login_attempts == 2
        assert self.user.locked_until is None
        assert self.user.is_locked(NOW) is False

    def test_reaching_maximum_locks_for_policy_duration(self):
        for _ in range(POLICY.max_attempts - 1):
            self.user.register_failed_login(POLICY, now=NOW)

        locked = self.user.register_failed_login(POLICY, now=NOW)

        assert locked is True
        assert self.user.locked_until == NOW + POLICY.lock_duration
        assert self.user.is_locked(NOW + timedelta(minutes=14)) is True

    def test_lock_expires_after_duration(self):
        for _ in range(POLICY.max_attempts):
            self.user.register_failed_login(POLICY, now=NOW)

        assert self.user.is_locked(NOW + POLICY.lock_duration) is False
        assert self.user.is_locked(NOW + timedelta(hours=1)) is False

    def test_failure_after_expired_lock_locks_again(self):
        for _ in range(POLICY.max_attempts):
            self.user.register_failed_login(POLICY, now=NOW)
        later = NOW + timedelta(hours=1)

        locked = self.user.register_failed_login(POLICY, now=later)

        assert locked is True
        assert self.user.locked_until == later + POLICY.lock_duration

    def test_reset_clears_counter_and_lock(self):
        for _ in range(POLICY.max_attempts):
            self.user.register_failed_login(POLICY, now=NOW)

        self.user.reset_failed_logins()

        assert self.user.failed_login_attempts == 0
        assert self.user.locked_until is None


class TestUserMutations:
    def setup_method(self):
        self.user = User.create("alice@example.com", "old-hash")

    def test_record_login_sets_time_and_ip(self):
        self.user.record_login("203.0.113.7")

        assert self.user.last_login_at is not None
        assert self.user.last_login_ip == "203.0.113.7"

    def test_record_login_stores_empty_ip_as_none(self):
        self.user.record_login("")

        assert self.user.last_login_ip is None

    def test_change_password_hash_resets_lockout(self):
        self.user.register_failed_login(LockoutPolicy(max_attempts=1), now=NOW)

        self.user.change_password_hash("new-hash")

        assert self.user.password_hash == "new-hash"
        assert self.user.failed_login_attempts == 0
        assert self.user.locked_until is None

    def test_activation_flags(self):
        self.user.deactivate()
        assert self.user.is_active is False

        self.user.activate()
        assert self.user.is_active is True

        self.user.verify()
        assert self.user.is_verified is True

    def test_mutations_touch_updated_at(self):
        before = self.user.updated_at

        self.user.verify()

        assert self.user.updated_at >= before
