"""
Repository tests on PostgreSQL.

These catch what SQLite lets through: timezone handling of TIMESTAMPTZ
columns, UUID column types and row counts of conditional UPDATEs.
"""

from datetime import timedelta

import pytest

from tessera.domain.audit import AuditAction, AuditLog
from tessera.domain.shared.time import utc_now
from tessera.domain.user import LockoutPolicy
from tessera.infrastructure.persistence.sqlalchemy import (
    AuditLogRepositorySQLAlchemy,
    UserRepositorySQLAlchemy,
)
from tessera_auth import UserAlreadyExistsError
from tessera_auth.persistence.sqlalchemy import (
    RefreshTokenRepositorySQLAlchemy,
    TokenBlacklistRepositorySQLAlchemy,
)
from tessera_auth.repositories import BlacklistEntryData, RefreshTokenData
from tests.shared.fixtures import TestAuthFactory

pytestmark = pytest.mark.integration


class TestUserRepositoryPostgres:
    @pytest.mark.asyncio
    async def test_round_trip_keeps_timezones(self, db_session):
        # Arrange
        repo = UserRepositorySQLAlchemy(db_session)
        user = TestAuthFactory.alice()
        user.register_failed_login(LockoutPolicy(max_attempts=1))
        await repo.create(user)
        await db_session.commit()

        # Act
        retrieved = await repo.find_by_email(TestAuthFactory.ALICE_EMAIL)

        # Assert
        assert retrieved.locked_until == user.locked_until
        assert retrieved.locked_until.utcoffset() == timedelta(0)
        assert retrieved.is_locked() is True

    @pytest.mark.asyncio
    async def test_duplicate_email_keeps_transaction_usable(self, db_session):
        repo = UserRepositorySQLAlchemy(db_session)
        await repo.create(TestAuthFactory.alice())

        with pytest.raises(UserAlreadyExistsError):
            await repo.create(TestAuthFactory.alice())

        await db_session.commit()
        assert await repo.exists_by_email(TestAuthFactory.ALICE_EMAIL) is True


class TestRefreshTokenRepositoryPostgres:
    @pytest.mark.asyncio
    async def test_conditional_revoke(self, db_session):
        # Arrange
        repo = RefreshTokenRepositorySQLAlchemy(db_session)
        token = RefreshTokenData.issue(
            user_id=TestAuthFactory.ALICE_ID,
            token_hash="pg-hash",
            expires_at=utc_now() + timedelta(days=1),
        )
        await repo.create(token)

        # Act
        first = await repo.revoke_by_hash("pg-hash")
        second = await repo.revoke_by_hash("pg-hash")

        # Assert
        assert (first, second) == (True, False)
        stored = await repo.find_by_hash("pg-hash")
        assert stored.is_revoked is True
        assert stored.family_id == token.family_id

    @pytest.mark.asyncio
    async def test_revoke_all_and_delete_expired(self, db_session):
        repo = RefreshTokenRepositorySQLAlchemy(db_session)
        for index, hours in enumerate((1, 2, -1)):
            await repo.create(
                RefreshTokenData.issue(
                    user_id=TestAuthFactory.ALICE_ID,
                    token_hash=f"pg-{index}",
                    expires_at=utc_now() + timedelta(hours=hours),
                ),
            )

        assert await repo.revoke_all_by_user_id(TestAuthFactory.ALICE_ID) == 3
        assert await repo.delete_expired() == 1


class TestBlacklistAndAuditPostgres:
    @pytest.mark.asyncio
    async def test_blacklist_expiry(self, db_session):
        repo = TokenBlacklistRepositorySQLAlchemy(db_session)
        await repo.add(
            BlacklistEntryData(
                token_hash="live",
                expires_at=utc_now() + timedelta(minutes=15),
            ),
        )
        await repo.add(
            BlacklistEntryData(
                token_hash="stale",
                expires_at=utc_now() - timedelta(minutes=1),
            ),
        )

        assert await repo.is_blacklisted("live") is True
        assert await repo.is_blacklisted("stale") is False
        assert await repo.delete_expired() == 1

    @pytest.mark.asyncio
    async def test_audit_metadata_and_retention(self, db_session):
        repo = AuditLogRepositorySQLAlchemy(db_session)
        await repo.create(
            AuditLog(
                action=AuditAction.LOGIN_FAILED,
                user_id=TestAuthFactory.ALICE_ID,
                metadata={"email": TestAuthFactory.ALICE_EMAIL},
            ),
        )
        await repo.create(
            AuditLog(
                action=AuditAction.LOGIN,
                user_id=TestAuthFactory.ALICE_ID,
                created_at=utc_now() - timedelta(days=120),
            ),
        )

        assert await repo.delete_older_than(90) == 1
        (entry,) = await repo.find_by_user_id(TestAuthFactory.ALICE_ID)
        assert entry.metadata == {"email": TestAuthFactory.ALICE_EMAIL}
        assert entry.created_at.tzinfo is not None


class TestClientSuppliedValuesPostgres:
    """Header-derived values are stored in full, whatever their length."""

    LONG_USER_AGENT = "Mozilla/5.0 " + "x" * 2000
    LONG_FORWARDED_IP = "203.0.113.7, " * 40

    @pytest.mark.asyncio
    async def test_audit_entry_keeps_long_client_values(self, db_session):
        repo = AuditLogRepositorySQLAlchemy(db_session)

        await repo.create(
            AuditLog(
                action=AuditAction.LOGIN_FAILED,
                user_id=TestAuthFactory.ALICE_ID,
                ip_address=self.LONG_FORWARDED_IP,
                user_agent=self.LONG_USER_AGENT,
            ),
        )
        await db_session.commit()

        (entry,) = await repo.find_by_user_id(TestAuthFactory.ALICE_ID)
        assert entry.user_agent == self.LONG_USER_AGENT
        assert entry.ip_address == self.LONG_FORWARDED_IP

    @pytest.mark.asyncio
    async def test_login_ip_of_any_length_is_saved(self, db_session):
        repo = UserRepositorySQLAlchemy(db_session)
        user = TestAuthFactory.alice()
        await repo.create(user)

        user.record_login(self.LONG_FORWARDED_IP)
        await repo.update(user)
        await db_session.commit()

        retrieved = await repo.find_by_id(user.id)
        assert retrieved.last_login_ip == self.LONG_FORWARDED_IP
