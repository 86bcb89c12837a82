"""Integration tests for the PostgreSQL repositories.

Require a migrated PostgreSQL database (DATABASE__URL) and RELAY_INTEGRATION=1.
"""

import asyncio
import os
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from relay.domain.repository import CarryStore, UserIdentityRepository
from relay.domain.value import CarryKey, CarrySessionId, ProviderId, TokenGrant
from relay.persistence.repository import PostgresUserIdentityRepository
from tests.harness import create_env_fixture

pytestmark = pytest.mark.skipif(
    os.environ.get("RELAY_INTEGRATION") != "1",
    reason="set RELAY_INTEGRATION=1 to run against PostgreSQL",
)

# Integration test fixture
integration_env = create_env_fixture(unmock={"persistence"})

TTL = timedelta(minutes=5)


def make_grant(access: str, refresh: str, expires_in: int = 3600) -> TokenGrant:
    return TokenGrant(
        access_token=SecretStr(access),
        refresh_token=SecretStr(refresh),
        expires_in=expires_in,
        received_at=datetime.now(timezone.utc),
    )


def unique_provider_id() -> ProviderId:
    return ProviderId(f"usr{uuid4().hex[:12]}")


class TestPostgresUserIdentityRepository:
    """Integration tests for PostgresUserIdentityRepository."""

    @pytest.mark.asyncio
    async def test_upsert_inserts_then_updates(self, integration_env):
        """Second upsert should keep the row id and replace the tokens."""
        # Arrange
        repo = await integration_env.get(UserIdentityRepository)
        provider_id = unique_provider_id()
        now = datetime.now(timezone.utc)

        # Act
        first = await repo.upsert(provider_id, make_grant("AT1", "RT1"), now)
        second = await repo.upsert(
            provider_id, make_grant("AT2", "RT2"), now + timedelta(seconds=1)
        )

        # Assert
        assert second.id == first.id
        assert second.access_token.get_secret_value() == "AT2"
        assert second.refresh_token.get_secret_value() == "RT2"

        found = await repo.find_by_provider_id(provider_id)
        assert found is not None
        assert found.id == first.id
        assert found.access_token.get_secret_value() == "AT2"

    @pytest.mark.asyncio
    async def test_concurrent_upserts_produce_one_row(self, integration_env):
        """Parallel logins for one provider id should yield exactly one record."""
        # Arrange
        session_factory = await integration_env.get(async_sessionmaker[AsyncSession])
        provider_id = unique_provider_id()
        grants = [make_grant(f"AT{i}", f"RT{i}", 3600 + i) for i in range(5)]

        async def login(grant: TokenGrant):
            async with session_factory() as session:
                repo = PostgresUserIdentityRepository(session)
                identity = await repo.upsert(
                    provider_id, grant, datetime.now(timezone.utc)
                )
                await session.commit()
                return identity

        # Act
        results = await asyncio.gather(*(login(g) for g in grants))

        # Assert
        assert len({identity.id for identity in results}) == 1

        async with session_factory() as session:
            stored = await PostgresUserIdentityRepository(
                session
            ).find_by_provider_id(provider_id)
        winner = next(
            g
            for g in grants
            if g.access_token.get_secret_value()
            == stored.access_token.get_secret_value()
        )
        assert stored.refresh_token == winner.refresh_token
        assert stored.token_expires_at == winner.expires_at


class TestPostgresCarryStore:
    """Integration tests for PostgresCarryStore."""

    @pytest.mark.asyncio
    async def test_take_once_is_single_use(self, integration_env):
        """Only the first take should return the value."""
        store = await integration_env.get(CarryStore)
        session_id = CarrySessionId(uuid4().hex)
        await store.put(session_id, CarryKey.STATE, "s1", TTL)

        assert await store.take_once(session_id, CarryKey.STATE) == "s1"
        assert await store.take_once(session_id, CarryKey.STATE) is None

    @pytest.mark.asyncio
    async def test_concurrent_takes_have_one_winner(self, integration_env):
        """Two callbacks racing on one carry session cannot both get the value."""
        store = await integration_env.get(CarryStore)
        session_id = CarrySessionId(uuid4().hex)
        await store.put(session_id, CarryKey.CODE_VERIFIER, "v1", TTL)

        results = await asyncio.gather(
            *(store.take_once(session_id, CarryKey.CODE_VERIFIER) for _ in range(5))
        )

        assert results.count("v1") == 1
        assert results.count(None) == 4

    @pytest.mark.asyncio
    async def test_expired_entry_reads_as_missing(self, integration_env):
        """Entries past their TTL should return None."""
        store = await integration_env.get(CarryStore)
        session_id = CarrySessionId(uuid4().hex)
        await store.put(session_id, CarryKey.STATE, "s1", timedelta(seconds=-1))

        assert await store.take_once(session_id, CarryKey.STATE) is None

    @pytest.mark.asyncio
    async def test_discard(self, integration_env):
        """Discarded entries should be gone."""
        store = await integration_env.get(CarryStore)
        session_id = CarrySessionId(uuid4().hex)
        await store.put(session_id, CarryKey.STATE, "s1", TTL)

        await store.discard(session_id, CarryKey.STATE)

        assert await store.take_once(session_id, CarryKey.STATE) is None
