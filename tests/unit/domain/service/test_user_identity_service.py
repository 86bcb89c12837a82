"""Unit tests for UserIdentityService."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import SecretStr

from relay.domain.service import UserIdentityService
from relay.domain.value import ProviderId, TokenGrant
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


def make_grant(access: str, refresh: str, expires_in: int = 3600) -> TokenGrant:
    return TokenGrant(
        access_token=SecretStr(access),
        refresh_token=SecretStr(refresh),
        expires_in=expires_in,
        received_at=datetime.now(timezone.utc),
    )


class TestUserIdentityService:
    """Tests for identity upsert."""

    @pytest.mark.asyncio
    async def test_upsert_creates_identity(self, unit_env):
        """First login should create an identity holding the grant."""
        # Arrange
        service = await unit_env.get(UserIdentityService)
        grant = make_grant("AT1", "RT1")

        # Act
        identity = await service.upsert(ProviderId("prov-42"), grant)

        # Assert
        assert identity.provider_id == ProviderId("prov-42")
        assert identity.access_token.get_secret_value() == "AT1"
        assert identity.refresh_token.get_secret_value() == "RT1"
        assert identity.token_expires_at == grant.expires_at
        assert identity.last_login_at is not None

        found = await service.get_identity_by_provider_id(ProviderId("prov-42"))
        assert found == identity

    @pytest.mark.asyncio
    async def test_upsert_refreshes_existing_identity(self, unit_env):
        """Second login should keep the id and replace the tokens."""
        # Arrange
        service = await unit_env.get(UserIdentityService)
        first = await service.upsert(ProviderId("prov-42"), make_grant("AT1", "RT1"))

        # Act
        second = await service.upsert(
            ProviderId("prov-42"), make_grant("AT2", "RT2", expires_in=7200)
        )

        # Assert
        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.access_token.get_secret_value() == "AT2"
        assert second.refresh_token.get_secret_value() == "RT2"
        assert second.token_expires_at > first.token_expires_at
        assert second.last_login_at >= first.last_login_at

    @pytest.mark.asyncio
    async def test_concurrent_upserts_leave_one_consistent_record(self, unit_env):
        """Racing logins for one user should produce one record from one grant."""
        # Arrange
        service = await unit_env.get(UserIdentityService)
        grants = [make_grant(f"AT{i}", f"RT{i}", 3600 + i) for i in range(10)]

        # Act
        results = await asyncio.gather(
            *(service.upsert(ProviderId("prov-42"), g) for g in grants)
        )

        # Assert
        assert len({identity.id for identity in results}) == 1

        stored = await service.get_identity_by_provider_id(ProviderId("prov-42"))
        winner = next(
            g
            for g in grants
            if g.access_token.get_secret_value()
            == stored.access_token.get_secret_value()
        )
        assert stored.refresh_token == winner.refresh_token
        assert stored.token_expires_at == winner.expires_at

    @pytest.mark.asyncio
    async def test_unknown_provider_id_returns_none(self, unit_env):
        """Lookups for unseen provider ids should return None."""
        service = await unit_env.get(UserIdentityService)

        assert await service.get_identity_by_provider_id(ProviderId("nobody")) is None

    @pytest.mark.asyncio
    async def test_token_expiry_is_relative_to_receipt(self, unit_env):
        """token_expires_at should be about now + expires_in."""
        service = await unit_env.get(UserIdentityService)

        identity = await service.upsert(ProviderId("prov-1"), make_grant("a", "r"))

        expected = datetime.now(timezone.utc) + timedelta(seconds=3600)
        assert abs(identity.token_expires_at - expected) < timedelta(seconds=5)
