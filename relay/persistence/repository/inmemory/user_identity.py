"""In-memory user identity repository for testing."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from relay.domain.model.user_identity import UserIdentity
from relay.domain.repository.user_identity import UserIdentityRepository
from relay.domain.value import ProviderId, TokenGrant, UserIdentityId


class InMemoryUserIdentityRepository(UserIdentityRepository):
    """In-memory implementation of UserIdentityRepository for testing."""

    def __init__(self) -> None:
        self._identities: dict[ProviderId, UserIdentity] = {}

    async def upsert(
        self, provider_id: ProviderId, grant: TokenGrant, now: datetime
    ) -> UserIdentity:
        """Create or refresh identity.

        Lookup and write happen without an await in between, so two
        concurrent upserts on the event loop cannot interleave.
        """
        existing = self._identities.get(provider_id)
        if existing:
            identity = existing.model_copy(
                update={
                    "access_token": grant.access_token,
                    "refresh_token": grant.refresh_token,
                    "token_expires_at": grant.expires_at,
                    "last_login_at": now,
                    "updated_at": now,
                }
            )
        else:
            identity = UserIdentity(
                id=UserIdentityId(uuid4()),
                provider_id=provider_id,
                access_token=grant.access_token,
                refresh_token=grant.refresh_token,
                token_expires_at=grant.expires_at,
                created_at=now,
                updated_at=now,
                last_login_at=now,
            )
        self._identities[provider_id] = identity
        return identity

    async def find_by_provider_id(
        self, provider_id: ProviderId
    ) -> Optional[UserIdentity]:
        """Find user identity by provider user ID."""
        return self._identities.get(provider_id)
