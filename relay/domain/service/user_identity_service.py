"""User identity domain service."""

from datetime import datetime, timezone

import logfire

from relay.domain.model.user_identity import UserIdentity
from relay.domain.repository.user_identity import UserIdentityRepository
from relay.domain.value import ProviderId, TokenGrant

from .base import Service


class UserIdentityService(Service):
    """Domain service for user identity operations."""

    def __init__(self, user_identity_repository: UserIdentityRepository) -> None:
        """Initialize user identity service.

        Args:
            user_identity_repository: User identity repository
        """
        self.user_identity_repository = user_identity_repository

    async def get_identity_by_provider_id(
        self, provider_id: ProviderId
    ) -> UserIdentity | None:
        """Get identity by provider ID.

        Args:
            provider_id: Provider-specific user ID

        Returns:
            Identity if found, None otherwise
        """
        with logfire.span(
            "user_identity_service.get_identity_by_provider_id",
            provider_id=str(provider_id),
        ):
            return await self.user_identity_repository.find_by_provider_id(
                provider_id
            )

    async def upsert(self, provider_id: ProviderId, grant: TokenGrant) -> UserIdentity:
        """Create the identity or refresh its tokens and last login.

        Args:
            provider_id: Provider-specific user ID
            grant: Token pair from the provider

        Returns:
            The stored identity
        """
        with logfire.span(
            "user_identity_service.upsert", provider_id=str(provider_id)
        ):
            now = datetime.now(timezone.utc)
            identity = await self.user_identity_repository.upsert(
                provider_id, grant, now
            )
            logfire.info(
                "Identity upserted",
                identity_id=str(identity.id),
                provider_id=str(provider_id),
                token_expires_at=identity.token_expires_at.isoformat(),
            )
            return identity
