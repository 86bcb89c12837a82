"""User identity repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from relay.domain.model.user_identity import UserIdentity
from relay.domain.value import ProviderId, TokenGrant


class UserIdentityRepository(ABC):
    """Repository for UserIdentity entity.

    One record per provider identity, keyed on provider_id.
    """

    @abstractmethod
    async def find_by_provider_id(
        self, provider_id: ProviderId
    ) -> Optional[UserIdentity]:
        """Find an identity by provider ID.

        Args:
            provider_id: The user's ID at the provider

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def upsert(
        self, provider_id: ProviderId, grant: TokenGrant, now: datetime
    ) -> UserIdentity:
        """Create or refresh the identity for provider_id in one atomic write.

        Existing records keep their id and created_at; tokens, token expiry,
        last_login_at and updated_at are replaced. Must not be implemented as
        a read followed by a write.

        Args:
            provider_id: The user's ID at the provider
            grant: Token pair from the provider
            now: Login timestamp

        Returns:
            The resulting identity, including its local id
        """
        pass
