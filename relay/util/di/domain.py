"""Domain layer DI providers."""

from dishka import Scope, provide

from relay.domain.repository import CarryStore, UserIdentityRepository
from relay.domain.service import AuthService, OAuthClient, UserIdentityService
from relay.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_client: OAuthClient, carry_store: CarryStore
    ) -> AuthService:
        """Provide authentication domain service."""
        return AuthService(oauth_client=oauth_client, carry_store=carry_store)

    @provide
    def get_user_identity_service(
        self, user_identity_repository: UserIdentityRepository
    ) -> UserIdentityService:
        """Provide user identity domain service."""
        return UserIdentityService(user_identity_repository=user_identity_repository)
