"""Application layer DI providers."""

from dishka import Scope, provide

from relay.application.usecase.auth import BeginLoginUseCase, CompleteLoginUseCase
from relay.config import Settings
from relay.domain.service import AuthService, UserIdentityService
from relay.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_begin_login_use_case(
        self, auth_service: AuthService, settings: Settings
    ) -> BeginLoginUseCase:
        """Provide begin login use case."""
        return BeginLoginUseCase(auth_service=auth_service, settings=settings)

    @provide(scope=Scope.REQUEST)
    def get_complete_login_use_case(
        self,
        auth_service: AuthService,
        user_identity_service: UserIdentityService,
        settings: Settings,
    ) -> CompleteLoginUseCase:
        """Provide complete login use case."""
        return CompleteLoginUseCase(
            auth_service=auth_service,
            user_identity_service=user_identity_service,
            settings=settings,
        )
