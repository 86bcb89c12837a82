"""Begin login use case."""

from datetime import timedelta

import logfire
from pydantic import BaseModel, Field

from relay.config import Settings
from relay.domain.service import AuthService
from relay.domain.value import CarrySessionId
from relay.util.pkce import new_random_token

from ..base import BaseUseCase


class BeginLoginResponse(BaseModel):
    """Where to send the browser, and the carry session it must bring back."""

    authorization_url: str = Field(repr=False)
    session_id: CarrySessionId = Field(repr=False)
    max_age: int  # Seconds the carry cookie should live


class BeginLoginUseCase(BaseUseCase):
    """Use case for starting the OAuth authorization code + PKCE flow."""

    def __init__(self, auth_service: AuthService, settings: Settings) -> None:
        """Initialize begin login use case.

        Args:
            auth_service: Authentication domain service
            settings: Application settings
        """
        self.auth_service = auth_service
        self.settings = settings

    async def execute(self, request: None = None) -> BeginLoginResponse:
        """Create a pending authorization and build the provider redirect.

        Steps:
        1. Open a fresh carry session for this login attempt
        2. Generate state and PKCE verifier, store both (TTL from settings)
        3. Build the authorization URL with the S256 challenge

        Returns:
            Authorization URL and carry session id
        """
        ttl = timedelta(seconds=self.settings.auth.pending_ttl_seconds)
        session_id = CarrySessionId(new_random_token())

        with logfire.span("begin_login"):
            authorization_url = await self.auth_service.begin_authorization(
                session_id, ttl
            )

        return BeginLoginResponse(
            authorization_url=authorization_url,
            session_id=session_id,
            max_age=int(ttl.total_seconds()),
        )
