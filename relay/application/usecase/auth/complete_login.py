"""Complete login use case.

Runs the OAuth callback as a staged exchange:

    received -> validated -> exchanged -> resolved -> persisted -> completed

Every check on the callback happens before the first provider call, so a
forged or replayed callback never triggers a token exchange.
"""

import secrets
from urllib.parse import urlencode

import logfire
from pydantic import BaseModel, Field

from relay.config import Settings
from relay.domain.error import (
    AuthFlowError,
    CallbackStage,
    IdentityResolutionError,
    MalformedCallbackError,
    MissingProofOfPossessionError,
    PersistenceError,
    ProviderDeniedAuthorizationError,
    StateMismatchError,
    TokenExchangeError,
)
from relay.domain.model import UserIdentity
from relay.domain.service import AuthService, UserIdentityService
from relay.domain.value import CarrySessionId, ProviderId, TokenGrant

from ..base import BaseUseCase


class CompleteLoginRequest(BaseModel):
    """Callback parameters as received from the browser.

    code and state are lists when the query string repeats them.
    """

    code: str | list[str] | None = Field(default=None, repr=False)
    state: str | list[str] | None = Field(default=None, repr=False)
    error: str | None = None
    error_description: str | None = None
    session_id: CarrySessionId | None = Field(default=None, repr=False)


class CompleteLoginResponse(BaseModel):
    """Successful login: where to send the browser."""

    redirect_url: str = Field(repr=False)
    user_id: str


class CompleteLoginUseCase(BaseUseCase):
    """Use case for the OAuth callback: validate, exchange, resolve, persist."""

    def __init__(
        self,
        auth_service: AuthService,
        user_identity_service: UserIdentityService,
        settings: Settings,
    ) -> None:
        """Initialize complete login use case.

        Args:
            auth_service: Authentication domain service
            user_identity_service: User identity domain service
            settings: Application settings
        """
        self.auth_service = auth_service
        self.user_identity_service = user_identity_service
        self.settings = settings

    async def execute(self, request: CompleteLoginRequest) -> CompleteLoginResponse:
        """Execute the callback exchange.

        Args:
            request: Callback parameters and carry session id

        Returns:
            Redirect to the client dashboard with token and local user id

        Raises:
            AuthFlowError: Subclass matching the stage that failed
        """
        with logfire.span("complete_login") as span:
            stage = CallbackStage.RECEIVED
            try:
                code, code_verifier = await self._validate(request)
                stage = CallbackStage.VALIDATED

                grant = await self._exchange(code, code_verifier)
                stage = CallbackStage.EXCHANGED

                provider_id = await self._resolve(grant)
                stage = CallbackStage.RESOLVED

                identity = await self._persist(provider_id, grant)
                stage = CallbackStage.PERSISTED

                await self.auth_service.clear_pending(request.session_id)
                stage = CallbackStage.COMPLETED
            except AuthFlowError as e:
                e.stage = stage
                span.set_attribute("stage", stage.value)
                self._log_failure(e)
                raise

            span.set_attribute("stage", stage.value)
            logfire.info(
                "OAuth callback completed",
                identity_id=str(identity.id),
                provider_id=str(identity.provider_id),
            )

            return CompleteLoginResponse(
                redirect_url=self._dashboard_url(grant, identity),
                user_id=str(identity.id),
            )

    async def _validate(self, request: CompleteLoginRequest) -> tuple[str, str]:
        """Run every callback check and return (code, PKCE verifier).

        The pending state and verifier are consumed here whatever the outcome,
        except when the provider itself reported an error.
        """
        if request.error:
            raise ProviderDeniedAuthorizationError(
                f"Provider returned error: {request.error}",
                public_message=request.error_description or None,
            )

        saved_state, code_verifier = await self.auth_service.take_pending(
            request.session_id
        )

        if (
            not isinstance(request.state, str)
            or not request.state
            or saved_state is None
            or not secrets.compare_digest(
                request.state.encode("utf-8"), saved_state.encode("utf-8")
            )
        ):
            # Same error whether or not a pending authorization existed
            raise StateMismatchError("State parameter did not match")

        if not code_verifier:
            raise MissingProofOfPossessionError("No code verifier for this session")

        if not isinstance(request.code, str) or not request.code:
            raise MalformedCallbackError("Code parameter missing or repeated")

        return (request.code, code_verifier)

    async def _exchange(self, code: str, code_verifier: str) -> TokenGrant:
        try:
            return await self.auth_service.exchange_code(code, code_verifier)
        except Exception as e:
            raise TokenExchangeError(
                f"Token exchange failed: {type(e).__name__}"
            ) from e

    async def _resolve(self, grant: TokenGrant) -> ProviderId:
        try:
            return await self.auth_service.resolve_provider_id(grant.access_token)
        except Exception as e:
            raise IdentityResolutionError(
                f"Identity resolution failed: {type(e).__name__}"
            ) from e

    async def _persist(self, provider_id: ProviderId, grant: TokenGrant) -> UserIdentity:
        try:
            return await self.user_identity_service.upsert(provider_id, grant)
        except Exception as e:
            raise PersistenceError(
                f"Identity upsert failed: {type(e).__name__}"
            ) from e

    def _dashboard_url(self, grant: TokenGrant, identity: UserIdentity) -> str:
        # TODO: hand the access token over via a one-time code instead of the
        # query string once the client supports it
        query = urlencode(
            {
                "token": grant.access_token.get_secret_value(),
                "userId": str(identity.id),
            }
        )
        return f"{self.settings.client_url}/dashboard?{query}"

    @staticmethod
    def _log_failure(error: AuthFlowError) -> None:
        cause = error.__cause__
        attributes = {
            "error_type": type(error).__name__,
            "stage": error.stage.value,
            "status_code": error.status_code,
            "detail": str(error),
        }
        if cause is not None:
            attributes["cause_type"] = type(cause).__name__
            attributes["provider_status"] = getattr(cause, "status_code", None)
            attributes["provider_error"] = getattr(cause, "error_code", None)

        if isinstance(error, StateMismatchError):
            logfire.warn(
                "OAuth callback state mismatch", security_event=True, **attributes
            )
        elif error.status_code < 500:
            logfire.warn("OAuth callback rejected", **attributes)
        else:
            logfire.error("OAuth callback failed", **attributes)
