"""Authentication domain service."""

from datetime import timedelta

import logfire
from pydantic import SecretStr

from relay.domain.repository.carry import CarryStore
from relay.domain.value import (
    CarryKey,
    CarrySessionId,
    PendingAuthorization,
    ProviderId,
    TokenGrant,
)
from relay.util.pkce import new_random_token

from .base import Service


class OAuthClient:
    """Generic OAuth 2.0 + PKCE client interface."""

    def build_authorization_url(self, state: str, code_challenge: str) -> str:
        """Build the provider's authorization URL.

        Args:
            state: State parameter for CSRF protection
            code_challenge: S256 PKCE challenge

        Returns:
            Authorization URL to redirect the browser to
        """
        raise NotImplementedError

    async def exchange_code(self, code: str, code_verifier: str) -> TokenGrant:
        """Exchange an authorization code for a token pair.

        Args:
            code: Authorization code from the callback
            code_verifier: PKCE verifier issued with the authorization request

        Returns:
            Token grant with absolute expiry anchor
        """
        raise NotImplementedError

    async def fetch_provider_id(self, access_token: SecretStr) -> str:
        """Resolve the stable provider identifier for an access token.

        Args:
            access_token: Freshly issued access token

        Returns:
            Provider user id
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service for the authorization code + PKCE handshake.

    Owns the pending authorization (state and verifier) in the carry store
    and delegates provider calls to the OAuth client.
    """

    def __init__(self, oauth_client: OAuthClient, carry_store: CarryStore) -> None:
        """Initialize auth service.

        Args:
            oauth_client: Provider OAuth client
            carry_store: Store for pending authorizations
        """
        self.oauth_client = oauth_client
        self.carry_store = carry_store

    async def begin_authorization(
        self, session_id: CarrySessionId, ttl: timedelta
    ) -> str:
        """Create a pending authorization and return the provider URL.

        Args:
            session_id: Carry session id the browser will present at callback
            ttl: Lifetime of the pending authorization

        Returns:
            Authorization URL carrying state and code challenge
        """
        pending = PendingAuthorization(
            state=new_random_token(), code_verifier=new_random_token()
        )

        await self.carry_store.put(session_id, CarryKey.STATE, pending.state, ttl)
        await self.carry_store.put(
            session_id, CarryKey.CODE_VERIFIER, pending.code_verifier, ttl
        )

        logfire.info("Pending authorization stored", ttl_seconds=ttl.total_seconds())

        return self.oauth_client.build_authorization_url(
            pending.state, pending.code_challenge
        )

    async def take_pending(
        self, session_id: CarrySessionId | None
    ) -> tuple[str | None, str | None]:
        """Consume the pending state and verifier.

        Both entries are taken, so neither can be used by a second callback.

        Args:
            session_id: Carry session id from the cookie (None if absent)

        Returns:
            Tuple of (state, code_verifier), each None if not available
        """
        if not session_id:
            return (None, None)

        state = await self.carry_store.take_once(session_id, CarryKey.STATE)
        verifier = await self.carry_store.take_once(session_id, CarryKey.CODE_VERIFIER)
        return (state, verifier)

    async def clear_pending(self, session_id: CarrySessionId | None) -> None:
        """Remove any pending entries for the carry session.

        Args:
            session_id: Carry session id from the cookie (None if absent)
        """
        if not session_id:
            return

        for key in CarryKey:
            await self.carry_store.discard(session_id, key)

    async def exchange_code(self, code: str, code_verifier: str) -> TokenGrant:
        """Exchange the authorization code via the provider.

        Args:
            code: Authorization code
            code_verifier: PKCE verifier

        Returns:
            Token grant
        """
        return await self.oauth_client.exchange_code(code, code_verifier)

    async def resolve_provider_id(self, access_token: SecretStr) -> ProviderId:
        """Resolve the provider identity behind an access token.

        Args:
            access_token: Access token from the grant

        Returns:
            Validated provider id

        Raises:
            pydantic.ValidationError: If the provider returned a blank id
        """
        provider_id = await self.oauth_client.fetch_provider_id(access_token)
        return ProviderId(provider_id)
