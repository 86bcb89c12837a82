"""Airtable OAuth 2.0 client implementation.

Implements the Authorization Code flow with PKCE against Airtable.
"""

from datetime import datetime, timezone
from urllib.parse import urlencode

import httpx
import logfire
from pydantic import BaseModel, Field, SecretStr

from relay.adapter.error import ProviderError
from relay.domain.service.auth_service import OAuthClient
from relay.domain.value import TokenGrant


class AirtableOAuthError(ProviderError):
    """Airtable OAuth error."""

    pass


class _TokenResponse(BaseModel):
    """Token endpoint success body. Both tokens must be non-empty strings."""

    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)
    expires_in: int = Field(ge=0)


class AirtableOAuthClient(OAuthClient):
    """Base class for Airtable OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


def _provider_error_code(response: httpx.Response) -> str | None:
    """Extract the OAuth error code from an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str):
            return error
        if isinstance(error, dict) and isinstance(error.get("type"), str):
            return error["type"]
    return None


class RealAirtableOAuthClient(AirtableOAuthClient):
    """Airtable OAuth 2.0 client with PKCE support."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        authorize_url: str,
        token_url: str,
        whoami_url: str,
        scopes: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Airtable OAuth client.

        Args:
            client_id: Airtable OAuth client ID
            client_secret: Airtable OAuth client secret
            redirect_uri: Callback URL registered with Airtable
            authorize_url: Authorization endpoint
            token_url: Token endpoint
            whoami_url: Identity endpoint
            scopes: Space-separated scope list
            timeout: I/O timeout in seconds for outbound calls
            transport: Optional httpx transport (tests)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.whoami_url = whoami_url
        self.scopes = scopes
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def build_authorization_url(self, state: str, code_challenge: str) -> str:
        """Build the Airtable authorization URL.

        Args:
            state: State parameter for CSRF protection
            code_challenge: S256 PKCE challenge

        Returns:
            Authorization URL to redirect the browser to
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scopes,
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }

        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str, code_verifier: str) -> TokenGrant:
        """Exchange authorization code for a token pair.

        Args:
            code: Authorization code from callback
            code_verifier: PKCE code verifier

        Returns:
            Token grant

        Raises:
            AirtableOAuthError: If token exchange fails
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
            "code_verifier": code_verifier,
        }

        # Basic Auth with client credentials
        auth = (self.client_id, self.client_secret)

        try:
            async with self._client() as client:
                response = await client.post(
                    self.token_url,
                    data=data,
                    auth=auth,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            logfire.error(
                "Airtable token exchange HTTP error", error_type=type(e).__name__
            )
            raise AirtableOAuthError(
                f"HTTP error during token exchange: {type(e).__name__}"
            ) from e

        if not response.is_success:
            error_code = _provider_error_code(response)
            logfire.error(
                "Airtable token exchange failed",
                status_code=response.status_code,
                error_code=error_code,
            )
            raise AirtableOAuthError(
                f"Token exchange failed: {response.status_code}",
                status_code=response.status_code,
                error_code=error_code,
            )

        received_at = datetime.now(timezone.utc)

        try:
            # ValidationError and JSON decode errors are both ValueErrors
            result = _TokenResponse.model_validate(response.json())
        except ValueError as e:
            logfire.error(
                "Airtable token response malformed", error_type=type(e).__name__
            )
            raise AirtableOAuthError(
                "Token response is missing required fields",
                status_code=response.status_code,
            ) from e

        return TokenGrant(
            access_token=SecretStr(result.access_token),
            refresh_token=SecretStr(result.refresh_token),
            expires_in=result.expires_in,
            received_at=received_at,
        )

    async def fetch_provider_id(self, access_token: SecretStr) -> str:
        """Get the Airtable user id for an access token.

        Args:
            access_token: OAuth access token

        Returns:
            Airtable user id

        Raises:
            AirtableOAuthError: If API request fails
        """
        headers = {"Authorization": f"Bearer {access_token.get_secret_value()}"}

        try:
            async with self._client() as client:
                response = await client.get(self.whoami_url, headers=headers)
        except httpx.HTTPError as e:
            logfire.error("Airtable whoami HTTP error", error_type=type(e).__name__)
            raise AirtableOAuthError(
                f"HTTP error fetching user info: {type(e).__name__}"
            ) from e

        if not response.is_success:
            error_code = _provider_error_code(response)
            logfire.error(
                "Airtable whoami request failed",
                status_code=response.status_code,
                error_code=error_code,
            )
            raise AirtableOAuthError(
                f"User info request failed: {response.status_code}",
                status_code=response.status_code,
                error_code=error_code,
            )

        try:
            user_id = response.json()["id"]
        except (ValueError, KeyError, TypeError) as e:
            raise AirtableOAuthError("User info response has no id") from e

        if not isinstance(user_id, str):
            raise AirtableOAuthError("User info id is not a string")

        return user_id


class MockAirtableOAuthClient(AirtableOAuthClient):
    """Mock Airtable OAuth client for testing.

    Returns deterministic test data without making real API calls and
    records every outbound call so tests can assert none happened.
    """

    def __init__(
        self,
        access_token: str = "mock-access-token",
        refresh_token: str = "mock-refresh-token",
        expires_in: int = 3600,
        provider_id: str = "usrMock123",
        exchange_error: Exception | None = None,
        identity_error: Exception | None = None,
    ):
        """Initialize mock client without real OAuth configuration."""
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.expires_in = expires_in
        self.provider_id = provider_id
        self.exchange_error = exchange_error
        self.identity_error = identity_error
        self.exchange_calls: list[tuple[str, str]] = []
        self.identity_calls: list[str] = []

    @property
    def outbound_calls(self) -> int:
        """Total number of simulated provider calls."""
        return len(self.exchange_calls) + len(self.identity_calls)

    def build_authorization_url(self, state: str, code_challenge: str) -> str:
        """Return mock authorization URL."""
        params = {
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
            "mock": "true",
        }
        return f"https://airtable.com/oauth2/v1/authorize?{urlencode(params)}"

    async def exchange_code(self, code: str, code_verifier: str) -> TokenGrant:
        """Return the configured grant (or raise the configured error)."""
        self.exchange_calls.append((code, code_verifier))
        if self.exchange_error:
            raise self.exchange_error
        return TokenGrant(
            access_token=SecretStr(self.access_token),
            refresh_token=SecretStr(self.refresh_token),
            expires_in=self.expires_in,
            received_at=datetime.now(timezone.utc),
        )

    async def fetch_provider_id(self, access_token: SecretStr) -> str:
        """Return the configured provider id (or raise the configured error)."""
        self.identity_calls.append(access_token.get_secret_value())
        if self.identity_error:
            raise self.identity_error
        return self.provider_id
