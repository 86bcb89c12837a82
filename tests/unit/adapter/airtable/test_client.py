"""Unit tests for the Airtable OAuth client."""

import base64
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from pydantic import SecretStr

from relay.adapter.airtable import AirtableOAuthError, RealAirtableOAuthClient

TOKEN_URL = "https://airtable.com/oauth2/v1/token"
WHOAMI_URL = "https://api.airtable.com/v0/meta/whoami"


def make_client(handler) -> RealAirtableOAuthClient:
    return RealAirtableOAuthClient(
        client_id="client-abc",
        client_secret="secret-xyz",
        redirect_uri="http://localhost:8000/auth/callback",
        authorize_url="https://airtable.com/oauth2/v1/authorize",
        token_url=TOKEN_URL,
        whoami_url=WHOAMI_URL,
        scopes="data.records:read schema.bases:read",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class TestBuildAuthorizationUrl:
    """Tests for authorization URL construction."""

    def test_includes_all_required_parameters(self):
        """URL should carry client, redirect, scope, state and S256 challenge."""
        client = make_client(lambda request: httpx.Response(500))

        url = client.build_authorization_url("state-123", "challenge-456")

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
            "https://airtable.com/oauth2/v1/authorize"
        )
        assert params == {
            "client_id": ["client-abc"],
            "redirect_uri": ["http://localhost:8000/auth/callback"],
            "response_type": ["code"],
            "scope": ["data.records:read schema.bases:read"],
            "state": ["state-123"],
            "code_challenge": ["challenge-456"],
            "code_challenge_method": ["S256"],
        }


class TestExchangeCode:
    """Tests for the token exchange."""

    @pytest.mark.asyncio
    async def test_posts_form_with_basic_auth(self):
        """Should send form-encoded grant with client credentials as Basic auth."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(
                200,
                json={
                    "access_token": "AT1",
                    "refresh_token": "RT1",
                    "expires_in": 3600,
                    "token_type": "Bearer",
                },
            )

        client = make_client(handler)

        grant = await client.exchange_code("code-abc", "verifier-xyz")

        request = captured["request"]
        assert request.method == "POST"
        assert str(request.url) == TOKEN_URL
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        expected_auth = base64.b64encode(b"client-abc:secret-xyz").decode("ascii")
        assert request.headers["authorization"] == f"Basic {expected_auth}"
        assert parse_qs(request.content.decode()) == {
            "grant_type": ["authorization_code"],
            "code": ["code-abc"],
            "redirect_uri": ["http://localhost:8000/auth/callback"],
            "code_verifier": ["verifier-xyz"],
        }

        assert grant.access_token.get_secret_value() == "AT1"
        assert grant.refresh_token.get_secret_value() == "RT1"
        assert grant.expires_in == 3600

    @pytest.mark.asyncio
    async def test_rejected_code_raises_with_error_code(self):
        """Non-success responses should raise with status and provider error code."""
        client = make_client(
            lambda request: httpx.Response(
                400,
                json={"error": "invalid_grant", "error_description": "expired"},
            )
        )

        with pytest.raises(AirtableOAuthError) as exc_info:
            await client.exchange_code("bad-code", "verifier")

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "invalid_grant"

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self):
        """Network errors should surface as AirtableOAuthError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(AirtableOAuthError) as exc_info:
            await client.exchange_code("code", "verifier")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_incomplete_token_response_raises(self):
        """A response without refresh_token is not a usable grant."""
        client = make_client(
            lambda request: httpx.Response(
                200, json={"access_token": "AT1", "expires_in": 3600}
            )
        )

        with pytest.raises(AirtableOAuthError):
            await client.exchange_code("code", "verifier")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"access_token": None, "refresh_token": "RT1", "expires_in": 3600},
            {"access_token": "AT1", "refresh_token": None, "expires_in": 3600},
            {"access_token": "", "refresh_token": "RT1", "expires_in": 3600},
            {"access_token": "AT1", "refresh_token": "", "expires_in": 3600},
            {"access_token": 123, "refresh_token": "RT1", "expires_in": 3600},
            {"access_token": "AT1", "refresh_token": "RT1", "expires_in": None},
            ["AT1", "RT1"],
        ],
    )
    async def test_null_or_empty_tokens_raise(self, body):
        """Null, empty or non-string tokens are not a usable grant."""
        client = make_client(lambda request: httpx.Response(200, json=body))

        with pytest.raises(AirtableOAuthError) as exc_info:
            await client.exchange_code("code", "verifier")

        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_non_json_token_response_raises(self):
        """A success status with a non-JSON body is rejected."""
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(AirtableOAuthError):
            await client.exchange_code("code", "verifier")

    @pytest.mark.asyncio
    async def test_error_message_does_not_contain_secrets(self):
        """Client secret and verifier must not leak into the error."""
        client = make_client(
            lambda request: httpx.Response(401, json={"error": "invalid_client"})
        )

        with pytest.raises(AirtableOAuthError) as exc_info:
            await client.exchange_code("code-abc", "verifier-xyz")

        message = str(exc_info.value)
        assert "secret-xyz" not in message
        assert "verifier-xyz" not in message
        assert "code-abc" not in message


class TestFetchProviderId:
    """Tests for the whoami lookup."""

    @pytest.mark.asyncio
    async def test_sends_bearer_token_and_returns_id(self):
        """Should call whoami with bearer auth and return the user id."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json={"id": "usr42", "scopes": []})

        client = make_client(handler)

        provider_id = await client.fetch_provider_id(SecretStr("AT1"))

        assert provider_id == "usr42"
        assert str(captured["request"].url) == WHOAMI_URL
        assert captured["request"].headers["authorization"] == "Bearer AT1"

    @pytest.mark.asyncio
    async def test_unauthorized_raises(self):
        """Non-success responses should raise."""
        client = make_client(
            lambda request: httpx.Response(
                401, json={"error": {"type": "AUTHENTICATION_REQUIRED"}}
            )
        )

        with pytest.raises(AirtableOAuthError) as exc_info:
            await client.fetch_provider_id(SecretStr("AT1"))

        assert exc_info.value.status_code == 401
        assert exc_info.value.error_code == "AUTHENTICATION_REQUIRED"

    @pytest.mark.asyncio
    async def test_missing_id_raises(self):
        """A response without an id cannot identify the user."""
        client = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(AirtableOAuthError):
            await client.fetch_provider_id(SecretStr("AT1"))
