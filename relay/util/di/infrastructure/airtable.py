"""Airtable infrastructure providers."""

from dishka import Scope, provide

from relay.adapter.airtable import RealAirtableOAuthClient
from relay.config import Settings
from relay.domain.service import OAuthClient
from relay.util.di.base import ProviderBase
from relay.util.error import ConfigurationError


class AirtableProvider(ProviderBase):
    """Airtable component base."""

    __mock_component__ = "airtable"


class ProdAirtableProvider(AirtableProvider):
    """Production Airtable provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_airtable_oauth_client(self, settings: Settings) -> OAuthClient:
        """Provide Airtable OAuth client.

        Returns:
            Airtable OAuth 2.0 client

        Raises:
            ConfigurationError: If Airtable OAuth credentials are not configured
        """
        airtable = settings.auth.airtable
        if not airtable.client_id:
            raise ConfigurationError("Airtable OAuth client ID must be configured")
        if not airtable.client_secret:
            raise ConfigurationError("Airtable OAuth client secret must be configured")

        return RealAirtableOAuthClient(
            client_id=airtable.client_id,
            client_secret=airtable.client_secret,
            redirect_uri=settings.auth.callback_url,
            authorize_url=airtable.authorize_url,
            token_url=airtable.token_url,
            whoami_url=airtable.whoami_url,
            scopes=airtable.scopes,
            timeout=airtable.http_timeout,
        )
