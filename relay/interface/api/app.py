"""FastAPI application."""

from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from relay.config import Settings
from relay.interface.api.routes import auth, health
from relay.util.di.container import create_container, setup_di
from relay.util.error import ConfigurationError
from relay.util.logging import get_logger
from relay.util.observability import (
    instrument_fastapi,
    instrument_httpx,
)

logger = get_logger(__name__)


def _validate_settings(settings: Settings) -> None:
    """Refuse to start without the OAuth client credentials."""
    missing = []
    if not settings.auth.airtable.client_id:
        missing.append("AUTH__AIRTABLE__CLIENT_ID")
    if not settings.auth.airtable.client_secret:
        missing.append("AUTH__AIRTABLE__CLIENT_SECRET")
    if not settings.database.url:
        missing.append("DATABASE__URL")

    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}"
        )


def create_app(
    container: AsyncContainer | None = None, settings: Settings | None = None
) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this and runs uvicorn with factory=True.
    In tests, pass a container built from the mock providers.

    Raises:
        ConfigurationError: If OAuth client credentials are missing
    """
    settings = settings or Settings()
    _validate_settings(settings)

    # Instrument httpx for outbound calls to Airtable
    # (Logfire must be configured before instrumentation)
    instrument_httpx()

    container = container or create_container()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await container.close()

    app_instance = FastAPI(
        title="Relay API",
        description="Airtable OAuth 2.0 login service (Authorization Code + PKCE)",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    setup_di(app_instance, container)

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(auth.router)

    logger.info(
        "Application created (environment=%s, client_url=%s)",
        settings.environment,
        settings.client_url,
    )

    return app_instance
