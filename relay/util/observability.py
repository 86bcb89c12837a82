"""Observability configuration using Logfire.

Logfire provides:
- Structured logging with OpenTelemetry
- Distributed tracing
- Integration with FastAPI, SQLAlchemy and httpx

Usage:
    import logfire

    # Structured logging (never pass tokens, codes, state or verifiers)
    logfire.info("Identity upserted", identity_id=str(identity.id))

    # Manual spans for critical operations
    with logfire.span("complete_login"):
        ...
"""

from collections.abc import Sequence
from typing import Any

import logfire
from fastapi import FastAPI
from opentelemetry.sdk.trace import Span, SpanProcessor
from sqlalchemy.ext.asyncio import AsyncEngine

from relay.config import Settings
from relay.util.redaction import redact_query, redact_url

# Request span attributes that carry the raw URL or query string
_URL_ATTRIBUTES = ("http.url", "http.target", "url.full")
_QUERY_ATTRIBUTES = ("url.query",)


def redact_http_attributes(span: Any) -> None:
    """Rewrite URL attributes of a recording span in place."""
    if not span.is_recording():
        return

    attributes = getattr(span, "attributes", None) or {}
    updates = {}
    for key in _URL_ATTRIBUTES:
        value = attributes.get(key)
        if isinstance(value, str):
            updates[key] = redact_url(value)
    for key in _QUERY_ATTRIBUTES:
        value = attributes.get(key)
        if isinstance(value, str):
            updates[key] = redact_query(value)

    if updates:
        span.set_attributes(updates)


class QueryRedactingSpanProcessor(SpanProcessor):
    """Redacts callback query parameters as soon as a span starts.

    Runs before Logfire's pending-span export, which snapshots attributes
    at span start.
    """

    def on_start(self, span: Span, parent_context: Any = None) -> None:
        redact_http_attributes(span)


def _redact_server_request(span: Any, scope: dict[str, Any]) -> None:
    # ASGI middleware re-applies the raw attributes after start
    redact_http_attributes(span)


def configure_logfire(
    settings: Settings,
    additional_span_processors: Sequence[SpanProcessor] = (),
) -> None:
    """Configure Logfire for observability.

    Token Configuration:
    - Set OBSERVABILITY__LOGFIRE_TOKEN environment variable to enable cloud sending
    - If token is present, logs will be sent to Logfire cloud by default
    - Can be explicitly controlled with OBSERVABILITY__SEND_TO_LOGFIRE

    Args:
        settings: Application settings
        additional_span_processors: Extra processors (e.g. test exporters),
            run after query redaction
    """
    # Priority: explicit setting > token presence > default (False)
    if settings.observability.send_to_logfire is not None:
        send_to_logfire = settings.observability.send_to_logfire
    elif settings.observability.logfire_token:
        send_to_logfire = True
    else:
        send_to_logfire = False

    config_kwargs: dict[str, Any] = {
        "service_name": "relay-api",
        "service_version": "0.1.0",
        "environment": settings.environment,
        "send_to_logfire": send_to_logfire,
        "additional_span_processors": [
            QueryRedactingSpanProcessor(),
            *additional_span_processors,
        ],
        "console": logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    }

    if settings.observability.logfire_token:
        config_kwargs["token"] = settings.observability.logfire_token

    logfire.configure(**config_kwargs)

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        debug=settings.debug,
        send_to_logfire=send_to_logfire,
        has_token=bool(settings.observability.logfire_token),
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Instrument FastAPI application with Logfire.

    Request headers are not captured so the carry cookie stays out of
    telemetry. Callback code and state are redacted from the request span.

    Args:
        app: FastAPI application instance
    """

    def _map_request_attributes(request, attributes):
        """Keep method and path, drop query parameters (code, state)."""
        result = {
            k: v for k, v in attributes.items() if k not in ("values", "errors")
        }

        if hasattr(request, "method"):
            result["method"] = request.method

        if hasattr(request, "url"):
            result["path"] = request.url.path

        return result

    logfire.instrument_fastapi(
        app,
        capture_headers=False,
        request_attributes_mapper=_map_request_attributes,
        server_request_hook=_redact_server_request,
    )
    logfire.info("FastAPI instrumented")


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Instrument SQLAlchemy engine with Logfire.

    Args:
        engine: SQLAlchemy async engine
    """
    logfire.instrument_sqlalchemy(
        engine=engine.sync_engine,
        enable_commenter=True,  # Add SQL comments with span context
    )
    logfire.info("SQLAlchemy instrumented")


def instrument_httpx() -> None:
    """Instrument httpx client with Logfire.

    Traces outbound calls to the provider's token and identity endpoints.
    Request bodies and headers are not captured.
    """
    logfire.instrument_httpx()
    logfire.info("httpx instrumented")
