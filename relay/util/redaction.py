"""Redaction of OAuth callback parameters in URLs."""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

# Callback parameters whose values must never reach telemetry or logs
REDACTED_QUERY_PARAMS = frozenset({"code", "state"})

REDACTED = "[redacted]"


def redact_query(query: str) -> str:
    """Replace the values of sensitive query parameters.

    Parameter names and other values are kept so failed callbacks stay
    diagnosable (e.g. error=access_denied).
    """
    pairs = parse_qsl(query, keep_blank_values=True)
    return urlencode(
        [(k, REDACTED if k in REDACTED_QUERY_PARAMS else v) for k, v in pairs],
        safe="[]",
    )


def redact_url(url: str) -> str:
    """Redact sensitive query parameters of an absolute or relative URL."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    return urlunsplit(parts._replace(query=redact_query(parts.query)))
