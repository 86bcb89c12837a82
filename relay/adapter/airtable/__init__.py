"""Airtable OAuth adapter."""

from .client import (
    AirtableOAuthClient,
    AirtableOAuthError,
    MockAirtableOAuthClient,
    RealAirtableOAuthClient,
)

__all__ = [
    "AirtableOAuthClient",
    "AirtableOAuthError",
    "MockAirtableOAuthClient",
    "RealAirtableOAuthClient",
]
