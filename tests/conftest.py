"""Test configuration and fixtures."""

import os

import logfire

# OAuth credentials are required at startup; tests talk to the mock client only
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH__AIRTABLE__CLIENT_ID", "test-client-id")
os.environ.setdefault("AUTH__AIRTABLE__CLIENT_SECRET", "test-client-secret")

logfire.configure(send_to_logfire=False, console=False)
