"""Strongly typed identifiers for Relay domain entities."""

from typing import NewType
from uuid import UUID

# Local identifier of a persisted identity (sent to the client as userId)
UserIdentityId = NewType("UserIdentityId", UUID)

# Opaque id stored in the carry cookie, scoping pending-authorization entries
CarrySessionId = NewType("CarrySessionId", str)
