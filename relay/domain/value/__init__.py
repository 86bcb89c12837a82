"""Domain value objects for Relay."""

from relay.domain.value.identifiers import CarrySessionId, UserIdentityId
from relay.domain.value.types import (
    CarryKey,
    PendingAuthorization,
    ProviderId,
    TokenGrant,
)

__all__ = [
    # Identifiers
    "CarrySessionId",
    "UserIdentityId",
    # Types
    "CarryKey",
    "PendingAuthorization",
    "ProviderId",
    "TokenGrant",
]
