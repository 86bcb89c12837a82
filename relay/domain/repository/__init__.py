"""Repository interfaces for the Relay domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from relay.domain.repository.carry import CarryStore
from relay.domain.repository.user_identity import UserIdentityRepository

__all__ = [
    "CarryStore",
    "UserIdentityRepository",
]
