"""PostgreSQL repository implementations."""

from relay.persistence.repository.carry import PostgresCarryStore
from relay.persistence.repository.user_identity_repository import (
    PostgresUserIdentityRepository,
)

__all__ = [
    "PostgresCarryStore",
    "PostgresUserIdentityRepository",
]
