"""In-memory repository implementations for testing."""

from .carry import InMemoryCarryStore
from .user_identity import InMemoryUserIdentityRepository

__all__ = [
    "InMemoryCarryStore",
    "InMemoryUserIdentityRepository",
]
