"""Mock providers for testing."""

from .airtable import MockAirtableProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockAirtableProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
