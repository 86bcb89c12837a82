"""Infrastructure providers."""

# Import bases
from .airtable import AirtableProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .airtable import ProdAirtableProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "AirtableProvider",
    "PersistenceProvider",
    "ProdAirtableProvider",
    "ProdPersistenceProvider",
]
