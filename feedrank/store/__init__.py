"""Content store port and adapters.

The ranking engine reads published items through the ContentStore
protocol; two adapters are provided:
- InMemoryContentStore for tests and embedded use
- SQLiteContentStore for a persistent single-file corpus
"""

from feedrank.store.errors import ContentStoreError, StoreConnectionError
from feedrank.store.memory import InMemoryContentStore
from feedrank.store.models import (
    ContentItem,
    ContentStatus,
    ContentType,
    Difficulty,
    SourceCount,
)
from feedrank.store.protocols import RANKED_ORDER, ContentStore, OrderBy, SortField
from feedrank.store.sqlite import SQLiteContentStore


__all__ = [
    "RANKED_ORDER",
    # Errors
    "ContentStoreError",
    "StoreConnectionError",
    # Models
    "ContentItem",
    "ContentStatus",
    "ContentType",
    "Difficulty",
    "SourceCount",
    # Port
    "ContentStore",
    "OrderBy",
    "SortField",
    # Adapters
    "InMemoryContentStore",
    "SQLiteContentStore",
]
