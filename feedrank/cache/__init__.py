"""Cache capability used for corpus-wide aggregates and cached feeds."""

from feedrank.cache.memory import InMemoryCache
from feedrank.cache.metrics import CacheMetrics
from feedrank.cache.protocols import CacheBackend


__all__ = ["CacheBackend", "CacheMetrics", "InMemoryCache"]
