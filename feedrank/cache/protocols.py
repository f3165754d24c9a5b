"""Cache port consumed by the ranking engine."""

from collections.abc import Callable
from typing import Protocol, TypeVar


T = TypeVar("T")


class CacheBackend(Protocol):
    """Protocol for a get-or-compute cache with TTL.

    Implementations must be single-flight: a miss triggers at most one
    concurrent computation per key, and other callers for that key wait
    for its result.
    """

    def get_or_compute(self, key: str, ttl_seconds: float, compute: Callable[[], T]) -> T:
        """Return the cached value for key, computing and storing it on a miss.

        Args:
            key: Cache key.
            ttl_seconds: Lifetime of a freshly computed value.
            compute: Zero-argument function producing the value.

        Returns:
            The cached or freshly computed value.
        """
        ...

    def forget(self, key: str) -> None:
        """Drop a cached value so the next access recomputes it."""
        ...
