"""Metrics collection for the cache layer."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class CacheMetrics:
    """Counters for cache activity.

    Attributes:
        hits: Lookups served from a fresh entry.
        misses: Lookups that found no fresh entry.
        computations: Compute functions actually executed.
        failures: Compute functions that raised.
        waits: Lookups that blocked behind another caller's computation.
    """

    hits: int = 0
    misses: int = 0
    computations: int = 0
    failures: int = 0
    waits: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    _instance: ClassVar["CacheMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "CacheMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_hit(self) -> None:
        """Record a cache hit."""
        with self._lock:
            self.hits += 1

    def record_miss(self) -> None:
        """Record a cache miss."""
        with self._lock:
            self.misses += 1

    def record_computation(self) -> None:
        """Record an executed computation."""
        with self._lock:
            self.computations += 1

    def record_failure(self) -> None:
        """Record a failed computation."""
        with self._lock:
            self.failures += 1

    def record_wait(self) -> None:
        """Record a caller that waited on an in-flight computation."""
        with self._lock:
            self.waits += 1

    def to_dict(self) -> dict[str, int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "computations": self.computations,
                "failures": self.failures,
                "waits": self.waits,
            }
