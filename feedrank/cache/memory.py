"""In-process single-flight TTL cache."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import structlog

from feedrank.cache.metrics import CacheMetrics


logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class _Entry:
    value: Any
    expires_at: float


@dataclass
class _KeyLock:
    """Per-key computation lock and the number of callers holding or awaiting it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class InMemoryCache:
    """Get-or-compute cache with per-key locks.

    A registry lock guards the entry and lock tables; each key has its own
    lock held for the duration of a computation, so concurrent misses on
    one key collapse into a single computation while other keys proceed
    independently. A key's lock is dropped once no caller holds or awaits
    it. Failed computations are not cached.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        metrics: CacheMetrics | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            clock: Monotonic clock in seconds, injectable for tests.
            metrics: Optional metrics instance.
        """
        self._clock = clock
        self._metrics = metrics or CacheMetrics.get_instance()
        self._entries: dict[str, _Entry] = {}
        self._key_locks: dict[str, _KeyLock] = {}
        self._registry_lock = threading.Lock()
        self._log = logger.bind(component="cache", backend="memory")

    @property
    def pending_keys(self) -> int:
        """Number of keys with a computation running or awaited."""
        with self._registry_lock:
            return len(self._key_locks)

    def _fresh(self, key: str) -> _Entry | None:
        """Return the entry for key if present and unexpired.

        Must be called while holding the registry lock.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry

    def get_or_compute(self, key: str, ttl_seconds: float, compute: Callable[[], T]) -> T:
        """Return the cached value for key, computing it at most once per miss.

        Args:
            key: Cache key.
            ttl_seconds: Lifetime of a freshly computed value.
            compute: Zero-argument function producing the value.

        Returns:
            The cached or freshly computed value.
        """
        with self._registry_lock:
            entry = self._fresh(key)
            if entry is not None:
                self._metrics.record_hit()
                return entry.value
            key_lock = self._key_locks.get(key)
            if key_lock is None:
                key_lock = self._key_locks[key] = _KeyLock()
            key_lock.users += 1

        try:
            return self._compute_locked(key, key_lock.lock, ttl_seconds, compute)
        finally:
            with self._registry_lock:
                key_lock.users -= 1
                if key_lock.users == 0 and self._key_locks.get(key) is key_lock:
                    del self._key_locks[key]

    def _compute_locked(
        self,
        key: str,
        lock: threading.Lock,
        ttl_seconds: float,
        compute: Callable[[], T],
    ) -> T:
        self._metrics.record_miss()
        if not lock.acquire(blocking=False):
            self._metrics.record_wait()
            self._log.debug("cache_wait", key=key)
            lock.acquire()

        try:
            # Another caller may have filled the entry while we waited
            with self._registry_lock:
                entry = self._fresh(key)
            if entry is not None:
                self._metrics.record_hit()
                value: T = entry.value
                return value

            self._log.debug("cache_miss", key=key, ttl_seconds=ttl_seconds)
            self._metrics.record_computation()
            start = time.perf_counter()
            try:
                value = compute()
            except Exception:
                self._metrics.record_failure()
                self._log.warning("cache_compute_failed", key=key, exc_info=True)
                raise

            with self._registry_lock:
                self._entries[key] = _Entry(
                    value=value, expires_at=self._clock() + ttl_seconds
                )
            self._log.info(
                "cache_computed",
                key=key,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return value
        finally:
            lock.release()

    def forget(self, key: str) -> None:
        """Drop a cached value."""
        with self._registry_lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop all cached values."""
        with self._registry_lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        """Check whether a fresh value is cached for key."""
        if not isinstance(key, str):
            return False
        with self._registry_lock:
            return self._fresh(key) is not None
