"""Cached per-domain distribution of the published corpus."""

import time
from collections.abc import Iterable

import structlog

from feedrank.cache.protocols import CacheBackend
from feedrank.ranker.constants import DISTRIBUTION_CACHE_KEY
from feedrank.ranker.domain import extract_domain
from feedrank.ranker.metrics import RankingMetrics
from feedrank.ranker.models import DistributionStat
from feedrank.store.models import SourceCount
from feedrank.store.protocols import ContentStore


logger = structlog.get_logger()

DEFAULT_DISTRIBUTION_TTL_SECONDS = 3600


def compute_distribution(
    total_published: int, source_counts: Iterable[SourceCount]
) -> dict[str, DistributionStat]:
    """Merge per-URL counts into per-domain shares of the corpus.

    Args:
        total_published: Number of published items, including items
            without a source URL.
        source_counts: Published item counts per raw source URL.

    Returns:
        Mapping of domain key to DistributionStat; empty when the corpus
        is empty.
    """
    if total_published <= 0:
        return {}

    domain_counts: dict[str, int] = {}
    for source in source_counts:
        domain = extract_domain(source.source_url)
        domain_counts[domain] = domain_counts.get(domain, 0) + source.count

    return {
        domain: DistributionStat(
            count=count,
            percentage=count / total_published * 100,
        )
        for domain, count in domain_counts.items()
    }


class DistributionCache:
    """Time-bounded cache of the corpus domain distribution.

    Recomputes from the store at most once per TTL window. Concurrent
    misses collapse into one recomputation through the cache backend.
    Store failures propagate to the caller.
    """

    def __init__(
        self,
        store: ContentStore,
        cache: CacheBackend,
        ttl_seconds: float = DEFAULT_DISTRIBUTION_TTL_SECONDS,
        metrics: RankingMetrics | None = None,
    ) -> None:
        """Initialize the distribution cache.

        Args:
            store: Content store supplying counts.
            cache: Single-flight cache backend.
            ttl_seconds: Lifetime of a computed distribution.
            metrics: Optional metrics instance.
        """
        self._store = store
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._metrics = metrics or RankingMetrics.get_instance()
        self._log = logger.bind(component="ranker", subcomponent="distribution")

    @property
    def cache_key(self) -> str:
        """Cache key the distribution is stored under."""
        return DISTRIBUTION_CACHE_KEY

    def distribution(self) -> dict[str, DistributionStat]:
        """Get the current distribution snapshot.

        Returns:
            Mapping of domain key to DistributionStat.
        """
        snapshot: dict[str, DistributionStat] = self._cache.get_or_compute(
            DISTRIBUTION_CACHE_KEY, self._ttl_seconds, self._compute
        )
        return snapshot

    def invalidate(self) -> None:
        """Force recomputation on next access."""
        self._cache.forget(DISTRIBUTION_CACHE_KEY)

    def _compute(self) -> dict[str, DistributionStat]:
        start = time.perf_counter()
        total = self._store.count_published()
        stats = compute_distribution(
            total, self._store.aggregate_source_counts() if total > 0 else []
        )
        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_distribution_computed(duration_ms)

        self._log.info(
            "distribution_computed",
            total_published=total,
            domains=len(stats),
            duration_ms=round(duration_ms, 2),
        )
        return stats
