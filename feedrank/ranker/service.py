"""Ranking facade for the anonymous content feed."""

import threading
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

import structlog

from feedrank.cache.memory import InMemoryCache
from feedrank.cache.protocols import CacheBackend
from feedrank.ranker.constants import (
    CANDIDATE_POOL_MULTIPLIER,
    HERO_CACHE_KEY,
    SOURCE_STAGE_MULTIPLIER,
    TRENDING_CACHE_KEY,
)
from feedrank.ranker.distribution import DistributionCache
from feedrank.ranker.diversity import DifficultyDiversifier, SourceDiversifier
from feedrank.ranker.metrics import RankingMetrics
from feedrank.ranker.models import RankingConfig, ScoreBreakdown
from feedrank.ranker.scorer import ContentScorer
from feedrank.settings import RankingSettings
from feedrank.store.models import ContentItem
from feedrank.store.protocols import RANKED_ORDER, ContentStore


logger = structlog.get_logger()


def _published_sort_key(item: ContentItem) -> float:
    """Negative publish timestamp, so newer items sort first; unpublished last."""
    if item.published_at is None:
        return float("inf")
    published = item.published_at
    if published.tzinfo is None:
        published = published.replace(tzinfo=UTC)
    return -published.timestamp()


class ContentRankingService:
    """Orchestrates scoring and diversification for the content feed.

    Ranked feed pipeline:
        fetch 3 x limit top-scored items -> source diversity (2 x limit)
        -> difficulty diversity (limit)

    Trending and hero feeds rank a time-windowed pool, filter it, and are
    cached under their own keys, independent of the distribution cache.
    """

    def __init__(
        self,
        store: ContentStore,
        cache: CacheBackend | None = None,
        settings: RankingSettings | None = None,
        config: RankingConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        metrics: RankingMetrics | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Content store supplying published items.
            cache: Single-flight cache backend; in-process if None.
            settings: Cache windows and feed defaults.
            config: Weights and authority table; compiled defaults if None.
            clock: Returns the current time.
            metrics: Optional metrics instance.
        """
        self._store = store
        self._cache = cache or InMemoryCache()
        self._settings = settings or RankingSettings()
        self._config = config or RankingConfig.default()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._metrics = metrics or RankingMetrics.get_instance()

        self._distribution = DistributionCache(
            store=store,
            cache=self._cache,
            ttl_seconds=self._settings.distribution_ttl_seconds,
            metrics=self._metrics,
        )
        self._source_diversifier = SourceDiversifier(metrics=self._metrics)
        self._difficulty_diversifier = DifficultyDiversifier()
        self._feed_cache_keys: set[str] = set()
        self._feed_keys_lock = threading.Lock()

        self._log = logger.bind(component="ranker", subcomponent="service")

    @property
    def distribution_cache(self) -> DistributionCache:
        """Distribution cache feeding the diversity sub-score."""
        return self._distribution

    def scorer(self) -> ContentScorer:
        """Build a scorer over the current distribution snapshot and time."""
        return ContentScorer(
            distribution=self._distribution.distribution(),
            now=self._clock(),
            config=self._config,
        )

    # ===== Feeds =====

    def ranked_feed(self, limit: int | None = None) -> list[ContentItem]:
        """Ranked, source- and difficulty-diversified feed.

        Args:
            limit: Number of items, settings.feed_limit if None.

        Returns:
            Ordered items, at most limit.
        """
        limit = self._settings.feed_limit if limit is None else limit
        if limit <= 0:
            return []

        start = time.perf_counter()
        candidates = self._store.fetch_published(
            order_by=RANKED_ORDER, limit=limit * CANDIDATE_POOL_MULTIPLIER
        )

        if any(item.ranking_score is None for item in candidates):
            candidates = self._sort_by_effective_score(candidates, self.scorer())

        diverse = self._source_diversifier.diversify(
            candidates, limit * SOURCE_STAGE_MULTIPLIER
        )
        result = self._difficulty_diversifier.diversify(diverse, limit)

        self._record_feed("ranked", candidates, result, start)
        return result

    def rank_pool(
        self, items: Sequence[ContentItem], scorer: ContentScorer | None = None
    ) -> list[ContentItem]:
        """Order an arbitrary pool by effective score, then diversify by source.

        Args:
            items: Items to rank.
            scorer: Scorer for items without a stored score.

        Returns:
            All items, reordered.
        """
        if not items:
            return []
        scorer = scorer or self.scorer()
        ordered = self._sort_by_effective_score(items, scorer)
        return self._source_diversifier.diversify(ordered, len(ordered))

    def trending(
        self, limit: int | None = None, window_hours: int | None = None
    ) -> list[ContentItem]:
        """Recent items with meaningful engagement.

        Args:
            limit: Number of items, settings.trending_limit if None.
            window_hours: Recency window, settings.trending_window_hours if None.

        Returns:
            Ordered items, at most limit.
        """
        limit = self._settings.trending_limit if limit is None else limit
        window_hours = (
            self._settings.trending_window_hours
            if window_hours is None
            else window_hours
        )
        key = TRENDING_CACHE_KEY.format(limit=limit, window_hours=window_hours)
        self._track_feed_key(key)

        items: list[ContentItem] = self._cache.get_or_compute(
            key,
            self._settings.trending_ttl_seconds,
            lambda: self._compute_trending(limit, window_hours),
        )
        return list(items)

    def hero(
        self, limit: int | None = None, window_days: int | None = None
    ) -> list[ContentItem]:
        """High-quality items from the last week for hero placement.

        Args:
            limit: Number of items, settings.hero_limit if None.
            window_days: Recency window, settings.hero_window_days if None.

        Returns:
            Ordered items, at most limit.
        """
        limit = self._settings.hero_limit if limit is None else limit
        window_days = (
            self._settings.hero_window_days if window_days is None else window_days
        )
        key = HERO_CACHE_KEY.format(limit=limit, window_days=window_days)
        self._track_feed_key(key)

        items: list[ContentItem] = self._cache.get_or_compute(
            key,
            self._settings.hero_ttl_seconds,
            lambda: self._compute_hero(limit, window_days),
        )
        return list(items)

    # ===== Scoring & diagnostics =====

    def score_of(self, item: ContentItem) -> float:
        """Total score of an item under the current snapshot."""
        return self.scorer().score(item)

    def score_breakdown(self, item: ContentItem) -> ScoreBreakdown:
        """Score breakdown of an item for debugging."""
        return self.scorer().breakdown(item)

    def configuration(self) -> dict[str, object]:
        """Weights, authority table and version in effect.

        Returns:
            Dictionary with weights, source_authorities, version and
            last_updated.
        """
        return {
            **self._config.to_dict(),
            "last_updated": self._clock().isoformat(),
        }

    def refresh_scores(self) -> int:
        """Recompute and store ranking scores for every published item.

        Returns:
            Number of items updated.
        """
        start = time.perf_counter()
        items = self._store.fetch_published()
        scorer = self.scorer()
        scores = scorer.score_items(items)
        updated = self._store.save_ranking_scores(scores, scorer.now)

        self._metrics.record_scores_refreshed(updated)
        self._metrics.record_scores(list(scores.values()))
        self._log.info(
            "scores_refreshed",
            items=len(items),
            updated=updated,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return updated

    def flush_caches(self) -> None:
        """Drop the distribution and every feed entry this service cached."""
        self._distribution.invalidate()
        with self._feed_keys_lock:
            keys = sorted(self._feed_cache_keys)
            self._feed_cache_keys.clear()
        for key in keys:
            self._cache.forget(key)
        self._log.info("caches_flushed", feed_keys=len(keys))

    # ===== Internals =====

    def _track_feed_key(self, key: str) -> None:
        with self._feed_keys_lock:
            self._feed_cache_keys.add(key)

    def _compute_trending(self, limit: int, window_hours: int) -> list[ContentItem]:
        start = time.perf_counter()
        since = self._clock() - timedelta(hours=window_hours)
        pool = self._store.fetch_published(order_by=RANKED_ORDER, published_since=since)

        ranked = self.rank_pool(pool) if pool else []
        result = [
            item
            for item in ranked
            if item.views_count >= self._settings.trending_min_views
            or item.likes_count >= self._settings.trending_min_likes
        ][: max(limit, 0)]

        self._record_feed("trending", pool, result, start)
        return result

    def _compute_hero(self, limit: int, window_days: int) -> list[ContentItem]:
        start = time.perf_counter()
        since = self._clock() - timedelta(days=window_days)
        pool = self._store.fetch_published(order_by=RANKED_ORDER, published_since=since)
        if not pool:
            self._record_feed("hero", pool, [], start)
            return []

        scorer = self.scorer()
        result = [
            item
            for item in self.rank_pool(pool, scorer)
            if scorer.score(item) >= self._settings.hero_min_score
        ][: max(limit, 0)]

        self._record_feed("hero", pool, result, start)
        return result

    @staticmethod
    def _sort_by_effective_score(
        items: Sequence[ContentItem], scorer: ContentScorer
    ) -> list[ContentItem]:
        """Sort by stored-or-computed score desc, then newest first.

        Args:
            items: Items to sort.
            scorer: Scorer for items without a stored score.

        Returns:
            Sorted items.
        """
        scores = {item.id: scorer.effective_score(item) for item in items}
        return sorted(
            items, key=lambda i: (-scores[i.id], _published_sort_key(i))
        )

    def _record_feed(
        self,
        feed: str,
        candidates: Sequence[ContentItem],
        result: Sequence[ContentItem],
        start: float,
    ) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_feed(feed, len(candidates), len(result), duration_ms)
        self._log.info(
            "feed_ranked",
            feed=feed,
            candidates_in=len(candidates),
            items_out=len(result),
            duration_ms=round(duration_ms, 2),
        )
