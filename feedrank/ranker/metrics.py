"""Metrics collection for the ranker module."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RankingMetrics:
    """Metrics for ranking operations.

    Attributes:
        candidates_in: Candidate pool size of the last feed request.
        items_out: Items returned by the last feed request.
        feeds_served: Feed requests served, by feed name.
        distribution_computations: Distribution recomputations.
        distribution_duration_ms: Duration of the last recomputation.
        diversity_flushes: Source passes that fell back to flushing.
        ranking_duration_ms: Duration of the last ranking pipeline run.
        scores_refreshed: Items whose stored score was last rewritten.
        score_values: Recent effective scores for percentile calculation.
    """

    candidates_in: int = 0
    items_out: int = 0
    feeds_served: dict[str, int] = field(default_factory=dict)
    distribution_computations: int = 0
    distribution_duration_ms: float = 0.0
    diversity_flushes: int = 0
    ranking_duration_ms: float = 0.0
    scores_refreshed: int = 0
    score_values: list[float] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    _instance: ClassVar["RankingMetrics | None"] = None
    MAX_SCORE_SAMPLES: ClassVar[int] = 10_000

    @classmethod
    def get_instance(cls) -> "RankingMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_feed(
        self, feed: str, candidates_in: int, items_out: int, duration_ms: float
    ) -> None:
        """Record one served feed.

        Args:
            feed: Feed name (ranked, trending, hero).
            candidates_in: Candidate pool size.
            items_out: Items returned.
            duration_ms: Pipeline duration in milliseconds.
        """
        with self._lock:
            self.candidates_in = candidates_in
            self.items_out = items_out
            self.ranking_duration_ms = duration_ms
            self.feeds_served[feed] = self.feeds_served.get(feed, 0) + 1

    def record_distribution_computed(self, duration_ms: float) -> None:
        """Record a distribution recomputation.

        Args:
            duration_ms: Duration in milliseconds.
        """
        with self._lock:
            self.distribution_computations += 1
            self.distribution_duration_ms = duration_ms

    def record_diversity_flush(self) -> None:
        """Record a source pass that flushed remaining items."""
        with self._lock:
            self.diversity_flushes += 1

    def record_scores_refreshed(self, count: int) -> None:
        """Record a score write-back.

        Args:
            count: Number of items updated.
        """
        with self._lock:
            self.scores_refreshed = count

    def record_scores(self, scores: list[float]) -> None:
        """Record scores for percentile calculation.

        Args:
            scores: Score values.
        """
        with self._lock:
            self.score_values.extend(scores)
            overflow = len(self.score_values) - self.MAX_SCORE_SAMPLES
            if overflow > 0:
                del self.score_values[:overflow]

    def get_score_percentiles(self) -> dict[str, float]:
        """Calculate score percentiles (p50/p90/p99).

        Returns:
            Dictionary with p50, p90, p99 values.
        """
        with self._lock:
            sorted_scores = sorted(self.score_values)

        if not sorted_scores:
            return {"p50": 0.0, "p90": 0.0, "p99": 0.0}

        n = len(sorted_scores)

        def percentile(p: float) -> float:
            idx = int(p * n / 100)
            return sorted_scores[min(idx, n - 1)]

        return {
            "p50": percentile(50),
            "p90": percentile(90),
            "p99": percentile(99),
        }

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            data: dict[str, object] = {
                "candidates_in": self.candidates_in,
                "items_out": self.items_out,
                "feeds_served": dict(self.feeds_served),
                "distribution_computations": self.distribution_computations,
                "distribution_duration_ms": self.distribution_duration_ms,
                "diversity_flushes": self.diversity_flushes,
                "ranking_duration_ms": self.ranking_duration_ms,
                "scores_refreshed": self.scores_refreshed,
            }
        data["score_percentiles"] = self.get_score_percentiles()
        return data
