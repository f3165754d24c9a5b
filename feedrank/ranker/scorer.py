"""Scoring engine for content ranking."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime

import structlog

from feedrank.ranker.authority import AuthorityMatcher, default_matcher
from feedrank.ranker.constants import (
    DIVERSITY_BANDS,
    DIVERSITY_FLOOR_SCORE,
    DIVERSITY_NEUTRAL_SCORE,
    ENGAGEMENT_LIKE_MULTIPLIER,
    ENGAGEMENT_LIKE_WEIGHT,
    ENGAGEMENT_LOG_SCALE,
    ENGAGEMENT_MAX_SCORE,
    ENGAGEMENT_RATE_WEIGHT,
    ENGAGEMENT_VIEW_WEIGHT,
    RECENCY_FRESH_HOURS,
    RECENCY_MAX_SCORE,
    RECENCY_STALE_DECAY_HOURS,
    RECENCY_STALE_SCORE,
    RECENCY_WEEK_DECAY_HOURS,
    RECENCY_WEEK_HOURS,
    UNKNOWN_DOMAIN,
)
from feedrank.ranker.domain import extract_domain
from feedrank.ranker.models import (
    DistributionStat,
    RankingConfig,
    ScoreBreakdown,
    SubScore,
)
from feedrank.store.models import ContentItem


logger = structlog.get_logger()


def hours_since(published_at: datetime | None, now: datetime) -> float | None:
    """Hours elapsed between publication and now.

    Naive timestamps are taken to be UTC.

    Args:
        published_at: Publication time, None when unpublished.
        now: Reference time.

    Returns:
        Elapsed hours (negative for future dates), or None.
    """
    if published_at is None:
        return None
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return (now - published_at).total_seconds() / 3600


def recency_score(hours_old: float | None) -> float:
    """Piecewise exponential recency decay.

    Full score for the first day, slow decay through the first week,
    then a lower curve decaying over roughly a month.

    Args:
        hours_old: Hours since publication, None when unpublished.

    Returns:
        Recency score (0.0 to 10.0).
    """
    if hours_old is None:
        return 0.0
    if hours_old <= RECENCY_FRESH_HOURS:
        return RECENCY_MAX_SCORE
    if hours_old <= RECENCY_WEEK_HOURS:
        return RECENCY_MAX_SCORE * math.exp(
            -(hours_old - RECENCY_FRESH_HOURS) / RECENCY_WEEK_DECAY_HOURS
        )
    return RECENCY_STALE_SCORE * math.exp(
        -(hours_old - RECENCY_WEEK_HOURS) / RECENCY_STALE_DECAY_HOURS
    )


def engagement_rate(views: int, likes: int) -> float:
    """Likes per hundred views, 0 when there are no views."""
    if views <= 0:
        return 0.0
    return likes / views * 100


def engagement_score(views: int, likes: int, hours_old: float | None) -> float:
    """Time-normalized engagement with log scaling.

    Args:
        views: View count.
        likes: Like count.
        hours_old: Hours since publication, None when unpublished.

    Returns:
        Engagement score (0.0 to 10.0).
    """
    hours_live = max(hours_old if hours_old is not None else 1.0, 1.0)
    views = max(views, 0)
    likes = max(likes, 0)

    view_velocity = views / hours_live
    like_velocity = likes / hours_live

    raw = (
        view_velocity * ENGAGEMENT_VIEW_WEIGHT
        + like_velocity * ENGAGEMENT_LIKE_MULTIPLIER * ENGAGEMENT_LIKE_WEIGHT
        + engagement_rate(views, likes) * ENGAGEMENT_RATE_WEIGHT
    )
    return min(ENGAGEMENT_MAX_SCORE, math.log(raw + 1) * ENGAGEMENT_LOG_SCALE)


def diversity_score_for_percentage(percentage: float) -> float:
    """Map a domain's corpus share to the diversity sub-score.

    Dominant sources are penalized; the 5-15% range is ideal.

    Args:
        percentage: Domain share of the published corpus (0-100).

    Returns:
        Diversity score.
    """
    for threshold, inclusive, score in DIVERSITY_BANDS:
        if percentage > threshold or (inclusive and percentage == threshold):
            return score
    return DIVERSITY_FLOOR_SCORE


class ContentScorer:
    """Computes weighted content scores.

    Scoring formula:
        score = authority * w_authority + recency * w_recency
              + engagement * w_engagement + diversity * w_diversity

    Where:
        - authority: Domain reputation from the authority table (1-10)
        - recency: Piecewise exponential decay on hours since publication
        - engagement: Log-scaled view/like velocity and like rate
        - diversity: Penalty/boost from the domain's corpus share

    The scorer is pure: given the same items, reference time, and
    distribution snapshot it always returns the same scores.
    """

    def __init__(
        self,
        distribution: Mapping[str, DistributionStat] | None = None,
        now: datetime | None = None,
        config: RankingConfig | None = None,
    ) -> None:
        """Initialize the scorer.

        Args:
            distribution: Domain distribution snapshot for the diversity
                sub-score. Empty or None scores every domain as neutral.
            now: Current time for recency calculation.
            config: Weights and authority table; compiled defaults if None.
        """
        self._distribution = dict(distribution or {})
        self._now = now or datetime.now(UTC)
        self._config = config or RankingConfig.default()
        self._weights = self._config.weights
        if config is None:
            self._matcher = default_matcher()
        else:
            self._matcher = AuthorityMatcher(self._config.authority_entries())
        self._log = logger.bind(component="ranker", subcomponent="scorer")

    @property
    def now(self) -> datetime:
        """Reference time used for recency."""
        return self._now

    @property
    def config(self) -> RankingConfig:
        """Configuration in effect."""
        return self._config

    def score(self, item: ContentItem) -> float:
        """Compute the total score for a single item.

        Args:
            item: Item to score.

        Returns:
            Weighted total score.
        """
        return self.breakdown(item).total_score

    def breakdown(self, item: ContentItem) -> ScoreBreakdown:
        """Compute the score breakdown for a single item.

        Args:
            item: Item to score.

        Returns:
            ScoreBreakdown with each weighted component.
        """
        domain = extract_domain(item.source_url)
        hours_old = hours_since(item.published_at, self._now)

        return ScoreBreakdown(
            source_authority=SubScore(
                self._compute_authority_score(item, domain),
                self._weights.source_authority,
            ),
            recency=SubScore(recency_score(hours_old), self._weights.recency),
            engagement=SubScore(
                engagement_score(item.views_count, item.likes_count, hours_old),
                self._weights.engagement,
            ),
            source_diversity=SubScore(
                self._compute_diversity_score(item, domain),
                self._weights.source_diversity,
            ),
            domain=domain,
            hours_old=hours_old,
            views=item.views_count,
            likes=item.likes_count,
            engagement_rate=round(
                engagement_rate(item.views_count, item.likes_count), 2
            ),
        )

    def score_items(self, items: list[ContentItem]) -> dict[str, float]:
        """Score multiple items.

        Args:
            items: Items to score.

        Returns:
            Mapping of item id to total score.
        """
        scores = {item.id: self.score(item) for item in items}

        self._log.info(
            "scoring_complete",
            items_scored=len(scores),
            min_score=min(scores.values(), default=0.0),
            max_score=max(scores.values(), default=0.0),
        )

        return scores

    def effective_score(self, item: ContentItem) -> float:
        """Stored ranking score, or a freshly computed one when absent."""
        # A stored 0.0 is kept; only a missing score is recomputed
        if item.ranking_score is not None:
            return item.ranking_score
        return self.score(item)

    def _compute_authority_score(self, item: ContentItem, domain: str) -> float:
        """Compute the authority sub-score.

        Args:
            item: Item to score.
            domain: Normalized domain of the item's source URL.

        Returns:
            Authority score (1-10).
        """
        if not item.source_url:
            return self._matcher.default_score
        return self._matcher.score(domain)

    def _compute_diversity_score(self, item: ContentItem, domain: str) -> float:
        """Compute the diversity sub-score from the distribution snapshot.

        Args:
            item: Item to score.
            domain: Normalized domain of the item's source URL.

        Returns:
            Diversity score, neutral for unknown or unseen sources.
        """
        if not item.source_url or domain == UNKNOWN_DOMAIN:
            return DIVERSITY_NEUTRAL_SCORE

        stat = self._distribution.get(domain)
        if stat is None:
            return DIVERSITY_NEUTRAL_SCORE

        return diversity_score_for_percentage(stat.percentage)
