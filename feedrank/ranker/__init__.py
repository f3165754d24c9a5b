"""Content ranker: scoring, distribution cache and diversification.

This module scores published content with weighted authority, recency,
engagement and source-diversity sub-scores, then orders candidates with
two round-robin passes (source domain, difficulty tier) so no single
source or tier dominates the head of the feed.
"""

from feedrank.ranker.authority import AuthorityMatcher, authority_score
from feedrank.ranker.distribution import DistributionCache, compute_distribution
from feedrank.ranker.diversity import DifficultyDiversifier, SourceDiversifier
from feedrank.ranker.domain import extract_domain
from feedrank.ranker.metrics import RankingMetrics
from feedrank.ranker.models import (
    AuthorityEntry,
    DistributionStat,
    RankingConfig,
    ScoreBreakdown,
    ScoreWeights,
    SubScore,
)
from feedrank.ranker.scorer import ContentScorer
from feedrank.ranker.service import ContentRankingService


__all__ = [
    "AuthorityEntry",
    "AuthorityMatcher",
    "ContentRankingService",
    "ContentScorer",
    "DifficultyDiversifier",
    "DistributionCache",
    "DistributionStat",
    "RankingConfig",
    "RankingMetrics",
    "ScoreBreakdown",
    "ScoreWeights",
    "SourceDiversifier",
    "SubScore",
    "authority_score",
    "compute_distribution",
    "extract_domain",
]
