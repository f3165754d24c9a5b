"""Content feed ranking and diversification engine.

Scores published content items with a weighted multi-factor formula and
orders them through source and difficulty round-robin passes.
"""

from feedrank.ranker import ContentRankingService, ContentScorer, ScoreBreakdown
from feedrank.store.models import ContentItem, Difficulty


__all__ = [
    "ContentItem",
    "ContentRankingService",
    "ContentScorer",
    "Difficulty",
    "ScoreBreakdown",
]
