"""Constants for the ranker module.

Weights and the authority table are part of the algorithm version:
changing either changes ranking semantics and requires bumping
ALGORITHM_VERSION.
"""

from typing import Final


ALGORITHM_VERSION: Final[str] = "1.0.0"

# Sub-score weights, summing to 1.0
WEIGHT_AUTHORITY: Final[float] = 0.35
WEIGHT_RECENCY: Final[float] = 0.30
WEIGHT_ENGAGEMENT: Final[float] = 0.25
WEIGHT_DIVERSITY: Final[float] = 0.10

# Reserved authority key applied when no rule matches
DEFAULT_AUTHORITY_KEY: Final[str] = "default"
DEFAULT_AUTHORITY_SCORE: Final[float] = 3.0

# Domain reputation on a 1-10 scale. Order matters for wildcard patterns:
# the first matching pattern wins.
SOURCE_AUTHORITY: Final[tuple[tuple[str, float], ...]] = (
    # Official Laravel sources
    ("laravel.com", 10.0),
    ("blog.laravel.com", 10.0),
    # High authority community sites
    ("laracasts.com", 9.0),
    ("laravel-news.com", 9.0),
    ("codecourse.com", 9.0),
    ("laraveldaily.com", 9.0),
    # Well-known developers
    ("freek.dev", 8.0),
    ("mattstauffer.com", 8.0),
    ("stitcher.io", 8.0),
    ("christoph-rumpel.com", 8.0),
    ("dyrynda.com.au", 8.0),
    # Popular community blogs
    ("tighten.co", 7.0),
    ("spatie.be", 7.0),
    ("beyondco.de", 7.0),
    ("nunomaduro.com", 7.0),
    # General developer publishing platforms
    ("dev.to", 6.0),
    ("medium.com", 6.0),
    ("hackernoon.com", 6.0),
    # Generic blog subdomains and .dev domains
    ("blog.*", 5.0),
    ("*.dev", 5.0),
    (DEFAULT_AUTHORITY_KEY, DEFAULT_AUTHORITY_SCORE),
)

UNKNOWN_DOMAIN: Final[str] = "unknown"

# Recency decay, in hours
RECENCY_MAX_SCORE: Final[float] = 10.0
RECENCY_FRESH_HOURS: Final[float] = 24.0
RECENCY_WEEK_HOURS: Final[float] = 168.0
RECENCY_WEEK_DECAY_HOURS: Final[float] = 168.0
RECENCY_STALE_SCORE: Final[float] = 3.0
RECENCY_STALE_DECAY_HOURS: Final[float] = 24.0 * 30

# Engagement blend
ENGAGEMENT_VIEW_WEIGHT: Final[float] = 0.4
ENGAGEMENT_LIKE_WEIGHT: Final[float] = 0.4
ENGAGEMENT_LIKE_MULTIPLIER: Final[float] = 10.0
ENGAGEMENT_RATE_WEIGHT: Final[float] = 0.2
ENGAGEMENT_LOG_SCALE: Final[float] = 2.0
ENGAGEMENT_MAX_SCORE: Final[float] = 10.0

# Diversity sub-score bands: (threshold percentage, inclusive, score),
# checked top to bottom. Below the last band scores DIVERSITY_FLOOR_SCORE.
DIVERSITY_BANDS: Final[tuple[tuple[float, bool, float], ...]] = (
    (60.0, True, 1.0),
    (40.0, False, 2.5),
    (25.0, True, 4.0),
    (15.0, False, 5.5),
    (5.0, True, 7.0),
    (2.0, True, 6.5),
)
DIVERSITY_FLOOR_SCORE: Final[float] = 5.5
DIVERSITY_NEUTRAL_SCORE: Final[float] = 5.0

# Source diversity round-robin
STRICT_FAIRNESS_ROUNDS: Final[int] = 3
RELAXED_ROUND_CAP: Final[int] = 2
MAX_DIVERSITY_ROUNDS: Final[int] = 10

# Feed pipeline multipliers
CANDIDATE_POOL_MULTIPLIER: Final[int] = 3
SOURCE_STAGE_MULTIPLIER: Final[int] = 2

# Cache keys
DISTRIBUTION_CACHE_KEY: Final[str] = "ranking:source_distribution:v1"
TRENDING_CACHE_KEY: Final[str] = "ranking:trending:{limit}:{window_hours}"
HERO_CACHE_KEY: Final[str] = "ranking:hero:{limit}:{window_days}"
