"""Data models for the content ranker."""

import math
from dataclasses import dataclass
from typing import Annotated

from pydantic import Field, field_validator, model_validator

from feedrank.data_model import StrictBaseModel
from feedrank.ranker.constants import (
    ALGORITHM_VERSION,
    DEFAULT_AUTHORITY_KEY,
    SOURCE_AUTHORITY,
    WEIGHT_AUTHORITY,
    WEIGHT_DIVERSITY,
    WEIGHT_ENGAGEMENT,
    WEIGHT_RECENCY,
)


@dataclass(frozen=True)
class DistributionStat:
    """Share of the published corpus coming from one domain.

    Attributes:
        count: Published items from the domain.
        percentage: count / total published * 100.
    """

    count: int
    percentage: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {"count": self.count, "percentage": self.percentage}


@dataclass(frozen=True)
class SubScore:
    """One weighted component of a content score.

    Attributes:
        score: Raw sub-score on a 0-10 scale.
        weight: Configured weight.
    """

    score: float
    weight: float

    @property
    def weighted_score(self) -> float:
        """Contribution of this component to the total."""
        return self.score * self.weight

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {
            "score": self.score,
            "weight": self.weight,
            "weighted_score": self.weighted_score,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """Breakdown of an item's score for debugging and analytics.

    Never used for control flow.

    Attributes:
        source_authority: Authority component.
        recency: Recency component.
        engagement: Engagement component.
        source_diversity: Diversity component.
        domain: Domain key the item was scored under.
        hours_old: Hours since publication, None when unpublished.
        views: View count.
        likes: Like count.
        engagement_rate: Likes per hundred views, rounded to 2 decimals.
    """

    source_authority: SubScore
    recency: SubScore
    engagement: SubScore
    source_diversity: SubScore
    domain: str
    hours_old: float | None
    views: int
    likes: int
    engagement_rate: float

    @property
    def total_score(self) -> float:
        """Sum of weighted components."""
        return (
            self.source_authority.weighted_score
            + self.recency.weighted_score
            + self.engagement.weighted_score
            + self.source_diversity.weighted_score
        )

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization.

        Returns:
            Nested dictionary keyed by component name.
        """
        return {
            "source_authority": {
                **self.source_authority.to_dict(),
                "domain": self.domain,
            },
            "recency": {**self.recency.to_dict(), "hours_old": self.hours_old},
            "engagement": {
                **self.engagement.to_dict(),
                "views": self.views,
                "likes": self.likes,
                "engagement_rate": self.engagement_rate,
            },
            "source_diversity": {
                **self.source_diversity.to_dict(),
                "domain": self.domain,
            },
            "total_score": self.total_score,
        }


class ScoreWeights(StrictBaseModel):
    """Sub-score weights. Must sum to 1.0.

    Attributes:
        source_authority: Weight of the authority sub-score.
        recency: Weight of the recency sub-score.
        engagement: Weight of the engagement sub-score.
        source_diversity: Weight of the diversity sub-score.
    """

    source_authority: Annotated[float, Field(ge=0.0, le=1.0)] = WEIGHT_AUTHORITY
    recency: Annotated[float, Field(ge=0.0, le=1.0)] = WEIGHT_RECENCY
    engagement: Annotated[float, Field(ge=0.0, le=1.0)] = WEIGHT_ENGAGEMENT
    source_diversity: Annotated[float, Field(ge=0.0, le=1.0)] = WEIGHT_DIVERSITY

    @model_validator(mode="after")
    def validate_sum(self) -> "ScoreWeights":
        """Ensure the weights sum to 1.0."""
        total = (
            self.source_authority
            + self.recency
            + self.engagement
            + self.source_diversity
        )
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            msg = f"Weights must sum to 1.0, got {total:.6f}"
            raise ValueError(msg)
        return self


class AuthorityEntry(StrictBaseModel):
    """Authority table entry.

    Attributes:
        pattern: Exact domain, ``*`` wildcard pattern, or ``default``.
        score: Authority score (1-10).
    """

    pattern: Annotated[str, Field(min_length=1, max_length=253)]
    score: Annotated[float, Field(ge=1.0, le=10.0)]

    @field_validator("pattern")
    @classmethod
    def normalize_pattern(cls, v: str) -> str:
        """Lowercase and trim so patterns compare like domain keys."""
        pattern = v.strip().lower()
        if not pattern:
            msg = "Pattern must be a non-empty string"
            raise ValueError(msg)
        return pattern


class RankingConfig(StrictBaseModel):
    """Versioned ranking configuration.

    Attributes:
        version: Algorithm version (semantic version string).
        weights: Sub-score weights.
        authority: Ordered authority table; wildcard order is significant.
    """

    version: Annotated[str, Field(pattern=r"^\d+\.\d+\.\d+$")] = ALGORITHM_VERSION
    weights: ScoreWeights = Field(default_factory=ScoreWeights)
    authority: list[AuthorityEntry] = Field(
        default_factory=lambda: [
            AuthorityEntry(pattern=p, score=s) for p, s in SOURCE_AUTHORITY
        ]
    )

    @model_validator(mode="after")
    def validate_authority_table(self) -> "RankingConfig":
        """Require a default entry and unique patterns."""
        patterns = [entry.pattern for entry in self.authority]
        if DEFAULT_AUTHORITY_KEY not in patterns:
            msg = f"Authority table must contain a '{DEFAULT_AUTHORITY_KEY}' entry"
            raise ValueError(msg)
        duplicates = sorted({p for p in patterns if patterns.count(p) > 1})
        if duplicates:
            msg = f"Duplicate authority patterns: {', '.join(duplicates)}"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def validate_versioned_weights(self) -> "RankingConfig":
        """Changed weights change ranking semantics and need a new version."""
        if self.version == ALGORITHM_VERSION and self.weights != ScoreWeights():
            msg = (
                f"Weights differ from algorithm {ALGORITHM_VERSION}; "
                "set a new version"
            )
            raise ValueError(msg)
        return self

    @classmethod
    def default(cls) -> "RankingConfig":
        """Configuration mirroring the compiled-in constants."""
        return cls()

    def authority_entries(self) -> list[tuple[str, float]]:
        """Authority table as ordered (pattern, score) pairs."""
        return [(entry.pattern, entry.score) for entry in self.authority]

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for diagnostics.

        Returns:
            Dictionary with weights, source_authorities and version.
        """
        return {
            "weights": self.weights.model_dump(),
            "source_authorities": dict(self.authority_entries()),
            "version": self.version,
        }
