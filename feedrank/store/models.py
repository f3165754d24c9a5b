"""Data models for content items consumed by the ranking engine."""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import Field, field_validator

from feedrank.data_model import StrictBaseModel


class Difficulty(str, Enum):
    """Difficulty tier assigned to a content item upstream.

    Declaration order is the round-robin order used by the difficulty
    diversifier.
    """

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @classmethod
    def from_value(cls, value: Any) -> "Difficulty":
        """Coerce a raw tag into a Difficulty, falling back to BEGINNER.

        Args:
            value: Raw difficulty tag (any case, may be None or garbage).

        Returns:
            Matching Difficulty, or BEGINNER when absent or invalid.
        """
        if isinstance(value, Difficulty):
            return value
        if not isinstance(value, str):
            return cls.BEGINNER
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.BEGINNER


class ContentType(str, Enum):
    """Kind of content item."""

    POST = "post"
    VIDEO = "video"
    PODCAST = "podcast"


class ContentStatus(str, Enum):
    """Publication status of a content item."""

    DRAFT = "draft"
    PUBLISHED = "published"


class ContentItem(StrictBaseModel):
    """Published content item as read from the content store.

    The ranking engine only reads these fields. The stored ranking score is
    written back through the store, never by mutating the model.
    """

    id: Annotated[str, Field(min_length=1, description="Item identifier")]
    title: str = Field(default="", description="Item title")
    content_type: ContentType = Field(default=ContentType.POST)
    status: ContentStatus = Field(default=ContentStatus.PUBLISHED)
    source_url: str | None = Field(default=None, description="Original source URL")
    published_at: datetime | None = Field(
        default=None, description="Publication timestamp (nullable)"
    )
    views_count: Annotated[int, Field(ge=0)] = 0
    likes_count: Annotated[int, Field(ge=0)] = 0
    difficulty: Difficulty = Field(default=Difficulty.BEGINNER)
    ranking_score: float | None = Field(
        default=None, description="Cached ranking score (nullable)"
    )
    ranking_calculated_at: datetime | None = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def coerce_difficulty(cls, v: Any) -> Difficulty:
        """Coerce unknown or missing difficulty tags to beginner."""
        return Difficulty.from_value(v)

    @field_validator("views_count", "likes_count", mode="before")
    @classmethod
    def coerce_counter(cls, v: Any) -> Any:
        """Treat missing counters as zero."""
        return 0 if v is None else v

    @field_validator("published_at", "ranking_calculated_at", mode="after")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Attach UTC to naive timestamps so every consumer compares aware times."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class SourceCount(StrictBaseModel):
    """Number of published items sharing one raw source URL."""

    source_url: Annotated[str, Field(min_length=1)]
    count: Annotated[int, Field(ge=0)]
