"""Store port consumed by the ranking engine."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from feedrank.store.models import ContentItem, SourceCount


class SortField(str, Enum):
    """Columns the ranking engine orders candidates by."""

    RANKING_SCORE = "ranking_score"
    PUBLISHED_AT = "published_at"
    VIEWS_COUNT = "views_count"


@dataclass(frozen=True)
class OrderBy:
    """One ordering clause. Null values always sort last."""

    field: SortField
    descending: bool = True


# Top-scored first, newest first among equal scores
RANKED_ORDER: tuple[OrderBy, ...] = (
    OrderBy(SortField.RANKING_SCORE),
    OrderBy(SortField.PUBLISHED_AT),
)


class ContentStore(Protocol):
    """Protocol for the external content store.

    "Published" means status published with a publication time that is
    set and not in the future.
    """

    def fetch_published(
        self,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
        published_since: datetime | None = None,
    ) -> list[ContentItem]:
        """Fetch published items.

        Args:
            order_by: Ordering clauses, applied left to right.
            limit: Maximum number of items, None for all.
            published_since: Only items published at or after this time.

        Returns:
            Ordered list of published items.
        """
        ...

    def count_published(self) -> int:
        """Count all published items."""
        ...

    def aggregate_source_counts(self) -> list[SourceCount]:
        """Count published items per raw source URL.

        Items without a source URL are excluded.
        """
        ...

    def save_ranking_scores(
        self, scores: Mapping[str, float], calculated_at: datetime
    ) -> int:
        """Write back recomputed ranking scores.

        Args:
            scores: Mapping of item id to score.
            calculated_at: When the scores were computed.

        Returns:
            Number of items updated.
        """
        ...
