"""In-memory content store."""

import threading
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime

import structlog

from feedrank.store.models import ContentItem, ContentStatus, SourceCount
from feedrank.store.protocols import OrderBy


logger = structlog.get_logger()


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def _sort_items(items: list[ContentItem], order_by: Sequence[OrderBy]) -> list[ContentItem]:
    """Sort items by the ordering clauses with nulls last.

    Args:
        items: Items to sort.
        order_by: Ordering clauses, most significant first.

    Returns:
        New sorted list.
    """
    result = list(items)
    # Stable sorts applied least-significant clause first
    for clause in reversed(order_by):
        name = clause.field.value
        present = [i for i in result if getattr(i, name) is not None]
        missing = [i for i in result if getattr(i, name) is None]
        present.sort(key=lambda i: getattr(i, name), reverse=clause.descending)
        result = present + missing
    return result


class InMemoryContentStore:
    """Content store backed by a dict of items.

    Useful for tests and for embedding the engine next to a store that
    already holds its corpus in memory. Thread-safe.
    """

    def __init__(
        self,
        items: Iterable[ContentItem] = (),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            items: Initial items.
            clock: Returns the current time, used for the published scope.
        """
        self._items: dict[str, ContentItem] = {item.id: item for item in items}
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = threading.Lock()
        self._log = logger.bind(component="store", backend="memory")

    def add(self, item: ContentItem) -> None:
        """Insert or replace an item."""
        with self._lock:
            self._items[item.id] = item

    def get(self, item_id: str) -> ContentItem | None:
        """Get an item by id, published or not."""
        with self._lock:
            return self._items.get(item_id)

    def _published(self) -> list[ContentItem]:
        now = _as_utc(self._clock())
        with self._lock:
            return [
                item
                for item in self._items.values()
                if item.status == ContentStatus.PUBLISHED
                and item.published_at is not None
                and item.published_at <= now
            ]

    def fetch_published(
        self,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
        published_since: datetime | None = None,
    ) -> list[ContentItem]:
        """Fetch published items, ordered and truncated."""
        items = self._published()
        if published_since is not None:
            since = _as_utc(published_since)
            items = [
                i
                for i in items
                if i.published_at is not None and i.published_at >= since
            ]
        items = _sort_items(items, order_by)
        if limit is not None:
            items = items[: max(limit, 0)]
        return items

    def count_published(self) -> int:
        """Count published items."""
        return len(self._published())

    def aggregate_source_counts(self) -> list[SourceCount]:
        """Count published items per non-empty source URL."""
        counts = Counter(i.source_url for i in self._published() if i.source_url)
        return [SourceCount(source_url=url, count=n) for url, n in counts.items()]

    def save_ranking_scores(
        self, scores: Mapping[str, float], calculated_at: datetime
    ) -> int:
        """Replace stored items with copies carrying the new scores."""
        updated = 0
        with self._lock:
            for item_id, score in scores.items():
                item = self._items.get(item_id)
                if item is None:
                    continue
                self._items[item_id] = item.model_copy(
                    update={
                        "ranking_score": score,
                        "ranking_calculated_at": calculated_at,
                    }
                )
                updated += 1
        self._log.debug("ranking_scores_saved", updated=updated)
        return updated
