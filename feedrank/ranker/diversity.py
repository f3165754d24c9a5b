"""Round-robin diversification by source domain and difficulty tier.

Both passes group candidates into index-cursor queues over immutable
slices of the input, so the candidate list is never consumed.
"""

import math
from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

from feedrank.ranker.constants import (
    MAX_DIVERSITY_ROUNDS,
    RELAXED_ROUND_CAP,
    STRICT_FAIRNESS_ROUNDS,
)
from feedrank.ranker.domain import extract_domain
from feedrank.ranker.metrics import RankingMetrics
from feedrank.store.models import ContentItem, Difficulty


logger = structlog.get_logger()

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


@dataclass
class GroupQueue(Generic[T]):
    """FIFO view over one group's items.

    Attributes:
        items: Group items in input order (not mutated).
        cursor: Index of the next item to hand out.
    """

    items: Sequence[T]
    cursor: int = 0

    @property
    def exhausted(self) -> bool:
        """Whether every item has been handed out."""
        return self.cursor >= len(self.items)

    def pop(self) -> T:
        """Hand out the head item and advance."""
        item = self.items[self.cursor]
        self.cursor += 1
        return item

    def remaining(self) -> Sequence[T]:
        """Items not yet handed out."""
        return self.items[self.cursor :]


def group_into_queues(
    items: Sequence[T], key: Callable[[T], K]
) -> dict[K, GroupQueue[T]]:
    """Group items by key, preserving first-seen group order and intra-group order.

    Args:
        items: Items to group.
        key: Group key function.

    Returns:
        Ordered mapping of group key to queue.
    """
    groups: dict[K, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return {k: GroupQueue(tuple(v)) for k, v in groups.items()}


def item_domain(item: ContentItem) -> str:
    """Domain grouping key of a content item."""
    return extract_domain(item.source_url)


def item_difficulty(item: ContentItem) -> Difficulty:
    """Difficulty grouping key of a content item."""
    return Difficulty.from_value(item.difficulty)


class SourceDiversifier:
    """Fair-allocation round-robin across source domains.

    In each pass every domain with remaining items may contribute one item
    while its usage is below ``(round + 1) * cap``. The cap is 1 for the
    first STRICT_FAIRNESS_ROUNDS rounds and then
    ``min(max_rounds_per_source, RELAXED_ROUND_CAP)``. A pass that admits
    nothing advances the round; past MAX_DIVERSITY_ROUNDS rounds the
    remaining items are flushed in domain order to fill the limit.
    """

    def __init__(
        self,
        key: Callable[[Any], Hashable] = item_domain,
        metrics: RankingMetrics | None = None,
    ) -> None:
        """Initialize the diversifier.

        Args:
            key: Domain key function.
            metrics: Optional metrics instance.
        """
        self._key = key
        self._metrics = metrics or RankingMetrics.get_instance()
        self._log = logger.bind(component="ranker", subcomponent="source_diversity")

    def diversify(self, candidates: Sequence[T], limit: int) -> list[T]:
        """Select up to limit candidates with bounded per-domain dominance.

        Args:
            candidates: Candidates in score order.
            limit: Maximum number of items to return.

        Returns:
            Reordered selection of at most limit items.
        """
        if limit <= 0 or not candidates:
            return []

        queues = group_into_queues(candidates, self._key)
        usage: dict[Hashable, int] = dict.fromkeys(queues, 0)
        max_rounds_per_source = math.ceil(limit / len(queues))

        result: list[T] = []
        round_number = 0
        flushed = False

        while len(result) < limit and queues:
            cap = (
                1
                if round_number < STRICT_FAIRNESS_ROUNDS
                else min(max_rounds_per_source, RELAXED_ROUND_CAP)
            )
            admitted = False

            for domain, queue in list(queues.items()):
                if len(result) >= limit:
                    break
                if usage[domain] < (round_number + 1) * cap:
                    result.append(queue.pop())
                    usage[domain] += 1
                    admitted = True
                    if queue.exhausted:
                        del queues[domain]

            if admitted:
                continue

            round_number += 1
            if round_number > MAX_DIVERSITY_ROUNDS:
                self._flush(queues, result, limit)
                flushed = True
                break

        if flushed:
            self._metrics.record_diversity_flush()

        self._log.debug(
            "source_diversity_complete",
            candidates=len(candidates),
            domains=len(usage),
            selected=len(result),
            rounds=round_number,
            flushed=flushed,
        )
        return result

    @staticmethod
    def _flush(
        queues: dict[Hashable, GroupQueue[T]], result: list[T], limit: int
    ) -> None:
        """Append remaining items in domain then queue order up to limit."""
        for queue in queues.values():
            for item in queue.remaining():
                if len(result) >= limit:
                    return
                result.append(item)


class DifficultyDiversifier:
    """Fixed-order round-robin over beginner, intermediate, advanced.

    Each full pass takes the head of every non-empty tier, so the tiers
    interleave without any fairness window. Missing tiers are skipped.
    """

    def __init__(
        self,
        key: Callable[[Any], Difficulty] = item_difficulty,
        order: Sequence[Difficulty] = tuple(Difficulty),
    ) -> None:
        """Initialize the diversifier.

        Args:
            key: Difficulty key function.
            order: Tier order of each pass.
        """
        self._key = key
        self._order = tuple(order)
        self._log = logger.bind(
            component="ranker", subcomponent="difficulty_diversity"
        )

    def diversify(self, candidates: Sequence[T], limit: int) -> list[T]:
        """Interleave candidates by difficulty tier.

        Args:
            candidates: Candidates, typically already source-diversified.
            limit: Maximum number of items to return.

        Returns:
            Interleaved selection of at most limit items.
        """
        if limit <= 0 or not candidates:
            return []

        grouped = group_into_queues(candidates, self._key)
        queues = [grouped[tier] for tier in self._order if tier in grouped]

        result: list[T] = []
        while len(result) < limit and queues:
            for queue in queues:
                if len(result) >= limit:
                    break
                result.append(queue.pop())
            queues = [q for q in queues if not q.exhausted]

        self._log.debug(
            "difficulty_diversity_complete",
            candidates=len(candidates),
            tiers=len(grouped),
            selected=len(result),
        )
        return result
