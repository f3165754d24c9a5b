"""Unit tests for the SQLite content store."""

from datetime import timedelta
from pathlib import Path

import pytest

from feedrank.store.errors import StoreConnectionError
from feedrank.store.models import ContentStatus, ContentType, Difficulty
from feedrank.store.protocols import RANKED_ORDER
from feedrank.store.sqlite import SQLiteContentStore
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_NOW


@pytest.fixture
def store(tmp_path: Path):
    """Connected store backed by a temporary database file."""
    with SQLiteContentStore(tmp_path / "content.db", clock=lambda: FIXED_NOW) as s:
        yield s


class TestSQLiteContentStore:
    """Tests for SQLiteContentStore."""

    def test_not_connected(self, tmp_path: Path) -> None:
        """Queries before connect raise StoreConnectionError."""
        store = SQLiteContentStore(tmp_path / "content.db")
        with pytest.raises(StoreConnectionError):
            store.count_published()

    def test_item_persisted(self, store: SQLiteContentStore) -> None:
        """Stored items read back with their fields intact."""
        item = make_item(
            item_id="video-1",
            source_url="https://laracasts.com/series/x",
            views=12,
            likes=3,
            difficulty="advanced",
            ranking_score=7.25,
        ).model_copy(update={"content_type": ContentType.VIDEO})
        store.upsert_items([item])

        [loaded] = store.fetch_published()
        assert loaded.model_dump() == item.model_dump()
        assert loaded.difficulty == Difficulty.ADVANCED

    def test_published_scope(self, store: SQLiteContentStore) -> None:
        """Drafts, future and undated items are excluded."""
        store.upsert_items(
            [
                make_item(item_id="live"),
                make_item(item_id="draft", status=ContentStatus.DRAFT),
                make_item(item_id="future", hours_old=-1.0),
                make_item(item_id="undated", hours_old=None),
            ]
        )

        assert [i.id for i in store.fetch_published()] == ["live"]
        assert store.count_published() == 1

    def test_ranked_order_and_limit(self, store: SQLiteContentStore) -> None:
        """Scores descend with nulls last and ties broken by recency."""
        store.upsert_items(
            [
                make_item(item_id="unscored", hours_old=1.0),
                make_item(item_id="low", ranking_score=2.0),
                make_item(item_id="high-old", ranking_score=8.0, hours_old=10.0),
                make_item(item_id="high-new", ranking_score=8.0, hours_old=2.0),
            ]
        )

        ids = [i.id for i in store.fetch_published(order_by=RANKED_ORDER)]
        assert ids == ["high-new", "high-old", "low", "unscored"]

        top = store.fetch_published(order_by=RANKED_ORDER, limit=2)
        assert [i.id for i in top] == ["high-new", "high-old"]

    def test_published_since(self, store: SQLiteContentStore) -> None:
        """Only items inside the window are returned."""
        store.upsert_items(
            [make_item(item_id="new", hours_old=3.0), make_item(item_id="old", hours_old=30.0)]
        )

        items = store.fetch_published(published_since=FIXED_NOW - timedelta(hours=24))
        assert [i.id for i in items] == ["new"]

    def test_aggregate_source_counts(self, store: SQLiteContentStore) -> None:
        """Counts group by raw URL, excluding empty URLs."""
        store.upsert_items(
            [
                make_item(item_id="1", source_url="https://a.com/x"),
                make_item(item_id="2", source_url="https://a.com/x"),
                make_item(item_id="3", source_url=None),
                make_item(item_id="4", source_url=""),
                make_item(item_id="5", source_url="https://b.com/y", status=ContentStatus.DRAFT),
            ]
        )

        counts = {c.source_url: c.count for c in store.aggregate_source_counts()}
        assert counts == {"https://a.com/x": 2}

    def test_save_ranking_scores(self, store: SQLiteContentStore) -> None:
        """Scores are written back in one transaction."""
        store.upsert_items([make_item(item_id="1"), make_item(item_id="2")])

        updated = store.save_ranking_scores({"1": 4.5, "2": 6.0, "missing": 1.0}, FIXED_NOW)

        assert updated == 2
        scores = {i.id: i.ranking_score for i in store.fetch_published()}
        assert scores == {"1": 4.5, "2": 6.0}
        assert store.fetch_published()[0].ranking_calculated_at == FIXED_NOW

    def test_reconnect_keeps_data(self, tmp_path: Path) -> None:
        """Data survives closing and reopening the database."""
        path = tmp_path / "content.db"
        with SQLiteContentStore(path, clock=lambda: FIXED_NOW) as first:
            first.upsert_items([make_item(item_id="1")])

        with SQLiteContentStore(path, clock=lambda: FIXED_NOW) as second:
            assert second.count_published() == 1

    def test_in_memory_database(self) -> None:
        """The :memory: path works for throwaway stores."""
        with SQLiteContentStore(":memory:", clock=lambda: FIXED_NOW) as store:
            store.upsert_items([make_item(item_id="1")])
            assert store.count_published() == 1
