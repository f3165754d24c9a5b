"""Unit tests for service bootstrap."""

from pathlib import Path

import structlog

from feedrank.bootstrap import ranking_service
from feedrank.settings import RankingSettings
from feedrank.store.memory import InMemoryContentStore
from feedrank.store.sqlite import SQLiteContentStore
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_NOW


class TestRankingService:
    """Tests for the ranking_service context manager."""

    def teardown_method(self) -> None:
        structlog.reset_defaults()

    def test_defaults_to_empty_memory_store(self) -> None:
        """Without a database the service ranks an empty corpus."""
        settings = RankingSettings(log_json=False)

        with ranking_service(settings) as service:
            assert service.ranked_feed(5) == []

    def test_sqlite_and_config(self, tmp_path: Path) -> None:
        """database_path and ranking_config_path are honored."""
        db_path = tmp_path / "content.db"
        with SQLiteContentStore(db_path) as seed:
            seed.upsert_items([make_item(item_id="1", published_at=FIXED_NOW)])

        config_path = tmp_path / "ranking.yaml"
        config_path.write_text('version: "1.2.0"\n', encoding="utf-8")

        settings = RankingSettings(
            database_path=str(db_path),
            ranking_config_path=str(config_path),
        )
        with ranking_service(settings) as service:
            assert service.configuration()["version"] == "1.2.0"
            assert [i.id for i in service.ranked_feed(5)] == ["1"]

    def test_explicit_store_wins(self) -> None:
        """A given store is used instead of database_path."""
        store = InMemoryContentStore([make_item(item_id="x", published_at=FIXED_NOW)])
        settings = RankingSettings(database_path="/nonexistent/dir/content.db")

        with ranking_service(settings, store=store) as service:
            assert [i.id for i in service.ranked_feed(5)] == ["x"]

    def test_logging_configured(self, monkeypatch) -> None:
        """Logging is configured from settings."""
        calls: list[dict[str, object]] = []
        monkeypatch.setattr(
            "feedrank.bootstrap.configure_logging",
            lambda **kwargs: calls.append(kwargs),
        )

        with ranking_service(RankingSettings(log_level="DEBUG", log_json=False)):
            pass

        assert calls == [{"level": "DEBUG", "json_format": False}]
