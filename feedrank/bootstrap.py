"""Wiring of settings, logging, store and configuration into a service."""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from feedrank.config.loader import load_ranking_config
from feedrank.observability.logging import configure_logging
from feedrank.ranker.service import ContentRankingService
from feedrank.settings import RankingSettings, get_settings
from feedrank.store.memory import InMemoryContentStore
from feedrank.store.protocols import ContentStore
from feedrank.store.sqlite import SQLiteContentStore


logger = structlog.get_logger()


@contextmanager
def ranking_service(
    settings: RankingSettings | None = None,
    store: ContentStore | None = None,
) -> Iterator[ContentRankingService]:
    """Build a ranking service from settings.

    Configures logging, opens the SQLite store at ``database_path`` unless
    a store is given (an empty in-memory store when neither is set), and
    loads ``ranking_config_path`` when set. A SQLite store opened here is
    closed on exit.

    Args:
        settings: Settings to use, read from the environment if None.
        store: Store to rank from, overriding ``database_path``.

    Yields:
        Ready-to-use ContentRankingService.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    log = logger.bind(component="bootstrap")

    config = (
        load_ranking_config(settings.ranking_config_path)
        if settings.ranking_config_path
        else None
    )

    owned: SQLiteContentStore | None = None
    if store is None:
        if settings.database_path:
            owned = SQLiteContentStore(settings.database_path)
            owned.connect()
            store = owned
        else:
            store = InMemoryContentStore()

    log.info(
        "ranking_service_ready",
        store=type(store).__name__,
        config_version=config.version if config else None,
    )
    try:
        yield ContentRankingService(store=store, settings=settings, config=config)
    finally:
        if owned is not None:
            owned.close()
