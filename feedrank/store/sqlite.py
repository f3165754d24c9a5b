"""SQLite content store implementation."""

import sqlite3
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path

import structlog

from feedrank.store.errors import StoreConnectionError
from feedrank.store.models import ContentItem, ContentStatus, SourceCount
from feedrank.store.protocols import OrderBy


logger = structlog.get_logger()

SCHEMA_VERSION = 1

_SCHEMA = """
CREATE TABLE IF NOT EXISTS content_items (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    content_type TEXT NOT NULL DEFAULT 'post',
    status TEXT NOT NULL DEFAULT 'published',
    source_url TEXT,
    published_at TEXT,
    views_count INTEGER NOT NULL DEFAULT 0,
    likes_count INTEGER NOT NULL DEFAULT 0,
    difficulty TEXT,
    ranking_score REAL,
    ranking_calculated_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_content_items_published
    ON content_items (status, published_at);
CREATE INDEX IF NOT EXISTS idx_content_items_ranking
    ON content_items (ranking_score DESC, published_at DESC);
"""

_COLUMNS = (
    "id",
    "title",
    "content_type",
    "status",
    "source_url",
    "published_at",
    "views_count",
    "likes_count",
    "difficulty",
    "ranking_score",
    "ranking_calculated_at",
)


def _to_db_time(value: datetime | None) -> str | None:
    """Serialize a timestamp as fixed-width UTC ISO text.

    Fixed width keeps lexical and chronological order identical.
    Naive timestamps are taken to be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def _from_db_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _order_clause(order_by: Sequence[OrderBy]) -> str:
    if not order_by:
        return ""
    parts: list[str] = []
    for clause in order_by:
        column = clause.field.value
        direction = "DESC" if clause.descending else "ASC"
        parts.append(f"{column} IS NULL, {column} {direction}")
    return " ORDER BY " + ", ".join(parts)


class SQLiteContentStore:
    """SQLite-backed content store.

    Uses WAL mode and creates its schema on connect. One connection is
    shared across threads and serialized with a lock.
    """

    def __init__(
        self,
        db_path: Path | str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
            clock: Returns the current time, used for the published scope.
        """
        self._db_path = str(db_path)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._log = logger.bind(
            component="store",
            backend="sqlite",
            db_path=self._db_path,
        )

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the connection and create the schema if needed."""
        if self._conn is not None:
            return

        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._log.info("connecting_to_database")
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")

        version = self._conn.execute("PRAGMA user_version").fetchone()[0]
        if version < SCHEMA_VERSION:
            self._conn.executescript(_SCHEMA)
            self._conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
            self._conn.commit()

        self._log.info(
            "database_connected",
            old_version=version,
            new_version=SCHEMA_VERSION,
        )

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.info("database_closed")

    def __enter__(self) -> "SQLiteContentStore":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        """Return the open connection.

        Raises:
            StoreConnectionError: If not connected.
        """
        if self._conn is None:
            raise StoreConnectionError("Database not connected. Call connect() first.")
        return self._conn

    def upsert_items(self, items: Iterable[ContentItem]) -> int:
        """Insert or replace content items.

        Args:
            items: Items to store.

        Returns:
            Number of rows written.
        """
        rows = [
            (
                item.id,
                item.title,
                item.content_type.value,
                item.status.value,
                item.source_url,
                _to_db_time(item.published_at),
                item.views_count,
                item.likes_count,
                item.difficulty.value,
                item.ranking_score,
                _to_db_time(item.ranking_calculated_at),
            )
            for item in items
        ]
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._lock:
            conn = self._ensure_connected()
            with conn:
                conn.executemany(
                    f"INSERT OR REPLACE INTO content_items ({', '.join(_COLUMNS)}) "
                    f"VALUES ({placeholders})",
                    rows,
                )
        self._log.info("items_upserted", count=len(rows))
        return len(rows)

    def _published_where(self) -> tuple[str, list[object]]:
        return (
            "status = ? AND published_at IS NOT NULL AND published_at <= ?",
            [ContentStatus.PUBLISHED.value, _to_db_time(self._clock())],
        )

    def fetch_published(
        self,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
        published_since: datetime | None = None,
    ) -> list[ContentItem]:
        """Fetch published items, ordered and truncated."""
        where, params = self._published_where()
        if published_since is not None:
            where += " AND published_at >= ?"
            params.append(_to_db_time(published_since))

        sql = f"SELECT * FROM content_items WHERE {where}{_order_clause(order_by)}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(max(limit, 0))

        with self._lock:
            rows = self._ensure_connected().execute(sql, params).fetchall()
        return [self._row_to_item(row) for row in rows]

    def count_published(self) -> int:
        """Count published items."""
        where, params = self._published_where()
        with self._lock:
            row = (
                self._ensure_connected()
                .execute(f"SELECT COUNT(*) FROM content_items WHERE {where}", params)
                .fetchone()
            )
        return int(row[0])

    def aggregate_source_counts(self) -> list[SourceCount]:
        """Count published items per non-empty source URL."""
        where, params = self._published_where()
        sql = (
            "SELECT source_url, COUNT(*) AS count FROM content_items "
            f"WHERE {where} AND source_url IS NOT NULL AND source_url != '' "
            "GROUP BY source_url"
        )
        with self._lock:
            rows = self._ensure_connected().execute(sql, params).fetchall()
        return [
            SourceCount(source_url=row["source_url"], count=row["count"])
            for row in rows
        ]

    def save_ranking_scores(
        self, scores: Mapping[str, float], calculated_at: datetime
    ) -> int:
        """Write back ranking scores in a single transaction."""
        stamp = _to_db_time(calculated_at)
        with self._lock:
            conn = self._ensure_connected()
            with conn:
                cursor = conn.executemany(
                    "UPDATE content_items SET ranking_score = ?, "
                    "ranking_calculated_at = ? WHERE id = ?",
                    [(score, stamp, item_id) for item_id, score in scores.items()],
                )
        updated = cursor.rowcount
        self._log.info("ranking_scores_saved", updated=updated)
        return updated

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> ContentItem:
        return ContentItem(
            id=row["id"],
            title=row["title"],
            content_type=row["content_type"],
            status=row["status"],
            source_url=row["source_url"],
            published_at=_from_db_time(row["published_at"]),
            views_count=row["views_count"],
            likes_count=row["likes_count"],
            difficulty=row["difficulty"],
            ranking_score=row["ranking_score"],
            ranking_calculated_at=_from_db_time(row["ranking_calculated_at"]),
        )
