"""Durable history of every identifier the pipeline has seen."""

import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .models import HistoryRecord
from .logger import get_logger


class StorageError(Exception):
    """Raised when the history database cannot be read or written."""
    pass


_SCHEMA = """
CREATE TABLE IF NOT EXISTS history (
    identifier TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    source_name TEXT NOT NULL,
    category TEXT NOT NULL,
    gloss TEXT,
    score REAL,
    published_at TEXT,
    created_at TEXT NOT NULL,
    delivered INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_history_created ON history(created_at);
CREATE INDEX IF NOT EXISTS idx_history_delivered ON history(delivered);
"""


class HistoryStore:
    """
    SQLite-backed record of seen items and their delivered flag.

    Insertion is create-if-absent and `delivered` only ever moves from 0 to 1.
    The connection is opened explicitly (or via ``with``) and must be closed
    by the owner; nothing here is initialized lazily.
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Initialize history store.

        Args:
            db_path: Path to the SQLite database file (":memory:" for tests)
        """
        self.db_path = str(db_path)
        self.logger = get_logger()
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> 'HistoryStore':
        """Open the connection and create the schema if needed."""
        if self._conn is not None:
            return self

        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=30.0, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute('PRAGMA journal_mode=WAL;')
            conn.execute('PRAGMA synchronous=NORMAL;')
            conn.executescript(_SCHEMA)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Failed to open history database {self.db_path}: {e}")

        self._conn = conn
        self.logger.info(f"Opened history database: {self.db_path}")
        return self

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self.logger.debug(f"Closed history database: {self.db_path}")

    def __enter__(self) -> 'HistoryStore':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("History store is not open")
        return self._conn

    def has_seen(self, identifier: str) -> bool:
        """
        Check whether an identifier has a record, delivered or not.

        Raises:
            StorageError: If the lookup fails. Callers must not treat a failed
                lookup as "not seen".
        """
        try:
            row = self.connection.execute(
                "SELECT 1 FROM history WHERE identifier = ?", (identifier,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to look up {identifier}: {e}")
        return row is not None

    def record_seen(self, record: HistoryRecord) -> bool:
        """
        Insert a record unless one already exists for its identifier.

        Args:
            record: Record to persist; its `delivered` flag is stored as given

        Returns:
            True if a new row was inserted, False if the identifier existed
        """
        created_at = record.created_at or datetime.now()
        try:
            with self.connection:
                cursor = self.connection.execute(
                    """
                    INSERT OR IGNORE INTO history
                        (identifier, title, source_name, category, gloss, score,
                         published_at, created_at, delivered)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.identifier,
                        record.title,
                        record.source_name,
                        record.category,
                        record.gloss or None,
                        record.score,
                        record.published_at.isoformat() if record.published_at else None,
                        created_at.isoformat(),
                        1 if record.delivered else 0,
                    ),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to record {record.identifier}: {e}")
        return cursor.rowcount > 0

    def mark_delivered(self, identifiers: Iterable[str]) -> int:
        """
        Set delivered=1 for each known identifier.

        Unknown identifiers are ignored (a pruning job may have removed them).

        Returns:
            Number of records that changed from undelivered to delivered
        """
        identifiers = list(identifiers)
        if not identifiers:
            return 0

        try:
            with self.connection:
                cursor = self.connection.executemany(
                    "UPDATE history SET delivered = 1 WHERE identifier = ? AND delivered = 0",
                    [(identifier,) for identifier in identifiers],
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to mark {len(identifiers)} items delivered: {e}")

        changed = max(cursor.rowcount, 0)
        self.logger.debug(f"Marked {changed}/{len(identifiers)} items delivered")
        return changed

    def recent_records(self, window_hours: float = 24, now: Optional[datetime] = None) -> List[HistoryRecord]:
        """
        Records created within the trailing window, newest first.

        Args:
            window_hours: Size of the window in hours
            now: Reference time (defaults to the current time)
        """
        cutoff = (now or datetime.now()) - timedelta(hours=window_hours)
        return self._select(
            "SELECT * FROM history WHERE created_at > ? ORDER BY created_at DESC, rowid DESC",
            (cutoff.isoformat(),),
        )

    def undelivered_records(self, limit: int = 100) -> List[HistoryRecord]:
        """Records never confirmed delivered, newest first."""
        return self._select(
            "SELECT * FROM history WHERE delivered = 0 ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (limit,),
        )

    def get_record(self, identifier: str) -> Optional[HistoryRecord]:
        """Fetch the record for an identifier, or None."""
        records = self._select("SELECT * FROM history WHERE identifier = ?", (identifier,))
        return records[0] if records else None

    def count(self) -> int:
        """Total number of records."""
        try:
            row = self.connection.execute("SELECT COUNT(*) FROM history").fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to count history records: {e}")
        return row[0]

    def _select(self, sql: str, params: tuple) -> List[HistoryRecord]:
        try:
            rows = self.connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"History query failed: {e}")
        return [self._row_to_record(row) for row in rows]

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> HistoryRecord:
        return HistoryRecord.from_dict({
            'identifier': row['identifier'],
            'title': row['title'],
            'source_name': row['source_name'],
            'category': row['category'],
            'gloss': row['gloss'],
            'score': row['score'],
            'published_at': row['published_at'],
            'created_at': row['created_at'],
            'delivered': row['delivered'],
        })
