"""SQLite log store — messages table plus per-message metadata rows."""

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from logvault.config import Config, load_config, load_yaml_config
from logvault.models import LogRecord, MetadataEntry
from logvault.writer import DurableWriter

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(Config.db_path)

_default_store = None
_default_lock = threading.Lock()


class LogStore:
    """
    Durable store for log records.

    Every handler bound to a store shares its single background writer, so
    records reach the database in the order they were enqueued.
    """

    def __init__(self, db_path: Path | str | None = None, queue_size: int = 10000):
        self.db_path = Path(db_path) if db_path is not None else DEFAULT_DB_PATH
        self._queue_size = queue_size
        self._writer: DurableWriter | None = None
        self._writer_lock = threading.Lock()

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @classmethod
    def default(cls) -> "LogStore":
        """Process-wide store, created on first use from LOGVAULT_* settings."""
        global _default_store
        with _default_lock:
            if _default_store is None:
                config = load_config(load_yaml_config(os.environ.get("LOGVAULT_CONFIG")))
                _default_store = cls(config.db_path, queue_size=config.queue_size)
            return _default_store

    def _init_db(self) -> None:
        with self._get_connection() as conn:
            # WAL lets readers inspect the database while the writer appends
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    created_at TEXT NOT NULL,
                    level INTEGER NOT NULL,
                    label TEXT NOT NULL,
                    session TEXT NOT NULL,
                    text TEXT NOT NULL,
                    file TEXT,
                    function TEXT,
                    line INTEGER
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS metadata (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    message_id INTEGER NOT NULL
                        REFERENCES messages(id) ON DELETE CASCADE,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    UNIQUE (message_id, key)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_messages_session
                ON messages(session)
            """)
            conn.commit()

        logger.info("Log store initialized: %s", self.db_path)

    @contextmanager
    def _get_connection(self):
        # timeout=10.0: wait out a reader holding the lock instead of failing at once
        conn = sqlite3.connect(str(self.db_path), timeout=10.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    @property
    def writer(self) -> DurableWriter:
        """The store's one background writer, started on first access."""
        with self._writer_lock:
            if self._writer is None:
                self._writer = DurableWriter(self, queue_size=self._queue_size)
            return self._writer

    def save(self, record: LogRecord) -> int:
        """Insert a record and its metadata in one transaction. Returns the row id."""
        with self._get_connection() as conn:
            try:
                cursor = conn.execute("""
                    INSERT INTO messages (
                        created_at, level, label, session, text, file, function, line
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    record.created_at.isoformat(),
                    record.level,
                    record.label,
                    record.session,
                    record.text,
                    record.file,
                    record.function,
                    record.line,
                ))
                message_id = cursor.lastrowid
                if record.metadata:
                    conn.executemany(
                        "INSERT INTO metadata (message_id, key, value) VALUES (?, ?, ?)",
                        [(message_id, e.key, e.value) for e in record.metadata],
                    )
                conn.commit()
            except BaseException:
                conn.rollback()
                raise
            return message_id

    def fetch_messages(self) -> list[LogRecord]:
        """Return every stored record, oldest first, with its metadata."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM messages ORDER BY id").fetchall()
            meta_rows = conn.execute(
                "SELECT message_id, key, value FROM metadata ORDER BY id"
            ).fetchall()

        by_message: dict[int, list[MetadataEntry]] = {}
        for row in meta_rows:
            by_message.setdefault(row["message_id"], []).append(
                MetadataEntry(key=row["key"], value=row["value"])
            )

        return [
            LogRecord(
                created_at=datetime.fromisoformat(row["created_at"]),
                level=row["level"],
                label=row["label"],
                session=row["session"],
                text=row["text"],
                metadata=by_message.get(row["id"], []),
                file=row["file"],
                function=row["function"],
                line=row["line"],
            )
            for row in rows
        ]

    def count(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM messages").fetchone()[0]

    def close(self, timeout: float = 5.0) -> None:
        """Stop the background writer after it drains pending records.

        The closed writer stays attached, so later records are dropped and
        counted instead of starting a new worker.
        """
        writer = self.writer
        writer.close(timeout=timeout)
