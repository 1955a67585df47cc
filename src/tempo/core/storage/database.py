"""SQLite database management for the Tempo advice store.

Handles connection lifecycle, schema creation, and migrations.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

# Current schema version
SCHEMA_VERSION = 2

# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

_SCHEMA_V1 = """
-- One row per user; the profile itself is an encrypted JSON blob
CREATE TABLE IF NOT EXISTS user_profiles (
    user_id         TEXT PRIMARY KEY,
    profile_enc     TEXT NOT NULL,
    completion_rate REAL,
    updated_at      TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Rolling daily-try history: at most one topic per user per day
CREATE TABLE IF NOT EXISTS try_history (
    user_id    TEXT NOT NULL,
    try_date   TEXT NOT NULL,
    topic      TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (user_id, try_date)
);

-- Per-day domain scores (unencrypted, bounded 0-100)
CREATE TABLE IF NOT EXISTS domain_scores (
    user_id    TEXT NOT NULL,
    score_date TEXT NOT NULL,
    sleep      REAL NOT NULL,
    hrv        REAL NOT NULL,
    rhythm     REAL NOT NULL,
    activity   REAL NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (user_id, score_date)
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_history_user_date ON try_history(user_id, try_date);
CREATE INDEX IF NOT EXISTS idx_scores_user_date  ON domain_scores(user_id, score_date);
"""

# ---------------------------------------------------------------------------
# V2: cached advice and weekly try tracking
# ---------------------------------------------------------------------------

_SCHEMA_V2 = """
CREATE TABLE IF NOT EXISTS advice_cache (
    user_id       TEXT NOT NULL,
    advice_date   TEXT NOT NULL,
    domain        TEXT NOT NULL,
    used_fallback INTEGER NOT NULL DEFAULT 0,
    advice_enc    TEXT NOT NULL,
    created_at    TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (user_id, advice_date)
);

CREATE TABLE IF NOT EXISTS weekly_tries (
    user_id    TEXT PRIMARY KEY,
    topic      TEXT NOT NULL,
    week_start TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class DatabaseError(Exception):
    """Raised when database operations fail."""


class AdviceDatabase:
    """SQLite store for profiles, try history, scores and cached advice.

    ``db_path`` may use ``~``; parent directories are created on first open.
    Pass ``:memory:`` for a throwaway database.

    Usage::

        with AdviceDatabase(":memory:") as db:
            db.connection.execute("SELECT 1")
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the active database connection.

        Raises:
            DatabaseError: If the database has not been initialized.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the connection and ensure the schema exists. Idempotent."""
        if self._conn is not None:
            return

        if self._db_path != ":memory:":
            db_file = Path(self._db_path).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_file)
        else:
            target = ":memory:"

        try:
            # Sync MCP tools may be dispatched from a worker thread.
            self._conn = sqlite3.connect(target, check_same_thread=False)
        except sqlite3.Error as exc:
            raise DatabaseError(f"Cannot open database {self._db_path}: {exc}") from exc

        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        self._ensure_schema()
        logger.info("Advice database initialized: %s", self._db_path)

    def _ensure_schema(self) -> None:
        conn = self.connection
        conn.executescript(_SCHEMA_V1)

        current_version = self.get_schema_version()

        if current_version < 2:
            conn.executescript(_SCHEMA_V2)
            logger.info("Applied schema migration V2: advice_cache, weekly_tries")

        if current_version < SCHEMA_VERSION:
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            conn.commit()
            logger.info(
                "Schema updated from version %d to %d", current_version, SCHEMA_VERSION
            )

    def get_schema_version(self) -> int:
        """Return the current schema version (0 for a fresh database)."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Advice database closed")

    def __enter__(self) -> AdviceDatabase:
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()
