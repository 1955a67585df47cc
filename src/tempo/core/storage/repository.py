"""Advice repository: persistence for profiles, try history, scores and advice.

The repository mediates between domain objects and the SQLite database,
using FieldEncryptor for profile and advice payloads. Writes for one user go
through a single connection and commit per operation, which keeps history
appends serialized and the look-back window intact.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, timedelta

from tempo.core.storage.database import AdviceDatabase
from tempo.core.storage.encryption import EncryptionError, FieldEncryptor
from tempo.core.storage.models import CachedAdvice, StoredScores, WeeklyTry
from tempo.domains.advice.domain_logic.health_models import DomainScores, Metric
from tempo.domains.advice.domain_logic.profile_models import UserProfile
from tempo.domains.advice.domain_logic.response_validator import AdviceResponse
from tempo.domains.advice.domain_logic.try_history import (
    LOOKBACK_DAYS,
    RecentTryHistory,
    TryRecord,
)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


class AdviceRepository:
    """Per-user store behind the daily advice pipeline.

    Usage::

        db = AdviceDatabase(":memory:")
        db.initialize()
        repo = AdviceRepository(db, FieldEncryptor(FieldEncryptor.generate_key()))

        repo.save_profile("u1", profile)
        history = repo.append_try("u1", TryRecord(date.today(), "fitness"))
    """

    def __init__(self, database: AdviceDatabase, encryptor: FieldEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    def _commit(self, action: str) -> None:
        try:
            self._db.connection.commit()
        except sqlite3.Error as exc:
            self._db.connection.rollback()
            raise RepositoryError(f"{action} failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def save_profile(self, user_id: str, profile: UserProfile) -> None:
        """Insert or replace the encrypted profile for ``user_id``."""
        self._db.connection.execute(
            """INSERT INTO user_profiles (user_id, profile_enc, completion_rate, updated_at)
               VALUES (?, ?, ?, datetime('now'))
               ON CONFLICT(user_id) DO UPDATE SET
                   profile_enc = excluded.profile_enc,
                   completion_rate = excluded.completion_rate,
                   updated_at = excluded.updated_at""",
            (user_id, self._enc.encrypt(profile.to_payload()), profile.completion_rate),
        )
        self._commit("save_profile")
        logger.info("Saved profile for user %s", user_id)

    def get_profile(self, user_id: str) -> UserProfile | None:
        row = self._db.connection.execute(
            "SELECT profile_enc FROM user_profiles WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return UserProfile.from_dict(self._enc.decrypt(row["profile_enc"]))

    def delete_user(self, user_id: str) -> int:
        """Account reset: remove every row stored for ``user_id``.

        Returns:
            Total number of rows deleted.
        """
        conn = self._db.connection
        deleted = 0
        for table in ("user_profiles", "try_history", "domain_scores", "advice_cache", "weekly_tries"):
            cursor = conn.execute(f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
            deleted += cursor.rowcount
        self._commit("delete_user")
        logger.warning("Deleted all data for user %s (%d rows)", user_id, deleted)
        return deleted

    def rotate_encryption(self) -> int:
        """Re-encrypt every stored profile and cached advice under the primary key.

        Returns:
            Number of rows rewritten.
        """
        conn = self._db.connection
        rewritten = 0
        for table, column, key_columns in (
            ("user_profiles", "profile_enc", ("user_id",)),
            ("advice_cache", "advice_enc", ("user_id", "advice_date")),
        ):
            keys = ", ".join(key_columns)
            where = " AND ".join(f"{c} = ?" for c in key_columns)
            rows = conn.execute(f"SELECT {keys}, {column} FROM {table}").fetchall()
            for row in rows:
                try:
                    token = self._enc.rotate(row[column])
                except EncryptionError:
                    conn.rollback()
                    raise
                conn.execute(
                    f"UPDATE {table} SET {column} = ? WHERE {where}",
                    (token, *(row[c] for c in key_columns)),
                )
                rewritten += 1
        self._commit("rotate_encryption")
        logger.info("Re-encrypted %d stored records under the primary key", rewritten)
        return rewritten

    def count_users(self) -> int:
        row = self._db.connection.execute("SELECT COUNT(*) FROM user_profiles").fetchone()
        return row[0]

    # ------------------------------------------------------------------
    # Try history
    # ------------------------------------------------------------------

    def append_try(
        self,
        user_id: str,
        record: TryRecord,
        window_days: int = LOOKBACK_DAYS,
    ) -> RecentTryHistory:
        """Record today's try (replacing any for that date) and evict stale rows.

        Returns:
            The history after the append.
        """
        conn = self._db.connection
        conn.execute(
            """INSERT INTO try_history (user_id, try_date, topic) VALUES (?, ?, ?)
               ON CONFLICT(user_id, try_date) DO UPDATE SET topic = excluded.topic""",
            (user_id, record.date.isoformat(), record.topic),
        )
        newest = conn.execute(
            "SELECT MAX(try_date) FROM try_history WHERE user_id = ?", (user_id,)
        ).fetchone()[0]
        cutoff = date.fromisoformat(newest) - timedelta(days=window_days - 1)
        evicted = conn.execute(
            "DELETE FROM try_history WHERE user_id = ? AND try_date < ?",
            (user_id, cutoff.isoformat()),
        ).rowcount
        self._commit("append_try")

        if evicted:
            logger.info("Evicted %d try records older than %s for user %s", evicted, cutoff, user_id)
        return self.get_try_history(user_id, window_days)

    def get_try_history(
        self, user_id: str, window_days: int = LOOKBACK_DAYS
    ) -> RecentTryHistory:
        rows = self._db.connection.execute(
            "SELECT try_date, topic FROM try_history WHERE user_id = ? ORDER BY try_date",
            (user_id,),
        ).fetchall()
        return RecentTryHistory.from_pairs(
            ((row["try_date"], row["topic"]) for row in rows), window_days=window_days
        )

    # ------------------------------------------------------------------
    # Domain scores
    # ------------------------------------------------------------------

    def save_scores(self, user_id: str, score_date: date, scores: DomainScores) -> None:
        self._db.connection.execute(
            """INSERT INTO domain_scores (user_id, score_date, sleep, hrv, rhythm, activity)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(user_id, score_date) DO UPDATE SET
                   sleep = excluded.sleep, hrv = excluded.hrv,
                   rhythm = excluded.rhythm, activity = excluded.activity""",
            (
                user_id,
                score_date.isoformat(),
                scores.sleep,
                scores.hrv,
                scores.rhythm,
                scores.activity,
            ),
        )
        self._commit("save_scores")

    def get_latest_scores(self, user_id: str) -> StoredScores | None:
        row = self._db.connection.execute(
            """SELECT * FROM domain_scores WHERE user_id = ?
               ORDER BY score_date DESC LIMIT 1""",
            (user_id,),
        ).fetchone()
        if row is None:
            return None
        return StoredScores(
            user_id=user_id,
            score_date=date.fromisoformat(row["score_date"]),
            scores=DomainScores(**{m.value: row[m.value] for m in Metric}),
        )

    # ------------------------------------------------------------------
    # Advice cache
    # ------------------------------------------------------------------

    def cache_advice(
        self,
        user_id: str,
        advice_date: date,
        domain: str,
        advice: AdviceResponse,
        *,
        used_fallback: bool = False,
    ) -> None:
        """Store the advice delivered on ``advice_date`` (one per user per day)."""
        self._db.connection.execute(
            """INSERT INTO advice_cache (user_id, advice_date, domain, used_fallback, advice_enc)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(user_id, advice_date) DO UPDATE SET
                   domain = excluded.domain,
                   used_fallback = excluded.used_fallback,
                   advice_enc = excluded.advice_enc,
                   created_at = datetime('now')""",
            (
                user_id,
                advice_date.isoformat(),
                domain,
                int(used_fallback),
                self._enc.encrypt(advice.to_payload()),
            ),
        )
        self._commit("cache_advice")

    def get_cached_advice(self, user_id: str, advice_date: date) -> CachedAdvice | None:
        row = self._db.connection.execute(
            "SELECT * FROM advice_cache WHERE user_id = ? AND advice_date = ?",
            (user_id, advice_date.isoformat()),
        ).fetchone()
        if row is None:
            return None
        return CachedAdvice(
            user_id=user_id,
            advice_date=advice_date,
            domain=row["domain"],
            used_fallback=bool(row["used_fallback"]),
            advice=self._enc.decrypt(row["advice_enc"]),
            created_at=row["created_at"],
        )

    # ------------------------------------------------------------------
    # Weekly try
    # ------------------------------------------------------------------

    def set_last_weekly_try(self, user_id: str, topic: str, week_start: date) -> None:
        self._db.connection.execute(
            """INSERT INTO weekly_tries (user_id, topic, week_start) VALUES (?, ?, ?)
               ON CONFLICT(user_id) DO UPDATE SET
                   topic = excluded.topic,
                   week_start = excluded.week_start,
                   updated_at = datetime('now')""",
            (user_id, topic, week_start.isoformat()),
        )
        self._commit("set_last_weekly_try")

    def get_last_weekly_try(self, user_id: str) -> WeeklyTry | None:
        row = self._db.connection.execute(
            "SELECT topic, week_start FROM weekly_tries WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return WeeklyTry(
            user_id=user_id,
            topic=row["topic"],
            week_start=date.fromisoformat(row["week_start"]),
        )
