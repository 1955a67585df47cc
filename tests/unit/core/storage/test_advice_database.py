"""Tests for AdviceDatabase: schema creation, versioning, lifecycle."""

from __future__ import annotations

import sqlite3

import pytest

from tempo.core.storage.database import SCHEMA_VERSION, AdviceDatabase, DatabaseError


class TestInitialization:
    def test_in_memory_initialize(self):
        db = AdviceDatabase(":memory:")
        db.initialize()
        assert db.connection is not None
        db.close()

    def test_double_initialize_is_idempotent(self):
        db = AdviceDatabase(":memory:")
        db.initialize()
        conn1 = db.connection
        db.initialize()
        assert db.connection is conn1
        db.close()

    def test_connection_before_init_raises(self):
        db = AdviceDatabase(":memory:")
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_context_manager(self):
        with AdviceDatabase(":memory:") as db:
            assert db.connection is not None
        with pytest.raises(DatabaseError):
            _ = db.connection

    def test_file_database_creates_parent_dirs(self, tmp_path):
        path = tmp_path / "nested" / "advice.db"
        with AdviceDatabase(str(path)) as db:
            assert db.get_schema_version() == SCHEMA_VERSION
        assert path.exists()


class TestSchema:
    def test_schema_version_recorded(self):
        with AdviceDatabase(":memory:") as db:
            assert db.get_schema_version() == SCHEMA_VERSION

    def test_tables_created(self):
        expected_tables = {
            "user_profiles",
            "try_history",
            "domain_scores",
            "advice_cache",
            "weekly_tries",
            "schema_version",
        }
        with AdviceDatabase(":memory:") as db:
            cursor = db.connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            tables = {row[0] for row in cursor.fetchall()}
            assert expected_tables <= tables

    def test_indexes_created(self):
        with AdviceDatabase(":memory:") as db:
            cursor = db.connection.execute("SELECT name FROM sqlite_master WHERE type='index'")
            indexes = {row[0] for row in cursor.fetchall()}
            assert {"idx_history_user_date", "idx_scores_user_date"} <= indexes

    def test_reopening_file_keeps_single_version_row(self, tmp_path):
        path = str(tmp_path / "advice.db")
        with AdviceDatabase(path):
            pass
        with AdviceDatabase(path) as db:
            count = db.connection.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
            assert count == 1

    def test_history_primary_key_is_user_and_date(self):
        with AdviceDatabase(":memory:") as db:
            db.connection.execute(
                "INSERT INTO try_history (user_id, try_date, topic) VALUES ('u', '2026-03-01', 'sleep')"
            )
            with pytest.raises(sqlite3.IntegrityError):
                db.connection.execute(
                    "INSERT INTO try_history (user_id, try_date, topic) "
                    "VALUES ('u', '2026-03-01', 'fitness')"
                )
