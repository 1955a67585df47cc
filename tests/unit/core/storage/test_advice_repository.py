"""Tests for AdviceRepository: CRUD with in-memory SQLite."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from conftest import make_profile, make_scores
from tempo.core.storage.encryption import EncryptionError, FieldEncryptor
from tempo.core.storage.repository import AdviceRepository
from tempo.core.llm.providers.mock import DEFAULT_ADVICE
from tempo.domains.advice.domain_logic.profile_models import Domain
from tempo.domains.advice.domain_logic.response_validator import validate_advice_response
from tempo.domains.advice.domain_logic.try_history import TryRecord

DAY = date(2026, 3, 16)


class TestProfiles:
    def test_round_trip(self, advice_repository):
        profile = make_profile(nickname="アキ", interests=["mental_health", "beauty"])
        advice_repository.save_profile("u1", profile)
        loaded = advice_repository.get_profile("u1")
        assert loaded == profile
        assert loaded.interests == (Domain.MENTAL, Domain.BEAUTY)

    def test_missing_profile_is_none(self, advice_repository):
        assert advice_repository.get_profile("nobody") is None

    def test_save_replaces_existing(self, advice_repository):
        advice_repository.save_profile("u1", make_profile(age=30))
        advice_repository.save_profile("u1", make_profile(age=31))
        assert advice_repository.get_profile("u1").age == 31
        assert advice_repository.count_users() == 1

    def test_profile_encrypted_at_rest(self, advice_repository, advice_db):
        advice_repository.save_profile("u1", make_profile(nickname="SecretName"))
        row = advice_db.connection.execute(
            "SELECT profile_enc FROM user_profiles WHERE user_id = 'u1'"
        ).fetchone()
        assert "SecretName" not in row["profile_enc"]


class TestTryHistory:
    def test_append_returns_history(self, advice_repository):
        history = advice_repository.append_try("u1", TryRecord(DAY, "fitness"))
        assert history.to_list() == [{"date": "2026-03-16", "topic": "fitness"}]

    def test_same_day_replaced(self, advice_repository):
        advice_repository.append_try("u1", TryRecord(DAY, "fitness"))
        history = advice_repository.append_try("u1", TryRecord(DAY, "energy"))
        assert history.topics() == ["energy"]

    def test_window_enforced_in_storage(self, advice_repository, advice_db):
        for offset in range(20):
            advice_repository.append_try("u1", TryRecord(DAY + timedelta(days=offset), "sleep"))
        count = advice_db.connection.execute(
            "SELECT COUNT(*) FROM try_history WHERE user_id = 'u1'"
        ).fetchone()[0]
        assert count == 14
        oldest = advice_repository.get_try_history("u1").records()[0].date
        assert oldest == DAY + timedelta(days=6)

    def test_users_isolated(self, advice_repository):
        advice_repository.append_try("u1", TryRecord(DAY, "fitness"))
        advice_repository.append_try("u2", TryRecord(DAY + timedelta(days=40), "sleep"))
        assert advice_repository.get_try_history("u1").topics() == ["fitness"]

    def test_custom_window(self, advice_repository):
        for offset in range(5):
            advice_repository.append_try(
                "u1", TryRecord(DAY + timedelta(days=offset), "sleep"), window_days=3
            )
        assert len(advice_repository.get_try_history("u1", window_days=3)) == 3


class TestScores:
    def test_latest_scores(self, advice_repository):
        advice_repository.save_scores("u1", DAY, make_scores(sleep=40))
        advice_repository.save_scores("u1", DAY + timedelta(days=1), make_scores(sleep=60))
        stored = advice_repository.get_latest_scores("u1")
        assert stored.score_date == DAY + timedelta(days=1)
        assert stored.scores.sleep == 60

    def test_no_scores(self, advice_repository):
        assert advice_repository.get_latest_scores("u1") is None


class TestAdviceCache:
    def test_round_trip(self, advice_repository):
        advice = validate_advice_response(DEFAULT_ADVICE)
        advice_repository.cache_advice("u1", DAY, "fitness", advice, used_fallback=True)
        cached = advice_repository.get_cached_advice("u1", DAY)
        assert cached.domain == "fitness"
        assert cached.used_fallback is True
        assert cached.advice["daily_try"]["title"] == DEFAULT_ADVICE["daily_try"]["title"]

    def test_missing_day(self, advice_repository):
        assert advice_repository.get_cached_advice("u1", DAY) is None


class TestWeeklyTry:
    def test_last_weekly_try_replaced(self, advice_repository):
        advice_repository.set_last_weekly_try("u1", "stretching", DAY)
        advice_repository.set_last_weekly_try("u1", "meal prep", DAY + timedelta(days=7))
        weekly = advice_repository.get_last_weekly_try("u1")
        assert weekly.topic == "meal prep"
        assert weekly.week_start == DAY + timedelta(days=7)


class TestDeleteUser:
    def test_removes_everything_for_user(self, advice_repository):
        advice_repository.save_profile("u1", make_profile())
        advice_repository.append_try("u1", TryRecord(DAY, "sleep"))
        advice_repository.save_scores("u1", DAY, make_scores())
        advice_repository.set_last_weekly_try("u1", "walk", DAY)
        advice_repository.save_profile("u2", make_profile())

        assert advice_repository.delete_user("u1") == 4
        assert advice_repository.get_profile("u1") is None
        assert len(advice_repository.get_try_history("u1")) == 0
        assert advice_repository.count_users() == 1

    def test_unknown_user_deletes_nothing(self, advice_repository):
        assert advice_repository.delete_user("ghost") == 0


class TestRotateEncryption:
    def test_rows_move_to_new_key(self, advice_db):
        old_key, new_key = FieldEncryptor.generate_key(), FieldEncryptor.generate_key()
        old_repo = AdviceRepository(advice_db, FieldEncryptor(old_key))
        old_repo.save_profile("u1", make_profile(nickname="Aki"))
        old_repo.cache_advice("u1", DAY, "sleep", validate_advice_response(DEFAULT_ADVICE))

        rotating = AdviceRepository(advice_db, FieldEncryptor(new_key, previous_keys=[old_key]))
        assert rotating.rotate_encryption() == 2

        new_only = AdviceRepository(advice_db, FieldEncryptor(new_key))
        assert new_only.get_profile("u1").nickname == "Aki"
        assert new_only.get_cached_advice("u1", DAY).domain == "sleep"

    def test_unknown_key_leaves_rows_untouched(self, advice_db):
        old_key = FieldEncryptor.generate_key()
        AdviceRepository(advice_db, FieldEncryptor(old_key)).save_profile("u1", make_profile())

        stranger = AdviceRepository(advice_db, FieldEncryptor(FieldEncryptor.generate_key()))
        with pytest.raises(EncryptionError):
            stranger.rotate_encryption()
        assert AdviceRepository(advice_db, FieldEncryptor(old_key)).get_profile("u1") is not None
