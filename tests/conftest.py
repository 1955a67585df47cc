"""Shared test fixtures for Tempo advice tests."""

from __future__ import annotations

import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("PREVIOUS_ENCRYPTION_KEYS", "")
    monkeypatch.setenv("ADVICE_LANGUAGE", "ja")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from tempo.domains.advice.domain_logic.health_models import (  # noqa: E402
    DomainScores,
    HealthSnapshot,
)
from tempo.domains.advice.domain_logic.profile_models import UserProfile  # noqa: E402


# ---------------------------------------------------------------------------
# Domain builders
# ---------------------------------------------------------------------------

def make_profile_dict(**overrides: Any) -> dict[str, Any]:
    """A complete, valid profile in wire shape."""
    profile: dict[str, Any] = {
        "nickname": "Aki",
        "age": 30,
        "gender": "female",
        "weightKg": 55.0,
        "heightCm": 165.0,
        "occupation": "it_engineer",
        "lifestyleRhythm": "morning",
        "exerciseFrequency": "one_to_two",
        "alcoholFrequency": "monthly",
        "interests": ["fitness", "sleep"],
    }
    profile.update(overrides)
    return profile


def make_profile(**overrides: Any) -> UserProfile:
    return UserProfile.from_dict(make_profile_dict(**overrides))


def make_scores(sleep=80.0, hrv=80.0, rhythm=80.0, activity=80.0) -> DomainScores:
    return DomainScores(sleep=sleep, hrv=hrv, rhythm=rhythm, activity=activity)


def make_health_dict(
    day: date = date(2026, 3, 2),
    *,
    duration_hours: float = 7.0,
    hrv_ms: float = 60.0,
    steps: int = 8000,
    bedtime: str = "23:00",
    avg_sleep_hours: float = 7.0,
    avg_hrv: float = 60.0,
    avg_steps: float = 8000,
    avg_bedtime: str = "23:00",
) -> dict[str, Any]:
    """One day of health data in wire shape; defaults equal the baseline."""
    hours, minutes = (int(p) for p in bedtime.split(":"))
    bed_day = day - timedelta(days=1) if hours >= 12 else day
    bed = datetime.combine(bed_day, datetime.min.time()).replace(hour=hours, minute=minutes)
    return {
        "date": day.isoformat(),
        "sleep": {"bedtime": bed.isoformat(), "durationHours": duration_hours},
        "morningVitals": {"restingHeartRate": 60, "hrvMs": hrv_ms},
        "yesterdayActivity": {"steps": steps, "activeMinutes": 30},
        "weekTrends": {
            "avgSleepHours": avg_sleep_hours,
            "avgHrv": avg_hrv,
            "avgSteps": avg_steps,
            "avgBedtime": avg_bedtime,
        },
    }


def make_snapshot(day: date = date(2026, 3, 2), **kwargs: Any) -> HealthSnapshot:
    return HealthSnapshot.from_dict(make_health_dict(day, **kwargs))


@pytest.fixture
def sample_profile() -> UserProfile:
    return make_profile()


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def advice_db():
    """Create an in-memory AdviceDatabase for testing."""
    from tempo.core.storage.database import AdviceDatabase

    db = AdviceDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def field_encryptor():
    """Create a FieldEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from tempo.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def advice_repository(advice_db, field_encryptor):
    """Create an AdviceRepository backed by in-memory SQLite."""
    from tempo.core.storage.repository import AdviceRepository

    return AdviceRepository(advice_db, field_encryptor)
