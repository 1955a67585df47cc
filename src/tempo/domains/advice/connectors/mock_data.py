"""Mock profile and health data for development and testing.

Represents a median healthy adult: slightly better than their own weekly
average on sleep and HRV, close to average on activity, stable rhythm.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta


def get_mock_profile() -> dict:
    """Return a complete, valid mock user profile (wire shape)."""
    return {
        "nickname": "テストユーザー",
        "age": 28,
        "gender": "female",
        "weightKg": 55.0,
        "heightCm": 165.0,
        "occupation": "it_engineer",
        "lifestyleRhythm": "morning",
        "exerciseFrequency": "three_to_four",
        "alcoholFrequency": "one_to_two",
        "interests": ["fitness", "beauty", "sleep"],
    }


def get_mock_location() -> dict:
    return {"latitude": 35.6762, "longitude": 139.6503, "city": "東京"}


def get_mock_health_data(day: date) -> dict:
    """Return one day of mock health data (wire shape) for ``day``."""
    bedtime = datetime.combine(day - timedelta(days=1), time(23, 0))
    wake_time = datetime.combine(day, time(6, 30))
    return {
        "date": day.isoformat(),
        "sleep": {
            "bedtime": bedtime.isoformat(),
            "wakeTime": wake_time.isoformat(),
            "durationHours": 7.5,
            "deepSleepMinutes": 108,
            "remSleepMinutes": 72,
            "awakenings": 2,
        },
        "morningVitals": {
            "restingHeartRate": 62,
            "hrvMs": 72.0,
        },
        "yesterdayActivity": {
            "steps": 8520,
            "activeMinutes": 45,
        },
        "weekTrends": {
            "avgSleepHours": 7.2,
            "avgHrv": 68.0,
            "avgSteps": 7800,
            "avgBedtime": "23:15",
        },
        "rhythmStability": {
            "status": "stable",
            "stableDays": 5,
        },
        "factors": [
            {"name": "sleep_duration", "impact": "positive", "detail": "7.5h vs 7.2h average", "weight": 0.3},
            {"name": "hrv", "impact": "positive", "detail": "72ms vs 68ms average", "weight": 0.3},
            {"name": "steps", "impact": "neutral", "detail": "8520 vs 7800 average", "weight": 0.2},
        ],
    }
