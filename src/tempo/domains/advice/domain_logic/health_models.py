"""Daily health snapshot models.

A snapshot is produced once per calendar day by the health-data connector and
is immutable afterwards. Raw values stay optional; scores are bounded 0-100.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

SCORE_MIN = 0.0
SCORE_MAX = 100.0

MINUTES_PER_DAY = 24 * 60
EVENING_START_MINUTES = 18 * 60


class Metric(str, Enum):
    SLEEP = "sleep"
    HRV = "hrv"
    RHYTHM = "rhythm"
    ACTIVITY = "activity"


class FactorImpact(str, Enum):
    HIGH_POSITIVE = "high_positive"
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    HIGH_NEGATIVE = "high_negative"


_IMPACT_ALIASES = {
    "highpositive": FactorImpact.HIGH_POSITIVE,
    "highnegative": FactorImpact.HIGH_NEGATIVE,
}


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _num(val: Any) -> float | None:
    """Float or None for missing / non-numeric values."""
    if val is None:
        return None
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def _int(val: Any) -> int | None:
    num = _num(val)
    return int(num) if num is not None else None


def _datetime(val: Any) -> datetime | None:
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val
    try:
        return datetime.fromisoformat(str(val).replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_date(val: Any) -> date:
    """Parse an ISO date or datetime string into a ``date``."""
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    text = str(val)
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Invalid date: {val!r}") from None


def _hours_to_minutes(val: Any) -> float | None:
    hours = _num(val)
    return hours * 60 if hours is not None else None


def bedtime_minutes(moment: datetime) -> int:
    """Minutes after 18:00, wrapped across midnight (23:30 -> 330, 01:00 -> 420)."""
    return (moment.hour * 60 + moment.minute - EVENING_START_MINUTES) % MINUTES_PER_DAY


def _bedtime_minutes(val: Any) -> float | None:
    """Accept minutes, ``HH:MM`` or an ISO datetime for an average bedtime."""
    if val is None or val == "":
        return None
    if isinstance(val, (int, float)):
        return float(val) % MINUTES_PER_DAY
    text = str(val)
    if len(text) <= 5 and ":" in text:
        hours, _, minutes = text.partition(":")
        try:
            total = int(hours) * 60 + int(minutes)
        except ValueError:
            return None
        return float((total - EVENING_START_MINUTES) % MINUTES_PER_DAY)
    moment = _datetime(text)
    return float(bedtime_minutes(moment)) if moment is not None else None


def _iso(val: datetime | None) -> str | None:
    return val.isoformat() if val is not None else None


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


# ---------------------------------------------------------------------------
# Snapshot parts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SleepSummary:
    duration_hours: float | None = None
    bedtime: datetime | None = None
    wake_time: datetime | None = None
    deep_sleep_minutes: float | None = None
    rem_sleep_minutes: float | None = None
    awakenings: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SleepSummary:
        deep = _num(data.get("deepSleepMinutes", data.get("deep_sleep_minutes")))
        if deep is None:
            deep = _hours_to_minutes(data.get("deepSleepHours"))
        rem = _num(data.get("remSleepMinutes", data.get("rem_sleep_minutes")))
        if rem is None:
            rem = _hours_to_minutes(data.get("remSleepHours"))
        return cls(
            duration_hours=_num(data.get("durationHours", data.get("duration_hours"))),
            bedtime=_datetime(data.get("bedtime")),
            wake_time=_datetime(data.get("wakeTime", data.get("wake_time"))),
            deep_sleep_minutes=deep,
            rem_sleep_minutes=rem,
            awakenings=_int(data.get("awakenings")),
        )

    def to_payload(self) -> dict[str, Any]:
        return _drop_none({
            "bedtime": _iso(self.bedtime),
            "wakeTime": _iso(self.wake_time),
            "durationHours": self.duration_hours,
            "deepSleepMinutes": self.deep_sleep_minutes,
            "remSleepMinutes": self.rem_sleep_minutes,
            "awakenings": self.awakenings,
        })


@dataclass(frozen=True)
class MorningVitals:
    resting_heart_rate: float | None = None
    hrv_ms: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MorningVitals:
        return cls(
            resting_heart_rate=_num(data.get("restingHeartRate", data.get("resting_heart_rate"))),
            hrv_ms=_num(data.get("hrvMs", data.get("hrv_ms"))),
        )

    def to_payload(self) -> dict[str, Any]:
        return _drop_none({"restingHeartRate": self.resting_heart_rate, "hrvMs": self.hrv_ms})


@dataclass(frozen=True)
class ActivitySummary:
    steps: int | None = None
    active_minutes: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActivitySummary:
        return cls(
            steps=_int(data.get("steps")),
            active_minutes=_num(
                data.get("activeMinutes", data.get("active_minutes", data.get("workoutMinutes")))
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        return _drop_none({"steps": self.steps, "activeMinutes": self.active_minutes})


@dataclass(frozen=True)
class WeekTrends:
    """Trailing 7-day averages, i.e. the user's own baseline.

    ``avg_bedtime_minutes`` is expressed as minutes after 18:00 so that
    bedtimes on either side of midnight average sensibly.
    """

    avg_sleep_hours: float | None = None
    avg_hrv: float | None = None
    avg_steps: float | None = None
    avg_bedtime_minutes: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WeekTrends:
        bedtime = data.get("avgBedtimeMinutes", data.get("avg_bedtime_minutes"))
        if bedtime is None:
            bedtime = data.get("avgBedtime", data.get("avg_bedtime"))
        return cls(
            avg_sleep_hours=_num(data.get("avgSleepHours", data.get("avg_sleep_hours"))),
            avg_hrv=_num(data.get("avgHrv", data.get("avg_hrv"))),
            avg_steps=_num(data.get("avgSteps", data.get("avg_steps"))),
            avg_bedtime_minutes=_bedtime_minutes(bedtime),
        )

    def to_payload(self) -> dict[str, Any]:
        return _drop_none({
            "avgSleepHours": self.avg_sleep_hours,
            "avgHrv": self.avg_hrv,
            "avgSteps": self.avg_steps,
            "avgBedtimeMinutes": self.avg_bedtime_minutes,
        })


@dataclass(frozen=True)
class DomainScores:
    """Per-metric scores, each in [0, 100]."""

    sleep: float
    hrv: float
    rhythm: float
    activity: float

    def __post_init__(self) -> None:
        for metric in Metric:
            value = getattr(self, metric.value)
            if not SCORE_MIN <= value <= SCORE_MAX:
                raise ValueError(f"{metric.value} score out of range [0, 100]: {value}")

    def get(self, metric: Metric) -> float:
        return getattr(self, metric.value)

    def as_dict(self) -> dict[str, float]:
        return {metric.value: self.get(metric) for metric in Metric}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DomainScores:
        return cls(**{metric.value: float(data[metric.value]) for metric in Metric})


@dataclass(frozen=True)
class RhythmStability:
    status: str = "shifting"  # 'stable' | 'shifting' | 'irregular'
    stable_days: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RhythmStability:
        return cls(
            status=str(data.get("status", "shifting")),
            stable_days=_int(data.get("stableDays", data.get("stable_days"))) or 0,
        )


@dataclass(frozen=True)
class HealthFactor:
    """A weighted contributor to today's condition."""

    name: str
    impact: FactorImpact
    detail: str = ""
    weight: float = 1.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HealthFactor:
        raw = str(data.get("impact", "neutral")).lower()
        impact = _IMPACT_ALIASES.get(raw.replace("_", "")) or FactorImpact(raw)
        return cls(
            name=str(data.get("name", "")),
            impact=impact,
            detail=str(data.get("detail", "")),
            weight=_num(data.get("weight")) or 1.0,
        )


@dataclass(frozen=True)
class HealthSnapshot:
    """One day of health data as delivered by the health-data collaborator."""

    date: date
    sleep: SleepSummary | None = None
    vitals: MorningVitals | None = None
    activity: ActivitySummary | None = None
    trends: WeekTrends | None = None
    scores: DomainScores | None = None
    rhythm: RhythmStability | None = None
    factors: tuple[HealthFactor, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HealthSnapshot:
        """Parse the wire ``healthData`` shape plus scores/rhythm/factors.

        Raises:
            ValueError: if ``date`` is missing/invalid or a score is out of range.
        """
        if "date" not in data:
            raise ValueError("Health snapshot requires a 'date'")

        def _part(key: str, alt: str, parser):
            raw = data.get(key, data.get(alt))
            return parser(raw) if isinstance(raw, dict) else None

        return cls(
            date=parse_date(data["date"]),
            sleep=_part("sleep", "sleep", SleepSummary.from_dict),
            vitals=_part("morningVitals", "vitals", MorningVitals.from_dict),
            activity=_part("yesterdayActivity", "activity", ActivitySummary.from_dict),
            trends=_part("weekTrends", "trends", WeekTrends.from_dict),
            scores=_part("scores", "domainScores", DomainScores.from_dict),
            rhythm=_part("rhythmStability", "rhythm", RhythmStability.from_dict),
            factors=tuple(HealthFactor.from_dict(f) for f in data.get("factors") or []),
        )

    def to_payload(self) -> dict[str, Any]:
        """Outbound ``healthData`` object (absent sections omitted)."""
        payload: dict[str, Any] = {"date": self.date.isoformat()}
        if self.sleep is not None:
            payload["sleep"] = self.sleep.to_payload()
        if self.vitals is not None:
            payload["morningVitals"] = self.vitals.to_payload()
        if self.activity is not None:
            payload["yesterdayActivity"] = self.activity.to_payload()
        if self.trends is not None:
            payload["weekTrends"] = self.trends.to_payload()
        return payload
