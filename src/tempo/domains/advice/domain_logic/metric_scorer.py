"""Metric scorer: raw daily values to bounded domain scores (0-100).

Every score is relative to the user's own trailing 7-day average, never to a
population norm. A value equal to the average lands at 50; better-than-usual
values fill the upper half and worse-than-usual values the lower half.
Missing inputs degrade to NEUTRAL_SCORE instead of raising.
"""

from __future__ import annotations

from dataclasses import replace

from tempo.domains.advice.domain_logic.health_models import (
    MINUTES_PER_DAY,
    SCORE_MAX,
    SCORE_MIN,
    DomainScores,
    HealthSnapshot,
    bedtime_minutes,
)

NEUTRAL_SCORE = 50.0

# Relative deviation from baseline that spans half the score range.
SLEEP_TOLERANCE = 0.25
HRV_TOLERANCE = 0.30
STEPS_TOLERANCE = 0.50

# Bedtime deviation (minutes) at which the rhythm score reaches 0.
RHYTHM_ZERO_MINUTES = 120.0

STABLE_DAYS_CAP = 7
IRREGULAR_RHYTHM_SCORE = 25.0


def _clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    return max(low, min(high, value))


def relative_score(value: float | None, baseline: float | None, tolerance: float) -> float:
    """Score ``value`` against ``baseline``.

    ``clamp(50 + 50 * (value / baseline - 1) / tolerance, 0, 100)``; missing
    or non-positive baselines yield the neutral score.
    """
    if value is None or baseline is None or baseline <= 0:
        return NEUTRAL_SCORE
    ratio = value / baseline - 1.0
    return round(_clamp(NEUTRAL_SCORE + 50.0 * ratio / tolerance), 1)


def score_sleep(snapshot: HealthSnapshot) -> float:
    duration = snapshot.sleep.duration_hours if snapshot.sleep else None
    baseline = snapshot.trends.avg_sleep_hours if snapshot.trends else None
    return relative_score(duration, baseline, SLEEP_TOLERANCE)


def score_hrv(snapshot: HealthSnapshot) -> float:
    hrv = snapshot.vitals.hrv_ms if snapshot.vitals else None
    baseline = snapshot.trends.avg_hrv if snapshot.trends else None
    return relative_score(hrv, baseline, HRV_TOLERANCE)


def score_activity(snapshot: HealthSnapshot) -> float:
    steps = snapshot.activity.steps if snapshot.activity else None
    baseline = snapshot.trends.avg_steps if snapshot.trends else None
    return relative_score(
        float(steps) if steps is not None else None, baseline, STEPS_TOLERANCE
    )


def bedtime_deviation(minutes: float, baseline_minutes: float) -> float:
    """Circular distance in minutes between two bedtimes (0-720)."""
    diff = abs(minutes - baseline_minutes) % MINUTES_PER_DAY
    return min(diff, MINUTES_PER_DAY - diff)


def score_rhythm(snapshot: HealthSnapshot) -> float:
    """Score sleep timing consistency.

    Uses today's bedtime against the 7-day average bedtime when both are
    known (0 min -> 100, 60 min -> 50, 120+ min -> 0). Otherwise falls back
    to the rhythm-stability descriptor, then to the neutral score.
    """
    bedtime = snapshot.sleep.bedtime if snapshot.sleep else None
    baseline = snapshot.trends.avg_bedtime_minutes if snapshot.trends else None
    if bedtime is not None and baseline is not None:
        deviation = bedtime_deviation(bedtime_minutes(bedtime), baseline)
        return round(_clamp(SCORE_MAX * (1.0 - deviation / RHYTHM_ZERO_MINUTES)), 1)

    rhythm = snapshot.rhythm
    if rhythm is None:
        return NEUTRAL_SCORE
    if rhythm.status == "stable":
        days = min(max(rhythm.stable_days, 0), STABLE_DAYS_CAP)
        return round(NEUTRAL_SCORE + 50.0 * days / STABLE_DAYS_CAP, 1)
    if rhythm.status == "irregular":
        return IRREGULAR_RHYTHM_SCORE
    return NEUTRAL_SCORE


def score_domains(snapshot: HealthSnapshot) -> DomainScores:
    """Compute all four domain scores for a snapshot."""
    return DomainScores(
        sleep=score_sleep(snapshot),
        hrv=score_hrv(snapshot),
        rhythm=score_rhythm(snapshot),
        activity=score_activity(snapshot),
    )


def ensure_scores(snapshot: HealthSnapshot) -> HealthSnapshot:
    """Return ``snapshot`` if it already carries scores, else a scored copy."""
    if snapshot.scores is not None:
        return snapshot
    return replace(snapshot, scores=score_domains(snapshot))
