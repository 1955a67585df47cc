"""Tests for baseline-relative metric scoring."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import make_scores, make_snapshot
from tempo.domains.advice.connectors.mock_data import get_mock_health_data
from tempo.domains.advice.domain_logic.health_models import (
    HealthSnapshot,
    RhythmStability,
    SleepSummary,
    WeekTrends,
)
from tempo.domains.advice.domain_logic.metric_scorer import (
    NEUTRAL_SCORE,
    bedtime_deviation,
    ensure_scores,
    relative_score,
    score_domains,
    score_rhythm,
)


class TestRelativeScore:
    def test_equal_to_baseline_is_neutral(self):
        assert relative_score(7.0, 7.0, 0.25) == 50.0

    def test_better_than_baseline_scores_higher(self):
        assert relative_score(8.0, 7.0, 0.25) > 50.0

    def test_worse_than_baseline_scores_lower(self):
        assert relative_score(6.0, 7.0, 0.25) < 50.0

    def test_clamped_to_range(self):
        assert relative_score(100.0, 1.0, 0.25) == 100.0
        assert relative_score(0.0, 7.0, 0.25) == 0.0

    @pytest.mark.parametrize("value,baseline", [(None, 7.0), (7.0, None), (7.0, 0.0)])
    def test_missing_inputs_are_neutral(self, value, baseline):
        assert relative_score(value, baseline, 0.25) == NEUTRAL_SCORE

    def test_monotone_in_value(self):
        scores = [relative_score(v, 60.0, 0.3) for v in (30, 45, 60, 75, 90)]
        assert scores == sorted(scores)


class TestRhythm:
    def test_same_bedtime_scores_full(self):
        assert score_rhythm(make_snapshot(bedtime="23:00", avg_bedtime="23:00")) == 100.0

    def test_one_hour_late_scores_half(self):
        assert score_rhythm(make_snapshot(bedtime="00:00", avg_bedtime="23:00")) == 50.0

    def test_two_hours_off_scores_zero(self):
        assert score_rhythm(make_snapshot(bedtime="21:00", avg_bedtime="23:00")) == 0.0

    def test_deviation_wraps_across_midnight(self):
        assert bedtime_deviation(330, 1410) == 360
        assert bedtime_deviation(10, 1430) == 20

    def test_falls_back_to_stability_descriptor(self):
        snapshot = HealthSnapshot(
            date=date(2026, 3, 2), rhythm=RhythmStability(status="stable", stable_days=7)
        )
        assert score_rhythm(snapshot) == 100.0

    def test_irregular_descriptor_scores_low(self):
        snapshot = HealthSnapshot(
            date=date(2026, 3, 2), rhythm=RhythmStability(status="irregular")
        )
        assert score_rhythm(snapshot) < NEUTRAL_SCORE

    def test_no_rhythm_data_is_neutral(self):
        snapshot = HealthSnapshot(
            date=date(2026, 3, 2),
            sleep=SleepSummary(bedtime=datetime(2026, 3, 1, 23, 0)),
            trends=WeekTrends(),
        )
        assert score_rhythm(snapshot) == NEUTRAL_SCORE


class TestScoreDomains:
    def test_mock_day_scores(self):
        snapshot = HealthSnapshot.from_dict(get_mock_health_data(date(2026, 3, 2)))
        scores = score_domains(snapshot)
        assert scores.sleep == pytest.approx(58.3)
        assert scores.hrv == pytest.approx(59.8)
        assert scores.activity == pytest.approx(59.2)
        assert scores.rhythm == pytest.approx(87.5)

    def test_all_scores_bounded(self):
        snapshot = make_snapshot(duration_hours=20, hrv_ms=1, steps=0, bedtime="12:00")
        for value in score_domains(snapshot).as_dict().values():
            assert 0.0 <= value <= 100.0

    def test_empty_snapshot_is_all_neutral(self):
        scores = score_domains(HealthSnapshot(date=date(2026, 3, 2)))
        assert scores.as_dict() == {
            "sleep": 50.0, "hrv": 50.0, "rhythm": 50.0, "activity": 50.0,
        }


class TestEnsureScores:
    def test_keeps_supplied_scores(self):
        supplied = make_scores(sleep=10)
        snapshot = make_snapshot()
        with_scores = HealthSnapshot(date=snapshot.date, scores=supplied)
        assert ensure_scores(with_scores).scores is supplied

    def test_computes_missing_scores(self):
        snapshot = make_snapshot()
        assert snapshot.scores is None
        assert ensure_scores(snapshot).scores is not None
