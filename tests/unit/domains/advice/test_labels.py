"""Tests for per-language display names."""

from __future__ import annotations

import pytest

from tempo.domains.advice.domain_logic.health_models import Metric
from tempo.domains.advice.domain_logic.labels import (
    _LABELS,
    SUPPORTED_LANGUAGES,
    display_name,
    normalize_language,
)
from tempo.domains.advice.domain_logic.profile_models import (
    AlcoholFrequency,
    Domain,
    ExerciseFrequency,
    Gender,
    LifestyleRhythm,
    Occupation,
)
from tempo.domains.advice.domain_logic.request_assembler import DayOfWeek, TimeSlot

ALL_TAG_ENUMS = [
    Gender,
    Occupation,
    LifestyleRhythm,
    ExerciseFrequency,
    AlcoholFrequency,
    Domain,
    Metric,
    DayOfWeek,
    TimeSlot,
]


@pytest.mark.parametrize("language", SUPPORTED_LANGUAGES)
@pytest.mark.parametrize("enum_cls", ALL_TAG_ENUMS)
def test_every_tag_has_a_label(enum_cls, language):
    table = _LABELS[language][enum_cls]
    assert set(table) == {tag.value for tag in enum_cls}


def test_same_value_different_enum_gets_own_label():
    assert Metric.SLEEP == Domain.SLEEP
    assert display_name(Metric.SLEEP, "ja") == "睡眠"
    assert display_name(TimeSlot.MORNING, "ja") != display_name(LifestyleRhythm.MORNING, "ja")


def test_english_labels():
    assert display_name(Domain.FITNESS, "en") == "Fitness"
    assert display_name(TimeSlot.MIDDAY, "en") == "Afternoon"


@pytest.mark.parametrize(
    "raw,expected",
    [("ja", "ja"), ("ja-JP", "ja"), ("EN", "en"), ("en_US", "en"), ("fr", "ja"), (None, "ja")],
)
def test_normalize_language(raw, expected):
    assert normalize_language(raw) == expected


def test_unknown_language_uses_default():
    assert display_name(Domain.SLEEP, "de") == display_name(Domain.SLEEP, "ja")
