"""Display names for tags, per language.

Enums carry no presentation data; this table maps (language, tag) to the
string shown to users or embedded in prompts. Tables are keyed by enum class
first because str-valued tags of different enums compare equal
(``Metric.SLEEP == Domain.SLEEP``).
"""

from __future__ import annotations

from enum import Enum

from tempo.domains.advice.domain_logic.health_models import Metric
from tempo.domains.advice.domain_logic.profile_models import (
    AlcoholFrequency,
    Domain,
    ExerciseFrequency,
    Gender,
    LifestyleRhythm,
    Occupation,
)
from tempo.domains.advice.domain_logic.request_assembler import DayOfWeek, TimeSlot

DEFAULT_LANGUAGE = "ja"
FALLBACK_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("ja", "en")

_LABELS: dict[str, dict[type[Enum], dict[str, str]]] = {
    "ja": {
        Gender: {
            "male": "男性",
            "female": "女性",
            "other": "その他",
            "unspecified": "回答しない",
        },
        Occupation: {
            "it_engineer": "IT・エンジニア",
            "sales": "営業・販売",
            "standing_work": "立ち仕事",
            "medical": "医療・介護",
            "creative": "クリエイティブ",
            "homemaker": "主婦・主夫",
            "student": "学生",
            "freelance": "フリーランス",
            "other": "その他",
        },
        LifestyleRhythm: {"morning": "朝型", "night": "夜型", "irregular": "不規則"},
        ExerciseFrequency: {
            "daily": "ほぼ毎日",
            "three_to_four": "週3〜4回",
            "one_to_two": "週1〜2回",
            "rarely": "ほとんどしない",
        },
        AlcoholFrequency: {
            "never": "飲まない",
            "monthly": "月数回",
            "one_to_two": "週1〜2回",
            "three_or_more": "週3回以上",
        },
        Domain: {
            "sleep": "睡眠改善",
            "mental": "メンタルヘルス・マインドフルネス",
            "fitness": "フィットネス・トレーニング",
            "energy": "仕事・パフォーマンス向上",
            "beauty": "美容・スキンケア",
            "nutrition": "栄養・食事管理",
        },
        Metric: {"sleep": "睡眠", "hrv": "心拍変動", "rhythm": "生活リズム", "activity": "活動量"},
        DayOfWeek: {
            "monday": "月曜日",
            "tuesday": "火曜日",
            "wednesday": "水曜日",
            "thursday": "木曜日",
            "friday": "金曜日",
            "saturday": "土曜日",
            "sunday": "日曜日",
        },
        TimeSlot: {"morning": "朝", "midday": "昼", "evening": "夜"},
    },
    "en": {
        Gender: {
            "male": "Male",
            "female": "Female",
            "other": "Other",
            "unspecified": "Prefer not to say",
        },
        Occupation: {
            "it_engineer": "IT / Engineering",
            "sales": "Sales / Retail",
            "standing_work": "Standing work",
            "medical": "Medical / Care",
            "creative": "Creative",
            "homemaker": "Homemaker",
            "student": "Student",
            "freelance": "Freelance",
            "other": "Other",
        },
        LifestyleRhythm: {"morning": "Early bird", "night": "Night owl", "irregular": "Irregular"},
        ExerciseFrequency: {
            "daily": "Almost every day",
            "three_to_four": "3-4 times a week",
            "one_to_two": "1-2 times a week",
            "rarely": "Rarely",
        },
        AlcoholFrequency: {
            "never": "Never",
            "monthly": "A few times a month",
            "one_to_two": "1-2 times a week",
            "three_or_more": "3+ times a week",
        },
        Domain: {
            "sleep": "Better sleep",
            "mental": "Mental health & mindfulness",
            "fitness": "Fitness & training",
            "energy": "Work performance & energy",
            "beauty": "Beauty & skin care",
            "nutrition": "Nutrition",
        },
        Metric: {
            "sleep": "Sleep",
            "hrv": "Heart rate variability",
            "rhythm": "Daily rhythm",
            "activity": "Activity",
        },
        DayOfWeek: {
            "monday": "Monday",
            "tuesday": "Tuesday",
            "wednesday": "Wednesday",
            "thursday": "Thursday",
            "friday": "Friday",
            "saturday": "Saturday",
            "sunday": "Sunday",
        },
        TimeSlot: {"morning": "Morning", "midday": "Afternoon", "evening": "Evening"},
    },
}


def normalize_language(language: str | None) -> str:
    """Map ``ja-JP``/``EN`` style codes to a supported language, else the default."""
    if not language:
        return DEFAULT_LANGUAGE
    code = language.split("-")[0].split("_")[0].lower()
    return code if code in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def display_name(tag: Enum, language: str = DEFAULT_LANGUAGE) -> str:
    """Display string for ``tag``; falls back to English, then the raw value."""
    for lang in (normalize_language(language), FALLBACK_LANGUAGE):
        label = _LABELS.get(lang, {}).get(type(tag), {}).get(tag.value)
        if label is not None:
            return label
    return str(tag.value)
