"""User profile model, tag enums and derived profile metrics."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tempo.core.errors import ValidationError


# ---------------------------------------------------------------------------
# Tags (presentation labels live in labels.py)
# ---------------------------------------------------------------------------

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNSPECIFIED = "unspecified"


class Occupation(str, Enum):
    IT_ENGINEER = "it_engineer"
    SALES = "sales"
    STANDING_WORK = "standing_work"
    MEDICAL = "medical"
    CREATIVE = "creative"
    HOMEMAKER = "homemaker"
    STUDENT = "student"
    FREELANCE = "freelance"
    OTHER = "other"


class LifestyleRhythm(str, Enum):
    MORNING = "morning"
    NIGHT = "night"
    IRREGULAR = "irregular"


class ExerciseFrequency(str, Enum):
    DAILY = "daily"
    THREE_TO_FOUR = "three_to_four"
    ONE_TO_TWO = "one_to_two"
    RARELY = "rarely"


class AlcoholFrequency(str, Enum):
    NEVER = "never"
    MONTHLY = "monthly"
    ONE_TO_TWO = "one_to_two"
    THREE_OR_MORE = "three_or_more"


class Domain(str, Enum):
    """Topical category of a daily recommendation (also used as interest tag)."""

    SLEEP = "sleep"
    MENTAL = "mental"
    FITNESS = "fitness"
    ENERGY = "energy"
    BEAUTY = "beauty"
    NUTRITION = "nutrition"


# Tags sent by older mobile clients.
_GENDER_ALIASES = {"not_specified": Gender.UNSPECIFIED}
_DOMAIN_ALIASES = {
    "mental_health": Domain.MENTAL,
    "work_performance": Domain.ENERGY,
}

# ---------------------------------------------------------------------------
# Validation bounds and completion inventory
# ---------------------------------------------------------------------------

NICKNAME_MAX_LENGTH = 20
MIN_AGE = 18
MIN_WEIGHT_KG = 30.0
MIN_HEIGHT_CM = 100.0
MIN_INTERESTS = 1
MAX_INTERESTS = 3

# 5 required scalar slots + 4 optional enums + 1 "has an interest" slot.
COMPLETION_TOTAL_FIELDS = 10


def parse_tag(enum_cls: type[Enum], value: Any, field: str) -> Any:
    """Parse a wire value into ``enum_cls``; ``None``/"" stay ``None``."""
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    raw = str(value).strip().lower()
    if enum_cls is Gender and raw in _GENDER_ALIASES:
        return _GENDER_ALIASES[raw]
    if enum_cls is Domain and raw in _DOMAIN_ALIASES:
        return _DOMAIN_ALIASES[raw]
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValidationError(
            "invalid_field_value", field, f"{field}: unknown value {value!r}"
        ) from None


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _number(value: Any, field: str) -> float:
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            "invalid_field_value", field, f"{field}: expected a number, got {value!r}"
        ) from None
    if not math.isfinite(number):
        raise ValidationError(
            "invalid_field_value", field, f"{field}: expected a finite number, got {value!r}"
        )
    return number


@dataclass(frozen=True)
class UserProfile:
    """Identity and preference facts collected at onboarding.

    Partially filled profiles are representable (onboarding progress);
    ``validate_profile`` decides whether a profile may be used for advice.
    """

    nickname: str
    age: int
    weight_kg: float
    height_cm: float
    gender: Gender | None = None
    occupation: Occupation | None = None
    lifestyle_rhythm: LifestyleRhythm | None = None
    exercise_frequency: ExerciseFrequency | None = None
    alcohol_frequency: AlcoholFrequency | None = None
    interests: tuple[Domain, ...] = ()

    @property
    def bmi(self) -> float:
        """Body mass index; 0.0 when height is not positive."""
        if self.height_cm <= 0:
            return 0.0
        height_m = self.height_cm / 100.0
        return self.weight_kg / (height_m * height_m)

    @property
    def completion_rate(self) -> float:
        """Share of the fixed field inventory that is filled (0.0-1.0)."""
        filled = [
            bool(self.nickname and self.nickname.strip()),
            self.age > 0,
            self.weight_kg > 0,
            self.height_cm > 0,
            self.gender is not None,
            self.occupation is not None,
            self.lifestyle_rhythm is not None,
            self.exercise_frequency is not None,
            self.alcohol_frequency is not None,
            len(self.interests) > 0,
        ]
        return sum(filled) / COMPLETION_TOTAL_FIELDS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        """Build a profile from the camelCase wire shape (snake_case also accepted).

        Raises:
            ValidationError: ``invalid_field_value`` for unknown tags or
                non-numeric measurements.
        """
        raw_interests = _pick(data, "interests", default=[]) or []
        if isinstance(raw_interests, str):
            raw_interests = [raw_interests]
        interests = tuple(parse_tag(Domain, tag, "interests") for tag in raw_interests)

        return cls(
            nickname=str(_pick(data, "nickname", default="")),
            age=int(_number(_pick(data, "age"), "age")),
            weight_kg=_number(_pick(data, "weightKg", "weight_kg"), "weight_kg"),
            height_cm=_number(_pick(data, "heightCm", "height_cm"), "height_cm"),
            gender=parse_tag(Gender, _pick(data, "gender"), "gender"),
            occupation=parse_tag(Occupation, _pick(data, "occupation"), "occupation"),
            lifestyle_rhythm=parse_tag(
                LifestyleRhythm,
                _pick(data, "lifestyleRhythm", "lifestyle_rhythm"),
                "lifestyle_rhythm",
            ),
            exercise_frequency=parse_tag(
                ExerciseFrequency,
                _pick(data, "exerciseFrequency", "exercise_frequency"),
                "exercise_frequency",
            ),
            alcohol_frequency=parse_tag(
                AlcoholFrequency,
                _pick(data, "alcoholFrequency", "alcohol_frequency"),
                "alcohol_frequency",
            ),
            interests=tuple(i for i in interests if i is not None),
        )

    def to_payload(self) -> dict[str, Any]:
        """Outbound ``userProfile`` object (optional enums omitted when unset)."""
        payload: dict[str, Any] = {
            "nickname": self.nickname,
            "age": self.age,
            "gender": (self.gender or Gender.UNSPECIFIED).value,
            "weightKg": self.weight_kg,
            "heightCm": self.height_cm,
        }
        optional = {
            "occupation": self.occupation,
            "lifestyleRhythm": self.lifestyle_rhythm,
            "exerciseFrequency": self.exercise_frequency,
            "alcoholFrequency": self.alcohol_frequency,
        }
        payload.update({k: v.value for k, v in optional.items() if v is not None})
        payload["interests"] = [i.value for i in self.interests]
        return payload
