"""Profile validation with a fixed check order; the first failure wins."""

from __future__ import annotations

from tempo.core.errors import ValidationError
from tempo.domains.advice.domain_logic.profile_models import (
    MAX_INTERESTS,
    MIN_AGE,
    MIN_HEIGHT_CM,
    MIN_INTERESTS,
    MIN_WEIGHT_KG,
    NICKNAME_MAX_LENGTH,
    UserProfile,
)


def validate_profile(profile: UserProfile) -> None:
    """Check a profile against the onboarding rules.

    Checks run in this order and the first violation is raised:
    nickname present, nickname length, age, weight, height, interests.

    Raises:
        ValidationError: with ``code`` and ``field`` of the first violation.
    """
    nickname = (profile.nickname or "").strip()
    if not nickname:
        raise ValidationError("empty_nickname", "nickname", "Nickname must not be empty")

    if len(nickname) > NICKNAME_MAX_LENGTH:
        raise ValidationError(
            "nickname_too_long",
            "nickname",
            f"Nickname must be at most {NICKNAME_MAX_LENGTH} characters",
        )

    # Negated comparisons so NaN fails every bound.
    if not profile.age >= MIN_AGE:
        raise ValidationError("invalid_age", "age", f"Age must be at least {MIN_AGE}")

    if not profile.weight_kg >= MIN_WEIGHT_KG:
        raise ValidationError(
            "invalid_weight", "weight_kg", f"Weight must be at least {MIN_WEIGHT_KG:g} kg"
        )

    if not profile.height_cm >= MIN_HEIGHT_CM:
        raise ValidationError(
            "invalid_height", "height_cm", f"Height must be at least {MIN_HEIGHT_CM:g} cm"
        )

    interests = profile.interests
    if not MIN_INTERESTS <= len(interests) <= MAX_INTERESTS or len(set(interests)) != len(interests):
        raise ValidationError(
            "invalid_interests_count",
            "interests",
            f"Choose between {MIN_INTERESTS} and {MAX_INTERESTS} distinct interests",
        )


def is_valid_profile(profile: UserProfile) -> bool:
    """Return True if ``validate_profile`` accepts the profile."""
    try:
        validate_profile(profile)
    except ValidationError:
        return False
    return True
