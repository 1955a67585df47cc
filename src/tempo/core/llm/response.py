"""Content guardrails for generated advice.

Structure is checked by the response validator; this module looks for
wording that crosses into diagnosis or treatment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tempo.core.errors import SchemaError
from tempo.domains.advice.domain_logic.response_validator import AdviceResponse

logger = logging.getLogger(__name__)

# Heuristic phrase lists; matched case-insensitively as substrings.
PROHIBITED_INDICATORS: dict[str, tuple[str, ...]] = {
    "making medical diagnoses": (
        "you have been diagnosed",
        "you are suffering from",
        "you have a condition",
        "と診断されます",
        "の疑いがあります",
        "病気の可能性",
    ),
    "prescribing treatments": (
        "take this medication",
        "stop taking your medication",
        "i prescribe",
        "薬を飲んで",
        "服用してください",
        "服薬をやめ",
    ),
    "providing specific dietary plans": (
        "eat exactly",
        "your daily caloric intake should be",
        "follow this meal plan",
    ),
    "making disease predictions": (
        "you will develop",
        "you are at high risk of dying",
        "guaranteed to cure",
        "必ず治ります",
    ),
}


@dataclass
class GuardrailCheck:
    """Result of checking advice text against the content guardrails."""

    passed: bool
    flags: list[str] = field(default_factory=list)
    first_field: str | None = None


def check_guardrails(advice: AdviceResponse) -> GuardrailCheck:
    """Scan every text field of ``advice`` for prohibited phrasing."""
    flags: list[str] = []
    first_field: str | None = None

    for field_name, text in advice.text_fields():
        text_lower = text.lower()
        for action, patterns in PROHIBITED_INDICATORS.items():
            for pattern in patterns:
                if pattern in text_lower:
                    flags.append(
                        f"prohibited_pattern_detected: {action} ('{pattern}') in {field_name}"
                    )
                    first_field = first_field or field_name

    if flags:
        logger.warning("Guardrail flags on generated advice: %s", flags)

    return GuardrailCheck(passed=not flags, flags=flags, first_field=first_field)


def enforce_guardrails(advice: AdviceResponse) -> GuardrailCheck:
    """Raise ``SchemaError(reason="prohibited_content")`` for flagged advice.

    Flagged advice is treated like a malformed payload so the caller
    regenerates or falls back instead of redacting text in place.
    """
    check = check_guardrails(advice)
    if not check.passed:
        raise SchemaError(
            check.first_field or "(root)",
            "prohibited_content",
            flags=len(check.flags),
        )
    return check
