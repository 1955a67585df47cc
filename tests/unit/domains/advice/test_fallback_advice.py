"""Tests for the bundled generic fallback advice."""

from __future__ import annotations

import pytest

from tempo.core.llm.response import check_guardrails
from tempo.domains.advice.domain_logic.profile_models import Domain
from tempo.domains.advice.domain_logic.request_assembler import TimeSlot
from tempo.domains.advice.domain_logic.response_validator import validate_advice_response
from tempo.domains.advice.resources.fallback import fallback_payload, load_fallback_advice


@pytest.mark.parametrize("language", ["ja", "en"])
@pytest.mark.parametrize("domain", list(Domain))
def test_every_entry_passes_strict_validation(domain, language):
    payload = fallback_payload(domain, language, "Aki")
    advice = validate_advice_response(payload, forbid_emoji=True)
    assert check_guardrails(advice).passed


def test_nickname_embedded_in_greeting():
    advice = load_fallback_advice(Domain.SLEEP, "en", "Aki", TimeSlot.EVENING)
    assert advice.greeting == "Good evening, Aki."


def test_greeting_follows_time_slot():
    morning = load_fallback_advice(Domain.SLEEP, "ja", "アキ", TimeSlot.MORNING)
    midday = load_fallback_advice(Domain.SLEEP, "ja", "アキ", TimeSlot.MIDDAY)
    assert morning.greeting != midday.greeting
    assert "アキ" in midday.greeting


def test_daily_try_matches_domain():
    fitness = load_fallback_advice(Domain.FITNESS, "en", "Aki")
    nutrition = load_fallback_advice(Domain.NUTRITION, "en", "Aki")
    assert fitness.daily_try.title != nutrition.daily_try.title


def test_regional_language_code_resolves():
    advice = load_fallback_advice(Domain.MENTAL, "en-GB", "Aki")
    assert advice.daily_try.title == "Quiet minutes"


def test_emoji_nickname_does_not_break_fallback():
    advice = load_fallback_advice(Domain.BEAUTY, "ja", "アキ\U0001F338")
    assert advice.weekly_try is None
