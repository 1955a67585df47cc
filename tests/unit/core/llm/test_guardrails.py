"""Tests for content guardrails and the system prompt."""

from __future__ import annotations

import copy

import pytest

from tempo.core.errors import SchemaError
from tempo.core.llm.providers.mock import DEFAULT_ADVICE
from tempo.core.llm.response import check_guardrails, enforce_guardrails
from tempo.core.llm.system_prompt import build_full_system_prompt
from tempo.domains.advice.domain_logic.response_validator import validate_advice_response


def _advice(**overrides):
    payload = copy.deepcopy(DEFAULT_ADVICE)
    payload.update(overrides)
    return validate_advice_response(payload)


class TestGuardrails:
    def test_default_advice_passes(self):
        check = check_guardrails(_advice())
        assert check.passed
        assert check.flags == []

    def test_english_diagnosis_flagged(self):
        check = check_guardrails(_advice(condition_insight="You are suffering from insomnia."))
        assert not check.passed
        assert check.first_field == "condition_insight"

    def test_japanese_prescription_flagged(self):
        daily = {"title": "服薬", "summary": "この薬を飲んでください。", "detail": "毎朝。"}
        check = check_guardrails(_advice(daily_try=daily))
        assert check.first_field == "daily_try.summary"

    def test_case_insensitive(self):
        assert not check_guardrails(_advice(greeting="I PRESCRIBE rest.")).passed

    def test_enforce_raises_schema_error(self):
        with pytest.raises(SchemaError) as exc_info:
            enforce_guardrails(_advice(greeting="You will develop diabetes."))
        assert exc_info.value.field == "greeting"
        assert exc_info.value.reason == "prohibited_content"

    def test_enforce_returns_check_when_clean(self):
        assert enforce_guardrails(_advice()).passed


class TestSystemPrompt:
    def test_title_limit_rendered(self):
        assert "at most 12 characters" in build_full_system_prompt("ja", title_max=12)

    def test_languages_differ(self):
        assert build_full_system_prompt("ja") != build_full_system_prompt("en")

    def test_schema_is_literal_json(self):
        prompt = build_full_system_prompt("en")
        assert '"daily_try": {' in prompt
        assert "{{" not in prompt
