"""Generic fallback advice, loaded from ``fallback_advice.yaml``."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from tempo.domains.advice.domain_logic.labels import normalize_language
from tempo.domains.advice.domain_logic.profile_models import Domain
from tempo.domains.advice.domain_logic.request_assembler import TimeSlot
from tempo.domains.advice.domain_logic.response_validator import (
    AdviceResponse,
    validate_advice_response,
)

logger = logging.getLogger(__name__)

FALLBACK_PATH = Path(__file__).resolve().parent / "fallback_advice.yaml"


@lru_cache(maxsize=1)
def _load_catalog(path: str = str(FALLBACK_PATH)) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f)
    logger.info("Loaded fallback advice for languages: %s", sorted(data))
    return data


def fallback_payload(
    domain: Domain,
    language: str,
    nickname: str,
    time_slot: TimeSlot = TimeSlot.MORNING,
) -> dict[str, Any]:
    """Render the raw fallback payload for one domain and language."""
    catalog = _load_catalog()
    entry = catalog[normalize_language(language)]
    greeting = entry["greetings"][time_slot.value].replace("{nickname}", nickname)
    return {
        "greeting": greeting,
        "condition": dict(entry["condition"]),
        "condition_insight": entry["condition_insight"],
        "closing_message": entry["closing_message"],
        "daily_try": dict(entry["domains"][domain.value]),
        "weekly_try": None,
    }


def load_fallback_advice(
    domain: Domain,
    language: str,
    nickname: str,
    time_slot: TimeSlot = TimeSlot.MORNING,
) -> AdviceResponse:
    """Fallback advice for ``domain``, validated like generated advice.

    Raises:
        SchemaError: if the bundled catalog is malformed.
    """
    payload = fallback_payload(domain, language, nickname, time_slot)
    # No emoji check: the greeting embeds the user-chosen nickname.
    return validate_advice_response(payload)
