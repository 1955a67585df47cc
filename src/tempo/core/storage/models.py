"""Data models for the advice persistence layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from tempo.domains.advice.domain_logic.health_models import DomainScores


@dataclass
class StoredScores:
    """The per-day domain scores persisted for a user."""

    user_id: str
    score_date: date
    scores: DomainScores


@dataclass
class CachedAdvice:
    """Advice delivered for a user on one day.

    ``advice`` is the decrypted payload in the validated response shape.
    """

    user_id: str
    advice_date: date
    domain: str
    used_fallback: bool
    advice: dict[str, Any]
    created_at: str = ""


@dataclass
class WeeklyTry:
    user_id: str
    topic: str
    week_start: date
