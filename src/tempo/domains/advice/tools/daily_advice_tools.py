"""MCP tools for profile validation and the daily advice pipeline."""

from __future__ import annotations

import json
import logging
import time
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

from tempo.core.errors import ProviderError, ValidationError
from tempo.domains.advice.connectors.providers import PayloadHealthDataProvider
from tempo.domains.advice.domain_logic.candidate_selector import explain_selection
from tempo.domains.advice.domain_logic.health_models import parse_date
from tempo.domains.advice.domain_logic.metric_scorer import ensure_scores
from tempo.domains.advice.domain_logic.profile_models import Domain, UserProfile, parse_tag
from tempo.domains.advice.domain_logic.profile_validator import validate_profile
from tempo.domains.advice.domain_logic.request_assembler import (
    Location,
    RequestContextInput,
    assemble_request,
)
from tempo.domains.advice.domain_logic.try_history import RecentTryHistory, TryRecord
from tempo.domains.advice.resources.fallback import load_fallback_advice

if TYPE_CHECKING:
    from tempo.core.llm.client import AdviceGenerationClient
    from tempo.core.storage.repository import AdviceRepository
    from tempo.domains.advice.connectors import HealthDataProvider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error(error: str, message: str, **extra: Any) -> str:
    payload = {"status": "error", "error": error, "message": message}
    payload.update({k: v for k, v in extra.items() if v is not None})
    return json.dumps(payload, ensure_ascii=False)


def _parse_current_time(value: str | None) -> datetime:
    """Local wall-clock time; offsets are kept but never converted."""
    if not value:
        return datetime.now()
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _normalize_topic(topic: str) -> str:
    """Domain tags (including legacy aliases) map to their canonical value."""
    try:
        return parse_tag(Domain, topic, "topic").value
    except ValidationError:
        return topic.strip()


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _history_from_pairs(
    recent_tries: list[dict[str, str]] | None, window_days: int
) -> RecentTryHistory:
    pairs = [
        (item["date"], _normalize_topic(item["topic"]))
        for item in recent_tries or []
        if item.get("date") and item.get("topic")
    ]
    return RecentTryHistory.from_pairs(pairs, window_days=window_days)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def register_daily_advice_tools(
    mcp: FastMCP,
    llm_client: AdviceGenerationClient,
    health_provider: HealthDataProvider,
    repository: AdviceRepository | None = None,
    *,
    language: str = "ja",
    lookback_days: int = 14,
) -> None:
    """Register the daily advice tools on the MCP server."""
    default_language = language
    window_days = lookback_days

    # Named explicitly so the function does not shadow validate_profile.
    @mcp.tool(name="validate_profile")
    def validate_profile_tool(profile: dict) -> str:
        """Validate an onboarding profile and report BMI and completion.

        Checks run in a fixed order and only the first problem is reported.

        Args:
            profile: Profile in camelCase wire shape (nickname, age, weightKg,
                heightCm, gender, occupation, lifestyleRhythm,
                exerciseFrequency, alcoholFrequency, interests).
        """
        try:
            parsed = UserProfile.from_dict(profile)
        except ValidationError as exc:
            return json.dumps({
                "valid": False,
                "error_code": exc.code,
                "field": exc.field,
                "bmi": None,
                "completion_rate": None,
            })

        result: dict[str, Any] = {
            "valid": True,
            "error_code": None,
            "field": None,
            "bmi": round(parsed.bmi, 1),
            "completion_rate": round(parsed.completion_rate, 2),
        }
        try:
            validate_profile(parsed)
        except ValidationError as exc:
            result.update(valid=False, error_code=exc.code, field=exc.field)
        return json.dumps(result)

    @mcp.tool
    async def daily_advice(
        latitude: float,
        longitude: float,
        city: str | None = None,
        current_time: str | None = None,
        profile: dict | None = None,
        health_data: dict | None = None,
        recent_tries: list[dict] | None = None,
        last_weekly_try: str | None = None,
        user_id: str = "default",
        language: str | None = None,
    ) -> str:
        """Generate today's personalized advice and daily try.

        Picks the weakest health metric, maps it to a domain not tried in
        the last two weeks, and asks the generation provider for advice in
        that domain. Falls back to generic advice when generation fails.

        Args:
            latitude: Current latitude (-90..90).
            longitude: Current longitude (-180..180).
            city: Optional city name.
            current_time: Local ISO 8601 timestamp (default: now).
            profile: Profile in wire shape; defaults to the stored profile.
            health_data: Today's health data in wire shape; defaults to the
                configured health data provider.
            recent_tries: [{date, topic}] history, used when no store is configured.
            last_weekly_try: Title of the current weekly try; defaults to the
                stored one.
            user_id: Identifier for stored profile and history.
            language: "ja" or "en" (default: server setting).
        """
        start_time = time.monotonic()
        lang = language or default_language

        # --- Profile ---
        try:
            if profile is not None:
                user_profile = UserProfile.from_dict(profile)
            elif repository is not None and (stored := repository.get_profile(user_id)):
                user_profile = stored
            else:
                return _error(
                    "profile_required",
                    "No profile supplied and none stored for this user.",
                )
            validate_profile(user_profile)
        except ValidationError as exc:
            return _error("validation_error", str(exc), code=exc.code, field=exc.field)

        # --- Location and time ---
        try:
            location = Location(latitude=latitude, longitude=longitude, city=city)
            now = _parse_current_time(current_time)
        except ValueError as exc:
            return _error("invalid_input", str(exc))

        # --- Health snapshot and scores ---
        source = PayloadHealthDataProvider(health_data) if health_data else health_provider
        try:
            snapshot = ensure_scores(await source.get_daily_snapshot(now.date()))
        except (ValueError, KeyError) as exc:
            return _error("invalid_health_data", str(exc))

        # --- History and selection ---
        # Today's own record never excludes today's domain.
        if repository is not None:
            history = repository.get_try_history(user_id, window_days)
            if last_weekly_try is None:
                weekly = repository.get_last_weekly_try(user_id)
                last_weekly_try = weekly.topic if weekly else None
        else:
            history = _history_from_pairs(recent_tries, window_days)
        history = history.before(now.date())

        trace = explain_selection(snapshot.scores, history, as_of=now.date())
        logger.info(
            "Selected domain %s for user %s (weakest=%s, excluded=%s, fell_back=%s)",
            trace.domain.value,
            user_id,
            trace.weakest_metric.value,
            [d.value for d in trace.excluded],
            trace.fell_back,
        )

        request = assemble_request(
            user_profile,
            snapshot,
            location,
            RequestContextInput(
                current_time=now, history=history, last_weekly_try=last_weekly_try
            ),
            trace.domain,
        )

        # --- Generation ---
        provider_error: str | None = None
        schema_errors: list[str] = []
        attempts = 0
        try:
            result = await llm_client.generate(request, lang)
            advice, used_fallback = result.advice, result.used_fallback
            schema_errors, attempts = result.schema_errors, result.attempts
        except ProviderError as exc:
            logger.error(
                "Generation failed for domain %s (%s); serving fallback advice",
                trace.domain.value,
                exc.kind,
            )
            provider_error = exc.kind
            advice = load_fallback_advice(
                trace.domain, lang, user_profile.nickname, request.context.time_slot
            )
            used_fallback = True

        # --- Persistence ---
        if repository is not None:
            today = now.date()
            repository.append_try(user_id, TryRecord(today, trace.domain.value), window_days)
            repository.save_scores(user_id, today, snapshot.scores)
            repository.cache_advice(
                user_id, today, trace.domain.value, advice, used_fallback=used_fallback
            )
            if advice.weekly_try is not None and not used_fallback:
                repository.set_last_weekly_try(
                    user_id, advice.weekly_try.title, _week_start(today)
                )

        elapsed_ms = (time.monotonic() - start_time) * 1000
        response: dict[str, Any] = {
            **advice.to_payload(),
            "domain": trace.domain.value,
            "used_fallback": used_fallback,
            "time_slot": request.context.time_slot.value,
            "day_of_week": request.context.day_of_week.value,
            "scores": snapshot.scores.as_dict(),
            "selection": trace.to_dict(),
            "attempts": attempts,
            "duration_ms": round(elapsed_ms, 1),
            **source.get_provenance(),
        }
        if schema_errors:
            response["schema_errors"] = schema_errors
        if provider_error:
            response["provider_error"] = provider_error
        return json.dumps(response, ensure_ascii=False)

    @mcp.tool
    def record_daily_try(
        topic: str,
        try_date: str | None = None,
        user_id: str = "default",
    ) -> str:
        """Record the daily try shown to the user (replaces that day's entry).

        Args:
            topic: Domain tag (e.g. "fitness") or free-form topic.
            try_date: ISO date (default: today).
            user_id: Identifier for the stored history.
        """
        if repository is None:
            return _error("storage_disabled", "Set ENCRYPTION_KEY to enable persistence.")
        if not topic or not topic.strip():
            return _error("invalid_input", "topic must not be empty")
        try:
            day = parse_date(try_date) if try_date else date.today()
        except ValueError as exc:
            return _error("invalid_input", str(exc))

        history = repository.append_try(
            user_id, TryRecord(day, _normalize_topic(topic)), window_days
        )
        return json.dumps({"status": "recorded", "history": history.to_list()})

    @mcp.tool
    def record_weekly_try(
        topic: str,
        week_start: str | None = None,
        user_id: str = "default",
    ) -> str:
        """Record the weekly try the user took on (replaces the previous one).

        Args:
            topic: Title of the weekly try.
            week_start: ISO date inside the week (default: this week); stored
                as that week's Monday.
            user_id: Identifier for the stored weekly try.
        """
        if repository is None:
            return _error("storage_disabled", "Set ENCRYPTION_KEY to enable persistence.")
        if not topic or not topic.strip():
            return _error("invalid_input", "topic must not be empty")
        try:
            day = parse_date(week_start) if week_start else date.today()
        except ValueError as exc:
            return _error("invalid_input", str(exc))

        monday = _week_start(day)
        repository.set_last_weekly_try(user_id, topic.strip(), monday)
        return json.dumps(
            {"status": "recorded", "topic": topic.strip(), "week_start": monday.isoformat()},
            ensure_ascii=False,
        )

    @mcp.tool
    def save_profile(profile: dict, user_id: str = "default") -> str:
        """Validate and store the user's profile (encrypted at rest).

        Args:
            profile: Profile in camelCase wire shape.
            user_id: Identifier for the stored profile.
        """
        if repository is None:
            return _error("storage_disabled", "Set ENCRYPTION_KEY to enable persistence.")
        try:
            parsed = UserProfile.from_dict(profile)
            validate_profile(parsed)
        except ValidationError as exc:
            return _error("validation_error", str(exc), code=exc.code, field=exc.field)

        repository.save_profile(user_id, parsed)
        return json.dumps({
            "status": "saved",
            "user_id": user_id,
            "completion_rate": round(parsed.completion_rate, 2),
        })

    @mcp.tool
    def delete_user_data(user_id: str = "default", confirm: str = "") -> str:
        """Permanently delete the stored profile, history, scores and advice.

        Args:
            user_id: Identifier whose data is removed.
            confirm: Must be exactly 'DELETE' to proceed. Safety gate.
        """
        if repository is None:
            return _error("storage_disabled", "Set ENCRYPTION_KEY to enable persistence.")
        if confirm != "DELETE":
            return json.dumps({
                "status": "cancelled",
                "message": "Call again with confirm='DELETE'. This cannot be undone.",
            })
        rows = repository.delete_user(user_id)
        return json.dumps({"status": "deleted", "user_id": user_id, "rows_deleted": rows})
