"""Structural validation of generated advice payloads.

Only shape is checked here (required fields, title length, optional emoji
ban); the wording of generated text is not judged. The first offending field
is reported so callers can decide between regenerating and falling back.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from tempo.core.errors import SchemaError

DAILY_TRY_TITLE_MAX_LENGTH = 15
ROOT_FIELD = "(root)"

# Pictographs, dingbats, regional indicators, variation selector and ZWJ.
_EMOJI_RE = re.compile(
    "["
    "\U0001F000-\U0001FAFF"
    "\U00002600-\U000027BF"
    "\U00002B00-\U00002BFF"
    "\U0000FE0F"
    "\U0000200D"
    "]"
)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```\s*$", re.DOTALL)

# camelCase keys produced by older prompt versions.
_KEY_ALIASES = {
    "conditionInsight": "condition_insight",
    "closingMessage": "closing_message",
    "dailyTry": "daily_try",
    "weeklyTry": "weekly_try",
}

# Checked in this order; the first failure is reported.
REQUIRED_FIELDS: tuple[str, ...] = (
    "greeting",
    "condition.summary",
    "condition.detail",
    "condition_insight",
    "closing_message",
    "daily_try.title",
    "daily_try.summary",
    "daily_try.detail",
)


@dataclass(frozen=True)
class Condition:
    summary: str
    detail: str


@dataclass(frozen=True)
class TryContent:
    title: str
    summary: str
    detail: str

    def to_payload(self) -> dict[str, str]:
        return {"title": self.title, "summary": self.summary, "detail": self.detail}


@dataclass(frozen=True)
class AdviceResponse:
    """Validated advice, ready to hand to the application."""

    greeting: str
    condition: Condition
    condition_insight: str
    closing_message: str
    daily_try: TryContent
    weekly_try: TryContent | None = None

    def text_fields(self) -> list[tuple[str, str]]:
        """(dotted field name, text) for every text field, in schema order."""
        fields = [
            ("greeting", self.greeting),
            ("condition.summary", self.condition.summary),
            ("condition.detail", self.condition.detail),
            ("condition_insight", self.condition_insight),
            ("closing_message", self.closing_message),
            ("daily_try.title", self.daily_try.title),
            ("daily_try.summary", self.daily_try.summary),
            ("daily_try.detail", self.daily_try.detail),
        ]
        if self.weekly_try is not None:
            fields += [
                ("weekly_try.title", self.weekly_try.title),
                ("weekly_try.summary", self.weekly_try.summary),
                ("weekly_try.detail", self.weekly_try.detail),
            ]
        return fields

    def to_payload(self) -> dict[str, Any]:
        return {
            "greeting": self.greeting,
            "condition": {"summary": self.condition.summary, "detail": self.condition.detail},
            "condition_insight": self.condition_insight,
            "closing_message": self.closing_message,
            "daily_try": self.daily_try.to_payload(),
            "weekly_try": self.weekly_try.to_payload() if self.weekly_try else None,
        }


def extract_json(text: str) -> dict[str, Any]:
    """Parse a JSON object out of raw model text.

    Strips markdown code fences and any prose around the outermost braces.

    Raises:
        SchemaError: with field ``(root)`` when no JSON object can be parsed.
    """
    body = text.strip()
    fenced = _FENCE_RE.match(body)
    if fenced:
        body = fenced.group(1).strip()
    if not body.startswith("{"):
        start, end = body.find("{"), body.rfind("}")
        if start == -1 or end <= start:
            raise SchemaError(ROOT_FIELD, "not_json")
        body = body[start:end + 1]
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as exc:
        raise SchemaError(ROOT_FIELD, "not_json", position=exc.pos) from exc
    if not isinstance(parsed, dict):
        raise SchemaError(ROOT_FIELD, "not_an_object")
    return parsed


def _normalize_keys(payload: dict[str, Any]) -> dict[str, Any]:
    normalized = dict(payload)
    for alias, canonical in _KEY_ALIASES.items():
        if alias in normalized and canonical not in normalized:
            normalized[canonical] = normalized.pop(alias)
    return normalized


def _lookup(payload: dict[str, Any], path: str) -> Any:
    node: Any = payload
    for part in path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


def _require_text(payload: dict[str, Any], path: str, prefix: str = "") -> str:
    value = _lookup(payload, path)
    field = f"{prefix}{path}"
    if value is None:
        raise SchemaError(field, "missing")
    if not isinstance(value, str):
        raise SchemaError(field, "not_a_string")
    if not value.strip():
        raise SchemaError(field, "empty")
    return value


def _parse_try(
    payload: dict[str, Any], field: str, max_title_length: int
) -> TryContent:
    node = payload.get(field)
    if not isinstance(node, dict):
        raise SchemaError(f"{field}.title", "missing")
    prefix = f"{field}."
    title = _require_text(node, "title", prefix)
    if len(title) > max_title_length:
        raise SchemaError(f"{field}.title", "too_long", max_length=max_title_length)
    return TryContent(
        title=title,
        summary=_require_text(node, "summary", prefix),
        detail=_require_text(node, "detail", prefix),
    )


def contains_emoji(text: str) -> bool:
    return bool(_EMOJI_RE.search(text))


def validate_advice_response(
    raw: dict[str, Any] | str,
    *,
    forbid_emoji: bool = False,
    max_title_length: int = DAILY_TRY_TITLE_MAX_LENGTH,
) -> AdviceResponse:
    """Validate a generated payload and return the typed response.

    Args:
        raw: Parsed payload, or raw model text (JSON, possibly code-fenced).
        forbid_emoji: Reject payloads containing emoji/pictographs.
        max_title_length: Maximum ``daily_try.title`` length in characters.

    Raises:
        SchemaError: naming the first offending field.
    """
    payload = extract_json(raw) if isinstance(raw, str) else raw
    if not isinstance(payload, dict):
        raise SchemaError(ROOT_FIELD, "not_an_object")
    payload = _normalize_keys(payload)

    greeting = _require_text(payload, "greeting")
    condition = Condition(
        summary=_require_text(payload, "condition.summary"),
        detail=_require_text(payload, "condition.detail"),
    )
    condition_insight = _require_text(payload, "condition_insight")
    closing_message = _require_text(payload, "closing_message")
    daily_try = _parse_try(payload, "daily_try", max_title_length)

    weekly_try = None
    if payload.get("weekly_try") is not None:
        weekly_try = _parse_try(payload, "weekly_try", max_title_length)

    advice = AdviceResponse(
        greeting=greeting,
        condition=condition,
        condition_insight=condition_insight,
        closing_message=closing_message,
        daily_try=daily_try,
        weekly_try=weekly_try,
    )

    if forbid_emoji:
        for field, text in advice.text_fields():
            if contains_emoji(text):
                raise SchemaError(field, "emoji_not_allowed")

    return advice
