"""MCP Resources for advice selection tables and fallback content."""

from __future__ import annotations

import json

from fastmcp import FastMCP

from tempo.domains.advice.domain_logic.candidate_selector import (
    ELIGIBLE_DOMAINS,
    METRIC_PRIORITY,
)
from tempo.domains.advice.domain_logic.labels import display_name, normalize_language
from tempo.domains.advice.domain_logic.profile_models import Domain
from tempo.domains.advice.domain_logic.try_history import LOOKBACK_DAYS
from tempo.domains.advice.resources.fallback import fallback_payload


def register_advice_resources(mcp: FastMCP) -> None:
    """Register advice discovery resources on the MCP server."""

    @mcp.resource("advice://selection/table")
    def selection_table_resource() -> str:
        """The weakest-metric to domain table used for daily try selection."""
        return json.dumps(
            {
                "metric_priority": [m.value for m in METRIC_PRIORITY],
                "eligible_domains": {
                    metric.value: [d.value for d in domains]
                    for metric, domains in ELIGIBLE_DOMAINS.items()
                },
                "lookback_days": LOOKBACK_DAYS,
            },
            indent=2,
        )

    @mcp.resource("advice://fallback/{language}")
    def fallback_advice_resource(language: str) -> str:
        """Generic fallback daily tries for every domain in one language."""
        lang = normalize_language(language)
        return json.dumps(
            {
                "language": lang,
                "domains": {
                    domain.value: {
                        "label": display_name(domain, lang),
                        "daily_try": fallback_payload(domain, lang, "")["daily_try"],
                    }
                    for domain in Domain
                },
            },
            ensure_ascii=False,
            indent=2,
        )
