"""User-message rendering and MCP prompts for daily advice."""

from __future__ import annotations

import json

from fastmcp import FastMCP

from tempo.domains.advice.domain_logic.health_models import Metric
from tempo.domains.advice.domain_logic.labels import display_name, normalize_language
from tempo.domains.advice.domain_logic.request_assembler import AdviceRequest

_HEADERS = {
    "ja": {
        "intro": "以下のデータをもとに、今日のアドバイスをJSONで作成してください。",
        "domain": "今日のトライの領域",
        "scores": "スコア（0-100、7日平均=50）",
        "recent": "最近のトライ（重複を避けてください）",
        "none": "なし",
    },
    "en": {
        "intro": "Write today's advice as JSON based on the data below.",
        "domain": "Daily try domain",
        "scores": "Scores (0-100, 7-day average = 50)",
        "recent": "Recent tries (avoid repeating these)",
        "none": "none",
    },
}


def build_user_message(request: AdviceRequest, language: str = "ja") -> str:
    """Render the provider user message for an assembled request."""
    lang = normalize_language(language)
    text = _HEADERS[lang]
    domain = request.domain

    lines = [
        text["intro"],
        "",
        f"{text['domain']}: {display_name(domain, lang)} ({domain.value})",
    ]

    scores = request.health_data.scores
    if scores is not None:
        rendered = ", ".join(
            f"{display_name(metric, lang)} {scores.get(metric):g}" for metric in Metric
        )
        lines.append(f"{text['scores']}: {rendered}")

    recent = request.context.recent_daily_tries
    lines.append(f"{text['recent']}: {', '.join(recent) if recent else text['none']}")
    lines += [
        "",
        "```json",
        json.dumps(request.to_payload(), ensure_ascii=False, indent=2),
        "```",
    ]
    return "\n".join(lines)


def register_advice_prompts(mcp: FastMCP) -> None:
    """Register daily advice MCP prompts."""

    @mcp.prompt()
    def daily_advice_prompt(nickname: str = "", language: str = "ja") -> str:
        """Prompt template for requesting today's personalized advice."""
        if normalize_language(language) == "en":
            who = f" for {nickname}" if nickname else ""
            return f"""Please prepare today's advice{who}:

1. Call `validate_profile` with my profile and fix anything it reports
2. Call `daily_advice` with my location and today's health data
3. Summarize my condition in two sentences and present the daily try

Keep it warm and practical. No medical diagnoses."""

        who = f"{nickname}さんの" if nickname else ""
        return f"""{who}今日のアドバイスを用意してください：

1. `validate_profile` でプロフィールを確認し、問題があれば教えてください
2. 現在地と今日の健康データで `daily_advice` を呼び出してください
3. 体調を2文で要約し、今日のトライを紹介してください

温かく、実践しやすい内容でお願いします。医学的な診断はしないでください。"""
