"""Mock LLM provider for testing."""

from __future__ import annotations

import json
from collections import deque
from typing import Iterable

from tempo.core.llm.provider import ProviderResponse

DEFAULT_ADVICE: dict = {
    "greeting": "おはようございます。",
    "condition": {
        "summary": "睡眠はいつも通りとれていて、体は落ち着いた状態です。",
        "detail": "心拍変動も平均並みで、今日は無理なく活動できそうです。",
    },
    "condition_insight": "昨日の活動量が少なめだったので、今日は少し体を動かすと良いリズムが作れます。",
    "closing_message": "今日も自分のペースで過ごしてください。",
    "daily_try": {
        "title": "10分のウォーキング",
        "summary": "いつもより少しだけ歩く時間を増やしましょう。",
        "detail": "昼休みに10分ほど早歩きをしてみてください。",
    },
    "weekly_try": None,
}


class MockProvider:
    """Mock provider for testing; returns canned advice JSON.

    ``script`` entries are consumed one per call: strings are returned as
    content, exceptions are raised. Once the script is exhausted every call
    returns ``response_content``.
    """

    def __init__(
        self,
        response_content: str | None = None,
        script: Iterable[str | BaseException] = (),
    ) -> None:
        self.response_content = (
            response_content
            if response_content is not None
            else json.dumps(DEFAULT_ADVICE, ensure_ascii=False)
        )
        self._script: deque[str | BaseException] = deque(script)
        self.last_system_message: str = ""
        self.last_user_message: str = ""
        self.call_count: int = 0

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> ProviderResponse:
        self.last_system_message = system_message
        self.last_user_message = user_message
        self.call_count += 1

        content = self.response_content
        if self._script:
            step = self._script.popleft()
            if isinstance(step, BaseException):
                raise step
            content = step

        return ProviderResponse(
            content=content,
            input_tokens=len(system_message.split()) + len(user_message.split()),
            output_tokens=len(content.split()),
            model="mock",
            latency_ms=0.0,
        )
