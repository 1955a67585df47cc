"""Advice generation client: the bridge between assembled requests and LLM calls.

Every provider call is time-boxed. Retryable provider failures are retried
with bounded exponential backoff. Payloads that fail schema or content checks
are regenerated a bounded number of times before the generic fallback advice
for the selected domain is returned.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

from tempo.core.errors import ProviderError, SchemaError
from tempo.core.llm.provider import LLMProvider, ProviderResponse
from tempo.core.llm.response import enforce_guardrails
from tempo.core.llm.system_prompt import build_full_system_prompt
from tempo.domains.advice.domain_logic.labels import normalize_language
from tempo.domains.advice.domain_logic.request_assembler import AdviceRequest
from tempo.domains.advice.domain_logic.response_validator import (
    DAILY_TRY_TITLE_MAX_LENGTH,
    AdviceResponse,
    validate_advice_response,
)
from tempo.domains.advice.prompts.advice_prompts import build_user_message
from tempo.domains.advice.resources.fallback import load_fallback_advice

if TYPE_CHECKING:
    from tempo.core.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationPolicy:
    """Timeout, retry and validation knobs for advice generation."""

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 8.0
    schema_max_retries: int = 2
    forbid_emoji: bool = True
    title_max_length: int = DAILY_TRY_TITLE_MAX_LENGTH

    def backoff_delay(self, retry: int) -> float:
        """Delay before retry number ``retry`` (0-based): ``min(base * 2**retry, max)``."""
        return min(self.backoff_base_seconds * (2 ** retry), self.backoff_max_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> GenerationPolicy:
        return cls(
            timeout_seconds=settings.provider_timeout_seconds,
            max_retries=settings.provider_max_retries,
            backoff_base_seconds=settings.provider_backoff_base_seconds,
            backoff_max_seconds=settings.provider_backoff_max_seconds,
            schema_max_retries=settings.schema_max_retries,
            forbid_emoji=settings.forbid_emoji,
            title_max_length=settings.daily_try_title_max_length,
        )


@dataclass
class GenerationResult:
    """Validated advice plus how it was obtained."""

    advice: AdviceResponse
    used_fallback: bool
    attempts: int
    usage: dict[str, int] = field(default_factory=dict)
    schema_errors: list[str] = field(default_factory=list)


class AdviceGenerationClient:
    """Invokes the generation provider for an assembled AdviceRequest."""

    def __init__(
        self,
        provider: LLMProvider,
        policy: GenerationPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.policy = policy or GenerationPolicy()
        self._sleep = sleep

    async def generate(
        self,
        request: AdviceRequest,
        language: str = "ja",
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> GenerationResult:
        """Generate and validate advice for ``request``.

        Raises:
            ProviderError: non-retryable failure, or retryable failures that
                exhausted ``max_retries``.
        """
        lang = normalize_language(language)
        system_message = build_full_system_prompt(lang, self.policy.title_max_length)
        user_message = build_user_message(request, lang)
        domain = request.domain

        usage = {"input_tokens": 0, "output_tokens": 0}
        schema_errors: list[str] = []
        attempts = 0

        for round_no in range(self.policy.schema_max_retries + 1):
            response, calls = await self._call_with_retries(
                system_message, user_message, max_tokens, temperature
            )
            attempts += calls
            usage["input_tokens"] += response.input_tokens
            usage["output_tokens"] += response.output_tokens

            logger.info(
                "Advice generation: domain=%s, model=%s, tokens=%d+%d, latency=%.0fms",
                domain.value,
                response.model,
                response.input_tokens,
                response.output_tokens,
                response.latency_ms,
            )

            try:
                advice = validate_advice_response(
                    response.content,
                    forbid_emoji=self.policy.forbid_emoji,
                    max_title_length=self.policy.title_max_length,
                )
                enforce_guardrails(advice)
            except SchemaError as exc:
                schema_errors.append(f"{exc.field}: {exc.reason}")
                logger.warning(
                    "Generated advice rejected (round %d/%d): field=%s reason=%s",
                    round_no + 1,
                    self.policy.schema_max_retries + 1,
                    exc.field,
                    exc.reason,
                )
                continue

            return GenerationResult(
                advice=advice,
                used_fallback=False,
                attempts=attempts,
                usage=usage,
                schema_errors=schema_errors,
            )

        logger.warning(
            "Schema retries exhausted for domain=%s; serving fallback advice", domain.value
        )
        fallback = load_fallback_advice(
            domain,
            lang,
            request.user_profile.nickname,
            request.context.time_slot,
        )
        return GenerationResult(
            advice=fallback,
            used_fallback=True,
            attempts=attempts,
            usage=usage,
            schema_errors=schema_errors,
        )

    async def _call_with_retries(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int,
        temperature: float,
    ) -> tuple[ProviderResponse, int]:
        """One logical provider call; returns the response and the call count."""
        retry = 0
        while True:
            try:
                response = await asyncio.wait_for(
                    self.provider.generate(
                        system_message=system_message,
                        user_message=user_message,
                        max_tokens=max_tokens,
                        temperature=temperature,
                    ),
                    timeout=self.policy.timeout_seconds,
                )
                return response, retry + 1
            except asyncio.TimeoutError as exc:
                error = ProviderError(
                    f"Provider call timed out after {self.policy.timeout_seconds:g}s",
                    kind="timeout",
                )
                error.__cause__ = exc
            except ProviderError as exc:
                error = exc

            if not error.retryable or retry >= self.policy.max_retries:
                logger.error(
                    "Provider call failed: kind=%s, retryable=%s, attempts=%d",
                    error.kind,
                    error.retryable,
                    retry + 1,
                )
                raise error

            delay = self.policy.backoff_delay(retry)
            logger.warning(
                "Retryable provider error (%s); retry %d/%d in %.2fs",
                error.kind,
                retry + 1,
                self.policy.max_retries,
                delay,
            )
            await self._sleep(delay)
            retry += 1
