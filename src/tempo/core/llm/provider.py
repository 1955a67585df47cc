"""LLM provider protocol: abstract interface for advice generation calls."""

from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Protocol, runtime_checkable

from tempo.core.errors import ProviderError


@dataclass
class ProviderResponse:
    """Response from an LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    latency_ms: float


@runtime_checkable
class LLMProvider(Protocol):
    """Abstract interface for advice generation calls.

    Implementations raise ``ProviderError`` for every failure of the
    underlying SDK call.
    """

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> ProviderResponse: ...


def translate_sdk_error(exc: Exception, sdk: ModuleType, provider: str) -> ProviderError:
    """Map an anthropic/openai SDK exception to a classified ProviderError.

    Both SDKs share the same exception hierarchy names.
    """
    status = getattr(exc, "status_code", None)
    if isinstance(exc, sdk.APITimeoutError):
        kind = "timeout"
    elif isinstance(exc, sdk.APIConnectionError):
        kind = "network"
    elif isinstance(exc, sdk.RateLimitError):
        kind = "rate_limit"
    elif isinstance(exc, (sdk.AuthenticationError, sdk.PermissionDeniedError)):
        kind = "auth"
    elif isinstance(exc, (sdk.BadRequestError, sdk.UnprocessableEntityError, sdk.NotFoundError)):
        kind = "bad_request"
    elif isinstance(exc, sdk.APIStatusError) and status is not None and status >= 500:
        kind = "server"
    else:
        kind = "unknown"
    return ProviderError(
        f"{provider} call failed ({kind}): {exc}",
        kind=kind,
        status_code=status,
        provider=provider,
    )


def create_provider(
    provider_name: str,
    api_key: str = "",
    model: str = "",
) -> LLMProvider:
    """Factory function to create an LLM provider by name.

    Args:
        provider_name: "anthropic", "openai", or "mock"
        api_key: API key for the provider.
        model: Model identifier override.

    Returns:
        An LLMProvider instance.
    """
    if provider_name == "anthropic":
        from tempo.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model or "claude-sonnet-4-5-20250929")
    elif provider_name == "openai":
        from tempo.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model or "gpt-4o")
    elif provider_name == "mock":
        from tempo.core.llm.providers.mock import MockProvider

        return MockProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
