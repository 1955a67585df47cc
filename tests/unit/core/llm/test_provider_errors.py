"""Tests for SDK error classification and the provider factory."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from tempo.core.errors import ProviderError
from tempo.core.llm.provider import LLMProvider, create_provider, translate_sdk_error
from tempo.core.llm.providers.mock import MockProvider


class _APIError(Exception):
    pass


class _APIConnectionError(_APIError):
    pass


class _APITimeoutError(_APIConnectionError):
    pass


class _APIStatusError(_APIError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class _RateLimitError(_APIStatusError):
    pass


class _AuthenticationError(_APIStatusError):
    pass


class _PermissionDeniedError(_APIStatusError):
    pass


class _BadRequestError(_APIStatusError):
    pass


class _UnprocessableEntityError(_APIStatusError):
    pass


class _NotFoundError(_APIStatusError):
    pass


# Mirrors the exception hierarchy shared by the anthropic and openai SDKs.
FAKE_SDK = SimpleNamespace(
    APIError=_APIError,
    APIConnectionError=_APIConnectionError,
    APITimeoutError=_APITimeoutError,
    APIStatusError=_APIStatusError,
    RateLimitError=_RateLimitError,
    AuthenticationError=_AuthenticationError,
    PermissionDeniedError=_PermissionDeniedError,
    BadRequestError=_BadRequestError,
    UnprocessableEntityError=_UnprocessableEntityError,
    NotFoundError=_NotFoundError,
)


@pytest.mark.parametrize(
    "exc,kind,retryable",
    [
        (_APITimeoutError(), "timeout", True),
        (_APIConnectionError(), "network", True),
        (_RateLimitError(429), "rate_limit", True),
        (_APIStatusError(503), "server", True),
        (_AuthenticationError(401), "auth", False),
        (_PermissionDeniedError(403), "auth", False),
        (_BadRequestError(400), "bad_request", False),
        (_NotFoundError(404), "bad_request", False),
        (_APIStatusError(409), "unknown", False),
        (_APIError(), "unknown", False),
    ],
)
def test_sdk_errors_classified(exc, kind, retryable):
    error = translate_sdk_error(exc, FAKE_SDK, "anthropic")
    assert isinstance(error, ProviderError)
    assert error.kind == kind
    assert error.retryable is retryable
    assert error.provider == "anthropic"


def test_status_code_kept():
    error = translate_sdk_error(_RateLimitError(429), FAKE_SDK, "openai")
    assert error.status_code == 429
    assert error.context["status_code"] == 429


def test_explicit_retryable_overrides_kind():
    assert ProviderError("x", kind="server", retryable=False).retryable is False


class TestCreateProvider:
    def test_mock_provider(self):
        provider = create_provider("mock")
        assert isinstance(provider, MockProvider)
        assert isinstance(provider, LLMProvider)

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_provider("gemini")

    def test_anthropic_provider_disables_sdk_retries(self):
        provider = create_provider("anthropic", api_key="test-key", model="claude-test")
        assert provider.model == "claude-test"
        assert provider.client.max_retries == 0

    def test_openai_provider_defaults_model(self):
        provider = create_provider("openai", api_key="test-key")
        assert provider.model == "gpt-4o"
        assert provider.client.max_retries == 0
