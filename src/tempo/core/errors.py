"""Error taxonomy for the daily advice pipeline.

Each error carries a ``context`` dict (field, domain, date, ...) so callers
can log it without re-deriving state.
"""

from __future__ import annotations

from typing import Any


class TempoError(Exception):
    """Base class for all advice pipeline errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = {k: v for k, v in context.items() if v is not None}


class ValidationError(TempoError):
    """A user profile field violates its constraints.

    Always surfaced to the caller before any request is assembled.
    """

    def __init__(self, code: str, field: str, message: str = "") -> None:
        super().__init__(message or f"{field}: {code}", code=code, field=field)
        self.code = code
        self.field = field


class PreconditionError(TempoError):
    """The request assembler was called on unvalidated or incomplete input.

    Treated as a programming error, fatal to the current request.
    """

    def __init__(self, reason: str, **context: Any) -> None:
        super().__init__(f"Precondition failed: {reason}", reason=reason, **context)
        self.reason = reason


class SchemaError(TempoError):
    """A generated payload failed structural validation.

    ``field`` names the first offending field using dotted notation
    (e.g. ``daily_try.title``) or ``(root)`` for unparseable payloads.
    """

    def __init__(self, field: str, reason: str, **context: Any) -> None:
        super().__init__(f"{field}: {reason}", field=field, reason=reason, **context)
        self.field = field
        self.reason = reason


class ProviderError(TempoError):
    """The external generation call failed.

    ``kind`` is one of: timeout, network, rate_limit, server, auth,
    bad_request, unknown. Only ``retryable`` errors are retried.
    """

    RETRYABLE_KINDS = frozenset({"timeout", "network", "rate_limit", "server"})

    def __init__(
        self,
        message: str,
        *,
        kind: str = "unknown",
        retryable: bool | None = None,
        status_code: int | None = None,
        provider: str | None = None,
    ) -> None:
        super().__init__(message, kind=kind, status_code=status_code, provider=provider)
        self.kind = kind
        self.retryable = kind in self.RETRYABLE_KINDS if retryable is None else retryable
        self.status_code = status_code
        self.provider = provider
