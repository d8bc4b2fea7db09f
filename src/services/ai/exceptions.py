"""Error taxonomy for the completion gateway and generation orchestrator.

The gateway raises one of the classified ``CompletionError`` subclasses;
the orchestrator decides from the message whether the failure is masked
behind a fallback document or surfaced as ``GenerationFailed``. Each error
carries a stable ``error_code`` for logging and the error envelope.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CompletionError(Exception):
    """Base class for completion and generation errors."""

    message: str
    error_code: str

    def __str__(self) -> str:
        return self.message


class GatewayAuthError(CompletionError):
    def __init__(self, message: str = "Provider rejected the credentials") -> None:
        super().__init__(message=message, error_code="auth_error")


class GatewayQuotaOrRateLimit(CompletionError):
    def __init__(self, message: str = "Provider quota or rate limit exceeded") -> None:
        super().__init__(message=message, error_code="quota_or_rate_limit")


class GatewayTransportError(CompletionError):
    def __init__(self, message: str = "Could not reach the provider") -> None:
        super().__init__(message=message, error_code="transport_error")


class GatewayUpstreamError(CompletionError):
    """Non-2xx (or unusable) response from the provider."""

    def __init__(
        self,
        message: str = "Provider returned an error",
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message=message, error_code="upstream_error")
        self.status_code = status_code
        self.body = body


class GenerationFailed(CompletionError):
    """A generation failure that is not masked by a fallback document."""

    def __init__(self, message: str, kind: str | None = None) -> None:
        super().__init__(message=message, error_code="generation_failed")
        self.kind = kind
