"""Centralized error handling and logging for the idea finder API.

This module provides:
- Global exception handler rendering every failure as the ErrorResponse envelope
- Structured logging with correlation IDs and redaction of sensitive keys
- Environment-aware error bodies (generic in production, detailed in dev)
"""

import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pythonjsonlogger.json import JsonFormatter
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from core.config import get_settings
from core.exceptions import (
    DomainError,
    DuplicateUserError,
    MissingTitleError,
    TrendsUnavailableError,
    UserNotFoundError,
)
from core.security_config import get_allowed_error_fields, is_sensitive_key
from schemas.api import ErrorResponse
from services.ai.exceptions import CompletionError, GenerationFailed


# Context variable for correlation ID tracking across async calls
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

logger = logging.getLogger(__name__)

# (status code, client message) per domain error
DOMAIN_ERRORS: dict[type[DomainError], tuple[int, str]] = {
    DuplicateUserError: (
        status.HTTP_409_CONFLICT,
        "The requested resource already exists",
    ),
    UserNotFoundError: (
        status.HTTP_404_NOT_FOUND,
        "The requested resource was not found",
    ),
    MissingTitleError: (status.HTTP_400_BAD_REQUEST, "Title is required"),
    TrendsUnavailableError: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Failed to fetch trends",
    ),
}

GENERATION_MESSAGES: dict[str, str] = {
    "idea": "Failed to generate ideas",
    "roadmap": "Failed to generate roadmap",
    "pitchDeck": "Failed to generate pitch deck",
    "enhancement": "Failed to enhance idea",
}


def get_correlation_id() -> str:
    """Get or create a correlation ID for request tracing."""
    correlation_id: str | None = _correlation_id_var.get()
    if not correlation_id:
        new_id = str(uuid.uuid4())
        _correlation_id_var.set(new_id)
        return new_id
    return correlation_id


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id_var.set(correlation_id)


class StructuredLogger:
    """Structured logger that includes correlation IDs and sanitized data."""

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(logger_name)

    def _log_with_context(
        self,
        level: int,
        message: str,
        extra_data: dict[str, Any] | None = None,
        exc_info: bool = False,
    ) -> None:
        correlation_id = get_correlation_id()
        log_data = {
            "correlation_id": correlation_id,
            **self._sanitize_data(extra_data or {}),
        }
        if get_settings().ENVIRONMENT == "production":
            # JsonFormatter merges `extra` keys into the JSON object
            self.logger.log(level, message, extra=log_data, exc_info=exc_info)
        else:
            self.logger.log(
                level,
                f"[{correlation_id}] {message}",
                extra={"structured_data": log_data},
                exc_info=exc_info,
            )

    def _sanitize_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Remove or mask sensitive data from log entries."""
        if not isinstance(data, dict):
            return {}
        return {
            key: "[REDACTED]" if is_sensitive_key(key) else self._sanitize_value(value)
            for key, value in data.items()
        }

    def _sanitize_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self._sanitize_data(value)
        if isinstance(value, list):
            return [self._sanitize_value(item) for item in value]
        return value

    def info(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._log_with_context(logging.ERROR, message, kwargs, exc_info=True)


structured_logger = StructuredLogger(__name__)


class ExceptionNormalizationMiddleware(BaseHTTPMiddleware):
    """Catch any uncaught Exception and delegate to global_exception_handler."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:  # noqa: BLE001
            return await global_exception_handler(request, exc)


def _build_error_response(
    *,
    correlation_id: str,
    error_type: str,
    message: str,
    environment: str,
    details: dict[str, Any] | None = None,
    traceback_str: str | None = None,
    exception_type: str | None = None,
    validation_errors: Any | None = None,
    status_code: int = 500,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Construct a sanitized JSON error response respecting environment rules."""
    allowed_fields = get_allowed_error_fields(environment)

    error_body: dict[str, Any] = {
        "correlation_id": correlation_id,
        "type": error_type,
    }
    optional = {
        "details": details,
        "traceback": traceback_str,
        "exception_type": exception_type,
        "validation_errors": validation_errors,
    }
    for field, value in optional.items():
        if field in allowed_fields and value is not None:
            error_body[field] = value

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, error=error_body).model_dump(),
        headers=headers,
    )


def _format_traceback(exc: BaseException) -> str:
    return "".join(traceback.format_exception(exc)).strip()


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any exception as the ErrorResponse envelope.

    Every body carries the correlation ID. Production never includes
    details, exception types or tracebacks.
    """
    environment = get_settings().ENVIRONMENT
    correlation_id = get_correlation_id()
    dev = environment != "production"

    if isinstance(exc, StarletteHTTPException):
        detail = exc.detail
        return _build_error_response(
            correlation_id=correlation_id,
            error_type="http_error",
            message=detail if isinstance(detail, str) else "An HTTP error occurred",
            environment=environment,
            details={"detail": detail} if dev else None,
            exception_type=exc.__class__.__name__ if dev else None,
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    if isinstance(exc, ValidationError | RequestValidationError):
        errors = exc.errors()
        structured_logger.warning("Validation error", validation_errors=errors)
        return _build_error_response(
            correlation_id=correlation_id,
            error_type="validation_error",
            message="Invalid request data provided",
            environment=environment,
            validation_errors=errors,
            status_code=422,
        )

    if isinstance(exc, GenerationFailed):
        structured_logger.error(
            "Generation failed",
            kind=exc.kind,
            error_code=exc.error_code,
            reason=exc.message,
        )
        cause = exc.__cause__
        return _build_error_response(
            correlation_id=correlation_id,
            error_type="generation_error",
            message=GENERATION_MESSAGES.get(
                exc.kind or "", "Failed to generate content"
            ),
            environment=environment,
            details={
                "reason": exc.message,
                "error_code": (
                    cause.error_code
                    if isinstance(cause, CompletionError)
                    else exc.error_code
                ),
            },
        )

    if isinstance(exc, IntegrityError):
        structured_logger.error("Integrity constraint violation", error=str(exc))
        return _build_error_response(
            correlation_id=correlation_id,
            error_type="integrity_error",
            message="A data integrity constraint was violated",
            environment=environment,
            status_code=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, DomainError):
        status_code, message = DOMAIN_ERRORS.get(
            type(exc), (status.HTTP_400_BAD_REQUEST, "Domain error")
        )
        structured_logger.warning(
            "Domain error", error_type=exc.__class__.__name__, domain_message=str(exc)
        )
        return _build_error_response(
            correlation_id=correlation_id,
            error_type="domain_error",
            message=message,
            environment=environment,
            details={"reason": str(exc)} if str(exc) else None,
            status_code=status_code,
        )

    structured_logger.exception(
        "Unhandled exception", exception_type=exc.__class__.__name__, error=str(exc)
    )
    return _build_error_response(
        correlation_id=correlation_id,
        error_type="internal_server_error",
        message="An internal error occurred",
        environment=environment,
        traceback_str=_format_traceback(exc) if dev else None,
        exception_type=exc.__class__.__name__ if dev else None,
    )


def setup_logging() -> None:
    """Configure root logging once: JSON in production, plain text elsewhere."""
    settings = get_settings()
    log_level = logging.DEBUG if settings.ENVIRONMENT == "development" else logging.INFO
    root_logger = logging.getLogger()

    # Idempotent: never stack duplicate handlers
    if root_logger.handlers:
        return

    formatter: logging.Formatter
    if settings.ENVIRONMENT == "production":
        formatter = JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    if settings.ENVIRONMENT == "production":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
