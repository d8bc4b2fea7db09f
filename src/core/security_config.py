"""Security configuration constants for the idea finder API.

Centralizes the keys redacted from logs and the error fields each
environment may expose to clients.
"""

import re


# Whole keys that are always redacted
SENSITIVE_KEYS: set[str] = {
    "password",
    "hashed_password",
    "secret",
    "secret_key",
    "token",
    "access_token",
    "refresh_token",
    "authorization",
    "api_key",
    "apikey",
    "jwt",
    "session_id",
    "email",
    "username",
    "set-cookie",
    "cookie",
    "x-api-key",
    "x-auth-token",
    "upstash_redis_rest_token",
}

# Any key containing one of these tokens (split on non-alphanumerics) is
# redacted too, e.g. ``gemini_api_key`` or ``X-Upstash-Token``.
SENSITIVE_TOKENS: set[str] = {
    "password",
    "secret",
    "token",
    "authorization",
    "bearer",
    "cookie",
    "credential",
    "credentials",
    "email",
}

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")

# Production error responses only carry these fields
PRODUCTION_ERROR_FIELDS: set[str] = {
    "correlation_id",
    "type",
}

# Development adds diagnostics
DEVELOPMENT_ERROR_FIELDS: set[str] = PRODUCTION_ERROR_FIELDS | {
    "details",
    "traceback",
    "exception_type",
    "validation_errors",
}


def get_allowed_error_fields(environment: str) -> set[str]:
    """Get allowed error response fields based on environment."""
    if environment == "production":
        return PRODUCTION_ERROR_FIELDS.copy()
    return DEVELOPMENT_ERROR_FIELDS.copy()


def is_sensitive_key(key: str) -> bool:
    """Check if a key should be considered sensitive and redacted.

    ``keywords`` or ``key_points`` are not sensitive; ``api_key`` and
    ``OPENAI_API_KEY`` are.
    """
    key_lower = key.lower()
    if key_lower in SENSITIVE_KEYS:
        return True
    if key_lower.endswith("api_key") or key_lower.endswith("api-key"):
        return True
    tokens = set(_TOKEN_SPLIT.split(key_lower))
    return bool(tokens & SENSITIVE_TOKENS)
