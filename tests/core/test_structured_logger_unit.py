import logging

import pytest

from core.error_handler import StructuredLogger, set_correlation_id
from core.security_config import get_allowed_error_fields, is_sensitive_key


def test_structured_logger_redacts_sensitive_keys():
    logger = StructuredLogger("tests")

    # allowlist: these are test fixture values, not real secrets
    data = {
        "password": "placeholder_password",  # pragma: allowlist secret
        "email": "me@example.com",
        "name": "alice",
        "nested": {"gemini_api_key": "placeholder", "domain": "Fintech"},
        "items": [{"access_token": "placeholder"}],
    }
    sanitized = logger._sanitize_data(data)

    assert sanitized["password"] == "[REDACTED]"
    assert sanitized["email"] == "[REDACTED]"
    assert sanitized["name"] == "alice"
    assert sanitized["nested"] == {"gemini_api_key": "[REDACTED]", "domain": "Fintech"}
    assert sanitized["items"] == [{"access_token": "[REDACTED]"}]


@pytest.mark.parametrize(
    "key",
    ["Authorization", "OPENAI_API_KEY", "x-api-key", "X-Upstash-Token", "db_password"],
)
def test_sensitive_keys(key):
    assert is_sensitive_key(key) is True


@pytest.mark.parametrize(
    "key", ["keywords", "key_points", "keyPoints", "title", "tokenizer_name"]
)
def test_domain_keys_are_not_sensitive(key):
    assert is_sensitive_key(key) is False


def test_allowed_error_fields_by_environment():
    assert get_allowed_error_fields("production") == {"correlation_id", "type"}
    assert "traceback" in get_allowed_error_fields("development")
    assert "traceback" in get_allowed_error_fields("test")


def test_log_line_carries_correlation_id(caplog):
    set_correlation_id("cid-123")
    logger = StructuredLogger("tests.structured")

    with caplog.at_level(logging.INFO, logger="tests.structured"):
        logger.info("Generation started", kind="idea")

    assert "[cid-123] Generation started" in caplog.text
    record = caplog.records[-1]
    assert record.structured_data == {"correlation_id": "cid-123", "kind": "idea"}
    set_correlation_id(None)
