"""Tests for rate limiting functionality.

Tests cover:
- Graceful degradation when Redis fails
- 429 response when rate limit exceeded
- Client identifier extraction from various sources
"""

from __future__ import annotations

import time
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException, Request

from core.ratelimit import _get_client_identifier, check_rate_limit


def _request(path: str = "/api/v1/auth/login", forwarded: str | None = None):
    mock_request = MagicMock(spec=Request)
    mock_request.url.path = path
    mock_request.headers.get.return_value = forwarded
    mock_request.client.host = "192.168.1.1"
    return mock_request


class TestCheckRateLimit:
    """Tests for the check_rate_limit dependency."""

    @pytest.mark.asyncio
    async def test_allows_request_on_redis_error(self) -> None:
        mock_settings = MagicMock(RATE_LIMIT_REQUESTS=10)
        mock_ratelimiter = MagicMock()
        mock_ratelimiter.limit = AsyncMock(
            side_effect=Exception("Redis connection failed")
        )

        with patch("core.ratelimit.get_ratelimiter", return_value=mock_ratelimiter):
            # Fails open
            await check_rate_limit(_request(), mock_settings)

        mock_ratelimiter.limit.assert_awaited_once_with(
            "192.168.1.1:/api/v1/auth/login"
        )

    @pytest.mark.asyncio
    async def test_returns_429_when_exceeded(self) -> None:
        mock_settings = MagicMock(RATE_LIMIT_REQUESTS=10)
        mock_response = MagicMock(
            allowed=False,
            remaining=0,
            reset=int(time.time() * 1000) + 30000,
        )
        mock_ratelimiter = MagicMock()
        mock_ratelimiter.limit = AsyncMock(return_value=mock_response)

        with patch("core.ratelimit.get_ratelimiter", return_value=mock_ratelimiter):
            with pytest.raises(HTTPException) as exc_info:
                await check_rate_limit(_request(), mock_settings)

        assert exc_info.value.status_code == 429
        headers = exc_info.value.headers or {}
        assert 1 <= int(headers["Retry-After"]) <= 30
        assert headers["X-RateLimit-Limit"] == "10"
        assert headers["X-RateLimit-Remaining"] == "0"

    @pytest.mark.asyncio
    async def test_allowed_request_passes(self) -> None:
        mock_ratelimiter = MagicMock()
        mock_ratelimiter.limit = AsyncMock(return_value=MagicMock(allowed=True))

        with patch("core.ratelimit.get_ratelimiter", return_value=mock_ratelimiter):
            await check_rate_limit(_request(), MagicMock())

    @pytest.mark.asyncio
    async def test_allows_when_not_configured(self) -> None:
        with patch("core.ratelimit.get_ratelimiter", return_value=None):
            await check_rate_limit(_request(), MagicMock())


class TestGetClientIdentifier:
    """Tests for client identifier extraction."""

    def test_uses_first_forwarded_for_hop(self) -> None:
        mock_request = _request(forwarded="  10.0.0.1  , 192.168.1.1")
        result = _get_client_identifier(mock_request)
        assert result == "10.0.0.1:/api/v1/auth/login"

    def test_uses_client_host(self) -> None:
        result = _get_client_identifier(_request(path="/api/v1/auth/register"))
        assert result == "192.168.1.1:/api/v1/auth/register"

    def test_unknown_client_gets_unique_bucket(self) -> None:
        mock_request = _request()
        mock_request.client = None

        result = _get_client_identifier(mock_request)

        client, path = result.rsplit(":", 1)
        assert client.startswith("unknown:")
        uuid.UUID(client.split(":", 1)[1])
        assert path == "/api/v1/auth/login"
