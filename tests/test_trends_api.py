"""Trends route tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from httpx import AsyncClient

from core.exceptions import TrendsUnavailableError
from schemas.trends import TrendQuery, TrendsResponse


TRENDS_URL = "/api/v1/trends"


@pytest.mark.asyncio
async def test_trends_fallback_message(authed_client: AsyncClient) -> None:
    trends = TrendsResponse(
        top=[TrendQuery(name="ai tools", value=100)],
        keyword="AI",
        region="US",
        fallback=True,
    )
    with patch(
        "api.v1.trends.get_trends", AsyncMock(return_value=trends)
    ) as get_trends:
        resp = await authed_client.get(TRENDS_URL, params={"keywords": "AI"})

    assert resp.status_code == status.HTTP_200_OK
    body = resp.json()
    assert body["message"] == "Fallback trend data"
    assert body["data"]["fallback"] is True
    assert body["data"]["top"] == [{"name": "ai tools", "value": 100}]
    get_trends.assert_awaited_once_with(domain=None, keywords="AI", region=None)


@pytest.mark.asyncio
async def test_trends_live_message(authed_client: AsyncClient) -> None:
    trends = TrendsResponse(rising=[TrendQuery(name="agents", value="Breakout")])
    with patch("api.v1.trends.get_trends", AsyncMock(return_value=trends)):
        resp = await authed_client.get(
            TRENDS_URL, params={"domain": "B2B", "region": "Global"}
        )

    body = resp.json()
    assert body["message"] == "Trends fetched"
    assert body["data"]["rising"][0]["value"] == "Breakout"


@pytest.mark.asyncio
async def test_trends_unavailable_is_server_error(authed_client: AsyncClient) -> None:
    with patch(
        "api.v1.trends.get_trends",
        AsyncMock(side_effect=TrendsUnavailableError("csv missing")),
    ):
        resp = await authed_client.get(TRENDS_URL)

    assert resp.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert resp.json()["message"] == "Failed to fetch trends"


@pytest.mark.asyncio
async def test_trends_requires_authentication(db_client: AsyncClient) -> None:
    resp = await db_client.get(TRENDS_URL)
    assert resp.status_code == status.HTTP_401_UNAUTHORIZED
