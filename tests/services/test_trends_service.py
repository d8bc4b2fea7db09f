"""Trend data: CSV parsing, live payloads and fallback selection."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from core.config import get_settings
from core.exceptions import TrendsUnavailableError
from schemas.trends import TrendsResponse
from services.trends import (
    _parse_live_payload,
    fetch_live_trends,
    get_trends,
    load_fallback_trends,
    parse_related_queries_csv,
)


CSV = """TOP
ai tools,100
chatgpt,92

not a line
broken,
RISING
ai agents,Breakout
no code ai,+250%
"""


def _settings(**overrides: object) -> MagicMock:
    settings = MagicMock()
    settings.TRENDS_API_URL = None
    settings.TRENDS_FALLBACK_CSV = get_settings().TRENDS_FALLBACK_CSV
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


def test_parse_sections_and_skip_malformed() -> None:
    top, rising = parse_related_queries_csv(CSV)

    assert [(q.name, q.value) for q in top] == [("ai tools", 100.0), ("chatgpt", 92.0)]
    assert [(q.name, q.value) for q in rising] == [
        ("ai agents", "Breakout"),
        ("no code ai", "+250%"),
    ]


def test_lines_before_a_section_are_ignored() -> None:
    top, rising = parse_related_queries_csv("header,1\nTOP\nx,5\n")
    assert [q.name for q in top] == ["x"]
    assert rising == []


def test_bundled_csv_loads() -> None:
    trends = load_fallback_trends(get_settings().TRENDS_FALLBACK_CSV)
    assert trends.fallback is True
    assert len(trends.top) == 10
    assert len(trends.rising) == 7


def test_missing_csv_raises(tmp_path: Path) -> None:
    with pytest.raises(TrendsUnavailableError):
        load_fallback_trends(tmp_path / "missing.csv")


def test_parse_live_payload() -> None:
    trends = _parse_live_payload(
        {
            "top": [{"query": "ai tools", "value": 100}],
            "rising": [
                {"query": "ai agents", "formattedValue": "Breakout", "value": 5000}
            ],
            "timeline": [{"formattedTime": "Jan 2025", "value": 42}],
        }
    )
    assert trends.top[0].name == "ai tools"
    assert trends.rising[0].value == "Breakout"
    assert trends.timeline[0].time == "Jan 2025"
    assert trends.timeline[0].value == 42
    assert trends.fallback is False


@pytest.mark.asyncio
async def test_fetch_live_sends_empty_geo_for_global() -> None:
    url = "https://trends.example.test/api"
    response = httpx.Response(
        200, json={"top": [], "rising": []}, request=httpx.Request("GET", url)
    )
    get = AsyncMock(return_value=response)
    with patch.object(httpx.AsyncClient, "get", get):
        await fetch_live_trends(url, keywords="saas", region="Global", domain="B2B")

    params = get.call_args.kwargs["params"]
    assert params == {"keyword": "saas", "geo": "", "domain": "B2B"}


@pytest.mark.asyncio
class TestGetTrends:
    async def test_unconfigured_source_uses_csv(self) -> None:
        with patch("services.trends.get_settings", return_value=_settings()):
            trends = await get_trends(keywords=None, region=None)

        assert trends.fallback is True
        assert trends.keyword == "AI"
        assert trends.region == "US"

    async def test_live_failure_uses_csv(self) -> None:
        settings = _settings(TRENDS_API_URL="https://trends.example.test/api")
        failing = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("services.trends.get_settings", return_value=settings), patch(
            "services.trends.fetch_live_trends", failing
        ):
            trends = await get_trends(keywords="fintech", region="GB")

        failing.assert_awaited_once()
        assert trends.fallback is True
        assert (trends.keyword, trends.region) == ("fintech", "GB")

    async def test_live_success(self) -> None:
        settings = _settings(TRENDS_API_URL="https://trends.example.test/api")
        live = AsyncMock(return_value=TrendsResponse(top=[], rising=[]))
        with patch("services.trends.get_settings", return_value=settings), patch(
            "services.trends.fetch_live_trends", live
        ):
            trends = await get_trends(domain="Health", keywords="telehealth")

        assert trends.fallback is False
        assert trends.keyword == "telehealth"
        assert live.call_args.kwargs["domain"] == "Health"
