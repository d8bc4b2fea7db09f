"""Search-trend data for the idea generator.

A live JSON source (``TRENDS_API_URL``) is tried first. When it is not
configured or fails, the bundled related-queries CSV is served instead and
the response is marked ``fallback``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx

from core.config import get_settings
from core.exceptions import TrendsUnavailableError
from schemas.trends import TimelinePoint, TrendQuery, TrendsResponse


logger = logging.getLogger(__name__)

DEFAULT_KEYWORDS = "AI"
DEFAULT_REGION = "US"
TRENDS_TIMEOUT_SECONDS = 10.0


def parse_related_queries_csv(text: str) -> tuple[list[TrendQuery], list[TrendQuery]]:
    """Parse the ``TOP`` / ``RISING`` sectioned CSV.

    Each data line is ``name,value``. Top values are numeric; rising values
    are labels such as ``+250%`` and stay strings. Blank and malformed lines
    are skipped.
    """
    top: list[TrendQuery] = []
    rising: list[TrendQuery] = []
    section: str | None = None

    for line in text.splitlines():
        stripped = line.strip()
        if stripped in ("TOP", "RISING"):
            section = stripped
            continue
        if not stripped or section is None:
            continue
        name, _, value = stripped.partition(",")
        name, value = name.strip(), value.split(",")[0].strip()
        if not name or not value:
            continue
        if section == "TOP":
            try:
                top.append(TrendQuery(name=name, value=float(value)))
            except ValueError:
                logger.debug("Skipping non-numeric top query line: %s", stripped)
        else:
            rising.append(TrendQuery(name=name, value=value))
    return top, rising


def load_fallback_trends(path: str | Path) -> TrendsResponse:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("CSV fallback also failed: %s", exc)
        raise TrendsUnavailableError(str(exc)) from exc
    top, rising = parse_related_queries_csv(text)
    return TrendsResponse(top=top, rising=rising, fallback=True)


def _queries(items: Any, value_keys: tuple[str, ...]) -> list[TrendQuery]:
    out: list[TrendQuery] = []
    for item in items or []:
        name = item.get("name") or item.get("query")
        value = next((item[k] for k in value_keys if item.get(k) is not None), None)
        if name and value is not None:
            out.append(TrendQuery(name=str(name), value=value))
    return out


def _parse_live_payload(payload: dict[str, Any]) -> TrendsResponse:
    timeline = [
        TimelinePoint(
            time=str(p.get("time") or p.get("formattedTime") or ""),
            value=p.get("value") or 0,
        )
        for p in payload.get("timeline") or []
    ]
    return TrendsResponse(
        top=_queries(payload.get("top"), ("value",)),
        rising=_queries(payload.get("rising"), ("formattedValue", "value")),
        timeline=timeline,
    )


async def fetch_live_trends(
    url: str, *, keywords: str, region: str, domain: str | None
) -> TrendsResponse:
    """Query the live trends endpoint; "Global" is sent as an empty geo."""
    params = {"keyword": keywords, "geo": "" if region == "Global" else region}
    if domain:
        params["domain"] = domain
    async with httpx.AsyncClient(timeout=TRENDS_TIMEOUT_SECONDS) as client:
        response = await client.get(url, params=params)
        response.raise_for_status()
        payload = response.json()
    return _parse_live_payload(payload)


async def get_trends(
    *,
    domain: str | None = None,
    keywords: str | None = None,
    region: str | None = None,
) -> TrendsResponse:
    settings = get_settings()
    keywords = keywords or DEFAULT_KEYWORDS
    region = region or DEFAULT_REGION

    if settings.TRENDS_API_URL:
        try:
            trends = await fetch_live_trends(
                settings.TRENDS_API_URL, keywords=keywords, region=region, domain=domain
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "Trends request failed: %s - %s", type(exc).__name__, str(exc)
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning(
                "Trends parse failed: %s - %s", type(exc).__name__, str(exc)
            )
        else:
            logger.info(
                "Trends fetched: %d top, %d rising", len(trends.top), len(trends.rising)
            )
            return trends.model_copy(update={"keyword": keywords, "region": region})

    logger.info("Using fallback CSV trend data")
    trends = load_fallback_trends(settings.TRENDS_FALLBACK_CSV)
    return trends.model_copy(update={"keyword": keywords, "region": region})
