"""Rate limiting backed by Upstash Redis.

Requests are counted per client IP and path with a sliding window. When
Upstash is not configured (development/test) every request is allowed.
"""

from __future__ import annotations

import logging
import time
import uuid
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status

from core.config import Settings, get_settings


if TYPE_CHECKING:
    from upstash_ratelimit.asyncio import Ratelimit

logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "smartideafinder:ratelimit"


@lru_cache
def get_ratelimiter() -> Ratelimit | None:
    """Create and cache the async rate limiter, or None when unconfigured."""
    settings = get_settings()
    if not settings.UPSTASH_REDIS_REST_URL or not settings.UPSTASH_REDIS_REST_TOKEN:
        logger.warning(
            "Upstash Redis not configured. Rate limiting is disabled. "
            "Set UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN to enable."
        )
        return None

    # Imported lazily so unconfigured environments never touch Upstash
    from upstash_ratelimit import SlidingWindow
    from upstash_ratelimit.asyncio import Ratelimit
    from upstash_redis.asyncio import Redis

    ratelimit = Ratelimit(
        redis=Redis(
            url=settings.UPSTASH_REDIS_REST_URL,
            token=settings.UPSTASH_REDIS_REST_TOKEN,
        ),
        limiter=SlidingWindow(
            max_requests=settings.RATE_LIMIT_REQUESTS,
            window=settings.RATE_LIMIT_WINDOW_SECONDS,
        ),
        prefix=RATE_LIMIT_PREFIX,
    )
    logger.info(
        "Rate limiting enabled: %d requests per %d seconds",
        settings.RATE_LIMIT_REQUESTS,
        settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    return ratelimit


def _get_client_identifier(request: Request) -> str:
    """Client IP (first X-Forwarded-For hop when proxied) plus request path."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client = forwarded_for.split(",")[0].strip()
    elif request.client and request.client.host:
        client = request.client.host
    else:
        # Unidentifiable clients must not share one bucket
        client = f"unknown:{uuid.uuid4()}"
    return f"{client}:{request.url.path}"


async def check_rate_limit(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """FastAPI dependency that raises 429 once the window is exhausted.

    Usage:
        @router.post("/login", dependencies=[Depends(check_rate_limit)])
    """
    ratelimiter = get_ratelimiter()
    if ratelimiter is None:
        return

    identifier = _get_client_identifier(request)
    try:
        response = await ratelimiter.limit(identifier)
    except Exception as e:  # noqa: BLE001
        # Fail open
        logger.error("Rate limit check failed: %s", e)
        return

    if response.allowed:
        return

    now_ms = int(time.time() * 1000)
    retry_after = max(1, (response.reset - now_ms) // 1000)
    logger.warning(
        "Rate limit exceeded for %s. Reset in %d seconds.", identifier, retry_after
    )
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many requests. Please try again later.",
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(settings.RATE_LIMIT_REQUESTS),
            "X-RateLimit-Remaining": str(response.remaining),
        },
    )
