from typing import Annotated

from fastapi import APIRouter, Query

from schemas.api import ApiResponse
from schemas.trends import TrendsResponse
from services.trends import get_trends


router = APIRouter(prefix="/trends", tags=["trends"])


@router.get("", response_model=ApiResponse[TrendsResponse])
async def read_trends(
    domain: Annotated[str | None, Query(max_length=200)] = None,
    keywords: Annotated[str | None, Query(max_length=500)] = None,
    region: Annotated[str | None, Query(max_length=100)] = None,
) -> ApiResponse[TrendsResponse]:
    """Related search queries; served from the bundled CSV when offline."""
    trends = await get_trends(domain=domain, keywords=keywords, region=region)
    message = "Fallback trend data" if trends.fallback else "Trends fetched"
    return ApiResponse(success=True, data=trends, message=message)
