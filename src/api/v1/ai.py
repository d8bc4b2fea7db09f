"""Generation endpoints: ideas, roadmaps, pitch decks and enhancements.

Provider outages never surface as errors here; the orchestrator answers
with a fallback document flagged ``fallback: true`` instead.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from dependencies.auth import CurrentUser
from schemas.api import ApiResponse
from schemas.generation import (
    EnhancementRequest,
    GenerationResult,
    IdeaRequest,
    PitchDeckRequest,
    RoadmapRequest,
)
from services.ai.interfaces import GenerationService
from services.ai.orchestrator import get_generation_orchestrator


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

Generator = Annotated[GenerationService, Depends(get_generation_orchestrator)]


def _envelope(result: GenerationResult) -> ApiResponse[GenerationResult]:
    message = result.warning if result.fallback else "Generation successful"
    return ApiResponse(success=True, data=result, message=message)


@router.post("/generate-idea", response_model=ApiResponse[GenerationResult])
async def generate_idea(
    request: IdeaRequest, service: Generator, current_user: CurrentUser
) -> ApiResponse[GenerationResult]:
    logger.info(
        "Idea generation for user %s, domain %s", current_user.id, request.domain
    )
    return _envelope(await service.generate_ideas(request))


@router.post("/generate-roadmap", response_model=ApiResponse[GenerationResult])
async def generate_roadmap(
    request: RoadmapRequest, service: Generator, current_user: CurrentUser
) -> ApiResponse[GenerationResult]:
    logger.info("Roadmap generation for user %s", current_user.id)
    return _envelope(await service.generate_roadmap(request))


@router.post("/generate-pitch-deck", response_model=ApiResponse[GenerationResult])
async def generate_pitch_deck(
    request: PitchDeckRequest, service: Generator, current_user: CurrentUser
) -> ApiResponse[GenerationResult]:
    logger.info("Pitch deck generation for user %s", current_user.id)
    return _envelope(await service.generate_pitch_deck(request))


@router.post("/enhance-idea", response_model=ApiResponse[GenerationResult])
async def enhance_idea(
    request: EnhancementRequest, service: Generator, current_user: CurrentUser
) -> ApiResponse[GenerationResult]:
    logger.info("Idea enhancement for user %s", current_user.id)
    return _envelope(await service.enhance_idea(request))
