"""Service interfaces for the generation pipeline.

Protocols let the orchestrator receive its collaborators by constructor
injection, so tests can pass a deterministic fake gateway or retriever.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from schemas.generation import (
    EnhancementRequest,
    GenerationRequest,
    GenerationResult,
    IdeaRequest,
    PitchDeckRequest,
    RetrievalContext,
    RoadmapRequest,
)
from services.ai.models import GenerationParams


class CompletionGatewayProtocol(Protocol):
    """Text-completion capability backed by an external provider."""

    async def complete(self, prompt: str, params: GenerationParams) -> str:
        """Return generated text or raise a classified ``CompletionError``."""
        ...


class RetrieverProtocol(Protocol):
    """Similarity search over the knowledge corpus."""

    async def retrieve(self, query: str, k: int) -> RetrievalContext:
        """Return prompt context; never raises."""
        ...


@runtime_checkable
class IdeaStoreProtocol(Protocol):
    """Persistence capability for saved documents keyed on (user, title)."""

    async def find_and_merge_by_key(
        self, db: AsyncSession, user_id: UUID, title: str, payload: dict[str, Any]
    ) -> Any:
        ...

    async def create(
        self, db: AsyncSession, user_id: UUID, payload: dict[str, Any]
    ) -> Any:
        ...


class GenerationService(ABC):
    """Abstract base for the generation orchestrator.

    Coordinates retrieval, prompting, completion and normalization for the
    four generation kinds.
    """

    def __init__(
        self,
        gateway: CompletionGatewayProtocol,
        retriever: RetrieverProtocol | None = None,
    ) -> None:
        self.gateway = gateway
        self.retriever = retriever

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Dispatch on ``request.kind``."""
        ...

    async def generate_ideas(self, request: IdeaRequest) -> GenerationResult:
        return await self.generate(request)

    async def generate_roadmap(self, request: RoadmapRequest) -> GenerationResult:
        return await self.generate(request)

    async def generate_pitch_deck(self, request: PitchDeckRequest) -> GenerationResult:
        return await self.generate(request)

    async def enhance_idea(self, request: EnhancementRequest) -> GenerationResult:
        return await self.generate(request)
