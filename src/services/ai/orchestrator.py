"""Generation orchestrator: retrieval, prompting, completion, normalization.

One call runs Building -> AwaitingCompletion -> Normalizing -> Done, or
diverts to a fallback document when the provider is unavailable. Nothing
is retried and no state survives between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from core.config import get_settings
from dependencies.db import DbSession
from schemas.generation import (
    GenerationKind,
    GenerationRequest,
    GenerationResult,
    RetrievalContext,
)
from services.ai import fallbacks, prompts
from services.ai.exceptions import GenerationFailed
from services.ai.gateway import PydanticAIGateway
from services.ai.interfaces import (
    CompletionGatewayProtocol,
    GenerationService,
    RetrieverProtocol,
)
from services.ai.models import GenerationParams
from services.ai.normalizer import Schema, is_parse_failure, normalize
from services.retrieval import KnowledgeRetriever


logger = logging.getLogger(__name__)

# Substrings (matched lower-case) marking a provider outage rather than a
# caller error. Provider names come from FALLBACK_PROVIDER_MARKERS.
OUTAGE_MARKERS = ("quota", "insufficient", "embedding", "404", "failed to generate")


def is_provider_outage(message: str, provider_markers: Iterable[str] = ()) -> bool:
    text = message.lower()
    return any(m in text for m in (*OUTAGE_MARKERS, *provider_markers))


@dataclass(frozen=True, slots=True)
class KindSpec:
    """Everything that differs between the four generation kinds."""

    schema: Schema
    params: GenerationParams
    query: Callable[[Any], str]
    prompt: Callable[[Any, str], str]
    fallback: Callable[[Any], dict[str, Any]]
    warning: str


KIND_SPECS: dict[GenerationKind, KindSpec] = {
    "idea": KindSpec(
        schema=Schema.IDEAS,
        params=GenerationParams(temperature=0.8, max_tokens=4000),
        query=prompts.idea_query,
        prompt=prompts.idea_prompt,
        fallback=fallbacks.fallback_ideas,
        warning=fallbacks.IDEA_WARNING,
    ),
    "roadmap": KindSpec(
        schema=Schema.ROADMAP,
        params=GenerationParams(temperature=0.7, max_tokens=3000),
        query=prompts.roadmap_query,
        prompt=prompts.roadmap_prompt,
        fallback=lambda _request: fallbacks.fallback_roadmap(),
        warning=fallbacks.ROADMAP_WARNING,
    ),
    "pitchDeck": KindSpec(
        schema=Schema.PITCH_DECK,
        params=GenerationParams(temperature=0.7, max_tokens=3500),
        query=prompts.pitch_deck_query,
        prompt=prompts.pitch_deck_prompt,
        fallback=fallbacks.fallback_pitch_deck,
        warning=fallbacks.PITCH_DECK_WARNING,
    ),
    "enhancement": KindSpec(
        schema=Schema.ENHANCEMENT,
        params=GenerationParams(temperature=0.7, max_tokens=2000),
        query=prompts.enhancement_query,
        prompt=prompts.enhancement_prompt,
        fallback=lambda _request: fallbacks.fallback_enhancement(),
        warning=fallbacks.ENHANCEMENT_WARNING,
    ),
}


class Orchestrator(GenerationService):
    """Concrete generation service.

    ``skip_retrieval`` and ``top_k`` default to ``RAG_SKIP_SEED`` and
    ``RAG_TOP_K``; ``provider_markers`` to ``FALLBACK_PROVIDER_MARKERS``.
    """

    def __init__(
        self,
        gateway: CompletionGatewayProtocol,
        retriever: RetrieverProtocol | None = None,
        *,
        skip_retrieval: bool | None = None,
        top_k: int | None = None,
        provider_markers: Iterable[str] | None = None,
    ) -> None:
        super().__init__(gateway, retriever)
        settings = get_settings()
        self.skip_retrieval = (
            settings.RAG_SKIP_SEED if skip_retrieval is None else skip_retrieval
        )
        self.top_k = top_k or settings.RAG_TOP_K
        markers = (
            settings.FALLBACK_PROVIDER_MARKERS
            if provider_markers is None
            else provider_markers
        )
        self.provider_markers = tuple(m.lower() for m in markers)

    async def _build_context(self, query: str) -> RetrievalContext:
        if self.skip_retrieval or self.retriever is None:
            return RetrievalContext()
        return await self.retriever.retrieve(query, self.top_k)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        kind_spec = KIND_SPECS[request.kind]
        retrieval = await self._build_context(kind_spec.query(request))
        prompt = kind_spec.prompt(request, retrieval.context)

        try:
            raw = await self.gateway.complete(prompt, kind_spec.params)
        except Exception as exc:
            message = str(exc)
            if not is_provider_outage(message, self.provider_markers):
                logger.error("%s generation failed: %s", request.kind, message)
                raise GenerationFailed(message, kind=request.kind) from exc
            logger.warning(
                "%s generation unavailable, serving fallback: %s",
                request.kind,
                message,
            )
            return GenerationResult(
                kind=request.kind,
                document=kind_spec.fallback(request),
                fallback=True,
                warning=kind_spec.warning,
            )

        document = normalize(raw, kind_spec.schema)
        if is_parse_failure(document):
            logger.info("%s completion could not be normalized", request.kind)
        return GenerationResult(
            kind=request.kind,
            document=document,
            context=retrieval.documents,
        )


@lru_cache
def get_completion_gateway() -> CompletionGatewayProtocol:
    return PydanticAIGateway()


# FastAPI DI provider (used by API layer via Depends)
def get_generation_orchestrator(db: DbSession) -> GenerationService:
    return Orchestrator(get_completion_gateway(), KnowledgeRetriever(db))
