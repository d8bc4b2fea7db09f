"""Retrieval-augmented context from the knowledge base.

The corpus is tiny, so every stored embedding is scored against the query
(full scan, cosine similarity) and the best ``k`` snippets become the
prompt context. Retrieval must never fail a generation request: any error
degrades to an empty context.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from crud.knowledge_base import count_documents, create_document, list_documents
from models.knowledge_base import KnowledgeDocument
from schemas.generation import KnowledgeSnippet, RetrievalContext
from services.embedding_service import generate_embedding, generate_query_embedding


logger = logging.getLogger(__name__)


SEED_DOCUMENTS: list[dict[str, Any]] = [
    {
        "content": (
            "A strong business idea should solve a real problem, have a clear "
            "target market, and offer a unique value proposition."
        ),
        "metadata": {"category": "business-fundamentals", "domain": "general"},
    },
    {
        "content": (
            "Project roadmaps should include clear milestones, timelines, resource "
            "allocation, and risk assessment. Break down work into phases: "
            "Planning, Development, Testing, and Launch."
        ),
        "metadata": {"category": "project-management", "domain": "general"},
    },
    {
        "content": (
            "An effective pitch deck includes: Problem, Solution, Market Size, "
            "Business Model, Competitive Advantage, Team, Financial Projections, "
            "and Ask."
        ),
        "metadata": {"category": "pitch-deck", "domain": "fundraising"},
    },
    {
        "content": (
            "Tech startup ideas should leverage emerging technologies like AI, "
            "blockchain, IoT, or cloud computing to create scalable solutions."
        ),
        "metadata": {"category": "business-ideas", "domain": "tech"},
    },
    {
        "content": (
            "Market validation is crucial. Use surveys, interviews, and MVP testing "
            "to validate demand before building a full product."
        ),
        "metadata": {"category": "validation", "domain": "general"},
    },
    {
        "content": (
            "A minimum viable product (MVP) should focus on core features that "
            "solve the main problem with minimum resources."
        ),
        "metadata": {"category": "mvp", "domain": "product"},
    },
]


def cosine_scores(query: list[float], matrix: list[list[float]]) -> np.ndarray:
    """Cosine similarity of ``query`` against each row of ``matrix``."""
    q = np.asarray(query, dtype=float)
    m = np.asarray(matrix, dtype=float)
    norms = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    # Zero vectors score 0 instead of NaN
    safe = np.where(norms == 0, 1.0, norms)
    return np.where(norms == 0, 0.0, (m @ q) / safe)


def build_context(snippets: list[KnowledgeSnippet]) -> str:
    return "\n\n".join(
        f"[Context {i}]: {s.content}" for i, s in enumerate(snippets, start=1)
    )


class KnowledgeRetriever:
    """Rank stored knowledge snippets against a query."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def search(self, query: str, k: int) -> list[KnowledgeSnippet]:
        query_embedding = await generate_query_embedding(query)
        documents = await list_documents(self.db)
        # Skip rows embedded with a different dimensionality
        documents = [d for d in documents if len(d.embedding) == len(query_embedding)]
        if not documents:
            return []

        scores = cosine_scores(query_embedding, [d.embedding for d in documents])
        order = np.argsort(-scores, kind="stable")[:k]
        return [
            KnowledgeSnippet(
                content=documents[i].content,
                score=float(scores[i]),
                metadata=documents[i].doc_metadata or {},
            )
            for i in order
        ]

    async def retrieve(self, query: str, k: int) -> RetrievalContext:
        try:
            snippets = await self.search(query, k)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Knowledge search failed, using empty context: %s", exc)
            return RetrievalContext()
        return RetrievalContext(context=build_context(snippets), documents=snippets)


async def add_to_knowledge_base(
    db: AsyncSession, content: str, metadata: dict[str, Any] | None = None
) -> KnowledgeDocument:
    """Embed ``content`` and store it; embedding errors propagate."""
    embedding = await generate_embedding(content)
    return await create_document(db, content, embedding, metadata)


async def seed_knowledge_base(db: AsyncSession) -> int:
    """Seed the corpus once; returns the number of documents added.

    Skipped when ``RAG_SKIP_SEED`` is set or the corpus is not empty. A
    snippet whose embedding fails is skipped on its own.
    """
    if get_settings().RAG_SKIP_SEED:
        logger.warning("Skipping knowledge base seeding because RAG_SKIP_SEED=true")
        return 0

    count = await count_documents(db)
    if count:
        logger.info("Knowledge base already initialized with %d documents", count)
        return 0

    added = 0
    for item in SEED_DOCUMENTS:
        try:
            await add_to_knowledge_base(
                db, item["content"], {"source": "seed", **item["metadata"]}
            )
        except Exception as exc:  # noqa: BLE001
            await db.rollback()
            logger.error("Seeding skipped for one item: %s", exc)
            continue
        added += 1

    logger.info("Knowledge base initialized with %d seed documents", added)
    return added
