"""Knowledge retrieval: ranking, degradation and seeding."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import numpy as np
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from crud.knowledge_base import count_documents, create_document, list_documents
from schemas.generation import KnowledgeSnippet
from services.retrieval import (
    SEED_DOCUMENTS,
    KnowledgeRetriever,
    build_context,
    cosine_scores,
    seed_knowledge_base,
)


def test_cosine_scores_handles_zero_rows() -> None:
    scores = cosine_scores([1.0, 0.0], [[2.0, 0.0], [0.0, 3.0], [0.0, 0.0]])
    assert scores.tolist() == pytest.approx([1.0, 0.0, 0.0])
    assert not np.isnan(scores).any()


def test_build_context_numbers_snippets() -> None:
    snippets = [
        KnowledgeSnippet(content="alpha", score=0.9),
        KnowledgeSnippet(content="beta", score=0.5),
    ]
    assert build_context(snippets) == "[Context 1]: alpha\n\n[Context 2]: beta"


@pytest.mark.asyncio
class TestKnowledgeRetriever:
    async def _store(self, db: AsyncSession) -> None:
        await create_document(db, "pitch decks", [1.0, 0.0, 0.0], {"category": "pd"})
        await create_document(db, "roadmaps", [0.6, 0.8, 0.0], {"category": "rm"})
        await create_document(db, "unrelated", [0.0, 0.0, 1.0])
        # Different dimensionality, never scored
        await create_document(db, "legacy", [1.0, 0.0])

    async def test_top_k_sorted_by_similarity(self, db_session: AsyncSession) -> None:
        await self._store(db_session)
        with patch(
            "services.retrieval.generate_query_embedding",
            AsyncMock(return_value=[1.0, 0.0, 0.0]),
        ):
            result = await KnowledgeRetriever(db_session).retrieve("pitch", 2)

        assert [d.content for d in result.documents] == ["pitch decks", "roadmaps"]
        assert result.documents[0].score == pytest.approx(1.0)
        assert result.documents[1].score == pytest.approx(0.6)
        assert result.documents[0].metadata == {"category": "pd"}
        assert result.context == "[Context 1]: pitch decks\n\n[Context 2]: roadmaps"

    async def test_k_larger_than_corpus(self, db_session: AsyncSession) -> None:
        await self._store(db_session)
        with patch(
            "services.retrieval.generate_query_embedding",
            AsyncMock(return_value=[0.0, 0.0, 1.0]),
        ):
            result = await KnowledgeRetriever(db_session).retrieve("x", 10)

        assert len(result.documents) == 3
        assert result.documents[0].content == "unrelated"

    async def test_empty_corpus(self, db_session: AsyncSession) -> None:
        with patch(
            "services.retrieval.generate_query_embedding",
            AsyncMock(return_value=[1.0, 0.0]),
        ):
            result = await KnowledgeRetriever(db_session).retrieve("x", 3)
        assert result.context == ""
        assert result.documents == []

    async def test_embedding_failure_degrades_to_empty_context(
        self, db_session: AsyncSession
    ) -> None:
        await self._store(db_session)
        with patch(
            "services.retrieval.generate_query_embedding",
            AsyncMock(side_effect=ValueError("gemini API key not configured")),
        ):
            result = await KnowledgeRetriever(db_session).retrieve("x", 3)
        assert result.context == ""
        assert result.documents == []


@pytest.mark.asyncio
class TestSeeding:
    async def test_seeds_every_snippet_once(self, db_session: AsyncSession) -> None:
        with patch(
            "services.retrieval.generate_embedding",
            AsyncMock(return_value=[0.5, 0.5]),
        ):
            added = await seed_knowledge_base(db_session)
            again = await seed_knowledge_base(db_session)

        assert added == len(SEED_DOCUMENTS) == 6
        assert again == 0
        assert await count_documents(db_session) == 6
        documents = await list_documents(db_session)
        assert all(d.doc_metadata["source"] == "seed" for d in documents)

    async def test_failing_item_is_skipped(self, db_session: AsyncSession) -> None:
        calls = {"n": 0}

        async def flaky(text: str) -> list[float]:
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("embedding quota exceeded")
            return [1.0, 0.0]

        with patch("services.retrieval.generate_embedding", flaky):
            added = await seed_knowledge_base(db_session)

        assert added == 5
        assert await count_documents(db_session) == 5

    async def test_skip_flag(self, db_session: AsyncSession) -> None:
        settings = MagicMock(RAG_SKIP_SEED=True)
        embed = AsyncMock()
        with patch("services.retrieval.get_settings", return_value=settings), patch(
            "services.retrieval.generate_embedding", embed
        ):
            assert await seed_knowledge_base(db_session) == 0
        embed.assert_not_awaited()
        assert await count_documents(db_session) == 0
