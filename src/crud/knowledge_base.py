"""Data access for the retrieval knowledge base."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.knowledge_base import KnowledgeDocument


async def count_documents(db: AsyncSession) -> int:
    count = await db.scalar(select(func.count()).select_from(KnowledgeDocument))
    return int(count or 0)


async def list_documents(db: AsyncSession) -> list[KnowledgeDocument]:
    result = await db.execute(select(KnowledgeDocument))
    return list(result.scalars().all())


async def create_document(
    db: AsyncSession,
    content: str,
    embedding: list[float],
    metadata: dict[str, Any] | None = None,
) -> KnowledgeDocument:
    document = KnowledgeDocument(
        content=content, embedding=embedding, doc_metadata=metadata or {}
    )
    db.add(document)
    await db.commit()
    await db.refresh(document)
    return document
