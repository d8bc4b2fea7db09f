"""CRUD operations for saved ideas."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.ideas import SavedIdea


# Generated documents and pitch inputs stored verbatim
DOCUMENT_FIELDS = (
    "roadmap",
    "pitch_deck",
    "ideas",
    "target_market",
    "business_model",
    "competitive_advantage",
    "funding_goal",
)

# Payload fields copied onto the row; ``title`` is handled separately
MERGEABLE_FIELDS = ("description", "score", "domain", *DOCUMENT_FIELDS)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


class SavedIdeaCRUD:
    """CRUD operations for saved ideas (no deletion)."""

    async def get_by_title(
        self, db: AsyncSession, user_id: UUID, title: str
    ) -> SavedIdea | None:
        statement = select(SavedIdea).where(
            SavedIdea.user_id == user_id, SavedIdea.title == title
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def create(
        self, db: AsyncSession, user_id: UUID, payload: dict[str, Any]
    ) -> SavedIdea:
        """Insert a new saved idea with defaults for the bookkeeping fields."""
        idea = SavedIdea(
            user_id=user_id,
            title=payload.get("title") or "Untitled Idea",
            description=payload.get("description") or "",
            score=payload.get("score") or 0,
            domain=payload.get("domain") or "General",
            saved=True,
        )
        for field in DOCUMENT_FIELDS:
            setattr(idea, field, payload.get(field))
        db.add(idea)
        await db.commit()
        await db.refresh(idea)
        return idea

    async def find_and_merge_by_key(
        self, db: AsyncSession, user_id: UUID, title: str, payload: dict[str, Any]
    ) -> SavedIdea:
        """Upsert keyed on ``(user_id, title)``.

        Only non-empty payload fields overwrite the stored row; the row is
        always marked saved. A missing row is inserted.
        """
        updates = {
            f: payload[f] for f in MERGEABLE_FIELDS if not _is_empty(payload.get(f))
        }
        idea = await self.get_by_title(db, user_id, title)
        if idea is None:
            return await self.create(db, user_id, {**updates, "title": title})

        for field, value in updates.items():
            setattr(idea, field, value)
        idea.saved = True
        await db.commit()
        await db.refresh(idea)
        return idea

    async def list_favorites(self, db: AsyncSession, user_id: UUID) -> list[SavedIdea]:
        """Saved ideas, newest first."""
        statement = (
            select(SavedIdea)
            .where(SavedIdea.user_id == user_id, SavedIdea.saved.is_(True))
            .order_by(SavedIdea.created_at.desc())
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def list_for_user(self, db: AsyncSession, user_id: UUID) -> list[SavedIdea]:
        """All of a user's ideas, newest first."""
        statement = (
            select(SavedIdea)
            .where(SavedIdea.user_id == user_id)
            .order_by(SavedIdea.created_at.desc())
        )
        result = await db.execute(statement)
        return list(result.scalars().all())


saved_idea_crud = SavedIdeaCRUD()
