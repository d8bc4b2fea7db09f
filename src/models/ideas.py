from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    UUID,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship


if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from .users import User

from .base import Base


class SavedIdea(Base):
    """A generated idea a user chose to keep, with optional expansions.

    Rows are keyed on ``(user_id, title)``; saving the same title again
    merges into the existing row instead of creating a duplicate.
    """

    __tablename__ = "saved_ideas"
    __table_args__ = (
        UniqueConstraint("user_id", "title", name="uq_saved_ideas_user_title"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    domain: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    saved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Generated documents attached to the idea
    roadmap: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    pitch_deck: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    ideas: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    target_market: Mapped[str | None] = mapped_column(Text, nullable=True)
    business_model: Mapped[str | None] = mapped_column(Text, nullable=True)
    competitive_advantage: Mapped[str | None] = mapped_column(Text, nullable=True)
    funding_goal: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship("User", back_populates="saved_ideas")
