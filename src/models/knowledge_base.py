import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, UUID, DateTime, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class KnowledgeDocument(Base):
    """A snippet of startup knowledge with its embedding vector."""

    __tablename__ = "knowledge_documents"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Plain JSON list so the table works on any backend
    embedding: Mapped[list[float]] = mapped_column(JSON, nullable=False)
    # `metadata` is reserved on declarative classes
    doc_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
