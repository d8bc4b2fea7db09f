from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SavedIdeaCreate(BaseModel):
    """Body of ``POST /ideas/save``.

    ``title`` is validated by the route so that a missing title yields a
    400 rather than a 422. ``merge_title`` (``_mergeTitle`` on the wire)
    switches from create to merge-by-title.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    description: str | None = None
    score: float | None = None
    domain: str | None = None
    roadmap: dict[str, Any] | None = None
    pitch_deck: dict[str, Any] | None = None
    ideas: list[dict[str, Any]] | None = None
    target_market: str | None = None
    business_model: str | None = None
    competitive_advantage: str | None = None
    funding_goal: str | None = None
    merge_title: str | None = Field(default=None, alias="_mergeTitle")


class SavedIdeaOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: UUID
    title: str
    description: str
    score: float
    domain: str
    saved: bool
    roadmap: dict[str, Any] | None = None
    pitch_deck: dict[str, Any] | None = None
    ideas: list[dict[str, Any]] | None = None
    target_market: str | None = None
    business_model: str | None = None
    competitive_advantage: str | None = None
    funding_goal: str | None = None
    created_at: datetime | None = None
