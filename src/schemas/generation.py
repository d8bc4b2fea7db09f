"""Request and result schemas for the generation endpoints.

Request bodies use the camelCase field names the web client sends
(``ideaTitle``, ``fundingGoal`` ...); snake_case names are accepted too.
Each request carries a ``kind`` tag so the four shapes form one
discriminated union.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class IdeaRequest(_CamelModel):
    """Generate a batch of startup ideas from trend keywords."""

    kind: Literal["idea"] = "idea"
    domain: str = Field(..., min_length=1, max_length=200)
    keywords: str = Field(default="", max_length=500)
    region: str | None = Field(default=None, max_length=100)
    trends: Any | None = Field(
        default=None, description="Trend data echoed into the prompt as JSON"
    )
    constraints: str | None = Field(default=None, max_length=2000)


class RoadmapRequest(_CamelModel):
    """Expand an idea into a phased project roadmap."""

    kind: Literal["roadmap"] = "roadmap"
    idea_title: str = Field(..., min_length=1, max_length=255)
    idea_description: str = Field(default="", max_length=5000)
    timeline: str | None = Field(default=None, max_length=100)
    team_size: str | None = Field(default=None, max_length=100)
    budget: str | None = Field(default=None, max_length=100)


class PitchDeckRequest(_CamelModel):
    """Draft pitch-deck slide content for an idea."""

    kind: Literal["pitchDeck"] = "pitchDeck"
    idea_title: str = Field(..., min_length=1, max_length=255)
    idea_description: str = Field(default="", max_length=5000)
    target_market: str | None = Field(default=None, max_length=1000)
    business_model: str | None = Field(default=None, max_length=1000)
    competitive_advantage: str | None = Field(default=None, max_length=1000)
    funding_goal: str | None = Field(default=None, max_length=100)


class IdeaInput(BaseModel):
    """An existing idea submitted for enhancement; unknown fields are kept."""

    model_config = ConfigDict(extra="allow", frozen=True)

    title: str = Field(..., min_length=1, max_length=255)


class EnhancementRequest(_CamelModel):
    """Ask for strengths, weaknesses and improvements of an idea."""

    kind: Literal["enhancement"] = "enhancement"
    idea: IdeaInput
    focus_area: str | None = Field(default=None, max_length=500)


GenerationRequest = Annotated[
    IdeaRequest | RoadmapRequest | PitchDeckRequest | EnhancementRequest,
    Field(discriminator="kind"),
]

GenerationKind = Literal["idea", "roadmap", "pitchDeck", "enhancement"]


class KnowledgeSnippet(BaseModel):
    """A retrieved knowledge-base entry with its similarity score."""

    content: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class RetrievalContext(BaseModel):
    """Prompt context built from the most similar knowledge snippets."""

    context: str = ""
    documents: list[KnowledgeSnippet] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """Outcome of one generation call.

    ``document`` is always a canonical document or a parse-failure document
    carrying ``rawContent`` and ``parseError``. ``fallback`` marks a
    hand-authored substitute returned while the provider is unavailable.
    """

    kind: GenerationKind
    document: dict[str, Any]
    fallback: bool = False
    warning: str | None = None
    context: list[KnowledgeSnippet] = Field(default_factory=list)
