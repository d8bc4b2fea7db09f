from pydantic import BaseModel, Field


class TrendQuery(BaseModel):
    name: str
    # Rising queries carry labels such as "+250%" or "Breakout"
    value: float | str


class TimelinePoint(BaseModel):
    time: str
    value: float = 0


class TrendsResponse(BaseModel):
    top: list[TrendQuery] = Field(default_factory=list)
    rising: list[TrendQuery] = Field(default_factory=list)
    timeline: list[TimelinePoint] = Field(default_factory=list)
    keyword: str | None = None
    region: str | None = None
    fallback: bool = False
