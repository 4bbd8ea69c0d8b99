from __future__ import annotations

from typing import Any, List, Literal, get_args

from pydantic import BaseModel, Field, ValidationInfo, field_validator

Sentiment = Literal["positive", "neutral", "negative"]


class NewsItem(BaseModel):
    title: str = "Untitled Article"
    content: str = ""
    url: str = "#"
    source: str = "News Source"
    date: str = ""
    sentiment: Sentiment = "neutral"

    model_config = {"frozen": True}

    @field_validator("title", "content", "url", "source", "date", "sentiment", mode="before")
    @classmethod
    def _fill_missing(cls, v: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        if v is None:
            return default
        if info.field_name == "sentiment" and v not in get_args(Sentiment):
            return default
        return v


class NewsReference(BaseModel):
    title: str
    url: str
    source: str
    date: str
    relevanceScore: float = Field(ge=0, le=100)
    sentiment: Sentiment = "neutral"
    keyPoints: List[str] = Field(default_factory=list, max_length=3)

    @field_validator("relevanceScore", mode="before")
    @classmethod
    def _clamp_relevance(cls, v: float) -> float:
        return max(0.0, min(100.0, float(v)))


class ChatSource(BaseModel):
    title: str = "Untitled Article"
    url: str = "#"
    publishedDate: str = "Unknown date"
    source: str = "Unknown source"
