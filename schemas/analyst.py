from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from schemas.insights import CorrelatedInsight
from schemas.news import ChatSource, NewsItem
from schemas.volume import Customer, VolumeRecord


class AnalystMessage(BaseModel):
    id: str
    role: Literal["user", "assistant"] = "assistant"
    content: str
    timestamp: datetime
    sources: List[ChatSource] = Field(default_factory=list)
    insights: List[CorrelatedInsight] = Field(default_factory=list)
    error: bool = False


class AnalystQueryRequest(BaseModel):
    message: str = Field(..., max_length=2000)
    volume: Optional[List[VolumeRecord]] = None
    customers: Optional[List[Customer]] = None

    @field_validator("message")
    @classmethod
    def _strip_message(cls, v: str) -> str:
        return (v or "").strip()


class AnalystQueryEnvelope(BaseModel):
    message: str
    data: AnalystMessage


class CorrelateRequest(BaseModel):
    query: str = Field(..., max_length=2000)
    news: List[NewsItem] = Field(default_factory=list)
    volume: Optional[List[VolumeRecord]] = None
    customers: Optional[List[Customer]] = None


class CorrelateResponse(BaseModel):
    insights: List[CorrelatedInsight] = Field(default_factory=list)
    policy_response: str = ""


class IntentRequest(BaseModel):
    query: str = Field(..., max_length=2000)
