from __future__ import annotations

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from schemas.news import NewsReference

Trend = Literal["increasing", "decreasing", "stable"]
Metric = Literal["Volume Trend", "Budget Variance"]

IMPACT_MIN, IMPACT_MAX = -10, 10
CONFIDENCE_MIN, CONFIDENCE_MAX = 0, 100


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity, the way dashboard scores always have."""
    return int(math.floor(value + 0.5))


class QueryIntent(BaseModel):
    sectors: List[str] = Field(default_factory=list)
    areas: List[str] = Field(default_factory=list)
    policyTerms: List[str] = Field(default_factory=list)
    countries: List[str] = Field(default_factory=list)


class DataReference(BaseModel):
    metric: Metric
    value: float
    trend: Trend = "stable"
    period: str
    anomaly: bool = False


class CorrelatedInsight(BaseModel):
    id: str
    title: str
    description: str
    impactScore: int = 0
    confidence: int = 0
    sectors: List[str] = Field(default_factory=list)
    areas: List[str] = Field(default_factory=list)
    newsReferences: List[NewsReference] = Field(default_factory=list)
    dataReferences: List[DataReference] = Field(default_factory=list)
    recommendedActions: Optional[List[str]] = None

    @field_validator("impactScore", mode="before")
    @classmethod
    def _clamp_impact(cls, v: float) -> int:
        return max(IMPACT_MIN, min(IMPACT_MAX, round_half_up(float(v))))

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: float) -> int:
        return max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, round_half_up(float(v))))
