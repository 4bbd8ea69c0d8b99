from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, Field, ValidationInfo, field_validator

VolumeType = Literal["Actual", "Budget", "Forecast", "Variance"]
CustomerStatus = Literal["On Track", "At Risk", "Underperforming"]


class VolumeRecord(BaseModel):
    """
    One monthly volume figure. Missing or null fields fall back to defaults.
    Rows that still cannot be placed in a month bucket are dropped by the
    volume services (see ``bucketable``).
    """

    customerId: str = ""
    volumeType: Optional[VolumeType] = None
    month: int = 0
    year: int = 0
    volume: float = 0.0
    id: Optional[str] = None

    @field_validator("customerId", "month", "year", "volume", mode="before")
    @classmethod
    def _none_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        return cls.model_fields[info.field_name].default if v is None else v

    @field_validator("volumeType", mode="before")
    @classmethod
    def _known_type(cls, v: Any) -> Any:
        return v if v in get_args(VolumeType) else None

    @property
    def bucketable(self) -> bool:
        return bool(self.customerId) and self.volumeType is not None and 1 <= self.month <= 12 and self.year > 0


class Customer(BaseModel):
    id: str
    area: str
    sector: str
    segment: str
    customerCode: Optional[str] = None
    customer: Optional[str] = None


class VolumeTotals(BaseModel):
    actual: float = 0.0
    budget: float = 0.0
    forecast: float = 0.0
    variance: float = 0.0


class TimeSeriesPoint(BaseModel):
    month: str
    actual: float = 0.0
    budget: float = 0.0
    forecast: Optional[float] = None


class CustomerInsight(Customer):
    status: CustomerStatus
    actualVolume: float
    budgetVolume: float
    forecastVolume: float
    variance: float
    variancePercent: float
    rank: int
    insights: List[str] = Field(default_factory=list)
    timeSeriesData: List[TimeSeriesPoint] = Field(default_factory=list)


class VolumeSummary(BaseModel):
    dimension: Literal["area", "sector", "segment"]
    breakdown: Dict[str, VolumeTotals] = Field(default_factory=dict)
    ytd: VolumeTotals
    current_month: VolumeTotals
