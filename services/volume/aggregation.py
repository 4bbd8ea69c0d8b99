from __future__ import annotations

from datetime import date
from typing import Dict, List, Literal, Sequence

import pandas as pd

from schemas.volume import Customer, VolumeRecord, VolumeSummary, VolumeTotals
from services.analytics.vocabulary import AREAS, SECTORS, SEGMENTS
from services.volume.trend import bucketable_records

Dimension = Literal["area", "sector", "segment"]

_RECORD_COLUMNS = ["customerId", "volumeType", "month", "year", "volume"]
_TYPE_COLUMNS = {"Actual": "actual", "Budget": "budget", "Forecast": "forecast", "Variance": "variance"}
_DIMENSION_VALUES: Dict[str, List[str]] = {"area": AREAS, "sector": SECTORS, "segment": SEGMENTS}


def records_frame(records: Sequence[VolumeRecord]) -> pd.DataFrame:
    rows = [record.model_dump(include=set(_RECORD_COLUMNS)) for record in bucketable_records(records)]
    frame = pd.DataFrame(rows, columns=_RECORD_COLUMNS)
    frame["volume"] = pd.to_numeric(frame["volume"], errors="coerce").fillna(0.0)
    return frame


def _type_totals(frame: pd.DataFrame, index: str) -> pd.DataFrame:
    columns = list(_TYPE_COLUMNS.values())
    if frame.empty:
        return pd.DataFrame(columns=columns, dtype=float)
    table = frame.pivot_table(index=index, columns="volumeType", values="volume", aggfunc="sum", fill_value=0)
    return table.rename(columns=_TYPE_COLUMNS).reindex(columns=columns, fill_value=0).astype(float)


def aggregate_by_dimension(
    records: Sequence[VolumeRecord],
    customers: Sequence[Customer],
    dimension: Dimension,
) -> Dict[str, VolumeTotals]:
    """
    Sum volume per type for every value of ``dimension``. Every vocabulary
    value is present in the result; records for unknown customers are skipped.
    """
    lookup = {customer.id: getattr(customer, dimension) for customer in customers}
    frame = records_frame(records)
    frame[dimension] = frame["customerId"].map(lookup)
    frame = frame.dropna(subset=[dimension])

    table = _type_totals(frame, dimension)
    values = list(_DIMENSION_VALUES[dimension])
    values += [value for value in table.index if value not in values]
    table = table.reindex(values, fill_value=0.0)

    return {
        str(value): VolumeTotals(**{column: float(row[column]) for column in _TYPE_COLUMNS.values()})
        for value, row in table.iterrows()
    }


def _totals(frame: pd.DataFrame) -> VolumeTotals:
    sums = frame.groupby("volumeType")["volume"].sum() if not frame.empty else pd.Series(dtype=float)
    actual = float(sums.get("Actual", 0.0))
    budget = float(sums.get("Budget", 0.0))
    forecast = float(sums.get("Forecast", 0.0))
    return VolumeTotals(actual=actual, budget=budget, forecast=forecast, variance=actual - budget)


def get_ytd_totals(records: Sequence[VolumeRecord], now: date) -> VolumeTotals:
    frame = records_frame(records)
    return _totals(frame[(frame["year"] == now.year) & (frame["month"] <= now.month)])


def get_current_month_totals(records: Sequence[VolumeRecord], now: date) -> VolumeTotals:
    frame = records_frame(records)
    return _totals(frame[(frame["year"] == now.year) & (frame["month"] == now.month)])


def build_volume_summary(
    records: Sequence[VolumeRecord],
    customers: Sequence[Customer],
    dimension: Dimension,
    now: date,
) -> VolumeSummary:
    return VolumeSummary(
        dimension=dimension,
        breakdown=aggregate_by_dimension(records, customers, dimension),
        ytd=get_ytd_totals(records, now),
        current_month=get_current_month_totals(records, now),
    )
