from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Sequence, Tuple

from schemas.insights import DataReference, Trend
from schemas.volume import Customer, VolumeRecord

logger = logging.getLogger(__name__)

TREND_THRESHOLD_PCT = 5.0
VOLUME_ANOMALY_PCT = 15.0
VARIANCE_ANOMALY_PCT = 10.0
WINDOW_MONTHS = 3
MIN_MONTHS_WITH_DATA = 2

_TYPE_KEYS = {"Actual": "actual", "Budget": "budget", "Forecast": "forecast", "Variance": "variance"}

MonthlyBuckets = Dict[str, Dict[str, float]]


def month_key(year: int, month: int) -> str:
    return f"{year}-{month}"


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move (year, month) by ``offset`` months, rolling the year as needed."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def trailing_months(now: date, count: int = WINDOW_MONTHS) -> List[Tuple[int, int]]:
    """Current month first, then the ``count - 1`` months before it."""
    return [shift_month(now.year, now.month, -i) for i in range(count)]


def bucketable_records(records: Iterable[VolumeRecord]) -> List[VolumeRecord]:
    """Drop rows without a customer, a known volume type or a valid month."""
    rows = list(records)
    kept = [record for record in rows if record.bucketable]
    if len(kept) != len(rows):
        logger.debug("volume.records.dropped count=%s kept=%s", len(rows) - len(kept), len(kept))
    return kept


def aggregate_monthly(records: Iterable[VolumeRecord]) -> MonthlyBuckets:
    buckets: MonthlyBuckets = {}
    for record in records:
        key = month_key(record.year, record.month)
        bucket = buckets.setdefault(key, {"actual": 0.0, "budget": 0.0, "forecast": 0.0, "variance": 0.0})
        type_key = _TYPE_KEYS.get(record.volumeType)
        if type_key:
            bucket[type_key] += record.volume
    return buckets


def filter_volume_records(
    records: Sequence[VolumeRecord],
    customers: Sequence[Customer],
    sectors: Sequence[str],
    areas: Sequence[str],
) -> List[VolumeRecord]:
    """Keep records whose customer matches the sector and area filters. No filters keeps everything."""
    records = bucketable_records(records)
    if not sectors and not areas:
        return records

    customer_ids = {
        customer.id
        for customer in customers
        if (not sectors or customer.sector in sectors) and (not areas or customer.area in areas)
    }
    return [record for record in records if record.customerId in customer_ids]


def classify_trend(percent: float) -> Trend:
    if percent > TREND_THRESHOLD_PCT:
        return "increasing"
    if percent < -TREND_THRESHOLD_PCT:
        return "decreasing"
    return "stable"


def _percent_change(current: float, base: float) -> float:
    if base > 0:
        return (current - base) / base * 100
    return 0.0


def analyze_volume_trend(records: Iterable[VolumeRecord], now: date) -> List[DataReference]:
    """
    Month-over-month volume trend and current-month budget variance.

    Looks at the current month and the two before it. With fewer than two
    of those months present nothing is returned; otherwise exactly two
    references come back, volume trend first.
    """
    buckets = aggregate_monthly(bucketable_records(records))
    window = [
        buckets[key]
        for key in (month_key(year, month) for year, month in trailing_months(now))
        if key in buckets
    ]
    if len(window) < MIN_MONTHS_WITH_DATA:
        logger.debug("volume.trend.insufficient months_with_data=%s", len(window))
        return []

    latest, previous = window[0], window[1]

    volume_change_pct = _percent_change(latest["actual"], previous["actual"])
    variance_pct = _percent_change(latest["actual"], latest["budget"])

    references = [
        DataReference(
            metric="Volume Trend",
            value=volume_change_pct,
            trend=classify_trend(volume_change_pct),
            period="Month-over-Month",
            anomaly=abs(volume_change_pct) > VOLUME_ANOMALY_PCT,
        ),
        DataReference(
            metric="Budget Variance",
            value=variance_pct,
            trend=classify_trend(variance_pct),
            period="Current Month",
            anomaly=abs(variance_pct) > VARIANCE_ANOMALY_PCT,
        ),
    ]
    logger.debug(
        "volume.trend.done change_pct=%.2f variance_pct=%.2f",
        volume_change_pct,
        variance_pct,
    )
    return references
