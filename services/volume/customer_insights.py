from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import date
from typing import Dict, List, Sequence, Tuple

from schemas.volume import Customer, CustomerInsight, CustomerStatus, TimeSeriesPoint, VolumeRecord
from services.volume.trend import bucketable_records, shift_month

ON_TRACK_MIN_PCT = -5.0
AT_RISK_MIN_PCT = -15.0
HISTORY_MONTHS = 6
FORECAST_MONTHS = 3

_SECTOR_NOTES = {
    "Rubber gloves": "The rubber gloves sector is experiencing strong demand due to healthcare industry growth.",
    "Oleochemical": "Recent supply chain disruptions are impacting the oleochemical sector's performance.",
    "Consumer Products": "Consumer products sector shows stable demand patterns with seasonal fluctuations.",
}

_SEGMENT_NOTES = {
    "Elite": "Elite segment customers typically have more stable consumption patterns and higher retention rates.",
    "Premium": "Premium segment customers show moderate growth potential with targeted engagement.",
}
_DEFAULT_SEGMENT_NOTE = "Preferred segment customers may benefit from more frequent touchpoints and service reviews."

_RECOMMENDATIONS = {
    "On Track": "Recommendation: Maintain current engagement strategy and explore upsell opportunities.",
    "At Risk": "Recommendation: Schedule a review meeting to address volume shortfall and identify improvement areas.",
    "Underperforming": "Recommendation: Immediate intervention required. Develop a recovery plan with the account team.",
}

# (year, month, volumeType) -> volume
VolumeIndex = Dict[Tuple[int, int, str], float]


def classify_status(variance_pct: float) -> CustomerStatus:
    if variance_pct >= ON_TRACK_MIN_PCT:
        return "On Track"
    if variance_pct >= AT_RISK_MIN_PCT:
        return "At Risk"
    return "Underperforming"


def _display_name(customer: Customer) -> str:
    return customer.customer or customer.customerCode or customer.id


def build_customer_notes(customer: Customer, variance_pct: float, status: CustomerStatus) -> List[str]:
    name = _display_name(customer)
    if status == "On Track":
        position = "above" if variance_pct > 0 else "near"
        headline = f"{name} is performing well with volumes {position} budget targets."
    elif status == "At Risk":
        headline = f"{name} is showing concerning trends with volumes {abs(variance_pct):.1f}% below budget."
    else:
        headline = f"{name} is significantly underperforming with volumes {abs(variance_pct):.1f}% below budget."

    sector_note = _SECTOR_NOTES.get(
        customer.sector,
        f"The {customer.sector} sector is showing typical performance patterns for this time of year.",
    )
    segment_note = _SEGMENT_NOTES.get(customer.segment, _DEFAULT_SEGMENT_NOTE)
    return [headline, sector_note, segment_note, _RECOMMENDATIONS[status]]


def _index_volumes(records: Sequence[VolumeRecord]) -> VolumeIndex:
    index: VolumeIndex = defaultdict(float)
    for record in records:
        index[(record.year, record.month, record.volumeType)] += record.volume
    return index


def _time_series(index: VolumeIndex, now: date) -> List[TimeSeriesPoint]:
    points: List[TimeSeriesPoint] = []
    for offset in range(-HISTORY_MONTHS, 1):
        year, month = shift_month(now.year, now.month, offset)
        points.append(
            TimeSeriesPoint(
                month=calendar.month_abbr[month],
                actual=index.get((year, month, "Actual"), 0.0),
                budget=index.get((year, month, "Budget"), 0.0),
            )
        )
    for offset in range(1, FORECAST_MONTHS + 1):
        year, month = shift_month(now.year, now.month, offset)
        points.append(
            TimeSeriesPoint(
                month=calendar.month_abbr[month],
                actual=0.0,
                budget=index.get((year, month, "Budget"), 0.0),
                forecast=index.get((year, month, "Forecast"), 0.0),
            )
        )
    return points


def generate_customer_insights(
    customers: Sequence[Customer],
    records: Sequence[VolumeRecord],
    now: date,
) -> List[CustomerInsight]:
    """Year-to-date performance, status and a 10-month chart series per customer."""
    by_customer: Dict[str, List[VolumeRecord]] = defaultdict(list)
    for record in bucketable_records(records):
        by_customer[record.customerId].append(record)

    upcoming = {shift_month(now.year, now.month, offset) for offset in range(1, FORECAST_MONTHS + 1)}

    out: List[CustomerInsight] = []
    for rank, customer in enumerate(customers, start=1):
        own = by_customer.get(customer.id, [])
        ytd = [r for r in own if r.year == now.year and r.month <= now.month]
        ytd_actual = sum(r.volume for r in ytd if r.volumeType == "Actual")
        ytd_budget = sum(r.volume for r in ytd if r.volumeType == "Budget")
        forecast = sum(
            r.volume for r in own if r.volumeType == "Forecast" and (r.year, r.month) in upcoming
        )

        variance = ytd_actual - ytd_budget
        variance_pct = variance / ytd_budget * 100 if ytd_budget > 0 else 0.0
        status = classify_status(variance_pct)

        out.append(
            CustomerInsight(
                **customer.model_dump(),
                status=status,
                actualVolume=ytd_actual,
                budgetVolume=ytd_budget,
                forecastVolume=forecast,
                variance=variance,
                variancePercent=variance_pct,
                rank=rank,
                insights=build_customer_notes(customer, variance_pct, status),
                timeSeriesData=_time_series(_index_volumes(own), now),
            )
        )
    return out
