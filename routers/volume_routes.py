from datetime import date
from typing import List, Literal

from fastapi import APIRouter, Query, Request

from middleware.rate_limit import DEFAULT_RATE_LIMIT, limiter
from schemas.volume import CustomerInsight, VolumeSummary
from services.volume.aggregation import build_volume_summary
from services.volume.customer_insights import generate_customer_insights
from services.volume.store import load_volume_dataset

router = APIRouter()


@router.get("/summary", response_model=VolumeSummary)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def volume_summary(
    request: Request,
    dimension: Literal["area", "sector", "segment"] = Query("sector", description="Grouping dimension"),
):
    customers, records = load_volume_dataset()
    return build_volume_summary(records, customers, dimension, date.today())


@router.get("/customers", response_model=List[CustomerInsight])
@limiter.limit(DEFAULT_RATE_LIMIT)
async def volume_customers(request: Request):
    customers, records = load_volume_dataset()
    return generate_customer_insights(customers, records, date.today())
