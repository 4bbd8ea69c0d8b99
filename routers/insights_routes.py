import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Request

from middleware.rate_limit import ANALYST_RATE_LIMIT, limiter
from schemas.analyst import CorrelateRequest, CorrelateResponse, IntentRequest
from schemas.insights import QueryIntent
from services.analytics.intent import extract_query_intent
from services.insights.correlation import correlate_news_with_data
from services.insights.policy_response import generate_policy_response
from services.volume.store import load_volume_dataset

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/correlate", response_model=CorrelateResponse)
@limiter.limit(ANALYST_RATE_LIMIT)
async def correlate(request: Request, req: CorrelateRequest):
    """Run the correlation pipeline over caller-supplied news."""
    query = (req.query or "").strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query is required")

    stored_customers, stored_records = load_volume_dataset()
    records = req.volume if req.volume is not None else stored_records
    customers = req.customers if req.customers is not None else stored_customers

    insights = correlate_news_with_data(query, req.news, records, customers, now=datetime.now())
    main = insights[0]
    policy = generate_policy_response(query, main.newsReferences, main.dataReferences)
    return CorrelateResponse(insights=insights, policy_response=policy)


@router.post("/intent", response_model=QueryIntent)
async def query_intent(req: IntentRequest):
    return extract_query_intent(req.query)
