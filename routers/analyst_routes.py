import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Request

from middleware.rate_limit import ANALYST_RATE_LIMIT, limiter
from schemas.analyst import AnalystQueryEnvelope, AnalystQueryRequest
from services.ai.analyst.analyst_service import SUGGESTED_QUESTIONS, process_user_query
from services.volume.store import load_volume_dataset

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/query", response_model=AnalystQueryEnvelope)
@limiter.limit(ANALYST_RATE_LIMIT)
async def analyst_query(request: Request, req: AnalystQueryRequest):
    """
    Answer a chat question. Volume data and customers default to the
    stored dataset when the caller does not send its own.
    """
    message = req.message
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")

    stored_customers, stored_records = load_volume_dataset()
    records = req.volume if req.volume is not None else stored_records
    customers = req.customers if req.customers is not None else stored_customers

    logger.info(
        "analyst.route.query query_len=%s records=%s customers=%s",
        len(message), len(records), len(customers),
    )
    answer = await process_user_query(message, records, customers, now=datetime.now())
    return AnalystQueryEnvelope(message="ok", data=answer)


@router.get("/suggestions")
async def analyst_suggestions():
    return {"questions": list(SUGGESTED_QUESTIONS)}
