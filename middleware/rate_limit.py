# middleware/rate_limit.py
"""
Per-client rate limits for the analyst API (slowapi).

Analyst and correlation routes run the news search and scoring pipeline,
so they get a tighter budget than the dashboard reads:

    @router.post("/query")
    @limiter.limit(ANALYST_RATE_LIMIT)
    async def analyst_query(request: Request, req: AnalystQueryRequest):
        ...
"""
import os

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

DEFAULT_RATE_LIMIT = os.getenv("RATE_LIMIT_DEFAULT", "60/minute")
ANALYST_RATE_LIMIT = os.getenv("RATE_LIMIT_ANALYST", "20/minute")


def client_key(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the socket address."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",")[0].strip()
    return first_hop or get_remote_address(request)


limiter = Limiter(
    key_func=client_key,
    default_limits=[DEFAULT_RATE_LIMIT],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window",
)
