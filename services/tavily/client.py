from __future__ import annotations

import logging
import os
from typing import Any, Dict

import httpx

logger = logging.getLogger(__name__)

TAVILY_API_URL = os.getenv("TAVILY_API_URL", "https://api.tavily.com/search")
TAVILY_API_KEY = os.getenv("TAVILY_API_KEY", "")
TAVILY_TIMEOUT_SEC = float(os.getenv("TAVILY_TIMEOUT_SEC", "8"))


class TavilyClientError(RuntimeError):
    """Raised when Tavily requests fail or are misconfigured."""


class TavilyConfigError(TavilyClientError):
    """Raised when no API key is configured; retrying cannot help."""


async def search(
    query: str,
    *,
    max_results: int = 5,
    include_answer: bool = True,
    include_raw_content: bool = False,
    search_depth: str = "advanced",
) -> Dict[str, Any]:
    """Run one Tavily search. Retries are the caller's concern."""
    if not TAVILY_API_KEY:
        raise TavilyConfigError("Missing TAVILY_API_KEY")

    payload = {
        "query": query,
        "search_depth": search_depth if search_depth in {"basic", "advanced"} else "advanced",
        "include_domains": [],
        "exclude_domains": [],
        "max_results": int(max_results),
        "include_answer": bool(include_answer),
        "include_images": False,
        "include_raw_content": bool(include_raw_content),
    }
    headers = {"Authorization": f"Bearer {TAVILY_API_KEY}"}

    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(TAVILY_TIMEOUT_SEC)) as client:
            response = await client.post(TAVILY_API_URL, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
    except httpx.TimeoutException as exc:
        raise TavilyClientError(f"Tavily request timed out after {TAVILY_TIMEOUT_SEC}s") from exc
    except httpx.HTTPStatusError as exc:
        raise TavilyClientError(f"Tavily returned status {exc.response.status_code}") from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise TavilyClientError(f"Tavily request failed: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise TavilyClientError("Invalid Tavily response structure")

    logger.info("tavily.search.done results=%s has_answer=%s", len(data["results"]), bool(data.get("answer")))
    return data
