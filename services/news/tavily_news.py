from __future__ import annotations

import asyncio
import logging
import os
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser

from schemas.news import ChatSource, NewsItem
from services.news.mock_news import generate_mock_news_payload
from services.news.sentiment import determine_sentiment
from services.tavily.client import TavilyClientError, TavilyConfigError, search as tavily_search

logger = logging.getLogger(__name__)

NEWS_SEARCH_RETRIES = int(os.getenv("NEWS_SEARCH_RETRIES", "2"))
NEWS_RETRY_DELAY_SEC = float(os.getenv("NEWS_RETRY_DELAY_SEC", "1.0"))
NEWS_MAX_RESULTS = int(os.getenv("NEWS_MAX_RESULTS", "5"))


def _normalize_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return " ".join(value.strip().split())


def _normalize_date(value: Any, default: str) -> str:
    raw = _normalize_text(value)
    if not raw:
        return default
    try:
        return parser.parse(raw).date().isoformat()
    except (ValueError, OverflowError):
        return raw


def _iter_results(payload: Optional[Dict[str, Any]]) -> Iterable[Dict[str, Any]]:
    results = (payload or {}).get("results")
    if not isinstance(results, list):
        return []
    return [item for item in results if isinstance(item, dict)]


def normalize_news_results(payload: Optional[Dict[str, Any]], today: Optional[date] = None) -> List[NewsItem]:
    """Map raw search results onto NewsItem, filling any missing field."""
    fallback_date = (today or date.today()).isoformat()
    items: List[NewsItem] = []
    for result in _iter_results(payload):
        content = _normalize_text(result.get("content") or result.get("snippet"))
        items.append(
            NewsItem(
                title=_normalize_text(result.get("title")) or "Untitled Article",
                content=content,
                url=_normalize_text(result.get("url")) or "#",
                source=_normalize_text(result.get("source")) or "News Source",
                date=_normalize_date(result.get("published_date"), fallback_date),
                sentiment=determine_sentiment(content),
            )
        )
    return items


def extract_sources(payload: Optional[Dict[str, Any]]) -> List[ChatSource]:
    sources: List[ChatSource] = []
    for result in _iter_results(payload):
        sources.append(
            ChatSource(
                title=_normalize_text(result.get("title")) or "Untitled Article",
                url=_normalize_text(result.get("url")) or "#",
                publishedDate=_normalize_text(result.get("published_date")) or "Unknown date",
                source=_normalize_text(result.get("source")) or "Unknown source",
            )
        )
    return sources


async def search_news_with_retry(
    query: str,
    *,
    retries: int = NEWS_SEARCH_RETRIES,
    delay_s: float = NEWS_RETRY_DELAY_SEC,
) -> Dict[str, Any]:
    """
    Call the search API up to ``retries + 1`` times with a fixed delay
    between attempts. The last error is re-raised once attempts run out.
    """
    attempts = max(0, int(retries)) + 1
    last_exc: Optional[TavilyClientError] = None
    for attempt in range(attempts):
        try:
            return await tavily_search(query, max_results=NEWS_MAX_RESULTS, include_answer=True)
        except TavilyConfigError:
            raise
        except TavilyClientError as exc:
            last_exc = exc
            logger.warning(
                "news.search.failed attempt=%s/%s error=%s", attempt + 1, attempts, exc
            )
            if attempt < attempts - 1:
                await asyncio.sleep(delay_s)

    raise TavilyClientError(f"News search failed after {attempts} attempts: {last_exc}") from last_exc


async def search_news(query: str, *, today: Optional[date] = None) -> Dict[str, Any]:
    """Search news, substituting the offline mock payload when the API fails."""
    try:
        return await search_news_with_retry(query)
    except TavilyClientError as exc:
        logger.warning("news.search.mock_fallback reason=%s query_len=%s", exc, len(query or ""))
        return generate_mock_news_payload(query, today or datetime.now().date())
