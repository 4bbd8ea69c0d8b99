from __future__ import annotations

import logging
import re
from typing import Iterable, List

from schemas.news import NewsItem, NewsReference

logger = logging.getLogger(__name__)

TITLE_MATCH_WEIGHT = 15
CONTENT_MATCH_WEIGHT = 5
MAX_RELEVANCE = 100
MIN_RELEVANCE_EXCLUSIVE = 20
MAX_KEY_POINTS = 3

KEY_TERMS = (
    "increase",
    "decrease",
    "growth",
    "decline",
    "expansion",
    "investment",
    "production",
    "capacity",
    "demand",
    "supply",
    "price",
    "cost",
    "margin",
    "profit",
    "revenue",
    "forecast",
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WHITESPACE = re.compile(r"\s+")


def tokenize_query(query: str) -> List[str]:
    return [token for token in _WHITESPACE.split((query or "").lower()) if token]


def extract_key_points(content: str, limit: int = MAX_KEY_POINTS) -> List[str]:
    sentences = [s for s in _SENTENCE_SPLIT.split(content or "") if s.strip()]
    points: List[str] = []
    for sentence in sentences:
        lowered = sentence.lower()
        if any(term in lowered for term in KEY_TERMS):
            points.append(sentence.strip())
        if len(points) >= limit:
            break
    return points


def relevance_score(tokens: List[str], title: str, content: str) -> int:
    title_lower = (title or "").lower()
    content_lower = (content or "").lower()
    title_matches = sum(1 for token in tokens if token in title_lower)
    content_matches = sum(1 for token in tokens if token in content_lower)
    return min(MAX_RELEVANCE, title_matches * TITLE_MATCH_WEIGHT + content_matches * CONTENT_MATCH_WEIGHT)


def filter_and_rank_news(query: str, items: Iterable[NewsItem]) -> List[NewsReference]:
    """
    Score every news item against the query tokens, drop anything scoring
    20 or less and return the rest best-first. Ties keep input order.
    """
    tokens = tokenize_query(query)
    ranked: List[NewsReference] = []
    total = 0
    for item in items:
        total += 1
        score = relevance_score(tokens, item.title, item.content)
        if score <= MIN_RELEVANCE_EXCLUSIVE:
            continue
        ranked.append(
            NewsReference(
                title=item.title,
                url=item.url,
                source=item.source,
                date=item.date,
                relevanceScore=score,
                sentiment=item.sentiment,
                keyPoints=extract_key_points(item.content),
            )
        )

    ranked.sort(key=lambda ref: ref.relevanceScore, reverse=True)
    logger.debug("news.relevance tokens=%s candidates=%s kept=%s", len(tokens), total, len(ranked))
    return ranked
