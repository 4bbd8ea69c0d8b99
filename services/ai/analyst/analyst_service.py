from __future__ import annotations

import logging
import os
import time
from datetime import datetime
from typing import List, Optional, Sequence

from schemas.analyst import AnalystMessage
from schemas.insights import CorrelatedInsight
from schemas.news import ChatSource
from schemas.volume import Customer, VolumeRecord
from services.insights.correlation import correlate_news_with_data
from services.insights.policy_response import generate_fallback_response, generate_policy_response
from services.news.tavily_news import extract_sources, normalize_news_results, search_news
from services.tavily.client import TavilyClientError

logger = logging.getLogger(__name__)

ANALYST_MAX_RETRIES = int(os.getenv("ANALYST_MAX_RETRIES", "2"))
SIGNIFICANT_IMPACT = 5

SUGGESTED_QUESTIONS: List[str] = [
    "How are supply chain issues affecting rubber glove production volumes?",
    "Analyze the impact of rising energy costs on manufacturing sector gas usage",
    "What's causing the variance in Johor's gas consumption this quarter?",
    "How do recent market trends correlate with our volume performance?",
    "What is the impact of Trump tariffs on Malaysian rubber gloves sector and rubber gloves sector gas usage?",
]

POLICY_REFERENCE_SOURCES: List[ChatSource] = [
    ChatSource(
        title="US-Malaysia Trade Relations Report",
        url="https://example.com/trade-report",
        publishedDate="2025-04-15",
        source="Trade Analysis Bureau",
    ),
    ChatSource(
        title="Impact of Tariffs on Asian Manufacturing",
        url="https://example.com/tariff-impact",
        publishedDate="2025-04-10",
        source="Economic Research Institute",
    ),
]


class NoRelevantNewsError(RuntimeError):
    """Raised when a news search comes back with nothing to correlate."""


def _message_id() -> str:
    return str(int(time.time() * 1000))


def is_policy_shortcut(query: str) -> bool:
    lowered = (query or "").lower()
    policy_words = any(word in lowered for word in ("tariff", "trump", "policy"))
    return policy_words and ("rubber" in lowered or "glove" in lowered)


def _impact_clause(score: int) -> str:
    if score > SIGNIFICANT_IMPACT:
        return "this represents an important opportunity for the business."
    if score < -SIGNIFICANT_IMPACT:
        return "this requires immediate attention and mitigation strategies."
    if score > 0:
        return "this is a positive development that should be monitored."
    if score < 0:
        return "this is a concerning trend that warrants closer observation."
    return "this has a balanced effect on operations at present."


def generate_response_from_insights(insights: Sequence[CorrelatedInsight], query: str) -> str:
    """Chat narrative built around the main (first) insight."""
    main = insights[0] if insights else None
    policy = generate_policy_response(
        query,
        main.newsReferences if main else [],
        main.dataReferences if main else [],
    )
    if policy:
        return policy
    if main is None:
        return generate_fallback_response(query)

    score = main.impactScore
    impact_text = "positive" if score > 0 else "negative" if score < 0 else "neutral"
    impact_strength = "significant" if abs(score) > SIGNIFICANT_IMPACT else "moderate"
    sign = "+" if score > 0 else ""

    response = (
        f'I\'ve analyzed your question about "{query}" by correlating our gas volume data with the latest '
        "market news.\n\n"
    )
    response += f"**Key Finding:** {main.title}\n\n{main.description}\n\n"
    response += (
        f"This analysis has a {main.confidence}% confidence level based on the correlation strength between "
        "our data and external news sources.\n\n"
    )
    response += (
        f"**Impact Assessment:** The {impact_strength} {impact_text} impact ({sign}{score}/10) suggests "
        f"{_impact_clause(score)}\n\n"
    )
    if main.recommendedActions:
        response += f"**Recommended Action:** {main.recommendedActions[0]}\n\n"
    if len(insights) > 1:
        response += (
            "I've provided additional correlated insights below for your review. You can expand each card to "
            "see the supporting news and data."
        )
    return response


async def _answer_once(
    query: str,
    volume_records: Sequence[VolumeRecord],
    customers: Sequence[Customer],
    now: datetime,
) -> AnalystMessage:
    payload = await search_news(query, today=now.date())
    news_items = normalize_news_results(payload, today=now.date())
    if not news_items:
        raise NoRelevantNewsError("No relevant news found")

    insights = correlate_news_with_data(query, news_items, volume_records, customers, now=now)
    return AnalystMessage(
        id=_message_id(),
        content=generate_response_from_insights(insights, query),
        timestamp=now,
        sources=extract_sources(payload),
        insights=insights,
    )


async def process_user_query(
    query: str,
    volume_records: Sequence[VolumeRecord],
    customers: Sequence[Customer],
    *,
    now: Optional[datetime] = None,
    max_retries: int = ANALYST_MAX_RETRIES,
) -> AnalystMessage:
    """
    Answer one analyst question.

    Tariff questions about rubber gloves get the canned policy narrative
    without a news search. Everything else goes through news search and
    correlation, retried up to ``max_retries`` times when no news comes
    back, then falls back to a sector narrative flagged ``error=True``.
    """
    now = now or datetime.now()
    started = time.perf_counter()

    if is_policy_shortcut(query):
        policy = generate_policy_response(query)
        if policy:
            logger.info("analyst.query.policy_shortcut query_len=%s", len(query))
            return AnalystMessage(
                id=_message_id(),
                content=policy,
                timestamp=now,
                sources=list(POLICY_REFERENCE_SOURCES),
            )

    attempts = max(0, int(max_retries)) + 1
    for attempt in range(1, attempts + 1):
        try:
            message = await _answer_once(query, volume_records, customers, now)
        except (NoRelevantNewsError, TavilyClientError) as exc:
            logger.warning("analyst.query.retry attempt=%s/%s reason=%s", attempt, attempts, exc)
            continue
        logger.info(
            "analyst.query.done attempt=%s insights=%s sources=%s elapsed_ms=%s",
            attempt,
            len(message.insights),
            len(message.sources),
            int((time.perf_counter() - started) * 1000),
        )
        return message

    logger.error("analyst.query.fallback attempts=%s query_len=%s", attempts, len(query))
    return AnalystMessage(
        id=_message_id(),
        content=generate_fallback_response(query),
        timestamp=now,
        error=True,
    )
