from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence

from schemas.insights import (
    IMPACT_MAX,
    IMPACT_MIN,
    CorrelatedInsight,
    DataReference,
    round_half_up,
)
from schemas.news import NewsReference
from services.analytics.vocabulary import Sector
from services.news.sentiment import sentiment_score

logger = logging.getLogger(__name__)

TOP_NEWS = 3
ALIGNED_CONFIDENCE = 75
MISALIGNED_CONFIDENCE = 50
VARIANCE_CONFIDENCE = 80
VARIANCE_IMPACT = 5
NEWS_ONLY_CONFIDENCE = 60
NEWS_ONLY_IMPACT = 3
DATA_ONLY_CONFIDENCE = 70
DATA_ONLY_IMPACT = 4
INSUFFICIENT_CONFIDENCE = 30
BUDGET_REVIEW_THRESHOLD_PCT = -10.0

ACTION_REVIEW_SALES = "Review sales and marketing strategies for affected sectors"
ACTION_SUPPLY_CHAIN = "Investigate supply chain for potential disruptions"
ACTION_BUDGET_MEETING = "Schedule budget review meeting with finance team"
ACTION_VARIANCE_REPORT = "Prepare variance explanation for management report"
ACTION_MONITOR_NEGATIVE = "Monitor market developments closely for continued impact"
ACTION_CONTINUE = "Continue monitoring trends for sustained performance"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _insight_id(kind: str, now_ms: Optional[int]) -> str:
    return f"{kind}-{now_ms if now_ms is not None else int(time.time() * 1000)}"


def _find(data: Sequence[DataReference], metric: str) -> Optional[DataReference]:
    return next((ref for ref in data if ref.metric == metric), None)


def _lead_text(news: Sequence[NewsReference], quote_title: bool = True) -> str:
    top = news[0]
    if top.keyPoints:
        return top.keyPoints[0]
    return f'"{top.title}"' if quote_title else top.title


def calculate_news_impact(news: Sequence[NewsReference]) -> float:
    """Mean sentiment of ``news`` on a -1..1 scale; 0 for no news."""
    if not news:
        return 0.0
    return sum(sentiment_score(item.sentiment) for item in news) / len(news)


def calculate_impact_score(volume_change_pct: float, news_impact: float) -> int:
    base = clamp(volume_change_pct / 3, IMPACT_MIN, IMPACT_MAX)
    adjusted = base * (1 + news_impact * 0.2)
    return int(clamp(round_half_up(adjusted), IMPACT_MIN, IMPACT_MAX))


def is_sentiment_aligned(news_impact: float, trend: str) -> bool:
    return (
        (news_impact > 0 and trend == "increasing")
        or (news_impact < 0 and trend == "decreasing")
        or (news_impact == 0 and trend == "stable")
    )


def extract_sectors_from_news(news: Sequence[NewsReference]) -> List[str]:
    """Sectors named in titles or key points, de-duplicated in order of first mention."""
    found: List[str] = []
    for item in news:
        texts = [text.lower() for text in (item.title, *item.keyPoints)]
        for sector in Sector:
            name = sector.value.lower()
            if sector.value not in found and any(name in text for text in texts):
                found.append(sector.value)
    return found


def generate_recommended_actions(
    volume_trend: Optional[DataReference],
    budget_variance: Optional[DataReference],
    news: Sequence[NewsReference],
) -> List[str]:
    actions: List[str] = []
    if volume_trend and volume_trend.trend == "decreasing":
        actions.append(ACTION_REVIEW_SALES)
        actions.append(ACTION_SUPPLY_CHAIN)
    if (
        budget_variance
        and budget_variance.trend == "decreasing"
        and budget_variance.value < BUDGET_REVIEW_THRESHOLD_PCT
    ):
        actions.append(ACTION_BUDGET_MEETING)
        actions.append(ACTION_VARIANCE_REPORT)
    if any(item.sentiment == "negative" for item in news):
        actions.append(ACTION_MONITOR_NEGATIVE)
    if not actions:
        actions.append(ACTION_CONTINUE)
    return actions


def describe_trend(volume_trend: DataReference, news: Sequence[NewsReference], aligned: bool) -> str:
    if volume_trend.trend == "increasing":
        trend_text = f"increased by {volume_trend.value:.1f}%"
    elif volume_trend.trend == "decreasing":
        trend_text = f"decreased by {abs(volume_trend.value):.1f}%"
    else:
        trend_text = "remained stable"

    description = f"Gas volume has {trend_text} {volume_trend.period.lower()}. "
    if news:
        description += "This trend aligns with recent news: " if aligned else "Despite contrary indicators in recent news: "
        description += _lead_text(news)
    return description


def describe_variance(budget_variance: DataReference, news: Sequence[NewsReference]) -> str:
    if budget_variance.trend == "increasing":
        variance_text = f"exceeding budget by {budget_variance.value:.1f}%"
    else:
        variance_text = f"falling short of budget by {abs(budget_variance.value):.1f}%"

    description = f"Current gas volume is {variance_text}. "
    if news:
        description += "This may be explained by recent developments: " + _lead_text(news)
    return description


def _correlated_insights(
    news: Sequence[NewsReference],
    data: Sequence[DataReference],
    now_ms: Optional[int],
) -> List[CorrelatedInsight]:
    volume_trend = _find(data, "Volume Trend")
    budget_variance = _find(data, "Budget Variance")
    relevant = list(news[:TOP_NEWS])
    sectors = extract_sectors_from_news(relevant)
    actions = generate_recommended_actions(volume_trend, budget_variance, relevant)

    insights: List[CorrelatedInsight] = []
    if volume_trend:
        direction = {"increasing": "growth", "decreasing": "decline"}.get(volume_trend.trend, "stability")
        news_impact = calculate_news_impact(relevant)
        aligned = is_sentiment_aligned(news_impact, volume_trend.trend)
        insights.append(
            CorrelatedInsight(
                id=_insight_id("trend", now_ms),
                title=f"Volume {direction} correlated with market news",
                description=describe_trend(volume_trend, relevant, aligned),
                impactScore=calculate_impact_score(volume_trend.value, news_impact),
                confidence=ALIGNED_CONFIDENCE if aligned else MISALIGNED_CONFIDENCE,
                sectors=sectors,
                areas=[],
                newsReferences=relevant,
                dataReferences=[volume_trend],
                recommendedActions=list(actions),
            )
        )

    if budget_variance and budget_variance.anomaly:
        label = "overperformance" if budget_variance.trend == "increasing" else "underperformance"
        insights.append(
            CorrelatedInsight(
                id=_insight_id("variance", now_ms),
                title=f"Significant budget {label} detected",
                description=describe_variance(budget_variance, relevant),
                impactScore=VARIANCE_IMPACT if budget_variance.trend == "increasing" else -VARIANCE_IMPACT,
                confidence=VARIANCE_CONFIDENCE,
                sectors=list(sectors),
                areas=[],
                newsReferences=relevant,
                dataReferences=[budget_variance],
                recommendedActions=list(actions),
            )
        )
    return insights


def generate_general_insight(
    news: Sequence[NewsReference],
    data: Sequence[DataReference],
    query: str,
    now_ms: Optional[int] = None,
) -> CorrelatedInsight:
    """Single-source insight for when news and data could not be correlated."""
    if news:
        top = news[0]
        return CorrelatedInsight(
            id=_insight_id("news", now_ms),
            title="Market developments may impact gas volume",
            description=_lead_text(news, quote_title=False),
            impactScore=NEWS_ONLY_IMPACT * sentiment_score(top.sentiment),
            confidence=NEWS_ONLY_CONFIDENCE,
            sectors=extract_sectors_from_news(news),
            newsReferences=list(news[:TOP_NEWS]),
            recommendedActions=["Monitor these developments for potential business impact"],
        )

    if data:
        metric = data[0]
        direction = "increased" if metric.trend == "increasing" else "decreased"
        return CorrelatedInsight(
            id=_insight_id("data", now_ms),
            title=f"{metric.metric} shows notable {metric.trend} trend",
            description=f"{metric.metric} has {direction} by {abs(metric.value):.1f}% {metric.period.lower()}.",
            impactScore=DATA_ONLY_IMPACT if metric.trend == "increasing" else -DATA_ONLY_IMPACT,
            confidence=DATA_ONLY_CONFIDENCE,
            dataReferences=[metric],
            recommendedActions=["Investigate factors driving this trend"],
        )

    return CorrelatedInsight(
        id=_insight_id("general", now_ms),
        title="Insufficient data for correlation analysis",
        description=f'Unable to find strong correlations between news and gas volume data for "{query}".',
        impactScore=0,
        confidence=INSUFFICIENT_CONFIDENCE,
        recommendedActions=["Refine search parameters for better results"],
    )


def synthesize_insights(
    news: Sequence[NewsReference],
    data: Sequence[DataReference],
    query: str,
    now_ms: Optional[int] = None,
) -> List[CorrelatedInsight]:
    """
    Merge ranked news and volume metrics into insights, main insight first.

    Always returns at least one insight: correlated ones when both inputs
    are present, otherwise a single fallback.
    """
    insights: List[CorrelatedInsight] = []
    if news and data:
        insights = _correlated_insights(news, data, now_ms)

    if not insights:
        insights = [generate_general_insight(news, data, query, now_ms)]

    logger.info(
        "insights.synthesize news=%s data=%s insights=%s main=%s",
        len(news),
        len(data),
        len(insights),
        insights[0].title,
    )
    return insights
