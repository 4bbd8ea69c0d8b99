from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from schemas.insights import CorrelatedInsight
from schemas.news import NewsItem
from schemas.volume import Customer, VolumeRecord
from services.analytics.intent import extract_query_intent
from services.insights.synthesizer import synthesize_insights
from services.news.relevance import filter_and_rank_news
from services.volume.trend import analyze_volume_trend, filter_volume_records

logger = logging.getLogger(__name__)


def correlate_news_with_data(
    query: str,
    news_items: Sequence[NewsItem],
    volume_records: Sequence[VolumeRecord],
    customers: Sequence[Customer],
    now: Optional[datetime] = None,
) -> List[CorrelatedInsight]:
    """
    Full correlation pass for one query: intent, news ranking, volume
    filtering by the sectors/areas the query names, trend analysis and
    insight synthesis.
    """
    now = now or datetime.now()
    intent = extract_query_intent(query)
    news_refs = filter_and_rank_news(query, news_items)
    scoped = filter_volume_records(volume_records, customers, intent.sectors, intent.areas)
    data_refs = analyze_volume_trend(scoped, now)

    logger.info(
        "correlation.run news_in=%s news_kept=%s records_in=%s records_scoped=%s data_refs=%s",
        len(news_items),
        len(news_refs),
        len(volume_records),
        len(scoped),
        len(data_refs),
    )
    return synthesize_insights(news_refs, data_refs, query, now_ms=int(now.timestamp() * 1000))
