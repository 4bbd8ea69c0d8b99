from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

_SECTOR_HINTS = (
    (("rubber", "glove"), "Rubber gloves"),
    (("manufacturing",), "Manufacturing"),
    (("energy", "cost"), "Energy"),
    (("food", "beverage"), "Food & Beverage"),
)


def infer_mock_sector(query: str) -> str:
    lowered = (query or "").lower()
    for hints, sector in _SECTOR_HINTS:
        if any(hint in lowered for hint in hints):
            return sector
    return "General"


def generate_mock_news_payload(query: str, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Offline stand-in for a Tavily response, shaped like the real payload
    ({results, answer, query}). Used when the search API is unavailable.
    """
    lowered = (query or "").lower()
    sector = infer_mock_sector(query)
    published = (today or date.today()).isoformat()

    results: List[Dict[str, Any]] = [
        {
            "title": f"Latest Trends in {sector} Industry",
            "content": (
                f"The {sector} industry has been experiencing significant changes due to global market shifts. "
                "Companies are adapting to new challenges and opportunities."
            ),
            "url": "https://example.com/industry-trends",
            "source": "Industry Insights",
            "published_date": published,
        },
        {
            "title": f"Supply Chain Updates for {sector}",
            "content": (
                f"Supply chain disruptions continue to affect the {sector} sector, with varying impacts across "
                "different regions. Companies are implementing new strategies to mitigate these challenges."
            ),
            "url": "https://example.com/supply-chain",
            "source": "Supply Chain Monitor",
            "published_date": published,
        },
        {
            "title": f"Market Analysis: {sector} in Southeast Asia",
            "content": (
                f"Southeast Asian markets show promising growth potential for {sector} companies, despite regional "
                "economic pressures. Malaysia and Thailand lead in adoption of new technologies."
            ),
            "url": "https://example.com/market-analysis",
            "source": "Market Research Institute",
            "published_date": published,
        },
    ]

    if "tariff" in lowered or "trump" in lowered:
        results.insert(
            0,
            {
                "title": f"Impact of Tariffs on {sector} Exports",
                "content": (
                    f"Recent tariff changes have created both challenges and opportunities for {sector} exporters. "
                    "Companies are diversifying markets and optimizing production to maintain competitiveness."
                ),
                "url": "https://example.com/tariff-impact",
                "source": "Trade Policy Review",
                "published_date": published,
            },
        )

    return {
        "results": results,
        "answer": (
            f"Based on recent information, the {sector} sector is adapting to changing market conditions with "
            "varying degrees of success. Companies that have invested in technology and supply chain resilience "
            "are showing better performance."
        ),
        "query": query,
    }
