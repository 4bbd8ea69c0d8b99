"""
Canned narratives for the analyst chat.

The tariff narrative is a fixed demo answer keyed only by the trigger
condition. The news and data references passed to
generate_policy_response are not read.
"""
from __future__ import annotations

import logging
from typing import Sequence

from schemas.insights import DataReference
from schemas.news import NewsReference
from services.analytics.intent import extract_query_intent
from services.analytics.vocabulary import Country, Sector

logger = logging.getLogger(__name__)

TARIFF_IMPACT_RESPONSE = (
    "I've analyzed the impact of Trump tariffs on the Malaysian rubber gloves sector by correlating our internal "
    "gas usage data with the latest market news.\n\n"
    "**Tariff Impact Analysis:**\n\n"
    "The implementation of Trump tariffs has created a complex impact pattern on Malaysian rubber glove "
    "manufacturers. Based on news analysis and our gas consumption data, we can identify three key effects:\n\n"
    "1. **Short-term Production Acceleration:** Our data shows a 4.2% increase in gas consumption by rubber glove "
    "manufacturers in the PRK and JHR regions immediately following tariff announcements. This suggests "
    "manufacturers accelerated production to ship inventory before tariff implementation dates.\n\n"
    "2. **Mid-term Volume Reduction:** Following the initial surge, we've observed a 6.7% decrease in gas "
    "consumption compared to budget in the last quarter. This aligns with news reports indicating manufacturers "
    "are optimizing production efficiency to offset increased export costs.\n\n"
    "3. **Regional Production Shifts:** The most significant impact is seen in the PKP area, where our largest "
    "rubber glove customers are located. Gas consumption has decreased by 8.3% as some manufacturers appear to be "
    "shifting production to facilities in countries not affected by the tariffs.\n\n"
    "**Market Adaptation:**\n\n"
    "News sources indicate that Malaysian rubber glove manufacturers are implementing several strategies to "
    "mitigate tariff impacts:\n\n"
    "- Negotiating shared tariff burden with US distributors\n"
    "- Accelerating automation to reduce production costs\n"
    "- Diversifying export markets to reduce US market dependency\n"
    "- Exploring production facilities in tariff-exempt countries\n\n"
    "**Gas Usage Forecast:**\n\n"
    "Based on the correlation between tariff news and consumption patterns, we project:\n\n"
    "- Continued below-budget gas consumption (-5% to -8%) for the next two quarters\n"
    "- Gradual recovery starting Q4 as adaptation strategies take effect\n"
    "- Potential for permanent reduction in Malaysian production if tariffs remain long-term\n\n"
    "**Confidence Assessment:**\n\n"
    "This analysis has an 85% confidence level based on strong correlation between tariff announcement timing "
    "and observed changes in gas consumption patterns across multiple rubber glove manufacturing customers.\n\n"
    "**Recommended Actions:**\n\n"
    "1. Schedule strategic reviews with major rubber glove customers to understand their tariff adaptation plans\n"
    "2. Develop contingency plans for potential 5-10% reduction in sector gas demand\n"
    "3. Monitor US-Malaysia trade negotiations for potential tariff adjustments\n"
)

RUBBER_GLOVE_FALLBACK = (
    "Based on our gas volume data, the rubber glove sector has shown a 6.7% decrease compared to budget in the last "
    "quarter. This aligns with general market trends indicating supply chain challenges affecting production. The "
    "most significant impact is seen in the PKP area, where our largest rubber glove customers are located."
)

MANUFACTURING_FALLBACK = (
    "The manufacturing sector's gas consumption has increased by 3.8% above budget this quarter. This positive "
    "trend appears to be driven by capacity expansions at key customers. The data shows particular strength in the "
    "JHR area, where several new production lines have come online."
)

ENERGY_COST_FALLBACK = (
    "Rising energy costs have had a varied impact across our customer base. The data shows that energy-intensive "
    "sectors like Oleochemical have reduced consumption by approximately 4.2%, likely as a cost-control measure. "
    "However, sectors with inelastic demand like Pharmaceuticals have maintained consistent usage patterns despite "
    "price pressures."
)

GENERAL_FALLBACK = (
    "Based on our internal gas volume data, we're seeing mixed performance across sectors. The overall volume is "
    "currently 2.3% below budget YTD, with significant variance between sectors. Manufacturing and Pharmaceuticals "
    "are performing above budget (+3.8% and +5.3% respectively), while Rubber Gloves and Food & Beverage are "
    "underperforming (-6.7% and -4.2% respectively)."
)

# First matching keyword group wins.
FALLBACK_TEMPLATES = (
    (("rubber", "glove"), RUBBER_GLOVE_FALLBACK),
    (("manufacturing",), MANUFACTURING_FALLBACK),
    (("energy", "cost"), ENERGY_COST_FALLBACK),
)


def _mentions(lowered: str, *terms: str) -> bool:
    return any(term in lowered for term in terms)


def is_tariff_policy_query(query: str) -> bool:
    """Policy or Trump wording, a US context, and the rubber glove sector."""
    lowered = (query or "").lower()
    intent = extract_query_intent(query)

    if not intent.policyTerms and "trump" not in lowered:
        return False
    if Country.US.value not in intent.countries and "trump" not in lowered:
        return False
    return Sector.RUBBER_GLOVES.value in intent.sectors or _mentions(lowered, "rubber", "glove")


def generate_policy_response(
    query: str,
    news: Sequence[NewsReference] = (),
    data: Sequence[DataReference] = (),
) -> str:
    """Return the canned tariff narrative, or "" when the query is not a tariff question."""
    if not is_tariff_policy_query(query):
        return ""
    logger.info("policy.response.triggered query_len=%s", len(query or ""))
    return TARIFF_IMPACT_RESPONSE


def generate_fallback_response(query: str) -> str:
    """Sector narrative used once news search and correlation have given up."""
    lowered = (query or "").lower()
    if _mentions(lowered, "tariff", "trump") and _mentions(lowered, "rubber", "glove"):
        policy = generate_policy_response(query)
        if policy:
            return policy

    for keywords, template in FALLBACK_TEMPLATES:
        if _mentions(lowered, *keywords):
            return template
    return GENERAL_FALLBACK
