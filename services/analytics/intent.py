from __future__ import annotations

import logging

from schemas.insights import QueryIntent
from services.analytics.vocabulary import (
    AREA_ALIASES,
    COUNTRY_ALIASES,
    POLICY_TERMS,
    SECTOR_ALIASES,
    match_aliases,
    match_terms,
)

logger = logging.getLogger(__name__)


def extract_query_intent(query: str) -> QueryIntent:
    """Pull sectors, area codes, policy terms and countries out of free text."""
    intent = QueryIntent(
        sectors=[s.value for s in match_aliases(query, SECTOR_ALIASES)],
        areas=[a.value for a in match_aliases(query, AREA_ALIASES)],
        policyTerms=match_terms(query, POLICY_TERMS),
        countries=[c.value for c in match_aliases(query, COUNTRY_ALIASES)],
    )
    logger.debug(
        "intent.extract sectors=%s areas=%s policy_terms=%s countries=%s",
        intent.sectors,
        intent.areas,
        intent.policyTerms,
        intent.countries,
    )
    return intent
