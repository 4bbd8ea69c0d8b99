from __future__ import annotations

from schemas.news import Sentiment

POSITIVE_TERMS = (
    "growth",
    "increase",
    "profit",
    "success",
    "positive",
    "improvement",
    "opportunity",
    "expand",
    "gain",
    "recovery",
    "boost",
    "rise",
)

NEGATIVE_TERMS = (
    "decline",
    "decrease",
    "loss",
    "failure",
    "negative",
    "challenge",
    "problem",
    "crisis",
    "risk",
    "threat",
    "drop",
    "fall",
    "concern",
)

SENTIMENT_SCORES = {"positive": 1, "neutral": 0, "negative": -1}


def count_terms(text: str, terms: tuple[str, ...]) -> int:
    lowered = (text or "").lower()
    return sum(1 for term in terms if term in lowered)


def determine_sentiment(text: str) -> Sentiment:
    """
    Keyword-count sentiment. One side has to lead by more than one
    distinct term, otherwise the text is neutral.
    """
    positive = count_terms(text, POSITIVE_TERMS)
    negative = count_terms(text, NEGATIVE_TERMS)
    if positive > negative + 1:
        return "positive"
    if negative > positive + 1:
        return "negative"
    return "neutral"


def sentiment_score(sentiment: str) -> int:
    return SENTIMENT_SCORES.get(sentiment, 0)
