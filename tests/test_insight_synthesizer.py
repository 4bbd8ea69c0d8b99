import unittest
from datetime import datetime

from schemas.insights import CorrelatedInsight, DataReference
from schemas.news import NewsItem, NewsReference
from schemas.volume import Customer, VolumeRecord
from services.insights.correlation import correlate_news_with_data
from services.insights.synthesizer import (
    ACTION_BUDGET_MEETING,
    ACTION_CONTINUE,
    ACTION_MONITOR_NEGATIVE,
    ACTION_REVIEW_SALES,
    calculate_impact_score,
    extract_sectors_from_news,
    round_half_up,
    synthesize_insights,
)


def _news(title: str, sentiment: str = "neutral", key_points=None) -> NewsReference:
    return NewsReference(
        title=title,
        url="https://example.com",
        source="Wire",
        date="2025-05-01",
        relevanceScore=50,
        sentiment=sentiment,
        keyPoints=key_points or [],
    )


def _trend(value: float, trend: str, anomaly: bool = False) -> DataReference:
    return DataReference(metric="Volume Trend", value=value, trend=trend, period="Month-over-Month", anomaly=anomaly)


def _variance(value: float, trend: str, anomaly: bool) -> DataReference:
    return DataReference(metric="Budget Variance", value=value, trend=trend, period="Current Month", anomaly=anomaly)


class TestScoring(unittest.TestCase):
    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(-2.5), -2)
        self.assertEqual(round_half_up(-2.6), -3)

    def test_impact_score_is_clamped(self):
        self.assertEqual(calculate_impact_score(60, 1.0), 10)
        self.assertEqual(calculate_impact_score(-60, -1.0), -8)
        self.assertEqual(calculate_impact_score(0, 1.0), 0)

    def test_insight_model_clamps(self):
        insight = CorrelatedInsight(id="x", title="t", description="d", impactScore=42, confidence=-3)
        self.assertEqual(insight.impactScore, 10)
        self.assertEqual(insight.confidence, 0)

    def test_insight_model_rounds_half_up_before_clamping(self):
        self.assertEqual(CorrelatedInsight(id="x", title="t", description="d", impactScore=3.7).impactScore, 4)
        self.assertEqual(CorrelatedInsight(id="x", title="t", description="d", impactScore=2.5).impactScore, 3)
        self.assertEqual(CorrelatedInsight(id="x", title="t", description="d", impactScore=-2.5).impactScore, -2)
        self.assertEqual(CorrelatedInsight(id="x", title="t", description="d", impactScore=9.6).impactScore, 10)
        self.assertEqual(CorrelatedInsight(id="x", title="t", description="d", confidence=74.5).confidence, 75)

    def test_sectors_follow_vocabulary_order(self):
        news = [_news("Manufacturing output and rubber gloves demand")]
        self.assertEqual(extract_sectors_from_news(news), ["Rubber gloves", "Manufacturing"])


class TestSynthesizeInsights(unittest.TestCase):
    def test_nothing_to_correlate(self):
        insights = synthesize_insights([], [], "gas demand", now_ms=1000)
        self.assertEqual(len(insights), 1)
        self.assertEqual(insights[0].id, "general-1000")
        self.assertEqual(insights[0].title, "Insufficient data for correlation analysis")
        self.assertEqual(insights[0].confidence, 30)
        self.assertEqual(insights[0].impactScore, 0)
        self.assertIn('"gas demand"', insights[0].description)

    def test_news_only(self):
        news = [_news("Glove exports slump", "negative", ["Exports fell sharply"])]
        (insight,) = synthesize_insights(news, [], "gloves", now_ms=1)
        self.assertEqual(insight.confidence, 60)
        self.assertEqual(insight.impactScore, -3)
        self.assertEqual(insight.description, "Exports fell sharply")

    def test_data_only(self):
        (insight,) = synthesize_insights([], [_trend(-12.0, "decreasing")], "gloves", now_ms=1)
        self.assertEqual(insight.title, "Volume Trend shows notable decreasing trend")
        self.assertEqual(insight.description, "Volume Trend has decreased by 12.0% month-over-month.")
        self.assertEqual(insight.impactScore, -4)
        self.assertEqual(insight.confidence, 70)

    def test_aligned_growth(self):
        news = [_news("Rubber gloves demand surges", "positive")]
        data = [_trend(20.0, "increasing", True), _variance(3.0, "stable", False)]
        insights = synthesize_insights(news, data, "rubber gloves", now_ms=5)

        self.assertEqual(len(insights), 1)
        main = insights[0]
        self.assertEqual(main.id, "trend-5")
        self.assertEqual(main.title, "Volume growth correlated with market news")
        self.assertEqual(main.confidence, 75)
        self.assertEqual(main.impactScore, 8)
        self.assertEqual(main.sectors, ["Rubber gloves"])
        self.assertEqual(main.recommendedActions, [ACTION_CONTINUE])
        self.assertTrue(main.description.startswith("Gas volume has increased by 20.0% month-over-month."))

    def test_misaligned_decline_with_budget_shortfall(self):
        news = [_news("Glove makers expand", "positive")]
        data = [_trend(-10.0, "decreasing"), _variance(-12.0, "decreasing", True)]
        trend_insight, variance_insight = synthesize_insights(news, data, "gloves", now_ms=7)

        self.assertEqual(trend_insight.confidence, 50)
        self.assertIn("Despite contrary indicators in recent news", trend_insight.description)
        self.assertIn(ACTION_REVIEW_SALES, trend_insight.recommendedActions)
        self.assertIn(ACTION_BUDGET_MEETING, trend_insight.recommendedActions)

        self.assertEqual(variance_insight.id, "variance-7")
        self.assertEqual(variance_insight.title, "Significant budget underperformance detected")
        self.assertEqual(variance_insight.impactScore, -5)
        self.assertEqual(variance_insight.confidence, 80)

    def test_negative_news_adds_monitoring_action(self):
        news = [_news("Glove plant fire", "negative")]
        (insight,) = synthesize_insights(news, [_trend(1.0, "stable")], "gloves", now_ms=1)
        self.assertIn(ACTION_MONITOR_NEGATIVE, insight.recommendedActions)

    def test_only_top_three_news_are_referenced(self):
        news = [_news(f"headline {i}") for i in range(5)]
        (insight,) = synthesize_insights(news, [_trend(1.0, "stable")], "q", now_ms=1)
        self.assertEqual(len(insight.newsReferences), 3)

    def test_same_inputs_same_output(self):
        news = [_news("Rubber gloves demand", "positive")]
        data = [_trend(8.0, "increasing"), _variance(-20.0, "decreasing", True)]
        first = synthesize_insights(news, data, "q", now_ms=1)
        second = synthesize_insights(news, data, "q", now_ms=2)
        strip = lambda items: [i.model_dump(exclude={"id"}) for i in items]
        self.assertEqual(strip(first), strip(second))



class TestCorrelationPipeline(unittest.TestCase):
    def setUp(self):
        self.customers = [
            Customer(id="1", area="JHR", sector="Rubber gloves", segment="Elite"),
            Customer(id="2", area="PRK", sector="Manufacturing", segment="Premium"),
        ]
        self.records = [
            VolumeRecord(customerId="1", volumeType="Actual", month=3, year=2025, volume=7000),
            VolumeRecord(customerId="1", volumeType="Actual", month=4, year=2025, volume=7000),
            VolumeRecord(customerId="1", volumeType="Budget", month=4, year=2025, volume=10000),
            VolumeRecord(customerId="2", volumeType="Actual", month=4, year=2025, volume=50000),
        ]
        self.now = datetime(2025, 4, 30, 12, 0)

    def test_budget_shortfall_adds_variance_insight(self):
        news = [NewsItem(title="Rubber gloves exporters", content="Rubber gloves demand is flat.")]
        insights = correlate_news_with_data("rubber gloves in johor", news, self.records, self.customers, now=self.now)

        self.assertEqual(len(insights), 2)
        variance = insights[1]
        self.assertEqual(variance.impactScore, -5)
        self.assertEqual(variance.confidence, 80)
        self.assertAlmostEqual(variance.dataReferences[0].value, -30.0)
        self.assertEqual(insights[0].id, f"trend-{int(self.now.timestamp() * 1000)}")

    def test_irrelevant_news_falls_back_to_data_only(self):
        news = [NewsItem(title="Weather report", content="Sunny skies ahead.")]
        insights = correlate_news_with_data("rubber gloves in johor", news, self.records, self.customers, now=self.now)
        self.assertEqual(len(insights), 1)
        self.assertEqual(insights[0].confidence, 70)

    def test_nothing_matches(self):
        insights = correlate_news_with_data("oleochemical", [], self.records, self.customers, now=self.now)
        self.assertEqual(len(insights), 1)
        self.assertEqual(insights[0].confidence, 30)


if __name__ == "__main__":
    unittest.main()
