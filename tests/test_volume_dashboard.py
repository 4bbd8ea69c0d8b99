import json
import os
import tempfile
import unittest
from datetime import date

from schemas.volume import Customer, VolumeRecord
from services.analytics.vocabulary import AREAS, SECTORS
from services.volume.aggregation import (
    aggregate_by_dimension,
    build_volume_summary,
    get_current_month_totals,
    get_ytd_totals,
)
from services.volume.customer_insights import classify_status, generate_customer_insights
from services.volume.store import DEFAULT_CUSTOMERS, VolumeDataError, load_volume_dataset

TODAY = date(2025, 5, 20)

CUSTOMERS = [
    Customer(id="c1", customer="GloveMax Industries", area="JHR", sector="Rubber gloves", segment="Elite"),
    Customer(id="c2", customer="PrecisionTech Industries", area="PRK", sector="Manufacturing", segment="Premium"),
]


def _rec(customer_id: str, volume_type: str, month: int, volume: float, year: int = 2025) -> VolumeRecord:
    return VolumeRecord(customerId=customer_id, volumeType=volume_type, month=month, year=year, volume=volume)


RECORDS = [
    _rec("c1", "Actual", 4, 80),
    _rec("c1", "Actual", 5, 100),
    _rec("c1", "Budget", 5, 120),
    _rec("c2", "Actual", 5, 50),
    _rec("c2", "Budget", 5, 80),
    _rec("c2", "Forecast", 6, 70),
    _rec("c2", "Actual", 5, 40, year=2024),
    _rec("ghost", "Actual", 5, 999),
]


class TestAggregation(unittest.TestCase):
    def test_every_sector_is_present(self):
        totals = aggregate_by_dimension(RECORDS, CUSTOMERS, "sector")
        self.assertEqual(list(totals)[: len(SECTORS)], SECTORS)
        self.assertEqual(totals["Rubber gloves"].actual, 180.0)
        self.assertEqual(totals["Rubber gloves"].budget, 120.0)
        self.assertEqual(totals["Manufacturing"].actual, 90.0)
        self.assertEqual(totals["Manufacturing"].forecast, 70.0)
        self.assertEqual(totals["Oleochemical"].actual, 0.0)

    def test_area_breakdown(self):
        totals = aggregate_by_dimension(RECORDS, CUSTOMERS, "area")
        self.assertEqual(set(AREAS), set(totals))
        self.assertEqual(totals["JHR"].actual, 180.0)
        self.assertEqual(totals["PRK"].budget, 80.0)

    def test_ytd_and_current_month(self):
        ytd = get_ytd_totals(RECORDS, TODAY)
        self.assertEqual(ytd.actual, 80 + 100 + 50 + 999)
        self.assertEqual(ytd.budget, 200.0)
        self.assertEqual(ytd.forecast, 0.0)
        self.assertEqual(ytd.variance, ytd.actual - ytd.budget)

        month = get_current_month_totals(RECORDS, TODAY)
        self.assertEqual(month.actual, 100 + 50 + 999)
        self.assertEqual(month.budget, 200.0)

    def test_unplaceable_rows_are_left_out_of_totals(self):
        bad = [
            VolumeRecord(customerId="c1", volumeType="Actual", month=0, year=2025, volume=500),
            VolumeRecord(customerId="c1", volumeType="Actual", month=5, volume=500),
        ]
        ytd = get_ytd_totals(RECORDS + bad, TODAY)
        self.assertEqual(ytd.actual, 80 + 100 + 50 + 999)
        (glove,) = generate_customer_insights(CUSTOMERS[:1], RECORDS + bad, TODAY)
        self.assertEqual(glove.actualVolume, 180.0)

    def test_empty_dataset(self):
        summary = build_volume_summary([], CUSTOMERS, "segment", TODAY)
        self.assertEqual(summary.dimension, "segment")
        self.assertEqual(summary.ytd.actual, 0.0)
        self.assertEqual(summary.breakdown["Elite"].actual, 0.0)


class TestCustomerInsights(unittest.TestCase):
    def test_status_thresholds(self):
        self.assertEqual(classify_status(3.0), "On Track")
        self.assertEqual(classify_status(-5.0), "On Track")
        self.assertEqual(classify_status(-5.01), "At Risk")
        self.assertEqual(classify_status(-15.0), "At Risk")
        self.assertEqual(classify_status(-15.1), "Underperforming")

    def test_customer_rows(self):
        glove, precision = generate_customer_insights(CUSTOMERS, RECORDS, TODAY)

        self.assertEqual(glove.rank, 1)
        self.assertEqual(glove.actualVolume, 180.0)
        self.assertEqual(glove.budgetVolume, 120.0)
        self.assertAlmostEqual(glove.variancePercent, 50.0)
        self.assertEqual(glove.status, "On Track")
        self.assertEqual(glove.insights[0], "GloveMax Industries is performing well with volumes above budget targets.")
        self.assertEqual(len(glove.insights), 4)

        self.assertEqual(precision.rank, 2)
        self.assertEqual(precision.actualVolume, 50.0)
        self.assertAlmostEqual(precision.variancePercent, -37.5)
        self.assertEqual(precision.status, "Underperforming")
        self.assertEqual(precision.forecastVolume, 70.0)
        self.assertTrue(precision.insights[-1].startswith("Recommendation: Immediate intervention"))

    def test_time_series_window(self):
        glove, precision = generate_customer_insights(CUSTOMERS, RECORDS, TODAY)
        months = [point.month for point in glove.timeSeriesData]
        self.assertEqual(months, ["Nov", "Dec", "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug"])
        self.assertEqual(glove.timeSeriesData[6].actual, 100.0)
        self.assertIsNone(glove.timeSeriesData[6].forecast)
        self.assertEqual(precision.timeSeriesData[7].forecast, 70.0)

    def test_no_budget_means_zero_variance_percent(self):
        (row,) = generate_customer_insights(CUSTOMERS[:1], [_rec("c1", "Actual", 5, 10)], TODAY)
        self.assertEqual(row.variancePercent, 0.0)
        self.assertEqual(row.status, "On Track")


class TestVolumeStore(unittest.TestCase):
    def test_missing_file_returns_demo_roster(self):
        customers, records = load_volume_dataset("/nonexistent/volume.json")
        self.assertEqual(customers, DEFAULT_CUSTOMERS)
        self.assertEqual(records, [])

    def test_loads_json_file(self):
        raw = {
            "customers": [c.model_dump() for c in CUSTOMERS],
            "volume": [r.model_dump() for r in RECORDS[:3]],
        }
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as fh:
            json.dump(raw, fh)
            path = fh.name
        try:
            customers, records = load_volume_dataset(path)
        finally:
            os.remove(path)
        self.assertEqual([c.id for c in customers], ["c1", "c2"])
        self.assertEqual(len(records), 3)

    def test_invalid_records_raise(self):
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as fh:
            json.dump({"volume": [{"customerId": "c1", "volumeType": "Actual", "month": 5, "year": 2025, "volume": "lots"}]}, fh)
            path = fh.name
        try:
            with self.assertRaises(VolumeDataError):
                load_volume_dataset(path)
        finally:
            os.remove(path)


if __name__ == "__main__":
    unittest.main()
