"""Regression tests for drill-level aggregation.

Guards the behaviours the chart depends on:
    * Bucket sums conserve the filtered row totals at every level.
    * Ratio metrics come from summed numerator/denominator, never from the
      mean of per-row ratios.
    * Buckets are ordered case- and accent-insensitively and deterministically.
"""

import math
import unittest

from sku_drilldown.aggregation import aggregate, filter_frame, measure_totals, row_metric_values
from sku_drilldown.dataset import load_dataset
from sku_drilldown.drill_path import DrillPath


SALES_ROWS = [
    {"Category": "Snacks", "Sub Category": "Chips", "Item": "Salted", "SKU Code": "S1", "Revenue": "1.2k", "Margin": "300", "Cost": "900"},
    {"Category": "Snacks", "Sub Category": "Chips", "Item": "BBQ", "SKU Code": "S2", "Revenue": "800", "Margin": "-50", "Cost": "850"},
    {"Category": "Snacks", "Sub Category": "Nuts", "Item": "Almonds", "SKU Code": "S3", "Revenue": "2,000", "Margin": "500", "Cost": "n/a"},
    {"Category": "drinks", "Sub Category": "Soda", "Item": "Cola", "SKU Code": "D1", "Revenue": "1,500", "Margin": "450", "Cost": "1050"},
    {"Category": "Drinks", "Sub Category": "Water", "Item": "Still", "SKU Code": "D2", "Revenue": "", "Margin": "0", "Cost": "40"},
    {"Category": "Bakery", "Sub Category": "Bread", "Item": "Rye", "SKU Code": "B1", "Revenue": "300", "Margin": "30", "Cost": "270"},
    {"Category": "Bakery", "Sub Category": "Bread", "Item": "Rye", "SKU Code": "B2", "Revenue": "200", "Margin": "10", "Cost": "190"},
]


class EndToEndTests(unittest.TestCase):

    def setUp(self):
        self.dataset = load_dataset([
            {"category": "A", "sub_category": "X", "item": "I1", "Revenue": 100, "Margin": 20},
            {"category": "A", "sub_category": "X", "item": "I2", "Revenue": 50, "Margin": -10},
        ])

    def test_root_bucket(self):
        result = aggregate(self.dataset, DrillPath())
        self.assertEqual(result.group_field, "category")
        self.assertEqual(len(result.buckets), 1)
        bucket = result.buckets[0]
        self.assertEqual(bucket.name, "A")
        self.assertEqual(bucket.sums["Revenue"], 150.0)
        self.assertEqual(bucket.sums["Margin"], 10.0)
        self.assertAlmostEqual(bucket.ratios["Margin %"], 10 / 150 * 100)
        self.assertEqual(f"{bucket.ratios['Margin %']:.1f}", "6.7")

    def test_drilled_bucket_has_identical_sums(self):
        root = aggregate(self.dataset, DrillPath()).buckets[0]
        result = aggregate(self.dataset, DrillPath(("A",)))
        self.assertEqual(result.group_field, "sub_category")
        self.assertEqual([b.name for b in result.buckets], ["X"])
        self.assertEqual(dict(result.buckets[0].sums), dict(root.sums))
        self.assertAlmostEqual(result.buckets[0].ratios["Margin %"], root.ratios["Margin %"])


class AggregationTests(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.dataset = load_dataset(SALES_ROWS)

    def test_conservation_at_every_level(self):
        for path in [DrillPath(), DrillPath(("Snacks",)), DrillPath(("Snacks", "Chips"))]:
            buckets = aggregate(self.dataset, path).buckets
            totals = measure_totals(filter_frame(self.dataset, path), self.dataset.catalog)
            for measure in self.dataset.catalog.base_measures:
                self.assertAlmostEqual(
                    sum(b.sums[measure] for b in buckets), totals[measure], places=9,
                    msg=f"{measure} at {path.values}"
                )

    def test_non_numeric_cells_contribute_zero(self):
        buckets = {b.name: b for b in aggregate(self.dataset, DrillPath(("Snacks",))).buckets}
        self.assertEqual(buckets["Nuts"].sums["Cost"], 0.0)
        self.assertEqual(buckets["Chips"].sums["Revenue"], 2000.0)

    def test_case_insensitive_ordering(self):
        names = [b.name for b in aggregate(self.dataset, DrillPath()).buckets]
        self.assertEqual(names, ["Bakery", "Drinks", "drinks", "Snacks"])
        again = [b.name for b in aggregate(self.dataset, DrillPath()).buckets]
        self.assertEqual(names, again)

    def test_accented_names_sort_with_their_base_letter(self):
        dataset = load_dataset([
            {"category": name, "sub_category": "X", "item": "I1", "Revenue": 1}
            for name in ["Eggs", "\u00c9clairs", "Apples"]
        ])
        names = [b.name for b in aggregate(dataset, DrillPath()).buckets]
        self.assertEqual(names, ["Apples", "\u00c9clairs", "Eggs"])

    def test_drill_filter_is_case_sensitive(self):
        lower = aggregate(self.dataset, DrillPath(("drinks",))).buckets
        upper = aggregate(self.dataset, DrillPath(("Drinks",))).buckets
        self.assertEqual([b.name for b in lower], ["Soda"])
        self.assertEqual([b.name for b in upper], ["Water"])

    def test_zero_denominator_ratio_is_undefined(self):
        water = aggregate(self.dataset, DrillPath(("Drinks",))).buckets[0]
        self.assertEqual(water.sums["Revenue"], 0.0)
        self.assertTrue(math.isnan(water.ratios["Margin %"]))

    def test_negative_buckets_are_kept(self):
        items = aggregate(self.dataset, DrillPath(("Snacks", "Chips"))).buckets
        self.assertEqual([b.name for b in items], ["BBQ", "Salted"])
        self.assertEqual(items[0].sums["Margin"], -50.0)

    def test_leaf_returns_rows(self):
        result = aggregate(self.dataset, DrillPath(("Bakery", "Bread", "Rye")))
        self.assertTrue(result.is_leaf)
        self.assertEqual(result.buckets, ())
        self.assertEqual([r.sku_code for r in result.leaf_rows], ["B1", "B2"])

    def test_row_metric_values(self):
        row = aggregate(self.dataset, DrillPath(("Bakery", "Bread", "Rye"))).leaf_rows[0]
        values = row_metric_values(row, self.dataset.catalog)
        self.assertAlmostEqual(values["Margin %"], 10.0)


class RatioFromSumsTests(unittest.TestCase):
    """The averaging of per-row ratios is a known defect; summed components must be used."""

    def test_summed_ratio_differs_from_mean_of_row_ratios(self):
        rows = [
            {"category": "A", "sub_category": "X", "item": "tiny", "Revenue": 1, "Margin": 1},
            {"category": "A", "sub_category": "X", "item": "large", "Revenue": 99, "Margin": 0},
        ]
        bucket = aggregate(load_dataset(rows), DrillPath()).buckets[0]
        mean_of_rows = (1 / 1 * 100 + 0 / 99 * 100) / 2

        self.assertAlmostEqual(bucket.ratios["Margin %"], 1.0)
        self.assertNotAlmostEqual(bucket.ratios["Margin %"], mean_of_rows)


class EmptyInputTests(unittest.TestCase):

    def test_empty_dataset_yields_no_buckets(self):
        dataset = load_dataset([])
        for path in [DrillPath(), DrillPath(("A",)), DrillPath(("A", "B", "C"))]:
            result = aggregate(dataset, path)
            self.assertEqual(result.buckets, ())
            self.assertEqual(result.leaf_rows, ())

    def test_dataset_without_measures(self):
        dataset = load_dataset([{"category": "A", "sub_category": "X", "item": "I1", "Region": "West"}])
        buckets = aggregate(dataset, DrillPath()).buckets
        self.assertEqual([b.name for b in buckets], ["A"])
        self.assertEqual(dict(buckets[0].sums), {})


if __name__ == "__main__":
    unittest.main()
