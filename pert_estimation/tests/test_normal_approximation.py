"""
Unit tests for normal-approximation statistics.

The two-story scenario (2, 10, 20) + (3, 5, 15) is the reproduction case for
the "average exceeds the 70% requirement" report. The comparison is reported
here; no direction is asserted as the correct one.
"""

import math
import unittest

from pert_estimation.engine import calculate
from pert_estimation.normal_approximation import (
    compare_with_distribution,
    iteration_stats,
    story_estimate,
    z_score,
)
from pert_estimation.pert import EstimateTriple


class TestStoryEstimate(unittest.TestCase):
    def test_closed_form(self):
        estimate = story_estimate([EstimateTriple(2, 10, 20)])
        self.assertAlmostEqual(estimate.expected_value, 62 / 6)
        self.assertEqual(estimate.standard_deviation, 3.0)

    def test_empty_bucket(self):
        estimate = story_estimate([])
        self.assertEqual(estimate.expected_value, 0.0)
        self.assertEqual(estimate.standard_deviation, 0.0)


class TestIterationStats(unittest.TestCase):
    def setUp(self):
        self.portfolio = [[EstimateTriple(2, 10, 20)], [EstimateTriple(3, 5, 15)], []]

    def test_totals(self):
        stats = iteration_stats(self.portfolio)
        self.assertEqual(stats.story_count, 2)
        self.assertAlmostEqual(stats.total_expected_value, 100 / 6)
        self.assertAlmostEqual(stats.total_variance, 13.0)
        self.assertAlmostEqual(stats.total_standard_deviation, math.sqrt(13.0))

    def test_z_scores(self):
        self.assertAlmostEqual(z_score(0.70), 1.036, places=3)
        self.assertAlmostEqual(z_score(0.95), 1.960, places=3)
        self.assertAlmostEqual(z_score(0.50), 0.674, places=3)

    def test_interval_is_symmetric(self):
        stats = iteration_stats(self.portfolio)
        low, high = stats.interval(0.95)
        self.assertAlmostEqual((low + high) / 2, stats.total_expected_value)
        self.assertAlmostEqual(high - low, 2 * 1.959964 * math.sqrt(13.0), places=4)

    def test_upper_bound_70(self):
        stats = iteration_stats(self.portfolio)
        expected = 100 / 6 + z_score(0.70) * math.sqrt(13.0)
        self.assertAlmostEqual(stats.upper_bound(0.70), expected)

    def test_invalid_confidence(self):
        stats = iteration_stats(self.portfolio)
        for confidence in (0, 1, 1.5, -0.2):
            with self.assertRaises(ValueError):
                stats.interval(confidence)


class TestComparison(unittest.TestCase):
    def setUp(self):
        self.portfolio = [[EstimateTriple(2, 10, 20)], [EstimateTriple(3, 5, 15)]]

    def test_reports_both_bounds(self):
        for algorithm in ("monte-carlo", "method-of-moments"):
            result = calculate(self.portfolio, algorithm=algorithm, iterations=20000, rng=5)
            comparison = compare_with_distribution(self.portfolio, result, confidence=0.70)
            self.assertEqual(comparison.distribution_bound, result.percentiles.p70)
            self.assertAlmostEqual(comparison.normal_bound, iteration_stats(self.portfolio).upper_bound(0.70))
            self.assertEqual(comparison.average_exceeds_normal_bound, comparison.mean > comparison.normal_bound)
            self.assertEqual(
                comparison.average_exceeds_distribution_bound,
                comparison.distribution_mean > comparison.distribution_bound,
            )
            self.assertAlmostEqual(comparison.discrepancy, comparison.distribution_bound - comparison.normal_bound)
            self.assertEqual(comparison.distribution_mean, result.mean)
            self.assertEqual(comparison.algorithm, result.algorithm)

    def test_distribution_flag_uses_distribution_mean(self):
        """An inverted triple is fixed at o=9 by the engine while the PERT sum gives 4.5."""
        portfolio = [[EstimateTriple(9, 4, 2)]]
        result = calculate(portfolio, algorithm="method-of-moments")
        comparison = compare_with_distribution(portfolio, result, confidence=0.70)
        self.assertEqual(result.mean, 9.0)
        self.assertAlmostEqual(comparison.mean, 4.5)
        self.assertEqual(comparison.distribution_mean, 9.0)
        self.assertEqual(comparison.distribution_bound, 9.0)
        self.assertFalse(comparison.average_exceeds_distribution_bound)

    def test_unsupported_confidence(self):
        result = calculate(self.portfolio, algorithm="method-of-moments")
        with self.assertRaises(ValueError):
            compare_with_distribution(self.portfolio, result, confidence=0.60)


if __name__ == "__main__":
    unittest.main()
