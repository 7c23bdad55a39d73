import os
import unittest
from unittest import mock

from pert_estimation.monte_carlo import MonteCarloAlgorithm
from pert_estimation.pert import EstimateTriple
from pert_estimation.planning import (
    CategorizedEstimate,
    WorkItem,
    build_portfolio,
    category_distributions,
    required_capacity,
    story_cutoff,
    story_distribution,
)
from pert_estimation.results import ConfidenceLevel, DistributionResult, Percentiles


def item(name, *estimates, excluded=False):
    return WorkItem(
        name=name,
        estimates=tuple(CategorizedEstimate(category, EstimateTriple(*triple)) for category, triple in estimates),
        excluded=excluded,
    )


class TestBuildPortfolio(unittest.TestCase):
    def setUp(self):
        self.items = [
            item("login", ("dev", (2, 10, 20)), ("dev", (4, 6, 10)), ("qa", (1, 2, 3))),
            item("search", ("qa", (2, 3, 5))),
            item("export", ("dev", (1, 1, 1)), excluded=True),
        ]

    def test_filters_category(self):
        portfolio = build_portfolio(self.items, "dev")
        self.assertEqual(portfolio, [[EstimateTriple(2, 10, 20), EstimateTriple(4, 6, 10)]])

    def test_skips_excluded_items(self):
        portfolio = build_portfolio(self.items, None)
        self.assertEqual(len(portfolio), 2)

    def test_unknown_category(self):
        self.assertEqual(build_portfolio(self.items, "design"), [])


class TestRequiredCapacity(unittest.TestCase):
    def test_confidence_mapping(self):
        """Avg reads the mean, not p50."""
        result = DistributionResult(percentiles=Percentiles(10, 12, 13, 16), mean=11)
        self.assertEqual(required_capacity(result, "Avg"), 11)
        self.assertEqual(required_capacity(result, "70%"), 12)
        self.assertEqual(required_capacity(result, ConfidenceLevel.P80), 13)
        self.assertEqual(required_capacity(result, "95%"), 16)

    def test_unknown_label(self):
        with self.assertRaises(ValueError):
            required_capacity(DistributionResult(), "99%")


class TestStoryDistribution(unittest.TestCase):
    def setUp(self):
        self.story = item("login", ("dev", (2, 10, 20)), ("qa", (100, 100, 100)))
        simulate = MonteCarloAlgorithm._simulate
        patcher = mock.patch.object(
            MonteCarloAlgorithm,
            "_simulate",
            autospec=True,
            side_effect=lambda algorithm, models, num_runs, rng: simulate(algorithm, models, num_runs, rng),
        )
        self.simulate = patcher.start()
        self.addCleanup(patcher.stop)

    def test_uses_single_item_iterations_setting(self):
        """Without an explicit count, PERT_SINGLE_ITEM_ITERATIONS sets the run count."""
        env = {"PERT_SINGLE_ITEM_ITERATIONS": "123", "PERT_ALGORITHM": "monte-carlo"}
        with mock.patch.dict(os.environ, env):
            result = story_distribution(self.story, "dev", rng=0)
        self.simulate.assert_called_once()
        self.assertEqual(self.simulate.call_args[0][2], 123)
        self.assertEqual(result.algorithm, "Monte Carlo")

    def test_explicit_iterations_win(self):
        with mock.patch.dict(os.environ, {"PERT_SINGLE_ITEM_ITERATIONS": "123"}):
            story_distribution(self.story, "dev", algorithm="monte-carlo", iterations=400, rng=0)
        self.assertEqual(self.simulate.call_args[0][2], 400)

    def test_filters_category(self):
        """Only the requested category's estimates enter the distribution."""
        result = story_distribution(self.story, "qa", algorithm="method-of-moments")
        self.assertEqual(result.mean, 100)
        self.assertEqual(result.percentiles, Percentiles.constant(100))
        self.simulate.assert_not_called()

    def test_unknown_category_is_empty(self):
        result = story_distribution(self.story, "ops", algorithm="monte-carlo", rng=0)
        self.assertEqual(result.curve, ())
        self.assertEqual(result.mean, 0.0)


class TestStoryCutoff(unittest.TestCase):
    def setUp(self):
        self.items = [
            item("a", ("dev", (4, 4, 4))),
            item("b", ("dev", (4, 4, 4))),
            item("skip", ("dev", (50, 50, 50)), excluded=True),
            item("c", ("dev", (4, 4, 4))),
        ]

    def test_cutoff_index(self):
        cutoff = story_cutoff(self.items, capacity=10, confidence="80%", category="dev", algorithm="method-of-moments")
        self.assertEqual(cutoff.cutoff_index, 2)
        self.assertEqual(cutoff.item_count, 3)
        self.assertEqual(cutoff.required, 12)
        self.assertTrue(cutoff.is_over)

    def test_everything_fits(self):
        cutoff = story_cutoff(self.items, capacity=100, confidence="Avg", category="dev", algorithm="method-of-moments")
        self.assertEqual(cutoff.cutoff_index, 3)
        self.assertFalse(cutoff.is_over)

    def test_nothing_fits(self):
        cutoff = story_cutoff(self.items, capacity=1, category="dev", algorithm="method-of-moments")
        self.assertEqual(cutoff.cutoff_index, 0)

    def test_monte_carlo_seeded(self):
        items = [item(str(i), ("dev", (2, 5, 12))) for i in range(6)]
        first = story_cutoff(items, capacity=25, confidence="95%", category="dev",
                             algorithm="monte-carlo", iterations=5000, rng=1)
        second = story_cutoff(items, capacity=25, confidence="95%", category="dev",
                              algorithm="monte-carlo", iterations=5000, rng=1)
        self.assertEqual(first, second)
        # four items: mean 22.7, p95 well above 25; three items: p95 below 25
        self.assertEqual(first.cutoff_index, 3)


class TestCategoryDistributions(unittest.TestCase):
    def test_per_category_results(self):
        items = [
            item("login", ("dev", (2, 10, 20)), ("qa", (1, 2, 3))),
            item("search", ("dev", (3, 5, 15))),
        ]
        results = category_distributions(items, ["dev", "qa", "design"], algorithm="method-of-moments")
        self.assertEqual(list(results), ["dev", "qa", "design"])
        self.assertAlmostEqual(results["dev"].mean, 100 / 6)
        self.assertAlmostEqual(results["qa"].mean, 2.0)
        self.assertTrue(results["design"].is_empty)

    def test_seeded_monte_carlo(self):
        items = [item("login", ("dev", (2, 10, 20))), item("search", ("dev", (3, 5, 15)))]
        first = category_distributions(items, ["dev"], algorithm="monte-carlo", iterations=2000, seed=3)
        second = category_distributions(items, ["dev"], algorithm="monte-carlo", iterations=2000, seed=3)
        self.assertEqual(first, second)


if __name__ == "__main__":
    unittest.main()
