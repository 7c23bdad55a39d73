"""
PURPOSE: Monte Carlo estimation of the portfolio-sum distribution.

Runs N independent scenarios. Each scenario draws one Beta sample per
variable bucket, rescales it onto the bucket's support and sums it with the
fixed buckets' constants. The sorted totals give percentiles, their average
gives the mean and a 25-bin histogram gives the density curve.

SINGLE RESPONSIBILITY:
- Sample totals for a portfolio
- Aggregate totals into percentiles, mean and a density curve
- Return a DistributionResult (no I/O, no formatting)

CONSTRAINTS:
- Randomness comes only from the Generator passed in (or built from a seed)
- Does NOT modify the portfolio; reads only
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

from pert_estimation.config import (
    CURVE_VALUE_DECIMALS,
    DEFAULT_ITERATIONS,
    HISTOGRAM_BINS,
    PERCENTILE_LEVELS,
)
from pert_estimation.pert import BucketModel, EstimateTriple, build_bucket_models
from pert_estimation.results import CurvePoint, DistributionResult, Percentiles
from pert_estimation.special_functions import sample_beta

logger = logging.getLogger(__name__)

RandomSource = Union[None, int, np.random.SeedSequence, np.random.Generator]


class MonteCarloAlgorithm:
    """
    Stochastic estimator for the sum of independent PERT buckets.

    Stateless: every call builds its own sample buffer and draws from the
    generator it is handed.
    """

    name = "Monte Carlo"

    def calculate(
        self,
        portfolio: Sequence[Sequence[EstimateTriple]],
        iterations: Optional[int] = None,
        rng: RandomSource = None,
    ) -> DistributionResult:
        """
        Simulate the portfolio total.

        Args:
            portfolio: Buckets of estimate triples; empty buckets are ignored.
            iterations: Number of scenarios (default DEFAULT_ITERATIONS).
            rng: numpy Generator, seed, or None for fresh entropy.

        Returns:
            DistributionResult with a histogram curve, percentiles and mean.
        """
        models = build_bucket_models(portfolio)
        if not models:
            return DistributionResult.empty(self.name)

        support_min = sum(model.low for model in models)
        support_max = sum(model.high for model in models)
        variable = [model for model in models if not model.fixed]
        if not variable or support_max <= support_min:
            logger.debug(f"Degenerate portfolio, every bucket fixed; total is {support_min}")
            return DistributionResult.point_mass(support_min, self.name)

        num_runs = DEFAULT_ITERATIONS if iterations is None else max(1, int(iterations))
        generator = np.random.default_rng(rng)
        totals = self._simulate(models, num_runs, generator)

        percentile_values = np.percentile(totals, PERCENTILE_LEVELS, method="linear")
        percentiles = Percentiles(*(float(v) for v in percentile_values))
        mean = float(np.mean(totals))
        curve = self._histogram_curve(totals, support_min, support_max)

        logger.debug(
            f"Simulated {num_runs} runs over {len(models)} buckets "
            f"({len(variable)} variable): mean={mean:.3f}, p80={percentiles.p80:.3f}"
        )
        return DistributionResult(curve=curve, percentiles=percentiles, mean=mean, algorithm=self.name)

    def _simulate(self, models: Sequence[BucketModel], num_runs: int, rng: np.random.Generator) -> np.ndarray:
        """Sum one draw per bucket for each of num_runs scenarios."""
        totals = np.zeros(num_runs)
        for model in models:
            if model.fixed:
                totals += model.low
            else:
                totals += model.low + sample_beta(model.alpha, model.beta, rng, num_runs) * model.range
        return totals

    def _histogram_curve(self, totals: np.ndarray, support_min: float, support_max: float):
        """
        Density histogram over [support_min, support_max].

        Samples land in bin min(last, floor((x - min) / width)). Zero-density
        anchors are added at the support ends when the outer bins are occupied.
        """
        num_runs = totals.size
        width = (support_max - support_min) / HISTOGRAM_BINS
        indices = np.floor((totals - support_min) / width).astype(int)
        indices = np.clip(indices, 0, HISTOGRAM_BINS - 1)
        counts = np.bincount(indices, minlength=HISTOGRAM_BINS)

        curve = []
        if counts[0] > 0:
            curve.append(CurvePoint(value=round(support_min, CURVE_VALUE_DECIMALS), density=0.0))
        for i, count in enumerate(counts):
            midpoint = support_min + (i + 0.5) * width
            curve.append(CurvePoint(
                value=round(midpoint, CURVE_VALUE_DECIMALS),
                density=float(count) / (num_runs * width),
            ))
        if counts[-1] > 0:
            curve.append(CurvePoint(value=round(support_max, CURVE_VALUE_DECIMALS), density=0.0))
        return tuple(curve)
