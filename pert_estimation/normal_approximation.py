"""
PURPOSE: Normal-approximation statistics for stories and iterations.

This is the older way of reading a confidence bound off PERT estimates:
sum the PERT means and variances and use mean +/- z * stddev. It ignores the
skew of the underlying Beta distributions, so its bounds can disagree with
the distribution algorithms. The engine never uses it for required
capacity; it is kept as a diagnostic next to a DistributionResult.

RESPONSIBILITIES:
- Per-story expected value and standard deviation
- Iteration totals and two-sided confidence intervals
- Side-by-side comparison with a distribution algorithm's percentile
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from scipy.stats import norm

from pert_estimation.pert import (
    EstimateTriple,
    filter_empty_buckets,
    pert_mean,
    pert_std_dev,
    reduce_bucket,
)
from pert_estimation.results import DistributionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoryEstimate:
    expected_value: float
    standard_deviation: float


@dataclass(frozen=True)
class IterationStats:
    total_expected_value: float
    total_variance: float
    story_count: int

    @property
    def total_standard_deviation(self) -> float:
        return math.sqrt(self.total_variance)

    def interval(self, confidence: float) -> Tuple[float, float]:
        """
        Two-sided interval mean +/- z * stddev.

        Args:
            confidence: Coverage in (0, 1), e.g. 0.5, 0.8, 0.95.

        Raises:
            ValueError: If confidence is not strictly between 0 and 1.
        """
        if not 0 < confidence < 1:
            raise ValueError(f"confidence must be in (0, 1), got {confidence}")
        z = z_score(confidence)
        spread = z * self.total_standard_deviation
        return self.total_expected_value - spread, self.total_expected_value + spread

    def upper_bound(self, confidence: float) -> float:
        """Upper end of the two-sided interval; for 0.70 this is mean + 1.036 * stddev."""
        return self.interval(confidence)[1]


@dataclass(frozen=True)
class ApproximationComparison:
    """Normal-approximation and distribution bounds side by side.

    Each flag compares a bound with the mean of its own method: `mean` is the
    legacy PERT sum, `distribution_mean` is what the algorithm reported. They
    differ when a bucket is fixed at its optimistic value (o >= p).
    """
    confidence: float
    mean: float
    normal_bound: float
    distribution_mean: float
    distribution_bound: float
    algorithm: str

    @property
    def average_exceeds_normal_bound(self) -> bool:
        return self.mean > self.normal_bound

    @property
    def average_exceeds_distribution_bound(self) -> bool:
        return self.distribution_mean > self.distribution_bound

    @property
    def discrepancy(self) -> float:
        """Distribution bound minus normal bound."""
        return self.distribution_bound - self.normal_bound


def z_score(confidence: float) -> float:
    """Two-sided standard normal quantile, e.g. 0.70 -> 1.036."""
    return float(norm.ppf(0.5 + confidence / 2))


def story_estimate(bucket: Sequence[EstimateTriple]) -> StoryEstimate:
    effective = reduce_bucket(bucket)
    if effective is None:
        return StoryEstimate(expected_value=0.0, standard_deviation=0.0)
    return StoryEstimate(
        expected_value=pert_mean(effective.optimistic, effective.most_likely, effective.pessimistic),
        standard_deviation=pert_std_dev(effective.optimistic, effective.pessimistic),
    )


def iteration_stats(portfolio: Sequence[Sequence[EstimateTriple]]) -> IterationStats:
    """Sum story means and variances, treating stories as independent."""
    total_expected_value = 0.0
    total_variance = 0.0
    buckets = filter_empty_buckets(portfolio)
    for bucket in buckets:
        estimate = story_estimate(bucket)
        total_expected_value += estimate.expected_value
        total_variance += estimate.standard_deviation ** 2
    return IterationStats(
        total_expected_value=total_expected_value,
        total_variance=total_variance,
        story_count=len(buckets),
    )


def compare_with_distribution(
    portfolio: Sequence[Sequence[EstimateTriple]],
    result: DistributionResult,
    confidence: float = 0.70,
) -> ApproximationComparison:
    """
    Put the normal-approximation bound next to a distribution percentile.

    The two methods are not reconciled: both numbers are reported and the
    caller decides what to display.

    Raises:
        ValueError: If confidence is not one of 0.50, 0.70, 0.80, 0.95.
    """
    percentile_by_confidence = {
        0.50: result.percentiles.p50,
        0.70: result.percentiles.p70,
        0.80: result.percentiles.p80,
        0.95: result.percentiles.p95,
    }
    if confidence not in percentile_by_confidence:
        raise ValueError(f"confidence must be one of {sorted(percentile_by_confidence)}, got {confidence}")
    stats = iteration_stats(portfolio)
    comparison = ApproximationComparison(
        confidence=confidence,
        mean=stats.total_expected_value,
        normal_bound=stats.upper_bound(confidence),
        distribution_mean=result.mean,
        distribution_bound=percentile_by_confidence[confidence],
        algorithm=result.algorithm,
    )
    if comparison.average_exceeds_normal_bound or comparison.average_exceeds_distribution_bound:
        logger.warning(
            f"Average exceeds a {confidence:.0%} bound "
            f"(normal: {comparison.mean:.3f} > {comparison.normal_bound:.3f} is {comparison.average_exceeds_normal_bound}, "
            f"{comparison.algorithm}: {comparison.distribution_mean:.3f} > {comparison.distribution_bound:.3f} "
            f"is {comparison.average_exceeds_distribution_bound})"
        )
    return comparison


if __name__ == "__main__":
    from pert_estimation.engine import calculate

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    portfolio = [
        [EstimateTriple(2, 10, 20)],
        [EstimateTriple(3, 5, 15)],
    ]
    for index, bucket in enumerate(portfolio, start=1):
        estimate = story_estimate(bucket)
        logger.info(f"Story {index}: e={estimate.expected_value:.3f} sd={estimate.standard_deviation:.3f}")

    stats = iteration_stats(portfolio)
    logger.info(f"Total: ev={stats.total_expected_value:.3f} sd={stats.total_standard_deviation:.3f}")
    logger.info(f"Required Capacity (Avg): {stats.total_expected_value:.3f}")
    logger.info(f"Required Capacity (70%, normal): {stats.upper_bound(0.70):.3f}")

    for algorithm in ("monte-carlo", "method-of-moments"):
        result = calculate(portfolio, algorithm=algorithm, iterations=50000, rng=42)
        comparison = compare_with_distribution(portfolio, result, confidence=0.70)
        logger.info(
            f"{comparison.algorithm}: p70={comparison.distribution_bound:.3f} "
            f"normal={comparison.normal_bound:.3f} discrepancy={comparison.discrepancy:+.3f}"
        )
        if comparison.average_exceeds_distribution_bound:
            logger.info("Anomaly CONFIRMED: Avg > 70%")
        else:
            logger.info("Anomaly DISPROVED: Avg < 70%")
