"""
PURPOSE: PERT point statistics and portfolio data model.

RESPONSIBILITIES:
- Closed-form PERT mean and standard deviation of a three-point estimate
- Reduce a bucket (several estimators, same item) to one effective triple
- Classify buckets as fixed (point mass) or variable (Beta distributed)
- Aggregate portfolio moments and support for the algorithms
- Single responsibility: no sampling, no integration
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from pert_estimation.config import SHAPE_FLOOR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EstimateTriple:
    """One estimator's three-point estimate for an item.

    The ordering optimistic <= most_likely <= pessimistic is expected but not
    enforced. Unordered triples are accepted and degrade as documented in
    classify_bucket.
    """
    optimistic: float
    most_likely: float
    pessimistic: float
    estimator: Optional[str] = None

    @property
    def is_ordered(self) -> bool:
        return self.optimistic <= self.most_likely <= self.pessimistic

    @property
    def mean(self) -> float:
        return pert_mean(self.optimistic, self.most_likely, self.pessimistic)

    @property
    def std_dev(self) -> float:
        return pert_std_dev(self.optimistic, self.pessimistic)


@dataclass(frozen=True)
class EffectiveTriple:
    """Field-wise average of the triples in one bucket."""
    optimistic: float
    most_likely: float
    pessimistic: float
    estimate_count: int


@dataclass(frozen=True)
class BucketModel:
    """Distribution of one bucket as seen by the algorithms.

    Fixed buckets are a point mass at `low`; variable buckets are
    low + Beta(alpha, beta) * (high - low).
    """
    effective: EffectiveTriple
    fixed: bool
    low: float
    high: float
    alpha: float = 0.0
    beta: float = 0.0

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def mean(self) -> float:
        if self.fixed:
            return self.low
        return pert_mean(self.effective.optimistic, self.effective.most_likely, self.effective.pessimistic)

    @property
    def variance(self) -> float:
        if self.fixed:
            return 0.0
        return pert_variance(self.effective.optimistic, self.effective.pessimistic)


@dataclass(frozen=True)
class PortfolioMoments:
    total_mean: float
    total_variance: float
    total_min: float
    total_max: float
    bucket_count: int


def pert_mean(optimistic: float, most_likely: float, pessimistic: float) -> float:
    """PERT expected value: (o + 4m + p) / 6."""
    return (optimistic + 4 * most_likely + pessimistic) / 6


def pert_std_dev(optimistic: float, pessimistic: float) -> float:
    """PERT standard deviation: (p - o) / 6."""
    return (pessimistic - optimistic) / 6


def pert_variance(optimistic: float, pessimistic: float) -> float:
    return pert_std_dev(optimistic, pessimistic) ** 2


def reduce_bucket(bucket: Sequence[EstimateTriple]) -> Optional[EffectiveTriple]:
    """
    Average each field over the triples of a bucket.

    Every estimator carries equal weight; this is a plain arithmetic mean per
    field, not a PERT-weighted mean.

    Args:
        bucket: Triples from different estimators for the same item/category.

    Returns:
        EffectiveTriple, or None for an empty bucket.
    """
    count = len(bucket)
    if count == 0:
        return None
    total_o = 0.0
    total_m = 0.0
    total_p = 0.0
    for triple in bucket:
        total_o += triple.optimistic
        total_m += triple.most_likely
        total_p += triple.pessimistic
    return EffectiveTriple(
        optimistic=total_o / count,
        most_likely=total_m / count,
        pessimistic=total_p / count,
        estimate_count=count,
    )


def filter_empty_buckets(portfolio: Iterable[Sequence[EstimateTriple]]) -> List[Sequence[EstimateTriple]]:
    """Drop buckets without triples. Empty buckets contribute nothing; they are never zero-filled."""
    return [bucket for bucket in portfolio if len(bucket) > 0]


def beta_shape(optimistic: float, most_likely: float, pessimistic: float):
    """
    PERT-to-Beta shape parameters for the support [optimistic, pessimistic].

    alpha = 1 + 4(m - o) / range, beta = 1 + 4(p - m) / range, each floored at
    SHAPE_FLOOR so that a most-likely value outside the support cannot produce
    a non-positive shape. Requires pessimistic > optimistic.
    """
    value_range = pessimistic - optimistic
    alpha = 1 + 4 * (most_likely - optimistic) / value_range
    beta = 1 + 4 * (pessimistic - most_likely) / value_range
    return max(SHAPE_FLOOR, alpha), max(SHAPE_FLOOR, beta)


def classify_bucket(effective: EffectiveTriple) -> BucketModel:
    """
    Decide how a bucket enters the portfolio sum.

    A bucket whose pessimistic value does not exceed its optimistic value has
    no Beta support width. It becomes a point mass at the optimistic value.
    This covers both o == p and the malformed o > p.
    """
    o = effective.optimistic
    p = effective.pessimistic
    if p - o <= 0:
        if p < o:
            logger.debug(f"Bucket with optimistic {o} > pessimistic {p}; treating as fixed at {o}")
        return BucketModel(effective=effective, fixed=True, low=o, high=o)
    alpha, beta = beta_shape(o, effective.most_likely, p)
    return BucketModel(effective=effective, fixed=False, low=o, high=p, alpha=alpha, beta=beta)


def build_bucket_models(portfolio: Iterable[Sequence[EstimateTriple]]) -> List[BucketModel]:
    """Filter empty buckets, reduce the rest and classify them."""
    models = []
    for bucket in filter_empty_buckets(portfolio):
        models.append(classify_bucket(reduce_bucket(bucket)))
    return models


def portfolio_moments(models: Sequence[BucketModel]) -> PortfolioMoments:
    """Sum means, variances and supports over independent buckets."""
    total_mean = 0.0
    total_variance = 0.0
    total_min = 0.0
    total_max = 0.0
    for model in models:
        total_mean += model.mean
        total_variance += model.variance
        total_min += model.low
        total_max += model.high
    return PortfolioMoments(
        total_mean=total_mean,
        total_variance=total_variance,
        total_min=total_min,
        total_max=total_max,
        bucket_count=len(models),
    )
