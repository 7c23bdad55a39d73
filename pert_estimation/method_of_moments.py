"""
PURPOSE: Deterministic portfolio distribution by Method-of-Moments Beta fitting.

Sums the buckets' PERT means and variances, fits one Beta curve on the summed
support with the same mean and variance, then integrates its density with the
trapezoidal rule to read off percentiles. No randomness: identical input gives
bit-identical output.

SRP/DRY: Single responsibility = moment matching and numerical integration.
         Bucket reduction lives in pert.py, the density in special_functions.py.
"""

import logging
from typing import Optional, Sequence

from pert_estimation.config import (
    COMMON_FACTOR_FALLBACK,
    CURVE_POINTS,
    CURVE_VALUE_DECIMALS,
    SHAPE_FLOOR,
)
from pert_estimation.pert import EstimateTriple, build_bucket_models, portfolio_moments
from pert_estimation.results import CurvePoint, DistributionResult, Percentiles
from pert_estimation.special_functions import beta_pdf

logger = logging.getLogger(__name__)

THRESHOLDS = (("p50", 0.50), ("p70", 0.70), ("p80", 0.80), ("p95", 0.95))


def fit_beta_shape(mean_norm: float, var_norm: float):
    """
    Invert the Beta mean/variance equations on [0, 1].

    common_factor = mean(1 - mean) / var - 1. A negative factor means no Beta
    on [0, 1] has this mean and variance; it is replaced by
    COMMON_FACTOR_FALLBACK and logged.

    Returns:
        (alpha, beta), both at least SHAPE_FLOOR.
    """
    common_factor = 0.0
    if var_norm > 0:
        common_factor = mean_norm * (1 - mean_norm) / var_norm - 1
    if common_factor < 0:
        logger.warning(
            f"Method-of-moments factor {common_factor:.4f} is negative "
            f"(mean_norm={mean_norm:.4f}, var_norm={var_norm:.4f}); using {COMMON_FACTOR_FALLBACK}"
        )
        common_factor = COMMON_FACTOR_FALLBACK
    alpha = max(SHAPE_FLOOR, mean_norm * common_factor)
    beta = max(SHAPE_FLOOR, (1 - mean_norm) * common_factor)
    return alpha, beta


class MethodOfMomentsAlgorithm:
    """Closed-form approximation of the portfolio-sum distribution."""

    name = "Method of Moments"

    def calculate(
        self,
        portfolio: Sequence[Sequence[EstimateTriple]],
        iterations: Optional[int] = None,
        rng=None,
    ) -> DistributionResult:
        """
        Fit and integrate the aggregate Beta curve.

        `iterations` and `rng` are accepted so the algorithm is interchangeable
        with MonteCarloAlgorithm; both are ignored.
        """
        models = build_bucket_models(portfolio)
        if not models:
            return DistributionResult.empty(self.name)

        moments = portfolio_moments(models)
        total_mean = moments.total_mean
        total_min = moments.total_min
        total_max = moments.total_max

        if moments.total_variance == 0 or total_min == total_max:
            logger.debug(f"Degenerate portfolio without variance; total is {total_mean}")
            return DistributionResult.point_mass(total_mean, self.name)

        value_range = total_max - total_min
        mean_norm = (total_mean - total_min) / value_range
        var_norm = moments.total_variance / (value_range * value_range)
        alpha, beta = fit_beta_shape(mean_norm, var_norm)

        step = value_range / CURVE_POINTS
        curve = []
        found = {}
        cumulative_probability = 0.0
        previous_density = 0.0
        for i in range(CURVE_POINTS + 1):
            x_norm = i / CURVE_POINTS
            value = total_min + x_norm * value_range

            density = 0.0
            if 0 < x_norm < 1:
                density = beta_pdf(x_norm, alpha, beta) / value_range
            curve.append(CurvePoint(value=round(value, CURVE_VALUE_DECIMALS), density=density))

            if i > 0:
                cumulative_probability += (previous_density + density) / 2 * step
            previous_density = density

            for key, threshold in THRESHOLDS:
                if key not in found and cumulative_probability >= threshold:
                    found[key] = value

        # Truncation error can leave the upper thresholds unreached
        percentiles = Percentiles(**{key: found.get(key, total_max) for key, _ in THRESHOLDS})

        logger.debug(
            f"Fitted Beta(alpha={alpha:.3f}, beta={beta:.3f}) over [{total_min}, {total_max}]; "
            f"integrated probability {cumulative_probability:.4f}"
        )
        return DistributionResult(curve=tuple(curve), percentiles=percentiles, mean=total_mean, algorithm=self.name)
