"""
PURPOSE: Special functions and random variate samplers behind the PERT algorithms.

RESPONSIBILITIES:
- Log-gamma via the Lanczos approximation (g=7, 9 coefficients)
- Beta probability density evaluated in log-space
- Standard normal (Box-Muller), Gamma (Marsaglia-Tsang) and Beta samplers
- Single responsibility: numerical primitives only, no portfolio logic

All samplers take an explicit numpy Generator so that callers control seeding.
"""

import math

import numpy as np

from pert_estimation.config import SHAPE_FLOOR

LANCZOS_G = 7
LANCZOS_COEFFICIENTS = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)
_HALF_LOG_TWO_PI = 0.5 * math.log(2 * math.pi)


def log_gamma(z: float) -> float:
    """
    Natural log of the Gamma function.

    Uses the reflection formula ln(pi / sin(pi z)) - log_gamma(1 - z) below
    0.5 and the Lanczos series otherwise.
    """
    if z < 0.5:
        return math.log(math.pi / math.sin(math.pi * z)) - log_gamma(1 - z)

    z -= 1
    x = LANCZOS_COEFFICIENTS[0]
    for i in range(1, len(LANCZOS_COEFFICIENTS)):
        x += LANCZOS_COEFFICIENTS[i] / (z + i)

    t = z + LANCZOS_G + 0.5
    return _HALF_LOG_TWO_PI + (z + 0.5) * math.log(t) - t + math.log(x)


def beta_pdf(x: float, alpha: float, beta: float) -> float:
    """
    Beta(alpha, beta) density at x.

    Returns 0 outside the open interval (0, 1). Works in log-space so that very
    large or very small shape parameters do not overflow.
    """
    if x <= 0 or x >= 1:
        return 0.0
    alpha = max(SHAPE_FLOOR, alpha)
    beta = max(SHAPE_FLOOR, beta)
    ln_val = (
        log_gamma(alpha + beta) - log_gamma(alpha) - log_gamma(beta)
        + (alpha - 1) * math.log(x) + (beta - 1) * math.log(1 - x)
    )
    return math.exp(ln_val)


def _positive_uniform(rng: np.random.Generator, size: int) -> np.ndarray:
    """Uniform(0, 1) draws with exact zeros redrawn."""
    u = rng.random(size)
    zeros = u == 0.0
    while np.any(zeros):
        u[zeros] = rng.random(int(np.sum(zeros)))
        zeros = u == 0.0
    return u


def sample_standard_normal(rng: np.random.Generator, size: int = 1) -> np.ndarray:
    """
    Sample N(0, 1) using the Box-Muller transform.

    Args:
        rng: numpy Generator supplying uniform draws
        size: Number of samples

    Returns:
        numpy array of standard normal samples
    """
    u1 = _positive_uniform(rng, size)
    u2 = _positive_uniform(rng, size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def sample_gamma(alpha: float, rng: np.random.Generator, size: int = 1) -> np.ndarray:
    """
    Sample Gamma(alpha, 1) with the Marsaglia-Tsang squeeze method.

    For alpha < 1 the sampler draws Gamma(1 + alpha) and scales by
    u^(1 / alpha). Rejected candidates are redrawn until every slot is filled.

    Args:
        alpha: Shape parameter, floored at SHAPE_FLOOR
        rng: numpy Generator
        size: Number of samples

    Returns:
        numpy array of gamma samples
    """
    alpha = max(SHAPE_FLOOR, alpha)
    if alpha < 1:
        boosted = sample_gamma(1 + alpha, rng, size)
        return boosted * _positive_uniform(rng, size) ** (1 / alpha)

    d = alpha - 1 / 3
    c = 1 / math.sqrt(9 * d)
    result = np.empty(size)
    pending = np.arange(size)
    while pending.size > 0:
        n = pending.size
        x = sample_standard_normal(rng, n)
        base = 1 + c * x
        # v = (1 + cx)^3 only defined for the squeeze when 1 + cx > 0
        valid = base > 0
        v = np.where(valid, base, 1.0) ** 3
        u = _positive_uniform(rng, n)
        squeeze = u < 1 - 0.0331 * x ** 4
        log_test = np.log(u) < 0.5 * x ** 2 + d * (1 - v + np.log(v))
        accepted = valid & (squeeze | log_test)
        result[pending[accepted]] = d * v[accepted]
        pending = pending[~accepted]
    return result


def sample_beta(alpha: float, beta: float, rng: np.random.Generator, size: int = 1) -> np.ndarray:
    """Sample Beta(alpha, beta) as g1 / (g1 + g2) from two independent Gamma draws."""
    g1 = sample_gamma(alpha, rng, size)
    g2 = sample_gamma(beta, rng, size)
    return g1 / (g1 + g2)
