"""
PURPOSE: Single entry point for portfolio distribution estimates.

RESPONSIBILITIES:
- Resolve the configured algorithm and dispatch calculate()
- Run independent portfolios (one per category) concurrently
- NO numerical work of its own
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Hashable, Mapping, Optional, Sequence, Union

import numpy as np

from pert_estimation.config import load_settings
from pert_estimation.pert import EstimateTriple
from pert_estimation.registry import AlgorithmRegistry, AlgorithmType, create_algorithm_registry
from pert_estimation.results import DistributionResult

logger = logging.getLogger(__name__)

Portfolio = Sequence[Sequence[EstimateTriple]]


def calculate(
    portfolio: Portfolio,
    algorithm: Union[str, AlgorithmType, None] = None,
    iterations: Optional[int] = None,
    rng=None,
    registry: Optional[AlgorithmRegistry] = None,
) -> DistributionResult:
    """
    Estimate the distribution of a portfolio total.

    Args:
        portfolio: Buckets of estimate triples.
        algorithm: Identifier such as "monte-carlo" or "method-of-moments".
                   None uses the PERT_ALGORITHM setting.
        iterations: Monte Carlo scenario count; ignored by Method of Moments.
        rng: numpy Generator, SeedSequence or int seed. None uses the
             PERT_RANDOM_SEED setting, or fresh entropy when that is unset.
        registry: Registry to resolve the algorithm from (default: built-ins).

    Returns:
        DistributionResult

    Raises:
        ValueError: If the algorithm identifier is unknown.
    """
    if algorithm is None or rng is None:
        settings = load_settings()
        if algorithm is None:
            algorithm = settings.algorithm
        if rng is None:
            rng = settings.seed
    if registry is None:
        registry = create_algorithm_registry()
    estimator = registry.get(algorithm)
    return estimator.calculate(portfolio, iterations=iterations, rng=rng)


def calculate_many(
    portfolios: Mapping[Hashable, Portfolio],
    algorithm: Union[str, AlgorithmType, None] = None,
    iterations: Optional[int] = None,
    seed: Optional[int] = None,
    max_workers: Optional[int] = None,
    registry: Optional[AlgorithmRegistry] = None,
) -> Dict[Hashable, DistributionResult]:
    """
    Estimate several independent portfolios in parallel.

    Each portfolio gets its own generator spawned from one SeedSequence, so a
    seeded call returns the same results whatever order the threads finish in.

    Returns:
        Dict keyed like `portfolios`, in the same order.
    """
    if registry is None:
        registry = create_algorithm_registry()
    keys = list(portfolios)
    if not keys:
        return {}
    child_seeds = np.random.SeedSequence(seed).spawn(len(keys))

    logger.info(f"Calculating {len(keys)} portfolios with algorithm={algorithm or 'default'}")
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            key: executor.submit(
                calculate,
                portfolios[key],
                algorithm=algorithm,
                iterations=iterations,
                rng=np.random.default_rng(child_seed),
                registry=registry,
            )
            for key, child_seed in zip(keys, child_seeds)
        }
        return {key: futures[key].result() for key in keys}
