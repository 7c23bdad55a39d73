"""
PERT estimation engine for capacity planning.

PURPOSE:
    Turn three-point (optimistic / most likely / pessimistic) estimates into
    the probability distribution of a whole iteration's required capacity, so
    planners can read off p50/p70/p80/p95 cutoffs.

RESPONSIBILITIES:
    - PERT point statistics and bucket reduction
    - Special functions and Beta/Gamma samplers
    - Monte Carlo and Method-of-Moments portfolio algorithms
    - Algorithm registry and engine facade
    - Normal-approximation diagnostics and planning helpers

SRP/DRY CHECK:
    Each submodule has a single responsibility:
    - pert.py: Point statistics and portfolio model only
    - special_functions.py: Numerical primitives only
    - monte_carlo.py: Simulation only
    - method_of_moments.py: Moment matching and integration only
    - registry.py / engine.py: Algorithm selection and dispatch only
    - normal_approximation.py: Legacy mean +/- z * stddev bounds only
    - planning.py: Work items, categories and cutoffs only
"""

from .pert import EstimateTriple, pert_mean, pert_std_dev, pert_variance, reduce_bucket
from .results import ConfidenceLevel, CurvePoint, DistributionResult, Percentiles
from .monte_carlo import MonteCarloAlgorithm
from .method_of_moments import MethodOfMomentsAlgorithm
from .registry import AlgorithmRegistry, AlgorithmType, create_algorithm_registry
from .engine import calculate, calculate_many

__version__ = "0.1.0"

__all__ = [
    "EstimateTriple",
    "pert_mean",
    "pert_std_dev",
    "pert_variance",
    "reduce_bucket",
    "ConfidenceLevel",
    "CurvePoint",
    "DistributionResult",
    "Percentiles",
    "MonteCarloAlgorithm",
    "MethodOfMomentsAlgorithm",
    "AlgorithmRegistry",
    "AlgorithmType",
    "create_algorithm_registry",
    "calculate",
    "calculate_many",
]
