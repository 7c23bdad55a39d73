"""
Algorithm registry.

Maps algorithm identifiers to estimator instances. The registry is an
ordinary object built by create_algorithm_registry() and passed to whoever
needs it, so tests and callers can register their own estimators.
"""

from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, Union

from pert_estimation.config import METHOD_OF_MOMENTS, MONTE_CARLO
from pert_estimation.method_of_moments import MethodOfMomentsAlgorithm
from pert_estimation.monte_carlo import MonteCarloAlgorithm
from pert_estimation.pert import EstimateTriple
from pert_estimation.results import DistributionResult


class AlgorithmType(str, Enum):
    MONTE_CARLO = MONTE_CARLO
    METHOD_OF_MOMENTS = METHOD_OF_MOMENTS


class EstimationAlgorithm(Protocol):
    name: str

    def calculate(
        self,
        portfolio: Sequence[Sequence[EstimateTriple]],
        iterations: Optional[int] = None,
        rng=None,
    ) -> DistributionResult:
        ...


class AlgorithmRegistry:
    def __init__(self, algorithms: Optional[Dict[str, EstimationAlgorithm]] = None):
        self._algorithms: Dict[str, EstimationAlgorithm] = dict(algorithms or {})

    def register(self, algorithm_type: Union[str, AlgorithmType], algorithm: EstimationAlgorithm) -> None:
        self._algorithms[_key(algorithm_type)] = algorithm

    def get(self, algorithm_type: Union[str, AlgorithmType]) -> EstimationAlgorithm:
        """
        Look up an estimator by identifier.

        Raises:
            ValueError: If the identifier is not registered.
        """
        key = _key(algorithm_type)
        if key not in self._algorithms:
            available = sorted(self._algorithms)
            raise ValueError(f"Unknown algorithm: '{key}'. Available: {available}")
        return self._algorithms[key]

    def available(self) -> List[Tuple[str, str]]:
        """Return (identifier, display name) pairs in registration order."""
        return [(key, algorithm.name) for key, algorithm in self._algorithms.items()]

    def __contains__(self, algorithm_type) -> bool:
        return _key(algorithm_type) in self._algorithms


def _key(algorithm_type: Union[str, AlgorithmType]) -> str:
    if isinstance(algorithm_type, AlgorithmType):
        return algorithm_type.value
    return str(algorithm_type)


def create_algorithm_registry() -> AlgorithmRegistry:
    """
    Create a registry holding both built-in estimators.

    Example:
        >>> registry = create_algorithm_registry()
        >>> registry.get("method-of-moments").name
        'Method of Moments'
    """
    return AlgorithmRegistry({
        AlgorithmType.MONTE_CARLO.value: MonteCarloAlgorithm(),
        AlgorithmType.METHOD_OF_MOMENTS.value: MethodOfMomentsAlgorithm(),
    })
