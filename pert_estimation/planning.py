"""
PURPOSE: Turn work items into portfolios and read capacity decisions off results.

RESPONSIBILITIES:
- Build a portfolio for one category, skipping excluded items
- Required capacity at a confidence label
- Single story distribution with the single-item iteration count
- Story cutoff: how many leading items fit in the available capacity
- Per-category distributions computed concurrently
- NO numerical algorithms; everything goes through engine.calculate
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Union

import numpy as np

from pert_estimation.config import load_settings
from pert_estimation.engine import calculate, calculate_many
from pert_estimation.pert import EstimateTriple
from pert_estimation.registry import AlgorithmType
from pert_estimation.results import ConfidenceLevel, DistributionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategorizedEstimate:
    category: Hashable
    triple: EstimateTriple


@dataclass(frozen=True)
class WorkItem:
    """A story as the engine sees it: a name, its estimates and whether it is excluded."""
    name: str
    estimates: Sequence[CategorizedEstimate] = field(default_factory=tuple)
    excluded: bool = False

    def bucket(self, category: Optional[Hashable] = None) -> List[EstimateTriple]:
        """Triples for one category, or every triple when category is None."""
        return [
            estimate.triple
            for estimate in self.estimates
            if category is None or estimate.category == category
        ]


@dataclass(frozen=True)
class CutoffResult:
    """
    Attributes:
        cutoff_index (int): Number of leading included items that fit.
        item_count (int): Number of included items considered.
        required (float): Required capacity of all included items.
        capacity (float): Capacity the items were compared against.
    """
    cutoff_index: int
    item_count: int
    required: float
    capacity: float

    @property
    def is_over(self) -> bool:
        return self.required > self.capacity


def included_items(items: Iterable[WorkItem]) -> List[WorkItem]:
    return [item for item in items if not item.excluded]


def build_portfolio(items: Iterable[WorkItem], category: Optional[Hashable] = None) -> List[List[EstimateTriple]]:
    """
    One bucket per included item with estimates in `category`.

    Excluded items and items without matching estimates contribute no bucket.
    """
    portfolio = []
    for item in included_items(items):
        bucket = item.bucket(category)
        if bucket:
            portfolio.append(bucket)
    return portfolio


def required_capacity(result: DistributionResult, confidence: Union[str, ConfidenceLevel]) -> float:
    return result.value_at(ConfidenceLevel(confidence))


def story_distribution(
    item: WorkItem,
    category: Optional[Hashable] = None,
    algorithm: Union[str, AlgorithmType, None] = None,
    iterations: Optional[int] = None,
    rng=None,
) -> DistributionResult:
    """
    Distribution of a single story's estimates in one category.

    Monte Carlo runs default to the single-item iteration setting, which is
    smaller than the aggregate one used for iteration and category views.
    """
    if iterations is None:
        iterations = load_settings().single_item_iterations
    bucket = item.bucket(category)
    return calculate([bucket], algorithm=algorithm, iterations=iterations, rng=rng)


def story_cutoff(
    items: Sequence[WorkItem],
    capacity: float,
    confidence: Union[str, ConfidenceLevel] = ConfidenceLevel.P80,
    category: Optional[Hashable] = None,
    algorithm: Union[str, AlgorithmType, None] = None,
    iterations: Optional[int] = None,
    rng=None,
) -> CutoffResult:
    """
    Find where the ordered items stop fitting into `capacity`.

    Items are added in order; after each one the required capacity of the
    running portfolio is read at `confidence`. The cutoff sits before the
    first item that pushes the requirement above capacity.

    Args:
        items: Work items in priority order.
        capacity: Available capacity for the category.
        confidence: Confidence label ("Avg", "70%", "80%", "95%").
        category: Category to filter estimates by, or None for all.
        algorithm: Algorithm identifier; None uses the configured default.
        iterations: Monte Carlo iterations (default aggregate iterations).
        rng: Generator or seed shared by every prefix calculation.

    Returns:
        CutoffResult
    """
    confidence = ConfidenceLevel(confidence)
    if iterations is None:
        iterations = load_settings().aggregate_iterations
    generator = np.random.default_rng(rng)

    included = included_items(items)
    running: List[List[EstimateTriple]] = []
    cutoff_index = None
    required = 0.0
    for index, item in enumerate(included):
        bucket = item.bucket(category)
        if bucket:
            running.append(bucket)
        result = calculate(running, algorithm=algorithm, iterations=iterations, rng=generator)
        required = required_capacity(result, confidence)
        if cutoff_index is None and required > capacity:
            cutoff_index = index

    if cutoff_index is None:
        cutoff_index = len(included)
    logger.debug(
        f"Cutoff for category={category!r} at {confidence.value}: "
        f"{cutoff_index}/{len(included)} items within capacity {capacity}"
    )
    return CutoffResult(
        cutoff_index=cutoff_index,
        item_count=len(included),
        required=required,
        capacity=capacity,
    )


def category_distributions(
    items: Sequence[WorkItem],
    categories: Iterable[Hashable],
    algorithm: Union[str, AlgorithmType, None] = None,
    iterations: Optional[int] = None,
    seed: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> Dict[Hashable, DistributionResult]:
    """Distribution of each category's total, computed in parallel."""
    if iterations is None:
        iterations = load_settings().aggregate_iterations
    portfolios = {category: build_portfolio(items, category) for category in categories}
    return calculate_many(
        portfolios,
        algorithm=algorithm,
        iterations=iterations,
        seed=seed,
        max_workers=max_workers,
    )
