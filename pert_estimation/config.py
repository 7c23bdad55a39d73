"""
PURPOSE: Engine configuration for the PERT estimation algorithms.

RESPONSIBILITIES:
- Define simulation hyperparameters (iterations per call site, histogram bins)
- Numeric floors and fallbacks used by degenerate-case handling
- Validated settings loaded from the environment
- Single responsibility: configuration only, no estimation logic
"""

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field

# Simulation Parameters
DEFAULT_ITERATIONS = 10000  # Used when a caller does not pass iterations
AGGREGATE_ITERATIONS = 50000  # Iteration- and category-level views
SINGLE_ITEM_ITERATIONS = 10000  # Single story views
RANDOM_SEED = None  # Set to int for reproducibility, None for random

# Curve Resolution
HISTOGRAM_BINS = 25  # Monte Carlo histogram buckets
CURVE_POINTS = 100  # Method-of-Moments slices (CURVE_POINTS + 1 samples)
CURVE_VALUE_DECIMALS = 2

# Numeric Guards
SHAPE_FLOOR = 0.1  # Smallest Beta shape parameter handed to log_gamma
COMMON_FACTOR_FALLBACK = 0.1  # Replaces a negative method-of-moments factor

# Percentile Outputs
PERCENTILE_LEVELS = (50, 70, 80, 95)

# Algorithm Selection
MONTE_CARLO = "monte-carlo"
METHOD_OF_MOMENTS = "method-of-moments"
DEFAULT_ALGORITHM = MONTE_CARLO


class EngineSettings(BaseModel):
    algorithm: Literal["monte-carlo", "method-of-moments"] = Field(
        default=DEFAULT_ALGORITHM,
        description="Algorithm used when the caller does not name one.",
    )
    aggregate_iterations: int = Field(
        default=AGGREGATE_ITERATIONS,
        gt=0,
        description="Monte Carlo iterations for iteration and category views.",
    )
    single_item_iterations: int = Field(
        default=SINGLE_ITEM_ITERATIONS,
        gt=0,
        description="Monte Carlo iterations for a single story view.",
    )
    seed: Optional[int] = Field(
        default=RANDOM_SEED,
        description="Seed for the random generator. None draws fresh entropy.",
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
    """Build EngineSettings from PERT_* environment variables, falling back to the defaults above."""
    if environ is None:
        environ = os.environ
    values = {}
    if environ.get("PERT_ALGORITHM"):
        values["algorithm"] = environ["PERT_ALGORITHM"]
    if environ.get("PERT_AGGREGATE_ITERATIONS"):
        values["aggregate_iterations"] = environ["PERT_AGGREGATE_ITERATIONS"]
    if environ.get("PERT_SINGLE_ITEM_ITERATIONS"):
        values["single_item_iterations"] = environ["PERT_SINGLE_ITEM_ITERATIONS"]
    if environ.get("PERT_RANDOM_SEED"):
        values["seed"] = environ["PERT_RANDOM_SEED"]
    return EngineSettings(**values)


def get_iteration_defaults():
    """Return iteration counts keyed by call site."""
    return {
        "default": DEFAULT_ITERATIONS,
        "aggregate": AGGREGATE_ITERATIONS,
        "single_item": SINGLE_ITEM_ITERATIONS,
    }
