"""
PURPOSE: Result types shared by every estimation algorithm.

This module defines the DistributionResult contract (density curve,
percentiles, mean) and the confidence-level labels consumers use to read a
required capacity off a result.

SRP/DRY: Single responsibility = result structure and serialization.
         No sampling, no integration.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class ConfidenceLevel(str, Enum):
    AVERAGE = "Avg"
    P70 = "70%"
    P80 = "80%"
    P95 = "95%"


@dataclass(frozen=True)
class CurvePoint:
    value: float
    density: float

    def to_dict(self) -> Dict[str, float]:
        return {"value": self.value, "density": self.density}


@dataclass(frozen=True)
class Percentiles:
    p50: float = 0.0
    p70: float = 0.0
    p80: float = 0.0
    p95: float = 0.0

    @classmethod
    def constant(cls, value: float) -> "Percentiles":
        return cls(p50=value, p70=value, p80=value, p95=value)

    def is_monotonic(self) -> bool:
        return self.p50 <= self.p70 <= self.p80 <= self.p95

    def to_dict(self) -> Dict[str, float]:
        return {"p50": self.p50, "p70": self.p70, "p80": self.p80, "p95": self.p95}


@dataclass(frozen=True)
class DistributionResult:
    """Distribution of the summed portfolio.

    Attributes:
        curve (tuple): CurvePoint sequence over the support, ready to render.
        percentiles (Percentiles): p50, p70, p80 and p95 of the sum.
        mean (float): Expected value of the sum.
        algorithm (str): Name of the algorithm that produced the result.
    """
    curve: Tuple[CurvePoint, ...] = ()
    percentiles: Percentiles = field(default_factory=Percentiles)
    mean: float = 0.0
    algorithm: str = ""

    @classmethod
    def empty(cls, algorithm: str = "") -> "DistributionResult":
        """Result for a portfolio without any estimates."""
        return cls(curve=(), percentiles=Percentiles(), mean=0.0, algorithm=algorithm)

    @classmethod
    def point_mass(cls, value: float, algorithm: str = "") -> "DistributionResult":
        """Result for a portfolio whose total cannot vary."""
        return cls(
            curve=(CurvePoint(value=value, density=1.0),),
            percentiles=Percentiles.constant(value),
            mean=value,
            algorithm=algorithm,
        )

    @property
    def is_empty(self) -> bool:
        return len(self.curve) == 0

    def value_at(self, confidence: ConfidenceLevel) -> float:
        """
        Required capacity at a confidence label.

        "Avg" maps to the mean rather than p50, matching how planners read the
        average column.
        """
        confidence = ConfidenceLevel(confidence)
        if confidence is ConfidenceLevel.AVERAGE:
            return self.mean
        if confidence is ConfidenceLevel.P70:
            return self.percentiles.p70
        if confidence is ConfidenceLevel.P80:
            return self.percentiles.p80
        return self.percentiles.p95

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary for JSON serialization."""
        return {
            "curve": [point.to_dict() for point in self.curve],
            "percentiles": self.percentiles.to_dict(),
            "mean": self.mean,
            "algorithm": self.algorithm,
        }
