#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results and weights.
"""

from typing import List, Dict, Any, Optional, Tuple
import math
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

# Active dimensions, in aggregation order
SKILL_MATCH = "skill_match"
LOCATION_PROXIMITY = "location_proximity"
REPUTATION_SCORE = "reputation_score"
PRICE_MATCH = "price_match"
AVAILABILITY_MATCH = "availability_match"
URGENCY_COMPATIBILITY = "urgency_compatibility"

ACTIVE_DIMENSIONS: Tuple[str, ...] = (
    SKILL_MATCH,
    LOCATION_PROXIMITY,
    REPUTATION_SCORE,
    PRICE_MATCH,
    AVAILABILITY_MATCH,
    URGENCY_COMPATIBILITY,
)


class WeightVector(BaseModel):
    """
    Per-dimension weights, immutable for the duration of a scoring pass.

    The last three slots belong to the generalized preference model shared
    with other scorers; they are carried through but never enter the
    aggregate of this engine.
    """
    model_config = ConfigDict(frozen=True)

    skill_match: float = 0.30
    location_proximity: float = 0.20
    reputation_score: float = 0.15
    price_match: float = 0.15
    availability_match: float = 0.10
    urgency_compatibility: float = 0.10

    user_preferences: float = 0.0
    previous_interactions: float = 0.0
    ai_trend: float = 0.0

    def active(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in ACTIVE_DIMENSIONS}

    def total(self) -> float:
        return math.fsum(self.active().values())


@dataclass(frozen=True)
class DimensionScore:
    """Output of a single dimension calculator."""
    score: float
    is_default: bool = False
    detail: str = ""


@dataclass
class CompatibilityDimension:
    """One scored factor of a match."""
    name: str
    score: float
    weight: float
    description: Optional[str] = None
    is_default: bool = False

    @property
    def contribution(self) -> float:
        return self.score * self.weight


@dataclass
class MatchResult:
    """Normalized score, per-dimension breakdown and explanations for one pair."""
    score: int
    dimensions: List[CompatibilityDimension] = field(default_factory=list)
    explanations: List[str] = field(default_factory=list)

    raw_score: float = 0.0
    boost: float = 1.0
    weight_diagnostics: List[str] = field(default_factory=list)

    def dimension(self, name: str) -> CompatibilityDimension:
        for dim in self.dimensions:
            if dim.name == name:
                return dim
        raise KeyError(name)

    @property
    def factors(self) -> Dict[str, float]:
        return {dim.name: dim.score for dim in self.dimensions}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'raw_score': self.raw_score,
            'boost': self.boost,
            'dimensions': [
                {
                    'name': d.name,
                    'score': d.score,
                    'weight': d.weight,
                    'description': d.description,
                    'is_default': d.is_default,
                }
                for d in self.dimensions
            ],
            'explanations': list(self.explanations),
        }
