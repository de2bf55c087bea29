#!/usr/bin/env python3
"""
Score Aggregator - Weighted sum of dimension scores, boosted and clamped.

Formula:
- raw_score = sum(score_i * weight_i) over the six active dimensions
- score = clamp(0, 100, round(raw_score * boost * 100))

Clamping is required: a boost above 1.0 on a near-perfect raw score
exceeds 100, and negative passthrough weights can drive it below 0.
"""

from typing import Dict, Any, List, Tuple
import logging

import numpy as np

from matchengine.scorer.models import (
    ACTIVE_DIMENSIONS, CompatibilityDimension, DimensionScore, WeightVector
)
from matchengine.utils import clamp, round_half_up

logger = logging.getLogger(__name__)


def build_dimensions(
    scores: Dict[str, DimensionScore],
    weights: WeightVector
) -> List[CompatibilityDimension]:
    """Pair each calculator output with its resolved weight, in aggregation order."""
    active = weights.active()
    return [
        CompatibilityDimension(
            name=name,
            score=scores[name].score,
            weight=active[name],
            description=scores[name].detail or None,
            is_default=scores[name].is_default,
        )
        for name in ACTIVE_DIMENSIONS
    ]


def aggregate_score(
    dimensions: List[CompatibilityDimension],
    boost: float = 1.0
) -> Tuple[int, Dict[str, Any]]:
    """
    Combine weighted dimension scores into the final 0-100 integer score.

    Returns: (score, score_components)
    """
    score_vec = np.array([d.score for d in dimensions], dtype=float)
    weight_vec = np.array([d.weight for d in dimensions], dtype=float)

    raw_score = float(np.dot(score_vec, weight_vec))
    boosted = raw_score * boost * 100.0
    score = int(clamp(round_half_up(boosted), 0, 100))

    components: Dict[str, Any] = {
        'raw_score': raw_score,
        'boost': boost,
        'boosted_points': boosted,
        'score': score,
        'contributions': {d.name: d.contribution for d in dimensions},
    }

    if boosted > 100.0 or boosted < 0.0:
        logger.debug("Clamped score %.1f to %d", boosted, score)

    return score, components
