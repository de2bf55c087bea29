#!/usr/bin/env python3
"""
Scoring Module - Compatibility scoring pipeline.

Public API:
- MatchingService: Orchestrator (score_one, score_many, score_providers, rank)
- MatchResult / CompatibilityDimension: Scored match and its breakdown
- WeightVector: Per-dimension weights

Single-responsibility modules:

- models.py: Data structures (MatchResult, CompatibilityDimension, WeightVector)
- dimensions.py: The six dimension calculators
- weights.py: Base weights and preference-flag adjustment
- premium.py: Premium tier boost
- aggregate.py: Weighted sum, boost and clamp
- explanations.py: Ordered explanation sentences
- service.py: MatchingService orchestrator
"""

from matchengine.scorer.models import MatchResult, CompatibilityDimension, WeightVector
from matchengine.scorer.service import MatchingService, MatchBatch, RejectedCandidate, rank_matches

__all__ = [
    'MatchingService', 'MatchBatch', 'RejectedCandidate', 'rank_matches',
    'MatchResult', 'CompatibilityDimension', 'WeightVector',
]
