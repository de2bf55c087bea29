#!/usr/bin/env python3
"""
Weight Resolver - Base weight vector adjusted by preference flags.

Flags add fixed deltas on top of the base vector and accumulate when several
are set. With a custom base vector the deltas can push a weight below zero;
that is reported as a warning plus a diagnostic, and the configured
negative-weight policy decides what happens to it.
"""

from typing import Dict, List, Optional, Tuple
import logging

from matchengine.config_loader import WeightConfig
from matchengine.models import MatchPreferences
from matchengine.scorer.models import (
    WeightVector, ACTIVE_DIMENSIONS,
    SKILL_MATCH, LOCATION_PROXIMITY, REPUTATION_SCORE,
    PRICE_MATCH, AVAILABILITY_MATCH, URGENCY_COMPATIBILITY,
)

logger = logging.getLogger(__name__)

# flag -> {dimension: delta}
PREFERENCE_DELTAS: Dict[str, Dict[str, float]] = {
    'prioritize_location': {
        LOCATION_PROXIMITY: +0.10,
        SKILL_MATCH: -0.05,
        PRICE_MATCH: -0.05,
    },
    'prioritize_rate': {
        PRICE_MATCH: +0.10,
        LOCATION_PROXIMITY: -0.05,
        REPUTATION_SCORE: -0.05,
    },
    'prioritize_urgent': {
        URGENCY_COMPATIBILITY: +0.10,
        AVAILABILITY_MATCH: +0.05,
        REPUTATION_SCORE: -0.05,
        LOCATION_PROXIMITY: -0.05,
        SKILL_MATCH: -0.05,
    },
}

NEGATIVE_WEIGHT_POLICIES = ("clamp", "renormalize", "passthrough")


def base_weights(config: Optional[WeightConfig] = None) -> WeightVector:
    """Base vector from configuration (defaults sum to 1.0)."""
    config = config or WeightConfig()
    return WeightVector(**{name: getattr(config, name) for name in ACTIVE_DIMENSIONS})


def resolve_weights(
    preferences: Optional[MatchPreferences] = None,
    base: Optional[WeightVector] = None,
    policy: str = "clamp"
) -> Tuple[WeightVector, List[str]]:
    """
    Apply preference flag deltas to the base vector.

    Args:
        preferences: Match preferences with optional prioritize_* flags
        base: Base weight vector (defaults to the standard vector)
        policy: What to do with weights below zero after adjustment:
            "clamp" (set to 0), "renormalize" (clamp, then rescale the
            active weights to sum to 1) or "passthrough" (keep as is)

    Returns: (resolved_weights, diagnostics)
    """
    if policy not in NEGATIVE_WEIGHT_POLICIES:
        raise ValueError(f"Unknown negative weight policy: {policy!r}")

    base = base or WeightVector()
    weights = base.active()
    applied = []

    if preferences is not None:
        for flag, deltas in PREFERENCE_DELTAS.items():
            if getattr(preferences, flag, False):
                applied.append(flag)
                for name, delta in deltas.items():
                    weights[name] += delta

    # Float noise from accumulated deltas (0.15 - 0.05 - 0.05 - 0.05)
    weights = {name: round(w, 10) for name, w in weights.items()}

    diagnostics: List[str] = []
    negative = {name: w for name, w in weights.items() if w < 0}
    for name, w in negative.items():
        msg = f"Weight {name}={w:.2f} is negative after applying {', '.join(applied)} (policy={policy})"
        logger.warning(msg)
        diagnostics.append(msg)

    if policy in ("clamp", "renormalize"):
        weights = {name: max(0.0, w) for name, w in weights.items()}

    if policy == "renormalize":
        total = sum(weights.values())
        if total > 0:
            weights = {name: w / total for name, w in weights.items()}
        else:
            msg = "All active weights are zero; cannot renormalize"
            logger.warning(msg)
            diagnostics.append(msg)

    if applied:
        logger.debug("Resolved weights with %s: %s", applied, weights)

    resolved = base.model_copy(update=weights)
    return resolved, diagnostics
