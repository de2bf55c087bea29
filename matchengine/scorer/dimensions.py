#!/usr/bin/env python3
"""
Dimension Calculators - Independent per-factor compatibility scores.

Each calculator is pure and returns a DimensionScore in [0, 1]:
- skill_match: required skills covered by the provider's skill names
- location_proximity: haversine distance scaled against a maximum distance
- reputation_compatibility: mean of both sides' normalized ratings
- price_match: tiered comparison of budget range and provider rates
- availability_match: presence of provider availability (placeholder)
- urgency_compatibility: urgency level blended with response time

Missing data never raises: every calculator goes through resolve_or_neutral,
so the neutral-default policy lives in one place.
"""

from typing import Dict, List, Optional
import logging
import math

from matchengine.config_loader import EngineConfig
from matchengine.models import (
    Availability, Geolocation, MatchPreferences, Provider, RateExpectation, Requester, UrgencyLevel
)
from matchengine.scorer.models import (
    DimensionScore,
    SKILL_MATCH, LOCATION_PROXIMITY, REPUTATION_SCORE,
    PRICE_MATCH, AVAILABILITY_MATCH, URGENCY_COMPATIBILITY,
)
from matchengine.utils import haversine_km, resolve_or_neutral

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = EngineConfig()


def _resolve(name, compute, *operands, config: EngineConfig) -> DimensionScore:
    score, is_default, detail = resolve_or_neutral(name, compute, *operands, neutral=config.neutral_score)
    return DimensionScore(score=score, is_default=is_default, detail=detail)


def _normalize_skill(skill: str) -> str:
    return skill.strip().lower()


def skill_match(
    required_skills: List[str],
    provider_skills: List[str],
    config: Optional[EngineConfig] = None
) -> DimensionScore:
    """Fraction of required skills contained in (or containing) a provider skill name."""
    config = config or _DEFAULT_CONFIG
    required = [_normalize_skill(s) for s in (required_skills or []) if s and s.strip()]
    offered = [_normalize_skill(s) for s in (provider_skills or []) if s and s.strip()]

    def compute():
        matched = [
            req for req in required
            if any(req in have or have in req for have in offered)
        ]
        return len(matched) / len(required), f"{len(matched)}/{len(required)} required skills matched"

    return _resolve(SKILL_MATCH, compute, required, offered, config=config)


def location_proximity(
    requester_location: Optional[Geolocation],
    provider_location: Optional[Geolocation],
    max_distance_km: Optional[float] = None,
    config: Optional[EngineConfig] = None
) -> DimensionScore:
    """1.0 at the same point, falling linearly to 0.0 at max_distance_km and beyond."""
    config = config or _DEFAULT_CONFIG

    max_dist = config.max_distance_km if max_distance_km is None else max_distance_km
    if not (isinstance(max_dist, (int, float)) and math.isfinite(max_dist) and max_dist > 0):
        logger.warning("Invalid max_distance_km=%r; using default=%r", max_dist, config.max_distance_km)
        max_dist = config.max_distance_km

    def compute():
        distance = haversine_km(
            requester_location.lat, requester_location.lng,
            provider_location.lat, provider_location.lng,
            earth_radius_km=config.earth_radius_km,
        )
        return max(0.0, 1.0 - distance / max_dist), f"{distance:.1f} km apart (max {max_dist:g} km)"

    return _resolve(LOCATION_PROXIMITY, compute, requester_location, provider_location, config=config)


def reputation_compatibility(
    provider_rating: Optional[float],
    customer_rating: Optional[float],
    config: Optional[EngineConfig] = None
) -> DimensionScore:
    """Rewards pairs where both sides already have good standing."""
    config = config or _DEFAULT_CONFIG

    def compute():
        score = (provider_rating / 5.0 + customer_rating / 5.0) / 2.0
        return score, f"provider {provider_rating:g}/5, customer {customer_rating:g}/5"

    return _resolve(REPUTATION_SCORE, compute, provider_rating, customer_rating, config=config)


def price_match(
    budget_min: Optional[float],
    budget_max: Optional[float],
    rate: Optional[RateExpectation],
    config: Optional[EngineConfig] = None
) -> DimensionScore:
    """
    Tiered comparison of the requester's budget range with the provider's rates.

    - 1.0: budget range contains the provider's preferred rate
    - 0.7: budget range and rate range overlap
    - 0.5: nearest-edge gap <= price_near_gap
    - 0.3: nearest-edge gap <= price_far_gap
    - 0.1: otherwise
    """
    config = config or _DEFAULT_CONFIG
    budget = None if budget_min is None and budget_max is None else (budget_min, budget_max)

    def compute():
        low = budget_min or 0.0
        if budget_max is not None:
            high = budget_max
        else:
            high = low * config.budget_max_multiplier
        if high < low:
            logger.warning("Budget max %r below budget min %r; swapping", high, low)
            low, high = high, low

        if low <= rate.preferred <= high:
            return 1.0, f"preferred rate {rate.preferred:g} within budget {low:g}-{high:g}"

        if low <= rate.max and high >= rate.min:
            return 0.7, f"rate range {rate.min:g}-{rate.max:g} overlaps budget {low:g}-{high:g}"

        gap = min(abs(low - rate.max), abs(rate.min - high))
        if gap <= config.price_near_gap:
            tier = 0.5
        elif gap <= config.price_far_gap:
            tier = 0.3
        else:
            tier = 0.1
        return tier, f"rates {gap:g} away from budget {low:g}-{high:g}"

    return _resolve(PRICE_MATCH, compute, budget, rate, config=config)


def availability_match(
    availability: Optional[Availability],
    config: Optional[EngineConfig] = None
) -> DimensionScore:
    """Presence-only check; schedule overlap is not computed."""
    config = config or _DEFAULT_CONFIG

    def compute():
        return config.availability_present_score, f"{len(availability.schedule)} schedule slot(s) published"

    return _resolve(AVAILABILITY_MATCH, compute, availability, config=config)


def urgency_compatibility(
    urgency_level: Optional[UrgencyLevel],
    response_time_minutes: Optional[float],
    config: Optional[EngineConfig] = None
) -> DimensionScore:
    """Urgency base value, blended with response speed for urgent requests."""
    config = config or _DEFAULT_CONFIG

    def compute():
        if isinstance(urgency_level, UrgencyLevel):
            level = urgency_level
        else:
            level = UrgencyLevel(str(urgency_level).strip().lower())
        base = getattr(config.urgency_levels, level.value)
        if response_time_minutes is not None and base > config.urgency_blend_threshold:
            response_score = max(0.0, 1.0 - response_time_minutes / config.response_time_window_minutes)
            share = config.urgency_base_share
            blended = share * base + (1.0 - share) * response_score
            return blended, f"{level.value} urgency, responds in {response_time_minutes:g} min"
        return base, f"{level.value} urgency"

    return _resolve(URGENCY_COMPATIBILITY, compute, urgency_level, config=config)


def calculate_dimensions(
    requester: Requester,
    provider: Provider,
    preferences: Optional[MatchPreferences] = None,
    config: Optional[EngineConfig] = None
) -> Dict[str, DimensionScore]:
    """Run all six calculators for one requester/provider pair."""
    config = config or _DEFAULT_CONFIG
    max_distance = preferences.max_distance_km if preferences else None

    return {
        SKILL_MATCH: skill_match(requester.required_skill_names(), provider.skill_names, config),
        LOCATION_PROXIMITY: location_proximity(requester.location, provider.location, max_distance, config),
        REPUTATION_SCORE: reputation_compatibility(provider.rating, requester.customer_rating, config),
        PRICE_MATCH: price_match(requester.budget_min, requester.budget_max, provider.rate_expectation(), config),
        AVAILABILITY_MATCH: availability_match(provider.availability, config),
        URGENCY_COMPATIBILITY: urgency_compatibility(requester.urgency_level, provider.response_time_minutes, config),
    }
