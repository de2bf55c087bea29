#!/usr/bin/env python3
"""
Explanation Generator - Human-readable rationale for a match.

Sentences are always emitted in this order:
    skill -> location -> price -> urgency (high urgency only)
    -> counterpart reputation (customer rating above 4 only)

The generator reads the dimension scores the aggregator already used; it
never recomputes a dimension.
"""

from typing import Dict, List, Optional
import logging

from matchengine.models import Provider, Requester, UrgencyLevel
from matchengine.scorer.models import (
    CompatibilityDimension,
    SKILL_MATCH, LOCATION_PROXIMITY, PRICE_MATCH, URGENCY_COMPATIBILITY,
)

logger = logging.getLogger(__name__)

EXCELLENT_REPUTATION = 4.0


def _job_phrase(requester: Requester) -> str:
    return f"this {requester.category_name} job" if requester.category_name else "this job"


def _skill_sentence(dim: CompatibilityDimension, requester: Requester) -> Optional[str]:
    if dim.is_default:
        return f"There is not enough skill information to compare with {_job_phrase(requester)}."
    if dim.score > 0.8:
        return f"Your skills are an excellent match for {_job_phrase(requester)}."
    if dim.score > 0.5:
        return f"You have some of the skills needed for {_job_phrase(requester)}."
    if dim.score > 0:
        return "This job may require skills you don't currently list in your profile."
    return None


def _location_sentence(dim: CompatibilityDimension) -> str:
    if dim.is_default:
        return "Location information is not available for this job."
    if dim.score > 0.8:
        return "This job is very close to your location."
    if dim.score > 0.5:
        return "This job is within a reasonable distance from your location."
    if dim.score > 0.2:
        return "This job is somewhat far from your location."
    return "This job is quite far from your location."


def _price_sentence(dim: CompatibilityDimension) -> str:
    if dim.is_default:
        return "There is no budget or rate information to compare."
    if dim.score > 0.8:
        return "The job budget aligns perfectly with your rate preferences."
    if dim.score > 0.5:
        return "The job budget is close to your preferred rates."
    return "The job budget differs from your preferred rates."


def _urgency_sentence(dim: CompatibilityDimension) -> str:
    if dim.score > 0.7:
        return "This is an urgent job that matches your quick response time."
    return "This is an urgent job requiring immediate attention."


def generate_explanations(
    dimensions: List[CompatibilityDimension],
    requester: Requester,
    provider: Provider
) -> List[str]:
    """
    Map computed dimensions and domain facts to ordered explanation sentences.

    Args:
        dimensions: Dimensions exactly as scored by the aggregator
        requester: The job or request being matched
        provider: The specialist or listing being matched

    Returns:
        Ordered list of explanation sentences (never empty: location and
        price always contribute one sentence each)
    """
    by_name: Dict[str, CompatibilityDimension] = {d.name: d for d in dimensions}
    explanations: List[str] = []

    skill = _skill_sentence(by_name[SKILL_MATCH], requester)
    if skill:
        explanations.append(skill)

    explanations.append(_location_sentence(by_name[LOCATION_PROXIMITY]))
    explanations.append(_price_sentence(by_name[PRICE_MATCH]))

    if requester.urgency_level == UrgencyLevel.HIGH:
        explanations.append(_urgency_sentence(by_name[URGENCY_COMPATIBILITY]))

    rating = requester.customer_rating
    if rating is not None and rating > EXCELLENT_REPUTATION:
        explanations.append(f"This client has an excellent reputation rating of {rating:g}/5.")

    logger.debug("Generated %d explanation(s) for requester %s / provider %s",
                 len(explanations), requester.id, provider.id)
    return explanations
