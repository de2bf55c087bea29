#!/usr/bin/env python3
"""
Premium Boost - Score multiplier from a provider's subscription tier.

The boost applies once, multiplicatively, to the provider's own score.
It is not a reallocation against other candidates.
"""

from typing import Dict, Optional, Tuple, Any
import logging

from matchengine.config_loader import PremiumConfig
from matchengine.models import PremiumProfile, PremiumTier

logger = logging.getLogger(__name__)

NO_BOOST = 1.0


def tier_defaults(config: Optional[PremiumConfig] = None) -> Dict[PremiumTier, float]:
    config = config or PremiumConfig()
    # Keyed by the closed tier set
    return {
        PremiumTier.BASIC: config.basic,
        PremiumTier.PRO: config.pro,
        PremiumTier.ELITE: config.elite,
    }


def calculate_premium_boost(
    premium: Optional[PremiumProfile],
    config: Optional[PremiumConfig] = None
) -> Tuple[float, Dict[str, Any]]:
    """
    Resolve the boost multiplier for a provider.

    A provider-specific boost_factor overrides the tier default. Providers
    that are not premium, or premium without a tier, get no boost.

    Returns: (boost, boost_details)
    """
    if premium is None or not premium.is_premium:
        return NO_BOOST, {'reason': 'Not premium', 'boost': NO_BOOST}

    if premium.premium_level is None:
        logger.debug("Premium provider without a tier; no boost applied")
        return NO_BOOST, {'reason': 'Premium without tier', 'boost': NO_BOOST}

    defaults = tier_defaults(config)
    tier_default = defaults[premium.premium_level]
    boost = premium.boost_factor if premium.boost_factor is not None else tier_default

    details = {
        'reason': f"Premium {premium.premium_level.value}",
        'tier': premium.premium_level.value,
        'tier_default': tier_default,
        'override': premium.boost_factor,
        'boost': boost,
    }
    return boost, details
