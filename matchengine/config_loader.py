import yaml
import os
import logging
from typing import Optional, Dict, Literal
from pydantic import BaseModel, Field, ConfigDict, ValidationError

from matchengine.errors import ConfigError

logger = logging.getLogger(__name__)


class UrgencyLevels(BaseModel):
    """Base urgency values per requester urgency level."""
    low: float = 0.3
    medium: float = 0.6
    high: float = 0.9


class EngineConfig(BaseModel):
    """
    Configuration for the dimension calculators.

    Several engines with different settings (e.g. one per marketplace
    category with its own proximity tolerance) can coexist.
    """
    neutral_score: float = Field(default=0.5, ge=0.0, le=1.0)

    # Location
    max_distance_km: float = 50.0
    earth_radius_km: float = 6371.0

    # Price tiers (nearest-edge gap in currency units)
    price_near_gap: float = 10.0
    price_far_gap: float = 20.0
    budget_max_multiplier: float = 1.5  # budget_max estimate when only budget_min is given

    # Availability placeholder score for providers exposing any availability
    availability_present_score: float = 0.8

    # Urgency
    urgency_levels: UrgencyLevels = Field(default_factory=UrgencyLevels)
    urgency_blend_threshold: float = 0.7
    urgency_base_share: float = 0.4
    response_time_window_minutes: float = 60.0


class PremiumConfig(BaseModel):
    """Default boost multipliers per premium tier."""
    basic: float = 1.1
    pro: float = 1.2
    elite: float = 1.3


class WeightConfig(BaseModel):
    """
    Base weight vector and the policy applied when preference flags
    push a weight below zero.

    clamp:        clamp the weight at 0
    renormalize:  clamp at 0, then rescale the active weights to sum to 1
    passthrough:  keep the negative weight (behavioral parity)
    """
    skill_match: float = 0.30
    location_proximity: float = 0.20
    reputation_score: float = 0.15
    price_match: float = 0.15
    availability_match: float = 0.10
    urgency_compatibility: float = 0.10
    negative_weight_policy: Literal["clamp", "renormalize", "passthrough"] = "clamp"


class ResultPolicy(BaseModel):
    """Post-scoring result filtering and truncation policy.

    Applied after ranking to filter and truncate results.
    """
    min_score: int = Field(default=0, ge=0, le=100)  # filter threshold
    top_k: Optional[int] = Field(default=None, ge=0)  # None = keep everything


class OrchestratorConfig(BaseModel):
    """Batch evaluation settings."""
    max_workers: int = 1  # 1 = evaluate candidates sequentially


class MatchingConfig(BaseModel):
    """
    Top-level matching configuration.
    """
    model_config = ConfigDict(extra='forbid')

    engine: EngineConfig = Field(default_factory=EngineConfig)
    premium: PremiumConfig = Field(default_factory=PremiumConfig)
    weights: WeightConfig = Field(default_factory=WeightConfig)
    result_policy: ResultPolicy = Field(default_factory=ResultPolicy)
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)


def load_config(config_path: str = "config.yaml") -> MatchingConfig:
    # If not found at relative path (e.g. running from another directory), try the repository root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    # Allow the matching settings to live under a top-level "matching" key
    if isinstance(data, dict) and 'matching' in data:
        data = data['matching'] or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Matching configuration in {config_path} must be a mapping")
    # An empty section ("engine:") means defaults
    data = {key: value for key, value in data.items() if value is not None}

    # Allow env var override for the proximity tolerance
    env_max_distance = os.environ.get("MATCHING_MAX_DISTANCE_KM")
    if env_max_distance:
        try:
            max_distance = float(env_max_distance)
        except ValueError as e:
            raise ConfigError(f"Invalid MATCHING_MAX_DISTANCE_KM={env_max_distance!r}") from e
        data['engine'] = data.get('engine') or {}
        data['engine']['max_distance_km'] = max_distance

    # Allow env var override for the worker pool size
    env_max_workers = os.environ.get("MATCHING_MAX_WORKERS")
    if env_max_workers:
        try:
            max_workers = int(env_max_workers)
        except ValueError as e:
            raise ConfigError(f"Invalid MATCHING_MAX_WORKERS={env_max_workers!r}") from e
        data['orchestrator'] = data.get('orchestrator') or {}
        data['orchestrator']['max_workers'] = max_workers

    try:
        config = MatchingConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid matching configuration in {config_path}: {e}") from e

    logger.info(f"Loaded matching configuration from {config_path}")
    return config


def config_summary(config: MatchingConfig) -> Dict[str, object]:
    """Flat summary of the settings that shape a score, for logs and CLI output."""
    return {
        'max_distance_km': config.engine.max_distance_km,
        'neutral_score': config.engine.neutral_score,
        'negative_weight_policy': config.weights.negative_weight_policy,
        'premium': config.premium.model_dump(),
        'max_workers': config.orchestrator.max_workers,
    }
