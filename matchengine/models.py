#!/usr/bin/env python3
"""
Domain Models - Provider and requester records consumed by the engine.

Records arrive from the marketplace API in camelCase; both camelCase and
snake_case keys are accepted. Optional fields are optional at the type level
so every calculator can apply the neutral default uniformly.
"""

from enum import Enum
from typing import List, Optional, Any
import logging

from pydantic import AliasChoices, BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UrgencyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PremiumTier(str, Enum):
    """Closed set of subscription tiers."""
    BASIC = "basic"
    PRO = "pro"
    ELITE = "elite"


class Geolocation(_Record):
    """Coordinates plus display-only address fields."""
    lat: float
    lng: float
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class Skill(_Record):
    id: Optional[str] = None
    name: str


class RateExpectation(_Record):
    min: float = Field(ge=0)
    max: float = Field(ge=0)
    preferred: float = Field(ge=0)


class ScheduleSlot(_Record):
    day: int = Field(ge=0, le=6)
    start_hour: int = Field(ge=0, le=24)
    end_hour: int = Field(ge=0, le=24)


class Availability(_Record):
    schedule: List[ScheduleSlot] = Field(default_factory=list)
    preferred_hours: Optional[List[int]] = None


class PremiumProfile(_Record):
    is_premium: bool = False
    premium_level: Optional[PremiumTier] = None
    boost_factor: Optional[float] = Field(default=None, gt=0)

    @field_validator('premium_level', mode='before')
    @classmethod
    def _normalize_tier(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value


class Provider(_Record):
    """Specialist, listing or item being matched against a request."""
    id: str
    skills: List[Skill] = Field(default_factory=list)
    location: Optional[Geolocation] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    completed_jobs: Optional[int] = Field(default=None, ge=0)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    rate_preferences: Optional[RateExpectation] = None
    availability: Optional[Availability] = None
    response_time_minutes: Optional[float] = Field(
        default=None, ge=0,
        validation_alias=AliasChoices("responseTimeMinutes", "responseTime", "response_time_minutes"),
    )
    verification_level: Optional[int] = None
    premium: Optional[PremiumProfile] = None

    @field_validator('skills', mode='before')
    @classmethod
    def _skills_from_names(cls, value: Any) -> Any:
        # ["React", {"name": "Vue"}] -> [{"name": "React"}, {"name": "Vue"}]
        if isinstance(value, list):
            return [{'name': v} if isinstance(v, str) else v for v in value]
        return value

    @property
    def skill_names(self) -> List[str]:
        return [s.name for s in self.skills]

    def rate_expectation(self) -> Optional[RateExpectation]:
        """Rate range, or a single hourly rate expanded into one."""
        if self.rate_preferences is not None:
            return self.rate_preferences
        if self.hourly_rate is not None:
            return RateExpectation(min=self.hourly_rate, max=self.hourly_rate, preferred=self.hourly_rate)
        return None


class Category(_Record):
    id: Optional[str] = None
    name: str


class CustomerReputation(_Record):
    overall_rating: float = Field(ge=0, le=5)
    total_ratings: int = Field(default=0, ge=0)
    reliability: Optional[float] = None
    communication: Optional[float] = None
    fair_payment: Optional[float] = None
    respectfulness: Optional[float] = None


class Customer(_Record):
    id: Optional[str] = None
    reputation: Optional[CustomerReputation] = None


class Requester(_Record):
    """Job post or booking request seeking a match."""
    id: str
    title: str
    location: Geolocation
    budget_min: Optional[float] = Field(default=None, ge=0)
    budget_max: Optional[float] = Field(default=None, ge=0)
    urgency_level: Optional[UrgencyLevel] = None
    category: Optional[Category] = None
    required_skills: List[str] = Field(default_factory=list)
    customer: Optional[Customer] = None

    @field_validator('urgency_level', mode='before')
    @classmethod
    def _normalize_urgency(cls, value: Any) -> Any:
        if value is None or isinstance(value, UrgencyLevel):
            return value
        normalized = str(value).strip().lower()
        if normalized in {u.value for u in UrgencyLevel}:
            return normalized
        logger.warning("Unrecognized urgency level %r; treating as unspecified", value)
        return None

    @field_validator('category', mode='before')
    @classmethod
    def _category_from_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {'name': value}
        return value

    @property
    def category_name(self) -> Optional[str]:
        return self.category.name if self.category else None

    def required_skill_names(self) -> List[str]:
        """Explicit skills, else the category name as the single requirement."""
        if self.required_skills:
            return list(self.required_skills)
        if self.category and self.category.name:
            return [self.category.name]
        return []

    @property
    def customer_rating(self) -> Optional[float]:
        if self.customer and self.customer.reputation:
            return self.customer.reputation.overall_rating
        return None


class MatchPreferences(_Record):
    """User-tunable matching preferences."""
    prioritize_location: bool = False
    prioritize_rate: bool = False
    prioritize_urgent: bool = False
    max_distance_km: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("maxDistanceKm", "maxDistance", "max_distance_km"),
    )
