#!/usr/bin/env python3
"""
Unit tests for the dimension calculators.
"""

import unittest

from matchengine.config_loader import EngineConfig
from matchengine.models import (
    Availability, Geolocation, MatchPreferences, RateExpectation, UrgencyLevel, Provider, Requester
)
from matchengine.scorer.dimensions import (
    skill_match, location_proximity, reputation_compatibility,
    price_match, availability_match, urgency_compatibility, calculate_dimensions,
)
from matchengine.scorer.models import ACTIVE_DIMENSIONS
from matchengine.utils import haversine_km
from tests.fixtures.record_fixtures import provider_payload, requester_payload


def rate(value: float) -> RateExpectation:
    return RateExpectation(min=value, max=value, preferred=value)


class TestSkillMatch(unittest.TestCase):

    def test_substring_containment(self):
        """A required skill contained in a longer provider skill name matches."""
        self.assertEqual(skill_match(["React"], ["React Developer"]).score, 1.0)

    def test_containment_other_direction(self):
        self.assertEqual(skill_match(["Senior Python Engineer"], ["python"]).score, 1.0)

    def test_case_insensitive(self):
        self.assertEqual(skill_match(["JAVASCRIPT"], ["javascript"]).score, 1.0)

    def test_partial_coverage(self):
        result = skill_match(["React", "Go", "Rust", "SQL"], ["React", "PostgreSQL"])
        self.assertAlmostEqual(result.score, 0.5)
        self.assertFalse(result.is_default)

    def test_no_overlap(self):
        self.assertEqual(skill_match(["Plumbing"], ["React"]).score, 0.0)

    def test_empty_required_is_neutral(self):
        result = skill_match([], ["React"])
        self.assertEqual(result.score, 0.5)
        self.assertTrue(result.is_default)

    def test_empty_provider_skills_is_neutral(self):
        self.assertEqual(skill_match(["React"], []).score, 0.5)

    def test_blank_names_ignored(self):
        """An empty string would otherwise be a substring of everything."""
        self.assertEqual(skill_match(["Plumbing"], ["", "  "]).score, 0.5)
        self.assertEqual(skill_match(["", "Plumbing"], ["React"]).score, 0.0)


class TestLocationProximity(unittest.TestCase):

    def setUp(self):
        self.here = Geolocation(lat=40.71, lng=-74.00)

    def test_same_point(self):
        self.assertEqual(location_proximity(self.here, self.here, max_distance_km=50).score, 1.0)

    def test_zero_at_max_distance(self):
        there = Geolocation(lat=40.95, lng=-74.30)
        distance = haversine_km(self.here.lat, self.here.lng, there.lat, there.lng)
        result = location_proximity(self.here, there, max_distance_km=distance)
        self.assertEqual(result.score, 0.0)

    def test_never_negative(self):
        boston = Geolocation(lat=42.36, lng=-71.06)
        self.assertEqual(location_proximity(self.here, boston, max_distance_km=50).score, 0.0)

    def test_linear_decay(self):
        there = Geolocation(lat=40.73, lng=-73.99)
        distance = haversine_km(40.71, -74.00, 40.73, -73.99)
        result = location_proximity(self.here, there)
        self.assertAlmostEqual(result.score, 1 - distance / 50.0)
        self.assertIn("km", result.detail)

    def test_missing_location_is_neutral(self):
        result = location_proximity(self.here, None)
        self.assertEqual(result.score, 0.5)
        self.assertTrue(result.is_default)

    def test_nan_coordinates_fall_back(self):
        broken = Geolocation(lat=float('nan'), lng=-74.0)
        with self.assertLogs('matchengine.utils', level='WARNING'):
            result = location_proximity(self.here, broken)
        self.assertEqual(result.score, 0.5)
        self.assertTrue(result.is_default)

    def test_out_of_range_coordinates_fall_back(self):
        broken = Geolocation(lat=123.0, lng=500.0)
        self.assertEqual(location_proximity(self.here, broken).score, 0.5)

    def test_invalid_max_distance_uses_default(self):
        there = Geolocation(lat=40.73, lng=-73.99)
        with self.assertLogs('matchengine.scorer.dimensions', level='WARNING'):
            result = location_proximity(self.here, there, max_distance_km=0)
        self.assertAlmostEqual(result.score, location_proximity(self.here, there).score)

    def test_config_earth_radius(self):
        """Distances scale with the configured radius."""
        there = Geolocation(lat=41.0, lng=-74.00)
        small_planet = EngineConfig(earth_radius_km=637.1, max_distance_km=50)
        self.assertLess(
            location_proximity(self.here, there).score,
            location_proximity(self.here, there, config=small_planet).score,
        )


class TestReputationCompatibility(unittest.TestCase):

    def test_average_of_normalized_ratings(self):
        self.assertAlmostEqual(reputation_compatibility(4.8, 4.5).score, (0.96 + 0.9) / 2)

    def test_perfect(self):
        self.assertEqual(reputation_compatibility(5, 5).score, 1.0)

    def test_zero_rating_is_data(self):
        self.assertEqual(reputation_compatibility(0, 0).score, 0.0)

    def test_missing_is_neutral(self):
        self.assertEqual(reputation_compatibility(None, 4.0).score, 0.5)
        self.assertEqual(reputation_compatibility(4.0, None).score, 0.5)


class TestPriceMatch(unittest.TestCase):

    def test_preferred_within_budget(self):
        self.assertEqual(price_match(50, 100, rate(75)).score, 1.0)

    def test_far_outside_budget(self):
        """Gap of 40 lands in the lowest tier."""
        result = price_match(50, 60, rate(100))
        self.assertLessEqual(result.score, 0.3)
        self.assertEqual(result.score, 0.1)

    def test_overlapping_ranges(self):
        rates = RateExpectation(min=55, max=90, preferred=85)
        self.assertEqual(price_match(40, 60, rates).score, 0.7)

    def test_gap_within_ten(self):
        self.assertEqual(price_match(50, 60, rate(68)).score, 0.5)

    def test_gap_within_twenty(self):
        self.assertEqual(price_match(50, 60, rate(75)).score, 0.3)

    def test_gap_below_budget(self):
        self.assertEqual(price_match(100, 120, rate(85)).score, 0.3)

    def test_budget_max_estimated_from_min(self):
        """Only budget_min given: max is budget_min * 1.5."""
        self.assertEqual(price_match(60, None, rate(85)).score, 1.0)
        self.assertEqual(price_match(60, None, rate(95)).score, 0.5)

    def test_only_budget_max(self):
        self.assertEqual(price_match(None, 100, rate(40)).score, 1.0)

    def test_inverted_budget_is_swapped(self):
        with self.assertLogs('matchengine.scorer.dimensions', level='WARNING'):
            result = price_match(100, 50, rate(75))
        self.assertEqual(result.score, 1.0)

    def test_missing_budget_is_neutral(self):
        self.assertEqual(price_match(None, None, rate(75)).score, 0.5)

    def test_missing_rate_is_neutral(self):
        result = price_match(50, 100, None)
        self.assertEqual(result.score, 0.5)
        self.assertTrue(result.is_default)

    def test_custom_gap_thresholds(self):
        config = EngineConfig(price_near_gap=50, price_far_gap=60)
        self.assertEqual(price_match(50, 60, rate(100), config).score, 0.5)


class TestAvailabilityMatch(unittest.TestCase):

    def test_present(self):
        availability = Availability.model_validate({'schedule': [{'day': 1, 'startHour': 9, 'endHour': 17}]})
        self.assertEqual(availability_match(availability).score, 0.8)

    def test_absent(self):
        result = availability_match(None)
        self.assertEqual(result.score, 0.5)
        self.assertTrue(result.is_default)


class TestUrgencyCompatibility(unittest.TestCase):

    def test_base_levels(self):
        self.assertAlmostEqual(urgency_compatibility(UrgencyLevel.LOW, None).score, 0.3)
        self.assertAlmostEqual(urgency_compatibility(UrgencyLevel.MEDIUM, None).score, 0.6)
        self.assertAlmostEqual(urgency_compatibility(UrgencyLevel.HIGH, None).score, 0.9)

    def test_high_urgency_blends_response_time(self):
        result = urgency_compatibility(UrgencyLevel.HIGH, 20)
        self.assertAlmostEqual(result.score, 0.4 * 0.9 + 0.6 * (1 - 20 / 60))

    def test_slow_response_floor(self):
        self.assertAlmostEqual(urgency_compatibility(UrgencyLevel.HIGH, 600).score, 0.36)

    def test_medium_ignores_response_time(self):
        self.assertAlmostEqual(urgency_compatibility(UrgencyLevel.MEDIUM, 5).score, 0.6)

    def test_string_level_accepted(self):
        self.assertAlmostEqual(urgency_compatibility("High", None).score, 0.9)

    def test_unknown_string_level_is_neutral(self):
        self.assertEqual(urgency_compatibility("asap", None).score, 0.5)

    def test_missing_is_neutral(self):
        self.assertEqual(urgency_compatibility(None, 10).score, 0.5)


class TestCalculateDimensions(unittest.TestCase):

    def test_all_dimensions_present(self):
        requester = Requester.model_validate(requester_payload())
        provider = Provider.model_validate(provider_payload())
        scores = calculate_dimensions(requester, provider)
        self.assertEqual(tuple(scores.keys()), ACTIVE_DIMENSIONS)
        for name, result in scores.items():
            self.assertTrue(0.0 <= result.score <= 1.0, name)

    def test_preference_max_distance(self):
        requester = Requester.model_validate(requester_payload())
        provider = Provider.model_validate(provider_payload())
        default = calculate_dimensions(requester, provider)
        tight = calculate_dimensions(requester, provider, MatchPreferences(max_distance_km=5))
        self.assertLess(tight['location_proximity'].score, default['location_proximity'].score)

    def test_category_is_required_skill(self):
        requester = Requester.model_validate(requester_payload(category='Plumbing'))
        provider = Provider.model_validate(provider_payload())
        self.assertEqual(calculate_dimensions(requester, provider)['skill_match'].score, 0.0)

    def test_explicit_required_skills_win_over_category(self):
        requester = Requester.model_validate(
            requester_payload(category='Plumbing', requiredSkills=['React', 'Node'])
        )
        provider = Provider.model_validate(provider_payload())
        self.assertAlmostEqual(calculate_dimensions(requester, provider)['skill_match'].score, 0.5)


if __name__ == '__main__':
    unittest.main(verbosity=2)
