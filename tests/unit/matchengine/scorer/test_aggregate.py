#!/usr/bin/env python3
"""
Unit tests for the score aggregator.
"""

import unittest

from matchengine.scorer.aggregate import aggregate_score, build_dimensions
from matchengine.scorer.models import ACTIVE_DIMENSIONS, CompatibilityDimension, DimensionScore, WeightVector


def dims(scores, weights):
    return [CompatibilityDimension(name=n, score=s, weight=w) for n, s, w in zip(ACTIVE_DIMENSIONS, scores, weights)]


class TestBuildDimensions(unittest.TestCase):

    def test_order_and_weights(self):
        scores = {name: DimensionScore(score=0.5, is_default=True, detail="insufficient data") for name in ACTIVE_DIMENSIONS}
        built = build_dimensions(scores, WeightVector())
        self.assertEqual([d.name for d in built], list(ACTIVE_DIMENSIONS))
        self.assertEqual(built[0].weight, 0.30)
        self.assertTrue(all(d.is_default for d in built))
        self.assertEqual(built[0].description, "insufficient data")


class TestAggregateScore(unittest.TestCase):

    def test_all_neutral_is_fifty(self):
        score, components = aggregate_score(dims([0.5] * 6, WeightVector().active().values()))
        self.assertEqual(score, 50)
        self.assertAlmostEqual(components['raw_score'], 0.5)

    def test_weighted_sum(self):
        score, components = aggregate_score(dims([1, 0, 0, 1, 0, 0], WeightVector().active().values()))
        self.assertAlmostEqual(components['raw_score'], 0.45)
        self.assertEqual(score, 45)
        self.assertAlmostEqual(components['contributions']['skill_match'], 0.30)

    def test_boost_is_multiplicative(self):
        score, _ = aggregate_score(dims([0.5] * 6, WeightVector().active().values()), boost=1.2)
        self.assertEqual(score, 60)

    def test_clamped_at_hundred(self):
        score, components = aggregate_score(dims([1.0] * 6, WeightVector().active().values()), boost=1.3)
        self.assertEqual(score, 100)
        self.assertGreater(components['boosted_points'], 100)

    def test_clamped_at_zero_with_negative_weight(self):
        score, _ = aggregate_score(dims([1.0, 0, 0, 0, 0, 0], [-0.5, 0.3, 0.3, 0.3, 0.3, 0.3]))
        self.assertEqual(score, 0)

    def test_half_rounds_up(self):
        score, _ = aggregate_score(dims([1.0, 0, 0, 0, 0, 0], [0.625, 0.075, 0.075, 0.075, 0.075, 0.075]))
        self.assertEqual(score, 63)

    def test_score_is_int(self):
        score, _ = aggregate_score(dims([0.33] * 6, WeightVector().active().values()))
        self.assertIsInstance(score, int)


if __name__ == '__main__':
    unittest.main(verbosity=2)
