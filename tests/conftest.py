"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For record payload factories, see tests/fixtures/record_fixtures.py
"""

import pytest

from matchengine.config_loader import MatchingConfig
from matchengine.scorer import MatchingService
from tests.fixtures.record_fixtures import provider_payload, requester_payload


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks property sweeps over many random records (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def matching_service():
    """Service with default configuration."""
    return MatchingService(MatchingConfig())


@pytest.fixture
def scenario_provider():
    return provider_payload()


@pytest.fixture
def scenario_requester():
    return requester_payload()
