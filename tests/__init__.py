#!/usr/bin/env python3
"""
Test suite for the matching engine.

All tests are pure (no database, no network) and can be run with
standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Skip the random property sweeps
    python -m pytest tests/ -v -m "not slow"

    # Using unittest
    python -m unittest discover tests -v
"""
