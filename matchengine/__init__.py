"""Compatibility matching engine for marketplace providers and requesters."""

__version__ = "1.0.0"
