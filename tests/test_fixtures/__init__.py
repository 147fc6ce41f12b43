"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .clock import FakeClock
from .resource_factory import TradeTestFactory, UserTestFactory

__all__ = ["FakeClock", "TradeTestFactory", "UserTestFactory"]
