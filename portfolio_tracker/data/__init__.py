# Data module
"""Market price sources."""

from portfolio_tracker.data.providers import IPriceSource, MockPriceSource

__all__ = ["IPriceSource", "MockPriceSource"]
