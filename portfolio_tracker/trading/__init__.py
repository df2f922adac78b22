# Trading module
"""Portfolio tracking components including the holdings ledger, trading service, and analytics."""

from .errors import (
    RejectionReason,
    TradingError,
    InvalidQuantityError,
    InvalidPriceError,
    InsufficientHoldingsError,
    NullArgumentError,
)
from .models import Asset, AssetKind, AssetPerformance, OrderType, PortfolioMetrics, Transaction
from .portfolio import IPortfolioLedger, PortfolioLedger
from .orders import ITradingService, TradingService
from .analytics import IPortfolioAnalytics, PortfolioAnalytics

__all__ = [
    "RejectionReason",
    "TradingError",
    "InvalidQuantityError",
    "InvalidPriceError",
    "InsufficientHoldingsError",
    "NullArgumentError",
    "Asset",
    "AssetKind",
    "AssetPerformance",
    "OrderType",
    "PortfolioMetrics",
    "Transaction",
    "IPortfolioLedger",
    "PortfolioLedger",
    "ITradingService",
    "TradingService",
    "IPortfolioAnalytics",
    "PortfolioAnalytics",
]
