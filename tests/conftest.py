from __future__ import annotations

import os
from decimal import Decimal

import pytest
from PySide6.QtCore import QCoreApplication

from portfolio_tracker.data.providers import MockPriceSource
from portfolio_tracker.trading import Asset, PortfolioAnalytics, PortfolioLedger, TradingService


@pytest.fixture(scope="session", autouse=True)
def _qt_app():
    # Use offscreen to avoid GUI requirement in CI
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def fixed_prices() -> MockPriceSource:
    """Jitter-free prices so market values are exact."""
    return MockPriceSource(
        base_prices={"TEST": Decimal("100"), "CRYPTO": Decimal("1000")},
        jitter=0,
    )


@pytest.fixture
def ledger() -> PortfolioLedger:
    return PortfolioLedger()


@pytest.fixture
def service(ledger: PortfolioLedger) -> TradingService:
    return TradingService(ledger)


@pytest.fixture
def analytics(ledger: PortfolioLedger) -> PortfolioAnalytics:
    return PortfolioAnalytics(ledger)


@pytest.fixture
def stock(fixed_prices: MockPriceSource) -> Asset:
    return Asset.stock("TEST", "Test Stock", fixed_prices)


@pytest.fixture
def coin(fixed_prices: MockPriceSource) -> Asset:
    return Asset.crypto("CRYPTO", "Test Crypto", fixed_prices)
