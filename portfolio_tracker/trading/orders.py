"""Trading service for the portfolio tracker.

This module provides trade execution functionality including:
- ITradingService interface for buy/sell submission
- TradingService which validates trades, builds transaction records and
  hands them to the ledger
- Convenience PnL and performance queries over the ledger's holdings
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional
from .errors import InsufficientHoldingsError, NullArgumentError
from .models import Asset, OrderType, Transaction
from .portfolio import IPortfolioLedger, check_price, check_quantity

logger = logging.getLogger(__name__)


class ITradingService(ABC):
    """Interface for trade submission."""

    @abstractmethod
    def buy(self, asset: Asset, quantity: int, price: Decimal) -> Transaction:
        """Buy ``quantity`` units of ``asset`` at ``price`` per unit.

        Args:
            asset: Asset to buy
            quantity: Units to buy
            price: Price per unit

        Returns:
            The recorded BUY transaction
        """
        ...

    @abstractmethod
    def sell(self, asset: Asset, quantity: int, price: Decimal) -> Transaction:
        """Sell ``quantity`` units of ``asset`` at ``price`` per unit.

        Args:
            asset: Asset to sell
            quantity: Units to sell
            price: Price per unit

        Returns:
            The recorded SELL transaction
        """
        ...


class TradingService(ITradingService):
    """Trade execution service.

    Validates trades against the ledger state before anything is recorded,
    so a rejected trade never touches the ledger.
    """

    def __init__(self, ledger: Optional[IPortfolioLedger]) -> None:
        """Initialize trading service.

        Args:
            ledger: Ledger that owns holdings and the transaction log

        Raises:
            NullArgumentError: If no ledger is given
        """
        if ledger is None:
            raise NullArgumentError("Ledger cannot be None")
        self._ledger = ledger

    @property
    def ledger(self) -> IPortfolioLedger:
        return self._ledger

    def buy(self, asset: Asset, quantity: int, price: Decimal) -> Transaction:
        """Buy an asset.

        Raises:
            InvalidQuantityError: If quantity is not a positive int
            InvalidPriceError: If price <= 0
        """
        price = self._validate(asset, quantity, price)
        transaction = self._ledger.record_transaction(
            self._build(asset, OrderType.BUY, quantity, price)
        )
        logger.info(f"Bought {quantity} {asset.symbol} at {price}")
        return transaction

    def sell(self, asset: Asset, quantity: int, price: Decimal) -> Transaction:
        """Sell an asset.

        Validates sufficient holdings before the transaction is built.

        Raises:
            InvalidQuantityError: If quantity is not a positive int
            InvalidPriceError: If price <= 0
            InsufficientHoldingsError: If the symbol is not held or the
                position is smaller than ``quantity``
        """
        price = self._validate(asset, quantity, price)

        held = self._ledger.get_asset(asset.symbol)
        held_quantity = held.quantity if held else 0
        if held is None or held_quantity < quantity:
            raise InsufficientHoldingsError(
                f"Insufficient holdings: need {quantity} {asset.symbol}, have {held_quantity}"
            )

        transaction = self._ledger.record_transaction(
            self._build(asset, OrderType.SELL, quantity, price)
        )
        logger.info(f"Sold {quantity} {asset.symbol} at {price}")
        return transaction

    @staticmethod
    def _validate(asset: Optional[Asset], quantity: int, price: Decimal) -> Decimal:
        if asset is None:
            raise NullArgumentError("Asset cannot be None")
        check_quantity(quantity)
        return check_price(price)

    @staticmethod
    def _build(asset: Asset, order_type: OrderType, quantity: int, price: Decimal) -> Transaction:
        return Transaction(
            asset=asset.copy(),
            order_type=order_type,
            quantity=quantity,
            price=price,
            timestamp=datetime.now(),
        )

    def get_total_value(self) -> Decimal:
        """Total market value of all holdings."""
        return self._ledger.get_total_value()

    def get_unrealized_pnl(self) -> Decimal:
        """Sum of (current price - average cost) x quantity over holdings."""
        return sum(
            (
                (asset.current_price() - asset.average_cost) * asset.quantity
                for asset in self._ledger.get_holdings().values()
            ),
            Decimal("0"),
        )

    def get_performance_percent(self) -> Decimal:
        """Unrealized PnL as a percentage of total cost; 0 with no cost."""
        holdings = self._ledger.get_holdings().values()
        total_cost = sum((asset.total_cost for asset in holdings), Decimal("0"))
        if total_cost == Decimal("0"):
            return Decimal("0")
        unrealized = sum(
            ((asset.current_price() - asset.average_cost) * asset.quantity for asset in holdings),
            Decimal("0"),
        )
        return unrealized / total_cost * Decimal("100")

    def get_portfolio_summary(self) -> str:
        """Human-readable summary of value, counts and each holding."""
        holdings = self._ledger.get_holdings()
        total_value = sum((asset.market_value for asset in holdings.values()), Decimal("0"))
        lines = [
            "Portfolio Summary:",
            f"Total Value: ${total_value:.2f}",
            f"Assets: {len(holdings)}",
            f"Transactions: {self._ledger.get_transaction_count()}",
            "",
            "Assets:",
        ]
        lines.extend(f"  {asset}" for asset in holdings.values())
        return "\n".join(lines)
