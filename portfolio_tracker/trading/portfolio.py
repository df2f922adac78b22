"""Holding ledger for portfolio tracking."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Optional

from .errors import InsufficientHoldingsError, InvalidPriceError, InvalidQuantityError
from .models import Asset, OrderType, Transaction

logger = logging.getLogger(__name__)


def check_quantity(quantity: object) -> int:
    """Return ``quantity`` if it is a positive whole number of units.

    Raises:
        InvalidQuantityError: If quantity is not a positive int
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(f"Quantity must be a whole number, got {quantity!r}")
    if quantity <= 0:
        raise InvalidQuantityError("Quantity must be positive")
    return quantity


def check_price(price: object) -> Decimal:
    """Return ``price`` as a positive Decimal.

    Raises:
        InvalidPriceError: If price is not a number or not positive
    """
    if isinstance(price, bool):
        raise InvalidPriceError(f"Price must be a number, got {price!r}")
    if not isinstance(price, Decimal):
        try:
            price = Decimal(str(price))
        except ArithmeticError:
            raise InvalidPriceError(f"Price must be a number, got {price!r}") from None
    if not price.is_finite() or price <= Decimal("0"):
        raise InvalidPriceError("Price must be positive")
    return price


class IPortfolioLedger(ABC):
    """Interface for the holdings ledger."""

    @abstractmethod
    def record_transaction(self, transaction: Transaction) -> Transaction:
        """Append a transaction to the log and update holdings."""
        ...

    @abstractmethod
    def get_holdings(self) -> Dict[str, Asset]:
        """Get a copy of all holdings keyed by symbol."""
        ...

    @abstractmethod
    def get_transactions(self) -> List[Transaction]:
        """Get a copy of the transaction log in recording order."""
        ...

    @abstractmethod
    def get_asset(self, symbol: str) -> Optional[Asset]:
        """Get the holding for a specific symbol."""
        ...

    @abstractmethod
    def get_total_value(self) -> Decimal:
        """Calculate total market value of all holdings."""
        ...

    @abstractmethod
    def get_asset_count(self) -> int:
        ...

    @abstractmethod
    def get_transaction_count(self) -> int:
        ...

    @abstractmethod
    def reset(self) -> None:
        """Clear all holdings and transactions."""
        ...


class PortfolioLedger(IPortfolioLedger):
    """Concrete holdings ledger.

    Uses the moving weighted average cost method: average cost moves only
    on buys, sells reduce quantity and leave the average untouched.

    The ledger owns its Asset objects. Reads hand out copies, and every
    read and write runs under one lock so a recorded transaction is never
    observed half-applied.
    """

    def __init__(self) -> None:
        self._assets: Dict[str, Asset] = {}
        self._transactions: List[Transaction] = []
        self._lock = threading.RLock()

    def record_transaction(self, transaction: Transaction) -> Transaction:
        """Append a transaction to the log and apply it to holdings.

        A SELL is stamped with the average cost in effect when it is
        recorded, so realized PnL does not drift after later buys.

        Args:
            transaction: Trade to record

        Returns:
            The transaction as stored in the log

        Raises:
            InvalidQuantityError: If quantity is not a positive int
            InvalidPriceError: If price is not a positive number
            InsufficientHoldingsError: If a SELL would leave a negative position
        """
        quantity = check_quantity(transaction.quantity)
        price = check_price(transaction.price)

        with self._lock:
            symbol = transaction.symbol
            existing = self._assets.get(symbol)
            held = existing.quantity if existing else 0
            average_cost = existing.average_cost if existing else Decimal("0")
            cost_basis = transaction.cost_basis

            # Work out the new position before touching any state
            if transaction.order_type is OrderType.SELL:
                if held - quantity < 0:
                    raise InsufficientHoldingsError(
                        f"Cannot sell {quantity} {symbol}: only {held} held"
                    )
                if cost_basis is None:
                    cost_basis = average_cost
                new_quantity = held - quantity
                new_average = average_cost
            else:
                new_quantity = held + quantity
                new_average = (held * average_cost + quantity * price) / new_quantity

            stored = replace(
                transaction,
                asset=transaction.asset.copy(),
                price=price,
                cost_basis=cost_basis,
            )
            asset = existing if existing is not None else self._register(stored.asset)
            self._transactions.append(stored)
            asset.quantity = new_quantity
            asset.average_cost = new_average

        logger.debug(f"Recorded {stored}")
        return stored.detached()

    def _register(self, template: Asset) -> Asset:
        asset = template.copy()
        asset.quantity = 0
        asset.average_cost = Decimal("0")
        self._assets[asset.symbol] = asset
        return asset

    def get_holdings(self) -> Dict[str, Asset]:
        with self._lock:
            return {symbol: asset.copy() for symbol, asset in self._assets.items()}

    def get_transactions(self) -> List[Transaction]:
        """Copy of the log; each transaction carries its own asset copy."""
        with self._lock:
            return [transaction.detached() for transaction in self._transactions]

    def get_asset(self, symbol: str) -> Optional[Asset]:
        with self._lock:
            asset = self._assets.get(symbol.upper())
            return asset.copy() if asset is not None else None

    def get_total_value(self) -> Decimal:
        """Sum of quantity x current price over all holdings."""
        with self._lock:
            return sum(
                (asset.market_value for asset in self._assets.values()),
                Decimal("0"),
            )

    def get_asset_count(self) -> int:
        with self._lock:
            return len(self._assets)

    def get_transaction_count(self) -> int:
        with self._lock:
            return len(self._transactions)

    def reset(self) -> None:
        with self._lock:
            self._assets.clear()
            self._transactions.clear()
