"""Portfolio analytics for the portfolio tracker."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Optional

from .errors import NullArgumentError
from .models import Asset, AssetPerformance, OrderType, PortfolioMetrics, Transaction
from .portfolio import IPortfolioLedger

DECIMAL_PLACES = 4
SCALE = Decimal(1).scaleb(-DECIMAL_PLACES)
ZERO = Decimal("0").quantize(SCALE)
HUNDRED = Decimal("100")

DEFAULT_RISK_FREE_RATE = Decimal("0.02")
DEFAULT_ASSET_VOLATILITY = Decimal("0.15")


def quantize(value: Decimal) -> Decimal:
    """Round to four decimal places, half up."""
    return value.quantize(SCALE, rounding=ROUND_HALF_UP)


class IPortfolioAnalytics(ABC):
    """Interface for portfolio analytics operations."""

    @abstractmethod
    def calculate_portfolio_metrics(self) -> PortfolioMetrics:
        """Calculate a fresh metrics snapshot from the current ledger state."""
        ...

    @abstractmethod
    def get_asset_allocation(self) -> Dict[str, Decimal]:
        """Map each symbol to its percentage of total market value."""
        ...

    @abstractmethod
    def get_best_performing_asset(self) -> Optional[AssetPerformance]:
        """Holding with the highest return over its average cost."""
        ...

    @abstractmethod
    def get_worst_performing_asset(self) -> Optional[AssetPerformance]:
        """Holding with the lowest return over its average cost."""
        ...


class PortfolioAnalytics(IPortfolioAnalytics):
    """Concrete implementation of portfolio analytics.

    Reads the ledger on every call and never mutates it. Volatility is a
    flat per-asset constant weighted by market value rather than something
    derived from price history.
    """

    def __init__(
        self,
        ledger: Optional[IPortfolioLedger],
        risk_free_rate: Decimal = DEFAULT_RISK_FREE_RATE,
        asset_volatility: Decimal = DEFAULT_ASSET_VOLATILITY,
    ) -> None:
        """Initialize analytics over a ledger.

        Args:
            ledger: Ledger to analyze
            risk_free_rate: Annual risk-free rate as a fraction (0.02 = 2%)
            asset_volatility: Volatility assumed for every asset

        Raises:
            NullArgumentError: If no ledger is given
        """
        if ledger is None:
            raise NullArgumentError("Ledger cannot be None")
        self._ledger = ledger
        self._risk_free_rate = Decimal(str(risk_free_rate))
        self._asset_volatility = Decimal(str(asset_volatility))

    def calculate_portfolio_metrics(self) -> PortfolioMetrics:
        """Calculate comprehensive portfolio metrics.

        Returns:
            PortfolioMetrics with every field at four decimal places
        """
        holdings = self._ledger.get_holdings()
        transactions = self._ledger.get_transactions()
        prices = self._snapshot_prices(holdings)

        total_value = self._total_value(holdings, prices)
        total_cost = self._total_cost(holdings)
        total_return = self._total_return_percentage(total_cost, total_value)
        volatility = self._volatility(holdings, prices, total_value)

        return PortfolioMetrics(
            total_value=total_value,
            total_cost=total_cost,
            unrealized_pnl=quantize(total_value - total_cost),
            realized_pnl=self._realized_pnl(transactions, holdings),
            total_return_percentage=total_return,
            volatility=volatility,
            sharpe_ratio=self.calculate_sharpe_ratio(total_return, volatility),
            asset_count=len(holdings),
            transaction_count=len(transactions),
        )

    def calculate_total_value(self) -> Decimal:
        holdings = self._ledger.get_holdings()
        return self._total_value(holdings, self._snapshot_prices(holdings))

    def calculate_total_cost(self) -> Decimal:
        return self._total_cost(self._ledger.get_holdings())

    def calculate_unrealized_pnl(self) -> Decimal:
        holdings = self._ledger.get_holdings()
        total_value = self._total_value(holdings, self._snapshot_prices(holdings))
        return quantize(total_value - self._total_cost(holdings))

    def calculate_realized_pnl(self) -> Decimal:
        """Realized PnL over all SELL transactions.

        Each sale is measured against the cost basis stamped on it when it
        was recorded; sales without one fall back to the holding's current
        average cost.
        """
        return self._realized_pnl(self._ledger.get_transactions(), self._ledger.get_holdings())

    def calculate_total_return_percentage(self) -> Decimal:
        holdings = self._ledger.get_holdings()
        total_value = self._total_value(holdings, self._snapshot_prices(holdings))
        return self._total_return_percentage(self._total_cost(holdings), total_value)

    def calculate_volatility(self) -> Decimal:
        holdings = self._ledger.get_holdings()
        prices = self._snapshot_prices(holdings)
        return self._volatility(holdings, prices, self._total_value(holdings, prices))

    def calculate_sharpe_ratio(
        self,
        total_return: Optional[Decimal] = None,
        volatility: Optional[Decimal] = None,
    ) -> Decimal:
        """Risk-adjusted return: (return% - risk-free%) / volatility.

        Either input left out is taken from the current ledger snapshot.

        Returns:
            Sharpe ratio, or zero when volatility is zero
        """
        if total_return is None or volatility is None:
            holdings = self._ledger.get_holdings()
            prices = self._snapshot_prices(holdings)
            total_value = self._total_value(holdings, prices)
            if total_return is None:
                total_return = self._total_return_percentage(self._total_cost(holdings), total_value)
            if volatility is None:
                volatility = self._volatility(holdings, prices, total_value)
        if volatility == Decimal("0"):
            return ZERO
        excess_return = total_return - self._risk_free_rate * HUNDRED
        return quantize(excess_return / volatility)

    def get_asset_allocation(self) -> Dict[str, Decimal]:
        holdings = self._ledger.get_holdings()
        prices = self._snapshot_prices(holdings)
        total_value = self._total_value(holdings, prices)
        if total_value == Decimal("0"):
            return {}
        return {
            symbol: quantize(asset.quantity * prices[symbol] / total_value) * HUNDRED
            for symbol, asset in holdings.items()
        }

    def get_best_performing_asset(self) -> Optional[AssetPerformance]:
        return self._select_performer(max)

    def get_worst_performing_asset(self) -> Optional[AssetPerformance]:
        return self._select_performer(min)

    def calculate_asset_performance(self, asset: Asset) -> AssetPerformance:
        """Return percentage of one holding over its average cost; zero with no cost."""
        return AssetPerformance(
            symbol=asset.symbol,
            return_percentage=self._asset_return(asset, asset.current_price()),
        )

    def _select_performer(self, pick: Callable) -> Optional[AssetPerformance]:
        # Sold-out holdings are skipped; ties go to the lexicographically first symbol
        performances = [
            self.calculate_asset_performance(asset)
            for asset in self._ledger.get_holdings().values()
            if asset.quantity > 0 and asset.average_cost > Decimal("0")
        ]
        if not performances:
            return None
        performances.sort(key=lambda p: p.symbol)
        return pick(performances, key=lambda p: p.return_percentage)

    @staticmethod
    def _asset_return(asset: Asset, price: Decimal) -> Decimal:
        if asset.average_cost <= Decimal("0"):
            return ZERO
        return quantize((price - asset.average_cost) / asset.average_cost) * HUNDRED

    @staticmethod
    def _snapshot_prices(holdings: Dict[str, Asset]) -> Dict[str, Decimal]:
        # One quote per symbol so every figure in a snapshot agrees
        return {symbol: asset.current_price() for symbol, asset in holdings.items()}

    @staticmethod
    def _total_value(holdings: Dict[str, Asset], prices: Dict[str, Decimal]) -> Decimal:
        if not holdings:
            return ZERO
        return quantize(sum(
            (asset.quantity * prices[symbol] for symbol, asset in holdings.items()),
            Decimal("0"),
        ))

    @staticmethod
    def _total_cost(holdings: Dict[str, Asset]) -> Decimal:
        if not holdings:
            return ZERO
        return quantize(sum((asset.total_cost for asset in holdings.values()), Decimal("0")))

    @staticmethod
    def _total_return_percentage(total_cost: Decimal, total_value: Decimal) -> Decimal:
        if total_cost == Decimal("0"):
            return ZERO
        return quantize((total_value - total_cost) / total_cost) * HUNDRED

    def _volatility(
        self,
        holdings: Dict[str, Asset],
        prices: Dict[str, Decimal],
        total_value: Decimal,
    ) -> Decimal:
        if not holdings or total_value == Decimal("0"):
            return ZERO
        weighted = sum(
            (
                quantize(asset.quantity * prices[symbol] / total_value) * self._asset_volatility
                for symbol, asset in holdings.items()
            ),
            Decimal("0"),
        )
        return quantize(weighted)

    @staticmethod
    def _realized_pnl(transactions: List[Transaction], holdings: Dict[str, Asset]) -> Decimal:
        realized = Decimal("0")
        for txn in transactions:
            if txn.order_type is not OrderType.SELL:
                continue
            cost_basis = txn.cost_basis
            if cost_basis is None:
                held = holdings.get(txn.symbol)
                cost_basis = held.average_cost if held else Decimal("0")
            realized += txn.total_value - cost_basis * txn.quantity
        return quantize(realized)
