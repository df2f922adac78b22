"""Data models for portfolio tracking."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
import uuid

from portfolio_tracker.data.providers import IPriceSource


class AssetKind(Enum):
    """Asset variant. Only decides which price source an asset is bound to."""
    STOCK = "stock"
    CRYPTO = "crypto"


class OrderType(Enum):
    """Direction of a trade."""
    BUY = "BUY"
    SELL = "SELL"


@dataclass
class Asset:
    """A symbol's position in the portfolio.

    Attributes:
        symbol: Ticker symbol (e.g., "AAPL", "BTC")
        name: Descriptive name (e.g., "Apple Inc.")
        kind: Asset variant (stock or crypto)
        price_source: Source queried for the current market price
        quantity: Units held, never negative
        average_cost: Weighted average purchase price per unit
    """
    symbol: str
    name: str
    kind: AssetKind
    price_source: IPriceSource = field(repr=False, compare=False)
    quantity: int = 0
    average_cost: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        self.symbol = self.symbol.upper()

    def current_price(self) -> Decimal:
        """Look up the current market price from the bound price source."""
        return self.price_source.get_current_price(self.symbol)

    @property
    def market_value(self) -> Decimal:
        """Current market value (quantity x current price)."""
        return self.quantity * self.current_price()

    @property
    def total_cost(self) -> Decimal:
        """Calculate total cost basis for this position."""
        return self.quantity * self.average_cost

    def copy(self) -> "Asset":
        """Detached copy sharing the same price source."""
        return replace(self)

    @classmethod
    def stock(cls, symbol: str, name: str, price_source: IPriceSource) -> "Asset":
        return cls(symbol=symbol, name=name, kind=AssetKind.STOCK, price_source=price_source)

    @classmethod
    def crypto(cls, symbol: str, name: str, price_source: IPriceSource) -> "Asset":
        return cls(symbol=symbol, name=name, kind=AssetKind.CRYPTO, price_source=price_source)

    def __str__(self) -> str:
        return (
            f"{self.kind.value.capitalize()}: {self.name} ({self.symbol}) - "
            f"Quantity: {self.quantity}, Avg Price: ${self.average_cost:.2f}"
        )


@dataclass(frozen=True)
class Transaction:
    """Represents a completed trade transaction.

    Attributes:
        asset: The traded asset; the ledger stores and hands out its own copies
        order_type: BUY or SELL
        quantity: Units traded, always positive
        price: Execution price per unit
        timestamp: Time of execution
        cost_basis: Average cost per unit at the moment a SELL was recorded
        id: Unique transaction identifier (UUID)
    """
    asset: Asset = field(compare=False)
    order_type: OrderType
    quantity: int
    price: Decimal
    timestamp: datetime = field(default_factory=datetime.now)
    cost_basis: Optional[Decimal] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def symbol(self) -> str:
        return self.asset.symbol

    @property
    def total_value(self) -> Decimal:
        """Calculate total value of this transaction."""
        return self.quantity * self.price

    def detached(self) -> "Transaction":
        """Same transaction with its own copy of the asset."""
        return replace(self, asset=self.asset.copy())

    def __str__(self) -> str:
        return (
            f"{self.order_type.value} {self.quantity} units of {self.symbol} "
            f"at ${self.price:.2f} on {self.timestamp.isoformat()} "
            f"(Total: ${self.total_value:.2f})"
        )


@dataclass(frozen=True)
class AssetPerformance:
    """Return of a single holding relative to its average cost."""
    symbol: str
    return_percentage: Decimal


@dataclass(frozen=True)
class PortfolioMetrics:
    """Snapshot of portfolio-level analytics.

    Built fresh for every query and never mutated afterwards. Monetary and
    percentage fields carry four decimal places.
    """
    total_value: Decimal
    total_cost: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    total_return_percentage: Decimal
    volatility: Decimal
    sharpe_ratio: Decimal
    asset_count: int
    transaction_count: int
    computed_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to a flat dictionary of strings and ints for export."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Decimal):
                data[key] = str(value)
        data["computed_at"] = self.computed_at.isoformat()
        return data
