"""Mock market price source.

Prices are synthesized from a per-symbol base price plus bounded uniform
jitter. Nothing is fetched from the network.
"""

from __future__ import annotations

import logging
import random
import threading
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Optional, Set

logger = logging.getLogger(__name__)


DEFAULT_BASE_PRICES: Dict[str, str] = {
    "AAPL": "150.0",
    "GOOGL": "2800.0",
    "MSFT": "300.0",
    "TSLA": "800.0",
    "AMZN": "3300.0",
    "NVDA": "500.0",
    "META": "350.0",
    "NFLX": "600.0",
    "BTC": "45000.0",
    "ETH": "3000.0",
    "ADA": "1.5",
    "DOT": "20.0",
    "LINK": "25.0",
    "UNI": "30.0",
}

# Range for bases synthesized on first sight of an unknown symbol
UNKNOWN_BASE_MIN = 50.0
UNKNOWN_BASE_SPAN = 200.0
FALLBACK_BASE_PRICE = Decimal("100.0")


class IPriceSource(ABC):
    """Interface for current-price lookups.

    Abstracts the price data source so assets and services can work
    with any implementation.
    """

    @abstractmethod
    def get_current_price(self, symbol: str, jitter: Optional[float] = None) -> Decimal:
        """Get the current price for a symbol.

        Args:
            symbol: Asset symbol (e.g., "AAPL")
            jitter: Symmetric relative band to draw noise from; None uses the
                source's default

        Returns:
            Current price as a non-negative Decimal
        """
        ...


class MockPriceSource(IPriceSource):
    """Pseudo-random price source for demos and tests.

    Each symbol has a base price. Quotes are ``base * (1 + u)`` with ``u``
    drawn uniformly from ``[-jitter, +jitter]``. Symbols without a configured
    base get one drawn once from [50, 250) and memoized for the life of the
    instance.
    """

    def __init__(
        self,
        base_prices: Optional[Dict[str, Decimal]] = None,
        jitter: float = 0.05,
        seed: Optional[int] = None,
    ) -> None:
        """Initialize the price source.

        Args:
            base_prices: Initial base prices; defaults to a built-in table of
                common stocks and crypto
            jitter: Default relative jitter band (0.05 = +/-5%)
            seed: Seed for the private random generator
        """
        if jitter < 0:
            raise ValueError("Jitter band cannot be negative")
        self._jitter = jitter
        self._random = random.Random(seed)
        self._lock = threading.Lock()
        self._base_prices: Dict[str, Decimal] = {}
        source = DEFAULT_BASE_PRICES if base_prices is None else base_prices
        for symbol, price in source.items():
            self.set_base_price(symbol, price)

    @property
    def jitter(self) -> float:
        return self._jitter

    def get_current_price(self, symbol: str, jitter: Optional[float] = None) -> Decimal:
        band = self._jitter if jitter is None else jitter
        key = symbol.upper()
        with self._lock:
            base = self._base_prices.get(key)
            if base is None:
                drawn = UNKNOWN_BASE_MIN + self._random.random() * UNKNOWN_BASE_SPAN
                base = Decimal(str(drawn))
                self._base_prices[key] = base
                logger.debug(f"Synthesized base price {base} for unknown symbol {key}")
            if band == 0:
                return base
            factor = Decimal(str(1.0 + self._random.uniform(-band, band)))
        return base * factor

    def set_base_price(self, symbol: str, price: Decimal | float | str) -> None:
        """Set or override the base price for a symbol.

        Raises:
            ValueError: If the price is negative
        """
        value = price if isinstance(price, Decimal) else Decimal(str(price))
        if value < Decimal("0"):
            raise ValueError("Base price cannot be negative")
        with self._lock:
            self._base_prices[symbol.upper()] = value

    def get_base_price(self, symbol: str) -> Decimal:
        """Base price without jitter; 100 for symbols never seen."""
        with self._lock:
            return self._base_prices.get(symbol.upper(), FALLBACK_BASE_PRICE)

    def get_known_symbols(self) -> Set[str]:
        with self._lock:
            return set(self._base_prices)

    def clear_prices(self) -> None:
        """Forget every base price, including the built-in table."""
        with self._lock:
            self._base_prices.clear()
