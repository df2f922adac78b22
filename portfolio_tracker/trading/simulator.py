"""Random trade simulation for demos.

A QTimer drives periodic ticks on the owning thread's event loop. Each tick
places one random buy or sell through the trading service.
"""

from __future__ import annotations

import logging
import random
from decimal import Decimal
from typing import List, Optional, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from portfolio_tracker.data.providers import IPriceSource

from .errors import TradingError
from .models import Asset, Transaction
from .orders import TradingService

logger = logging.getLogger(__name__)


def default_sample_assets(price_source: IPriceSource) -> List[Asset]:
    """Demo universe of four stocks and two crypto assets."""
    return [
        Asset.stock("AAPL", "Apple Inc.", price_source),
        Asset.stock("GOOGL", "Alphabet Inc.", price_source),
        Asset.stock("MSFT", "Microsoft Corporation", price_source),
        Asset.stock("TSLA", "Tesla Inc.", price_source),
        Asset.crypto("BTC", "Bitcoin", price_source),
        Asset.crypto("ETH", "Ethereum", price_source),
    ]


class TradeSimulator(QObject):
    """Places random demo trades, once per timer tick.

    Signals:
        tradeExecuted: Emitted with the recorded Transaction
        tradeFailed: Emitted with the error message when a trade is rejected
        runningChanged: Emitted when the timer starts or stops
    """

    tradeExecuted = Signal(object)
    tradeFailed = Signal(str)
    runningChanged = Signal(bool)

    def __init__(
        self,
        service: TradingService,
        price_source: IPriceSource,
        assets: Optional[Sequence[Asset]] = None,
        trade_jitter: float = 0.10,
        summary_every: int = 5,
        seed: Optional[int] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """Initialize the simulator.

        Args:
            service: Trading service trades are placed through
            price_source: Source of the market price each trade is priced around
            assets: Universe to trade; defaults to the demo sample assets
            trade_jitter: Relative band applied to the market price (0.10 = +/-10%)
            summary_every: Log a portfolio summary every N recorded transactions
            seed: Seed for the simulator's random generator
            parent: Parent QObject
        """
        super().__init__(parent)
        self._service = service
        self._price_source = price_source
        self._assets = list(assets) if assets is not None else default_sample_assets(price_source)
        if not self._assets:
            raise ValueError("Simulator needs at least one asset")
        self._trade_jitter = trade_jitter
        self._summary_every = summary_every
        self._random = random.Random(seed)
        self._busy = False
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._tick)

    def start(self, interval_ms: int = 1000) -> None:
        """Start periodic trading. Does nothing if already running."""
        if self._timer.isActive():
            return
        self._timer.setInterval(interval_ms)
        self._timer.start()
        logger.info(f"Trade simulation started with {interval_ms} ms interval")
        self.runningChanged.emit(True)

    def stop(self) -> None:
        if not self._timer.isActive():
            return
        self._timer.stop()
        logger.info("Trade simulation stopped")
        self.runningChanged.emit(False)

    def is_running(self) -> bool:
        return self._timer.isActive()

    def execute_trades(self, count: int) -> List[Transaction]:
        """Run ``count`` random trades synchronously.

        Returns:
            The transactions that were recorded
        """
        logger.info(f"Executing {count} trades...")
        executed = []
        for _ in range(count):
            transaction = self.execute_random_trade()
            if transaction is not None:
                executed.append(transaction)
        logger.info(f"Completed {len(executed)} of {count} trades")
        return executed

    def _tick(self) -> None:
        # Skip a tick that arrives while the previous one is still running
        if self._busy:
            logger.debug("Skipping overlapping simulation tick")
            return
        self._busy = True
        try:
            self.execute_random_trade()
        finally:
            self._busy = False

    def execute_random_trade(self) -> Optional[Transaction]:
        """Place one random trade.

        Half the trades are buys. A sell the current position cannot cover
        becomes a buy instead. Rejections are logged and reported through
        tradeFailed rather than raised.

        Returns:
            The recorded transaction, or None if the trade was rejected
        """
        asset = self._random.choice(self._assets)
        quantity = self._random.randint(1, 10)
        market_price = self._price_source.get_current_price(asset.symbol)
        variation = Decimal(str(1.0 + self._random.uniform(-self._trade_jitter, self._trade_jitter)))
        price = market_price * variation

        try:
            if self._random.random() < 0.5:
                transaction = self._service.buy(asset, quantity, price)
            else:
                held = self._service.ledger.get_asset(asset.symbol)
                if held is not None and held.quantity >= quantity:
                    transaction = self._service.sell(asset, quantity, price)
                else:
                    logger.debug(f"Cannot sell {quantity} {asset.symbol}; buying instead")
                    transaction = self._service.buy(asset, quantity, price)
        except TradingError as e:
            logger.warning(f"Error executing trade: {e}")
            self.tradeFailed.emit(str(e))
            return None

        self.tradeExecuted.emit(transaction)
        count = self._service.ledger.get_transaction_count()
        if self._summary_every > 0 and count % self._summary_every == 0:
            logger.info("\n" + self._service.get_portfolio_summary())
        return transaction
