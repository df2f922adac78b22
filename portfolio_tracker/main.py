"""Demo entry point: sample trades, optional timed simulation, report and export."""

from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QCoreApplication

from portfolio_tracker.config import load_settings
from portfolio_tracker.data.providers import MockPriceSource
from portfolio_tracker.reports import AnalyticsReportGenerator, CsvExporter
from portfolio_tracker.storage import JsonFileStorage
from portfolio_tracker.trading import Asset, PortfolioAnalytics, PortfolioLedger, TradingService
from portfolio_tracker.trading.simulator import TradeSimulator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Portfolio tracker demo")
    parser.add_argument("--settings", type=str, default=None, help="Settings directory (JSON)")
    parser.add_argument("--trades", type=int, default=5, help="Random trades to run synchronously")
    parser.add_argument("--simulate", type=int, default=0, help="Timer-driven trades to run on the event loop")
    parser.add_argument("--interval", type=int, default=None, help="Simulation interval in ms")
    parser.add_argument("--output", type=str, default=None, help="Export directory")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for prices and trades")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level")
    return parser.parse_args(argv)


def run_sample_trades(service: TradingService, prices: MockPriceSource) -> None:
    apple = Asset.stock("AAPL", "Apple Inc.", prices)
    google = Asset.stock("GOOGL", "Alphabet Inc.", prices)
    bitcoin = Asset.crypto("BTC", "Bitcoin", prices)
    ethereum = Asset.crypto("ETH", "Ethereum", prices)

    service.buy(apple, 10, Decimal("150.0"))
    service.buy(google, 5, Decimal("2800.0"))
    service.buy(bitcoin, 2, Decimal("45000.0"))
    service.buy(ethereum, 10, Decimal("3000.0"))
    service.sell(apple, 3, Decimal("155.0"))
    service.buy(apple, 8, Decimal("152.0"))


def run_simulation(simulator: TradeSimulator, ticks: int, interval_ms: int) -> None:
    """Run ``ticks`` timer-driven trades on a Qt event loop, then return."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    remaining = [ticks]

    def _on_trade_done(*_args) -> None:
        remaining[0] -= 1
        if remaining[0] <= 0:
            simulator.stop()
            app.quit()

    simulator.tradeExecuted.connect(_on_trade_done)
    simulator.tradeFailed.connect(_on_trade_done)
    simulator.start(interval_ms)
    app.exec()
    simulator.tradeExecuted.disconnect(_on_trade_done)
    simulator.tradeFailed.disconnect(_on_trade_done)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    storage = JsonFileStorage(args.settings) if args.settings else None
    settings = load_settings(storage)
    setup_logging(args.log_level or settings.log_level)

    prices = MockPriceSource(jitter=settings.market_jitter, seed=args.seed)
    ledger = PortfolioLedger()
    service = TradingService(ledger)
    analytics = PortfolioAnalytics(
        ledger,
        risk_free_rate=settings.risk_free_rate_decimal,
        asset_volatility=settings.asset_volatility_decimal,
    )

    run_sample_trades(service, prices)
    logger.info("\n" + service.get_portfolio_summary())
    logger.info(f"Total Portfolio Value: ${service.get_total_value():.2f}")
    logger.info(f"Unrealized P&L: ${service.get_unrealized_pnl():.2f}")
    logger.info(f"Portfolio Performance: {service.get_performance_percent():.2f}%")

    simulator = TradeSimulator(
        service,
        prices,
        trade_jitter=settings.trade_jitter,
        summary_every=settings.summary_every,
        seed=args.seed,
    )
    if args.trades > 0:
        simulator.execute_trades(args.trades)
    if args.simulate > 0:
        run_simulation(simulator, args.simulate, args.interval or settings.simulation_interval_ms)

    report = AnalyticsReportGenerator(analytics)
    print(report.generate_report_string())

    output = Path(args.output or settings.export_dir)
    try:
        CsvExporter.export_all(ledger, analytics, output)
        report.generate_report(output / "analytics_report.txt")
    except OSError as e:
        logger.error(f"Export failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
