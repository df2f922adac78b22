"""CSV export of holdings, transactions, and summary metrics."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, Tuple

from portfolio_tracker.trading.analytics import IPortfolioAnalytics
from portfolio_tracker.trading.portfolio import IPortfolioLedger

logger = logging.getLogger(__name__)

HOLDING_FIELDS = [
    "symbol", "name", "kind", "quantity", "average_cost", "current_price", "market_value",
]
TRANSACTION_FIELDS = [
    "id", "timestamp", "order_type", "symbol", "name", "quantity", "price", "total_value",
]
SUMMARY_FIELDS = ["metric", "value"]


def _prepare(filepath: str | Path) -> Path:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


class CsvExporter:
    """Writes ledger and analytics data to CSV files.

    Only reads from the ledger; a failed write raises OSError and leaves
    the ledger as it was.
    """

    @staticmethod
    def export_holdings(ledger: IPortfolioLedger, filepath: str | Path) -> Path:
        """Export one row per holding, in ledger order."""
        path = _prepare(filepath)
        try:
            with path.open("w", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=HOLDING_FIELDS)
                writer.writeheader()
                for asset in ledger.get_holdings().values():
                    price = asset.current_price()
                    writer.writerow({
                        "symbol": asset.symbol,
                        "name": asset.name,
                        "kind": asset.kind.value,
                        "quantity": asset.quantity,
                        "average_cost": f"{asset.average_cost:.2f}",
                        "current_price": f"{price:.2f}",
                        "market_value": f"{asset.quantity * price:.2f}",
                    })
        except OSError as e:
            logger.error(f"Failed to export holdings to {path}: {e}")
            raise
        logger.info(f"Portfolio exported to {path}")
        return path

    @staticmethod
    def export_transactions(ledger: IPortfolioLedger, filepath: str | Path) -> Path:
        """Export the transaction log in recording order."""
        path = _prepare(filepath)
        try:
            with path.open("w", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=TRANSACTION_FIELDS)
                writer.writeheader()
                for txn in ledger.get_transactions():
                    writer.writerow({
                        "id": txn.id,
                        "timestamp": txn.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                        "order_type": txn.order_type.value,
                        "symbol": txn.symbol,
                        "name": txn.asset.name,
                        "quantity": txn.quantity,
                        "price": f"{txn.price:.2f}",
                        "total_value": f"{txn.total_value:.2f}",
                    })
        except OSError as e:
            logger.error(f"Failed to export transactions to {path}: {e}")
            raise
        logger.info(f"Transactions exported to {path}")
        return path

    @staticmethod
    def export_summary(
        analytics: IPortfolioAnalytics,
        filepath: str | Path,
    ) -> Path:
        """Export metric/value rows followed by one allocation row per symbol."""
        path = _prepare(filepath)
        metrics = analytics.calculate_portfolio_metrics().to_dict()
        allocation: Dict = analytics.get_asset_allocation()
        try:
            with path.open("w", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=SUMMARY_FIELDS)
                writer.writeheader()
                for metric, value in metrics.items():
                    writer.writerow({"metric": metric, "value": value})
                for symbol, percentage in allocation.items():
                    writer.writerow({"metric": f"allocation:{symbol}", "value": str(percentage)})
        except OSError as e:
            logger.error(f"Failed to export summary to {path}: {e}")
            raise
        logger.info(f"Portfolio summary exported to {path}")
        return path

    @classmethod
    def export_all(
        cls,
        ledger: IPortfolioLedger,
        analytics: IPortfolioAnalytics,
        directory: str | Path,
    ) -> Tuple[Path, Path, Path]:
        """Export holdings, transactions and summary into ``directory``."""
        directory = Path(directory)
        return (
            cls.export_holdings(ledger, directory / "portfolio.csv"),
            cls.export_transactions(ledger, directory / "transactions.csv"),
            cls.export_summary(analytics, directory / "portfolio_summary.csv"),
        )
