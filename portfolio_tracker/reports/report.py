"""Human-readable analytics report."""

from __future__ import annotations

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, TextIO

from portfolio_tracker.trading.analytics import IPortfolioAnalytics
from portfolio_tracker.trading.errors import NullArgumentError
from portfolio_tracker.trading.models import AssetPerformance, PortfolioMetrics

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
REPORT_HEADER = "Portfolio Analytics Report"
SEPARATOR = "=" * 80
RULE = "-" * 40


class AnalyticsReportGenerator:
    """Renders a text report from an analytics engine."""

    def __init__(self, analytics: Optional[IPortfolioAnalytics]) -> None:
        if analytics is None:
            raise NullArgumentError("Analytics cannot be None")
        self._analytics = analytics

    def generate_report(self, filepath: str | Path) -> Path:
        """Write the report to ``filepath``, creating parent directories.

        Raises:
            ValueError: If the path is empty
            OSError: If the file cannot be written
        """
        if not str(filepath).strip():
            raise ValueError("Filename cannot be empty")
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with path.open("w", encoding="utf-8") as f:
                self._write_report(f)
        except OSError as e:
            logger.error(f"Failed to write analytics report to {path}: {e}")
            raise
        logger.info(f"Analytics report generated: {path}")
        return path

    def generate_report_string(self) -> str:
        buffer = io.StringIO()
        self._write_report(buffer)
        return buffer.getvalue()

    def _write_report(self, out: TextIO) -> None:
        metrics = self._analytics.calculate_portfolio_metrics()
        allocation = self._analytics.get_asset_allocation()

        out.write(f"{REPORT_HEADER}\n{SEPARATOR}\n")
        out.write(f"Generated on: {datetime.now().strftime(DATE_FORMAT)}\n\n")
        self._write_summary(out, metrics)
        self._write_performance(out, metrics)
        self._write_allocation(out, allocation)
        self._write_top_performers(
            out,
            self._analytics.get_best_performing_asset(),
            self._analytics.get_worst_performing_asset(),
        )
        out.write(f"{SEPARATOR}\n")
        out.write("Report generated by Portfolio Tracker Analytics\n")
        out.write(f"Calculation timestamp: {metrics.computed_at.strftime(DATE_FORMAT)}\n")

    @staticmethod
    def _write_summary(out: TextIO, metrics: PortfolioMetrics) -> None:
        out.write(f"PORTFOLIO SUMMARY\n{RULE}\n")
        out.write(f"Total Value: ${metrics.total_value:,.2f}\n")
        out.write(f"Total Cost: ${metrics.total_cost:,.2f}\n")
        out.write(f"Number of Assets: {metrics.asset_count}\n")
        out.write(f"Number of Transactions: {metrics.transaction_count}\n\n")

    @staticmethod
    def _write_performance(out: TextIO, metrics: PortfolioMetrics) -> None:
        out.write(f"PERFORMANCE METRICS\n{RULE}\n")
        out.write(f"Unrealized P&L: ${metrics.unrealized_pnl:,.2f}\n")
        out.write(f"Realized P&L: ${metrics.realized_pnl:,.2f}\n")
        out.write(f"Total Return: {metrics.total_return_percentage:.2f}%\n")
        out.write(f"Volatility: {metrics.volatility:.2f}%\n")
        out.write(f"Sharpe Ratio: {metrics.sharpe_ratio:.4f}\n\n")

    @staticmethod
    def _write_allocation(out: TextIO, allocation: Dict) -> None:
        out.write(f"ASSET ALLOCATION\n{RULE}\n")
        if not allocation:
            out.write("No assets in portfolio\n")
        # Largest share first
        for symbol, percentage in sorted(allocation.items(), key=lambda kv: kv[1], reverse=True):
            out.write(f"{symbol}: {percentage:.2f}%\n")
        out.write("\n")

    @staticmethod
    def _write_top_performers(
        out: TextIO,
        best: Optional[AssetPerformance],
        worst: Optional[AssetPerformance],
    ) -> None:
        out.write(f"TOP PERFORMERS\n{RULE}\n")
        if best is None or worst is None:
            out.write("No assets to analyze\n\n")
            return
        out.write(f"Best Performer: {best.symbol} ({best.return_percentage:.2f}%)\n")
        out.write(f"Worst Performer: {worst.symbol} ({worst.return_percentage:.2f}%)\n\n")
