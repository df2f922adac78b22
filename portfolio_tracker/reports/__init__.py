# Reports module
"""CSV export and text reports."""

from portfolio_tracker.reports.export import CsvExporter
from portfolio_tracker.reports.report import AnalyticsReportGenerator

__all__ = ["CsvExporter", "AnalyticsReportGenerator"]
