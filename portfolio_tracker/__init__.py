"""Toy portfolio tracker: holdings ledger, trading service, analytics and exports."""

__version__ = "0.1.0"
