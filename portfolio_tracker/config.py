"""Tracker settings model and loading."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from decimal import Decimal
from typing import Any, Optional

from portfolio_tracker.storage.storage import IStorageService

logger = logging.getLogger(__name__)

SETTINGS_STORAGE_KEY = "tracker_settings"


@dataclass
class TrackerSettings:
    """Tracker settings model."""
    risk_free_rate: str = "0.02"  # fraction, kept as string for exact Decimal parsing
    asset_volatility: str = "0.15"
    market_jitter: float = 0.05  # +/- band on market quotes
    trade_jitter: float = 0.10  # +/- band on simulated trade prices
    simulation_interval_ms: int = 1000
    summary_every: int = 5
    export_dir: str = "exports"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.market_jitter < 0 or self.trade_jitter < 0:
            raise ValueError("Jitter bands cannot be negative")
        if self.simulation_interval_ms <= 0:
            raise ValueError("Simulation interval must be positive")
        Decimal(str(self.risk_free_rate))
        Decimal(str(self.asset_volatility))

    @property
    def risk_free_rate_decimal(self) -> Decimal:
        return Decimal(str(self.risk_free_rate))

    @property
    def asset_volatility_decimal(self) -> Decimal:
        return Decimal(str(self.asset_volatility))

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TrackerSettings":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def load_settings(storage: Optional[IStorageService]) -> TrackerSettings:
    """Load settings from storage, falling back to (and saving) defaults.

    Stored data that is not a dictionary or fails validation is replaced
    with defaults.
    """
    if storage is None:
        return TrackerSettings()

    data: Any = storage.load(SETTINGS_STORAGE_KEY)
    if isinstance(data, dict):
        try:
            return TrackerSettings.from_dict(data)
        except (TypeError, ValueError, ArithmeticError) as e:
            logger.error(f"Invalid stored settings, using defaults: {e}")

    settings = TrackerSettings()
    storage.save(SETTINGS_STORAGE_KEY, settings.to_dict())
    return settings
