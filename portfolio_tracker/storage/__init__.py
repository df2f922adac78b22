# Storage module
"""JSON key/value storage used for tracker settings."""

from portfolio_tracker.storage.storage import IStorageService, JsonFileStorage

__all__ = ["IStorageService", "JsonFileStorage"]
