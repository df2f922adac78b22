"""Key/value storage for tracker settings.

Each key maps to one JSON document on disk. Portfolio state itself is never
persisted; only configuration goes through here.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class IStorageService(ABC):
    """Abstract key/value store for JSON-compatible documents."""

    @abstractmethod
    def save(self, key: str, data: Any) -> None:
        ...

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the document stored under ``key``, or None."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class JsonFileStorage(IStorageService):
    """Stores each key as ``<base_path>/<key>.json``.

    Writes go to a temporary sibling file first and are then moved into
    place, so a failed write never leaves a truncated document behind.
    """

    def __init__(self, base_path: str | Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base_path

    def path_for(self, key: str) -> Path:
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._base_path / f"{safe_key}.json"

    def save(self, key: str, data: Any) -> None:
        """Write ``data`` under ``key``.

        Raises:
            TypeError: If data is not JSON-serializable
            OSError: If the file cannot be written
        """
        target = self.path_for(key)
        tmp = target.with_suffix(".json.tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, target)
        except (TypeError, OSError) as e:
            logger.error(f"Failed to save data for key '{key}': {e}")
            tmp.unlink(missing_ok=True)
            raise

    def load(self, key: str) -> Optional[Any]:
        """Read the document under ``key``.

        Missing, unreadable and corrupted documents all load as None.
        """
        target = self.path_for(key)
        if not target.exists():
            return None
        try:
            with target.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupted data for key '{key}': {e}")
        except OSError as e:
            logger.error(f"Failed to load data for key '{key}': {e}")
        return None

    def delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete data for key '{key}': {e}")
