"""Key-value storage shared by the cart and auth stores."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from .interfaces import KeyValueStore

logger = logging.getLogger(__name__)

CART_KEY = "cart"
TOKEN_KEY = "token"


class MemoryStore(KeyValueStore):
    """In-process store, mostly useful for tests and one-off scripts."""

    def __init__(self, data: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Persists string blobs as one JSON object on disk, like browser local storage."""

    def __init__(self, path: Optional[str] = None) -> None:
        """
        Initialize the store.

        Args:
            path: File holding the data. Defaults to ~/.storefront_storage.json
        """
        if path is None:
            path = str(Path.home() / ".storefront_storage.json")
        self.path = path
        self._data: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        """Load stored blobs from file if it exists."""
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # A corrupted file starts fresh
            logger.warning(f"Could not read storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self.path}: not a JSON object")
            return {}
        return {key: value if isinstance(value, str) else json.dumps(value) for key, value in data.items()}

    def _save(self) -> None:
        with open(self.path, "w") as f:
            json.dump(self._data, f, indent=2)
        os.chmod(self.path, 0o600)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()
        logger.debug(f"Stored key '{key}' in {self.path}")

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()
