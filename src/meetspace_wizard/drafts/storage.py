"""Key-value backends for draft persistence.

Values are opaque strings (serialized JSON snapshots), mirroring a browser
profile's local storage.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from meetspace_wizard.core.exceptions import DraftStoreError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class DraftStore(ABC):
    """Abstract base for draft storage backends."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""


class MemoryDraftStore(DraftStore):
    """In-memory draft storage (for testing/single-instance use)."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self.writes += 1
        logger.debug(f"Saved draft to memory: {key}")

    def remove(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            logger.debug(f"Deleted draft from memory: {key}")

    def keys(self) -> list[str]:
        return sorted(self._values)


class FileDraftStore(DraftStore):
    """File-based draft storage (one JSON file per key)."""

    def __init__(self, storage_dir: Path | str) -> None:
        self.storage_dir = Path(storage_dir)
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DraftStoreError(
                f"Cannot create draft directory {self.storage_dir}",
                details={"error": str(e)},
            ) from e
        logger.info(f"Using file draft storage at: {self.storage_dir}")

    def _get_path(self, key: str) -> Path:
        return self.storage_dir / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self._get_path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise DraftStoreError(f"Failed to read draft {key}", key=key, details={"error": str(e)}) from e

    def set(self, key: str, value: str) -> None:
        path = self._get_path(key)
        try:
            path.write_text(value, encoding="utf-8")
        except OSError as e:
            raise DraftStoreError(f"Failed to write draft {key}", key=key, details={"error": str(e)}) from e
        logger.debug(f"Saved draft to file: {path}")

    def remove(self, key: str) -> None:
        path = self._get_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise DraftStoreError(f"Failed to delete draft {key}", key=key, details={"error": str(e)}) from e
        logger.debug(f"Deleted draft file: {path}")

    def keys(self) -> list[str]:
        return sorted(path.stem for path in self.storage_dir.glob("*.json"))
