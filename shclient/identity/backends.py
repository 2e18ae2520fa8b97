"""
Identity Backends - Durable string key-value storage.

Backends:
- MemoryBackend: process-local dict (tests, throwaway seats)
- JsonFileBackend: one JSON object on local disk

Design decisions:
- Values are plain strings, keys are already seat-scoped by the caller
- update() applies a batch of changes in one write, so an identity is never
  left half-written on disk
- A corrupt file is treated as empty (and replaced on the next write)
"""

from __future__ import annotations
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class IdentityStoreError(Exception):
    """Durable identity storage could not be written."""


class KeyValueBackend(ABC):
    """Abstract base class for durable key-value storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def update(self, changes: dict[str, str | None]):
        """Apply all changes at once. A None value deletes the key."""
        pass

    def keys(self) -> list[str]:
        return []


class MemoryBackend(KeyValueBackend):
    """In-memory backend. Lives as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def update(self, changes: dict[str, str | None]):
        for key, value in changes.items():
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = value

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileBackend(KeyValueBackend):
    """
    File-based backend.

    Usage:
        backend = JsonFileBackend("~/.shclient/identity.json")
        backend.update({"playerId": "p1", "playerSecret": "s1"})
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def keys(self) -> list[str]:
        return list(self._load())

    def update(self, changes: dict[str, str | None]):
        data = self._load()
        for key, value in changes.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        self._save(data)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable identity file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring identity file %s: not a JSON object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: dict[str, str]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".identity-")
        except OSError as e:
            raise IdentityStoreError(f"Cannot write identity file {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise IdentityStoreError(f"Cannot write identity file {self.path}: {e}") from e
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
