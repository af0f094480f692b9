"""
Key-value blob stores used to keep a configuration and a slot collection
between sessions.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class BlobStoreProtocol(Protocol):
    """Protocol describing the store behaviour needed by the repository."""

    async def put(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    async def get(self, key: str) -> Optional[str]:
        """Return the value under ``key`` or None when absent."""

    async def remove(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""

    async def clear(self) -> None:
        """Remove every key in the store."""

    async def keys(self) -> List[str]:
        """Return all keys currently stored."""


class InMemoryBlobStore:
    """Store holding values in a dict; used by tests and one-shot runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()

    async def keys(self) -> List[str]:
        return list(self._data)


class JsonFileBlobStore:
    """
    Store persisting all keys in a single JSON object on disk.

    Every operation reads the whole file and writes a full replacement
    through a temporary file, so a crash never leaves a half-written store.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def put(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    async def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    async def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    async def clear(self) -> None:
        self._write({})

    async def keys(self) -> List[str]:
        return list(self._read())

    def _read(self) -> Dict[str, str]:
        """
        Load the whole store.

        An unreadable store file counts as empty, so the next write replaces
        it instead of every command failing on it.
        """
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            logger.warning("Store file %s is not valid JSON, treating it as empty: %s", self.path, exc)
            return {}

        if not isinstance(data, dict):
            logger.warning("Store file %s does not hold a JSON object, treating it as empty", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        os.replace(tmp_path, self.path)
        logger.debug("Wrote %d key(s) to %s", len(data), self.path)
