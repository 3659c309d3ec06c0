"""Key-value persistence for the ledger's two records.

The desk keeps exactly two logical records, ``"trades"`` and
``"portfolioStats"``.  :class:`JsonFileStore` writes each one to its own
``<key>.json`` file atomically; :class:`MemoryStore` keeps them in a dict
for tests and throwaway sessions.

Reads never raise for a missing record (``None`` comes back).  Undecodable
content raises :class:`MalformedStateError` so the caller can decide to
reseed.  Failed writes are logged and raised as :class:`StorageError`;
nothing is silently swallowed.
"""

from __future__ import annotations

import contextlib
import copy
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from caroptions.core.exceptions import MalformedStateError, StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract interface for the desk's JSON record store."""

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the decoded record for *key*, or ``None`` if absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Persist *value* (JSON-serialisable) under *key*."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*; no-op when absent."""


class JsonFileStore(KeyValueStore):
    """One JSON file per key under *base_dir*.

    Writes go through a ``.tmp`` sibling + :func:`os.replace` so a crash
    mid-write never leaves a truncated record behind.
    """

    def __init__(self, base_dir: Path) -> None:
        self._base = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base

    def path_for(self, key: str) -> Path:
        return self._base / f"{key}.json"

    def get(self, key: str) -> Any:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise MalformedStateError(f"{path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            logger.warning("get(%s) could not read %s: %s", key, path, exc)
            return None
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedStateError(f"{path} is not valid JSON: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            payload = json.dumps(value, indent=2) + "\n"
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Record {key!r} is not JSON-serialisable: {exc}") from exc
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            logger.error("set(%s) failed writing %s: %s", key, path, exc)
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise StorageError(f"Could not write {path}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("delete(%s) failed: %s", key, exc)
            raise StorageError(f"Could not delete {path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"JsonFileStore(base_dir={self._base!r})"


class MemoryStore(KeyValueStore):
    """In-process store.  Values are deep-copied in and out, like JSON would."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
