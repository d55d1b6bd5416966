"""Local key-value store for persisted view state.

Holds small JSON-serialisable values (sort configs, expanded group labels,
current page numbers, view modes) in a single JSON file so view state
survives restarts. Absence of a key means "use the default"; a corrupt file
is backed up and replaced by an empty store.

Writes are last-write-wins: each ``set`` rewrites the file immediately.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

from config import settings

__all__ = ["LocalStateStore"]

log = logging.getLogger(__name__)

STORE_VERSION = 1


class LocalStateStore:
    def __init__(self, base_dir: str | None = None, filename: str | None = None):
        self.base_dir = base_dir or settings.DATA_DIR
        self.path = os.path.join(self.base_dir, filename or settings.LOCAL_STATE_FILENAME)
        self._values: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, dict) or raw.get("version") != STORE_VERSION:
                raise ValueError("unexpected local state layout")
            values = raw.get("values", {})
            if not isinstance(values, dict):
                raise ValueError("values must be an object")
            return values
        except (OSError, ValueError) as exc:
            backup = self.path + f".corrupt.{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}"
            log.warning("Local state at %s unreadable (%s); moved to %s", self.path, exc, backup)
            try:
                os.replace(self.path, backup)
            except OSError:  # pragma: no cover
                log.exception("Could not back up corrupt local state %s", self.path)
            return {}

    def _flush(self) -> None:
        os.makedirs(self.base_dir, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"version": STORE_VERSION, "values": self._values}, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``; ``None`` removes the key."""
        if value is None:
            self.remove(key)
            return
        self._values[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._flush()

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def keys(self) -> Iterator[str]:
        return iter(list(self._values))
