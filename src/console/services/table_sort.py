"""Table sort engine.

`SortConfig` describes the active sort of one logical view: a field key and
a direction, or the unsorted state where both are ``None``. Header clicks
cycle a key through asc -> desc -> unsorted; a different key always starts
at asc.

`sort_items` is stable: items with equal sort values keep their input order,
and the unsorted state returns the input order unchanged. Custom comparators
receive the direction and must honour it themselves.

`TableSortService` owns one view's `SortConfig`, restores it from the local
store on construction and writes it back on every change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Mapping, Optional, TypeVar

from core.local_store import LocalStateStore
from .comparators import Comparator, field_value, text_key

__all__ = ["ASC", "DESC", "SortConfig", "sort_items", "TableSortService"]

log = logging.getLogger(__name__)

T = TypeVar("T")

ASC = "asc"
DESC = "desc"
_DIRECTIONS = (ASC, DESC)


@dataclass(frozen=True)
class SortConfig:
    key: Optional[str] = None
    direction: Optional[str] = None

    @classmethod
    def unsorted(cls) -> "SortConfig":
        return cls(None, None)

    @property
    def is_sorted(self) -> bool:
        return self.key is not None

    def is_valid(self) -> bool:
        if self.key is None:
            return self.direction is None
        return isinstance(self.key, str) and self.direction in _DIRECTIONS

    def cycled(self, key: str) -> "SortConfig":
        """Config after the header for ``key`` is activated."""
        if self.key != key:
            return SortConfig(key, ASC)
        if self.direction == ASC:
            return SortConfig(key, DESC)
        return SortConfig.unsorted()

    def to_json(self) -> Dict[str, Any]:
        return {"key": self.key, "direction": self.direction}

    @classmethod
    def from_json(cls, obj: Any) -> Optional["SortConfig"]:
        """Parse a persisted config; ``None`` when the value is not a valid config."""
        if not isinstance(obj, Mapping):
            return None
        config = cls(obj.get("key"), obj.get("direction"))
        return config if config.is_valid() else None


def sort_items(
    items: Iterable[T],
    config: SortConfig,
    comparators: Mapping[str, Comparator] | None = None,
) -> List[T]:
    rows = list(items)
    if not config.is_sorted or not config.is_valid():
        return rows
    key = config.key
    direction = config.direction
    custom = (comparators or {}).get(key)  # type: ignore[arg-type]
    if custom is not None:
        return sorted(rows, key=cmp_to_key(lambda a, b: custom(a, b, direction)))
    return sorted(rows, key=lambda r: text_key(field_value(r, key)), reverse=direction == DESC)


class TableSortService:
    """Persisted sort state for one view.

    Parameters
    ----------
    store: LocalStateStore | None
        Where the config is persisted; ``None`` keeps it in memory only.
    storage_key: str | None
        Persistence key, e.g. ``"apps-list-sort"``.
    default_key / default_direction:
        Used when nothing (or something invalid) is persisted.
    comparators:
        Per-key custom comparators.
    """

    def __init__(
        self,
        store: LocalStateStore | None = None,
        storage_key: str | None = None,
        *,
        default_key: str | None = "name",
        default_direction: str | None = ASC,
        comparators: Mapping[str, Comparator] | None = None,
    ):
        self._store = store
        self._storage_key = storage_key
        self.comparators: Dict[str, Comparator] = dict(comparators or {})
        default = SortConfig(default_key, default_direction if default_key else None)
        self._default = default if default.is_valid() else SortConfig.unsorted()
        self._config = self._restore()

    def _restore(self) -> SortConfig:
        if self._store is None or not self._storage_key:
            return self._default
        raw = self._store.get(self._storage_key)
        if raw is None:
            return self._default
        config = SortConfig.from_json(raw)
        if config is None:
            log.warning("Ignoring invalid sort config for %s: %r", self._storage_key, raw)
            return self._default
        return config

    def _persist(self) -> None:
        if self._store is not None and self._storage_key:
            self._store.set(self._storage_key, self._config.to_json())

    @property
    def config(self) -> SortConfig:
        return self._config

    def set_config(self, config: SortConfig) -> None:
        self._config = config if config.is_valid() else SortConfig.unsorted()
        self._persist()

    def handle_sort(self, key: str) -> SortConfig:
        self._config = self._config.cycled(key)
        log.debug("sort %s -> %s", self._storage_key or "<memory>", self._config)
        self._persist()
        return self._config

    def sort(self, items: Iterable[T]) -> List[T]:
        return sort_items(items, self._config, self.comparators)
