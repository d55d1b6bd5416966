"""Grouping engine for grouped table views.

Groups an already-sorted sequence by a resolved display label. Groups come
out in case-insensitive alphabetical label order, recomputed on every call;
items inside a group keep their input order. References that do not resolve
land in the "" (uncategorized) group and are never dropped.

Expansion state is a set of labels. Only members of expanded groups are
part of the flattened visible sequence; a group may be expanded while it
has no members. Labels, not reference ids, identify groups, so two
references resolving to the same label share one group.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, TypeVar

from core.local_store import LocalStateStore
from .comparators import field_value, text_key

__all__ = [
    "UNCATEGORIZED",
    "group_items",
    "visible_items",
    "toggle_labels",
    "lookup_resolver",
    "resolve_ref",
    "ExpandedGroupsService",
]

log = logging.getLogger(__name__)

T = TypeVar("T")

UNCATEGORIZED = ""


def group_items(sorted_items: Iterable[T], key_resolver: Callable[[T], Any]) -> Dict[str, List[T]]:
    buckets: Dict[str, List[T]] = {}
    for item in sorted_items:
        label = key_resolver(item)
        label = UNCATEGORIZED if label is None else str(label)
        buckets.setdefault(label, []).append(item)
    return {label: buckets[label] for label in sorted(buckets, key=text_key)}


def visible_items(groups: Mapping[str, List[T]], expanded: Iterable[str]) -> List[T]:
    """Flatten the members of expanded groups, in group order then item order."""
    open_labels = set(expanded)
    out: List[T] = []
    for label, members in groups.items():
        if label in open_labels:
            out.extend(members)
    return out


def toggle_labels(expanded: Iterable[str], labels: Iterable[str]) -> FrozenSet[str]:
    return frozenset(expanded) ^ frozenset(labels)


def lookup_resolver(lookup: Mapping[Any, str], key: str) -> Callable[[Any], str]:
    """Resolve ``item.<key>`` through ``lookup`` (e.g. category id -> category name).

    Ids are matched as given, then as int and as str, so ``"2"`` and ``2``
    resolve alike. Unknown or missing refs resolve to ``UNCATEGORIZED``.
    """

    def resolve(item: Any) -> str:
        return resolve_ref(lookup, field_value(item, key))

    return resolve


def resolve_ref(lookup: Mapping[Any, str], ref: Any) -> str:
    if ref is None:
        return UNCATEGORIZED
    if ref in lookup:
        return lookup[ref]
    try:
        as_int = int(ref)
    except (TypeError, ValueError):
        as_int = None
    if as_int is not None and as_int in lookup:
        return lookup[as_int]
    return lookup.get(str(ref), UNCATEGORIZED)


class ExpandedGroupsService:
    """Persisted set of expanded group labels for one grouped view."""

    def __init__(self, store: LocalStateStore | None = None, storage_key: str | None = None):
        self._store = store
        self._storage_key = storage_key
        self._labels: FrozenSet[str] = self._restore()

    def _restore(self) -> FrozenSet[str]:
        if self._store is None or not self._storage_key:
            return frozenset()
        raw = self._store.get(self._storage_key, [])
        if not isinstance(raw, list):
            log.warning("Ignoring invalid expanded groups for %s: %r", self._storage_key, raw)
            return frozenset()
        return frozenset(str(label) for label in raw)

    def _persist(self) -> None:
        if self._store is not None and self._storage_key:
            self._store.set(self._storage_key, sorted(self._labels))

    @property
    def labels(self) -> FrozenSet[str]:
        return self._labels

    def is_expanded(self, label: str) -> bool:
        return label in self._labels

    def toggle(self, labels: str | Iterable[str]) -> FrozenSet[str]:
        if isinstance(labels, str):
            labels = [labels]
        self._labels = toggle_labels(self._labels, labels)
        self._persist()
        return self._labels

    def set_labels(self, labels: Iterable[str]) -> None:
        self._labels = frozenset(labels)
        self._persist()
