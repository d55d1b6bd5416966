"""Selection engine.

A `Selection` is an immutable set of entity ids. ``toggle`` follows the
checkbox semantics of list views:

- one id: flip its membership;
- several ids, no ``force``: if all are selected, deselect them all,
  otherwise select the missing ones (the "select all / none" header box);
- several ids with ``force=True`` / ``False``: add / remove exactly those.

Unknown or stale ids are tolerated. Deleted entities are not pruned
automatically; callers remove them with ``toggle(ids, False)``.
"""

from __future__ import annotations

from typing import Any, FrozenSet, Iterable, Iterator, Optional

__all__ = ["Selection"]


class Selection:
    __slots__ = ("_ids",)

    def __init__(self, ids: Iterable[Any] = ()):
        self._ids: FrozenSet[Any] = frozenset(ids)

    def __contains__(self, entity_id: Any) -> bool:
        return entity_id in self._ids

    def __iter__(self) -> Iterator[Any]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Selection):
            return self._ids == other._ids
        if isinstance(other, (set, frozenset)):
            return self._ids == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._ids)

    def __repr__(self) -> str:  # pragma: no cover - debug aid
        return f"Selection({sorted(self._ids, key=str)!r})"

    @property
    def ids(self) -> FrozenSet[Any]:
        return self._ids

    def toggle(self, ids: Any, force: Optional[bool] = None) -> "Selection":
        if not isinstance(ids, (list, tuple, set, frozenset)):
            if force is True:
                return Selection(self._ids | {ids})
            if force is False:
                return Selection(self._ids - {ids})
            return Selection(self._ids ^ {ids})
        group = frozenset(ids)
        if force is True:
            return Selection(self._ids | group)
        if force is False:
            return Selection(self._ids - group)
        if group and group <= self._ids:
            return Selection(self._ids - group)
        return Selection(self._ids | group)

    def all_selected(self, ids: Iterable[Any]) -> bool:
        group = frozenset(ids)
        return bool(group) and group <= self._ids

    def clear(self) -> "Selection":
        return Selection()
