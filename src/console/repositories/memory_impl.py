"""In-memory persistence gateway.

Stores records per entity type in insertion order and assigns incrementing
integer IDs. Used by tests and offline sessions; specific operations can be
made to fail to exercise partial-batch behaviour.
"""

from __future__ import annotations

import copy
from itertools import count
from typing import Dict, Iterable, List, Set, Tuple

from console.errors import PersistenceError
from .protocols import EntityId, EntityType, Record

__all__ = ["InMemoryGateway"]


class InMemoryGateway:
    def __init__(self, seed: Dict[EntityType, Iterable[Record]] | None = None):
        self._stores: Dict[EntityType, Dict[EntityId, Record]] = {}
        self._ids = count(1)
        self._failures: Set[Tuple[str, EntityId | None]] = set()
        self.calls: List[Tuple[str, EntityType, EntityId | None]] = []
        for entity_type, records in (seed or {}).items():
            for record in records:
                self._insert(entity_type, dict(record))

    def _store(self, entity_type: EntityType) -> Dict[EntityId, Record]:
        return self._stores.setdefault(entity_type, {})

    def _insert(self, entity_type: EntityType, record: Record) -> Record:
        if record.get("id") is None:
            record["id"] = next(self._ids)
        else:
            # keep generated ids clear of seeded integer ids
            if isinstance(record["id"], int):
                self._ids = count(max(record["id"] + 1, next(self._ids)))
        self._store(entity_type)[record["id"]] = record
        return record

    def fail_on(self, operation: str, entity_id: EntityId | None = None) -> None:
        """Make ``operation`` fail, for one ``entity_id`` or (``None``) for every call."""
        self._failures.add((operation, entity_id))

    def _check(self, operation: str, entity_type: EntityType, entity_id: EntityId | None) -> None:
        self.calls.append((operation, entity_type, entity_id))
        if (operation, None) in self._failures or (operation, entity_id) in self._failures:
            raise PersistenceError(entity_type.value, operation, "simulated failure")

    async def create(self, entity_type: EntityType, attributes: Record) -> Record:
        self._check("create", entity_type, None)
        record = dict(attributes)
        record.pop("id", None)
        return copy.deepcopy(self._insert(entity_type, record))

    async def update(self, entity_type: EntityType, entity_id: EntityId, attributes: Record) -> Record:
        self._check("update", entity_type, entity_id)
        store = self._store(entity_type)
        if entity_id not in store:
            raise PersistenceError(entity_type.value, "update", f"no record with id {entity_id}")
        store[entity_id].update({k: v for k, v in attributes.items() if k != "id"})
        return copy.deepcopy(store[entity_id])

    async def delete(self, entity_type: EntityType, entity_id: EntityId) -> bool:
        self._check("delete", entity_type, entity_id)
        return self._store(entity_type).pop(entity_id, None) is not None

    async def list(self, entity_type: EntityType) -> List[Record]:
        self._check("list", entity_type, None)
        return [copy.deepcopy(r) for r in self._store(entity_type).values()]
