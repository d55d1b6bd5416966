"""Persistence collaborator interface.

The console never stores entities itself. It talks to a gateway that
creates, updates, deletes and lists records per entity type (the REST API
in production, an in-memory double in tests). Records cross this boundary
as plain dicts; `domain.models` turns them into typed entities.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, runtime_checkable

from domain.models import EntityType

__all__ = ["EntityType", "EntityId", "Record", "PersistenceGateway"]

EntityId = Any  # int or str, assigned by the collaborator
Record = Dict[str, Any]


@runtime_checkable
class PersistenceGateway(Protocol):
    async def create(self, entity_type: EntityType, attributes: Record) -> Record:
        ...  # pragma: no cover

    async def update(self, entity_type: EntityType, entity_id: EntityId, attributes: Record) -> Record:
        ...  # pragma: no cover

    async def delete(self, entity_type: EntityType, entity_id: EntityId) -> bool:
        """Truthy when the entity is gone."""
        ...  # pragma: no cover

    async def list(self, entity_type: EntityType) -> List[Record]:
        ...  # pragma: no cover
