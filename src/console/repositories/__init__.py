"""Repository layer public exports.

Exposes the persistence collaborator Protocol and the in-memory gateway.
The HTTP-backed gateway lives in `core.api_client`.
"""

from .protocols import EntityId, EntityType, PersistenceGateway, Record
from .memory_impl import InMemoryGateway

__all__ = [
    "EntityId",
    "EntityType",
    "PersistenceGateway",
    "Record",
    "InMemoryGateway",
]
