import asyncio

import pytest

from console.errors import PersistenceError
from console.repositories import InMemoryGateway, PersistenceGateway
from domain.models import EntityType


def test_memory_gateway_satisfies_protocol():
    assert isinstance(InMemoryGateway(), PersistenceGateway)


def test_create_assigns_ids_after_seeded_ones():
    gw = InMemoryGateway({EntityType.APP: [{"id": 5, "name": "Seeded"}]})
    created = asyncio.run(gw.create(EntityType.APP, {"id": 1, "name": "New"}))
    assert created["id"] > 5
    assert created["name"] == "New"
    names = [r["name"] for r in asyncio.run(gw.list(EntityType.APP))]
    assert names == ["Seeded", "New"]


def test_update_and_delete():
    gw = InMemoryGateway({EntityType.USER: [{"id": 1, "name": "Ann"}]})
    updated = asyncio.run(gw.update(EntityType.USER, 1, {"name": "Anna", "id": 9}))
    assert updated == {"id": 1, "name": "Anna"}
    assert asyncio.run(gw.delete(EntityType.USER, 1)) is True
    assert asyncio.run(gw.delete(EntityType.USER, 1)) is False
    with pytest.raises(PersistenceError):
        asyncio.run(gw.update(EntityType.USER, 1, {"name": "x"}))


def test_list_returns_copies():
    gw = InMemoryGateway({EntityType.CATEGORY: [{"id": 1, "name": "Finance"}]})
    rows = asyncio.run(gw.list(EntityType.CATEGORY))
    rows[0]["name"] = "changed"
    assert asyncio.run(gw.list(EntityType.CATEGORY))[0]["name"] == "Finance"


def test_fail_on_specific_id():
    gw = InMemoryGateway({EntityType.APP: [{"id": 1}, {"id": 2}]})
    gw.fail_on("delete", 2)
    assert asyncio.run(gw.delete(EntityType.APP, 1))
    with pytest.raises(PersistenceError) as exc:
        asyncio.run(gw.delete(EntityType.APP, 2))
    assert exc.value.operation == "delete"
    assert ("delete", EntityType.APP, 2) in gw.calls
