import asyncio

import pytest

from console.errors import BulkOperationError, PersistenceError
from console.repositories.memory_impl import InMemoryGateway
from console.services.event_bus import EventBus, ViewEvent
from console.services.table_sort import ASC, DESC, SortConfig
from console.viewmodels.collection_view import GROUP_MODE, CollectionView
from domain.models import App, EntityType


def _names(items):
    return [i.name for i in items]


def _view(gateway, store, **kwargs):
    view = CollectionView(EntityType.APP, gateway, store=store, **kwargs)
    asyncio.run(view.refresh())
    return view


class FlakyCreateGateway(InMemoryGateway):
    """Fails the n-th create call (1-based)."""

    def __init__(self, fail_at, seed=None):
        super().__init__(seed)
        self.fail_at = fail_at
        self.creates = 0

    async def create(self, entity_type, attributes):
        self.creates += 1
        if self.creates == self.fail_at:
            raise PersistenceError(entity_type.value, "create", "quota exceeded")
        return await super().create(entity_type, attributes)


def test_refresh_loads_and_sorts_by_display_field(gateway, store):
    view = _view(gateway, store)
    assert view.sort_config == SortConfig("name", ASC)
    assert _names(view.current_view_items) == ["Budget", "charts", "Ledger", "Orphan"]
    assert all(isinstance(i, App) for i in view.items)


def test_handle_sort_cycles_and_persists(gateway, store):
    view = _view(gateway, store)
    assert view.handle_sort("name") == SortConfig("name", DESC)
    assert _names(view.current_view_items) == ["Orphan", "Ledger", "charts", "Budget"]
    assert view.handle_sort("name") == SortConfig.unsorted()
    assert _names(view.current_view_items) == ["Ledger", "charts", "Budget", "Orphan"]
    assert view.handle_sort("url") == SortConfig("url", ASC)
    restored = CollectionView(EntityType.APP, gateway, store=store)
    assert restored.sort_config == SortConfig("url", ASC)


def test_sort_change_is_published(gateway, store):
    bus = EventBus()
    seen = []
    bus.subscribe(ViewEvent.SORT_CHANGED, lambda e: seen.append(e.payload))
    view = _view(gateway, store, event_bus=bus)
    view.handle_sort("url")
    assert seen == [{"view": "apps", "key": "url", "direction": "asc"}]


def test_group_mode_requires_a_resolver(gateway, store):
    view = _view(gateway, store)
    assert not view.supports_grouping
    with pytest.raises(ValueError):
        view.set_view_mode(GROUP_MODE)
    with pytest.raises(ValueError):
        view.set_view_mode("tiles")
    assert view.groups() == {}


def test_out_of_range_page_resets_to_first(store):
    gw = InMemoryGateway({EntityType.CONTACT: [{"name": f"C{i:02d}"} for i in range(12)]})
    view = CollectionView(EntityType.CONTACT, gw, store=store, page_size=10)
    asyncio.run(view.refresh())
    assert view.page_count == 2
    assert view.set_page(2) == 2
    assert [c.name for c in view.current_page_items()] == ["C10", "C11"]
    view.set_page(5)
    assert view.page == 1
    assert len(view.current_page_items()) == 10
    assert store.get("contacts-current-page") == 1


def test_page_resets_when_collection_shrinks(store):
    gw = InMemoryGateway({EntityType.USER: [{"id": i, "name": f"U{i}"} for i in range(1, 4)]})
    view = CollectionView(EntityType.USER, gw, store=store, page_size=2)
    asyncio.run(view.refresh())
    view.set_page(2)
    asyncio.run(view.delete(3))
    assert view.page == 1


def test_selection_toggle_and_select_all_visible(gateway, store):
    view = _view(gateway, store)
    view.toggle_selection(10)
    assert view.selected_ids == {10}
    view.select_all_visible()
    assert view.selected_ids == {10, 11, 12, 13}
    view.select_all_visible()
    assert view.selected_ids == frozenset()
    view.toggle_selection([10, 11], True)
    view.clear_selection()
    assert len(view.selection) == 0


def test_create_update_delete_keep_collection_in_sync(gateway, store):
    view = _view(gateway, store)
    created = asyncio.run(view.create({"name": "Atlas", "url": "atlas"}))
    assert view.find(created.id) is created
    assert _names(view.current_view_items)[0] == "Atlas"
    updated = asyncio.run(view.update(created.id, {"name": "Zebra"}))
    assert view.find(created.id) is updated
    assert _names(view.current_view_items)[-1] == "Zebra"
    view.toggle_selection(created.id)
    assert asyncio.run(view.delete(created.id)) is True
    assert view.find(created.id) is None
    assert created.id not in view.selected_ids


def test_failed_create_is_reraised_and_leaves_collection(gateway, store):
    view = _view(gateway, store)
    gateway.fail_on("create")
    with pytest.raises(PersistenceError):
        asyncio.run(view.create({"name": "Nope"}))
    assert len(view.items) == 4


def test_foreign_gateway_errors_become_persistence_errors(store):
    class Broken(InMemoryGateway):
        async def list(self, entity_type):
            raise ConnectionError("socket closed")

    view = CollectionView(EntityType.APP, Broken(), store=store)
    with pytest.raises(PersistenceError) as exc:
        asyncio.run(view.refresh())
    assert exc.value.operation == "list"
    assert isinstance(exc.value.__cause__, ConnectionError)


def test_duplicate_one_names_copy_and_reports_position(gateway, store):
    view = _view(gateway, store)
    copy = asyncio.run(view.duplicate_one(view.find(10)))
    assert copy.name == "Ledger (Copy)"
    assert copy.url == "ledger-copy"
    assert copy.category_id == 1
    assert copy.id not in (10, 11, 12, 13)
    assert copy.view_position == 4
    again = asyncio.run(view.duplicate_one(copy))
    assert again.name == "Ledger (Copy) (Copy)"
    assert again.url == "ledger-copy-2"


def test_duplicate_many_reserves_pending_values(store):
    gw = InMemoryGateway(
        {EntityType.APP: [{"id": i, "name": "Item", "url": "item"} for i in (1, 2, 3)]}
    )
    view = CollectionView(EntityType.APP, gw, store=store)
    asyncio.run(view.refresh())
    copies = asyncio.run(view.duplicate_many([1, 2, 3]))
    assert [c.name for c in copies] == ["Item (Copy)", "Item (Copy 2)", "Item (Copy 3)"]
    assert [c.url for c in copies] == ["item-copy", "item-copy-2", "item-copy-3"]
    assert len(view.items) == 6


def test_duplicate_many_halts_and_keeps_earlier_copies(store):
    gw = FlakyCreateGateway(
        2, {EntityType.APP: [{"id": i, "name": f"A{i}", "url": f"a{i}"} for i in (1, 2, 3)]}
    )
    bus = EventBus()
    summaries = []
    bus.subscribe(ViewEvent.BULK_OPERATION_COMPLETED, lambda e: summaries.append(e.payload))
    view = CollectionView(EntityType.APP, gw, store=store, event_bus=bus)
    asyncio.run(view.refresh())
    with pytest.raises(BulkOperationError) as exc:
        asyncio.run(view.duplicate_many([1, 2, 3]))
    err = exc.value
    assert err.failed_ids == [2]
    assert [c.name for c in err.completed] == ["A1 (Copy)"]
    assert gw.creates == 2  # id 3 never attempted
    assert "A1 (Copy)" in _names(view.items)
    assert summaries[-1] == {"view": "apps", "operation": "duplicate", "succeeded": 1, "failed": 1}


def test_delete_many_continues_past_failure(store):
    gw = InMemoryGateway({EntityType.APP: [{"id": i, "name": f"A{i}"} for i in (1, 2, 3)]})
    gw.fail_on("delete", 2)
    view = CollectionView(EntityType.APP, gw, store=store)
    asyncio.run(view.refresh())
    view.toggle_selection([1, 2, 3])
    with pytest.raises(BulkOperationError) as exc:
        asyncio.run(view.delete_many([1, 2, 3]))
    assert exc.value.completed == [1, 3]
    assert exc.value.failed_ids == [2]
    assert [i.id for i in view.current_view_items] == [2]
    assert view.selected_ids == {2}


def test_delete_many_counts_falsy_result_as_failure(store):
    gw = InMemoryGateway({EntityType.APP: [{"id": 1, "name": "A1"}]})
    view = CollectionView(EntityType.APP, gw, store=store)
    asyncio.run(view.refresh())
    with pytest.raises(BulkOperationError) as exc:
        asyncio.run(view.delete_many([1, 42]))
    assert exc.value.completed == [1]
    assert exc.value.failed_ids == [42]


def test_delete_many_returns_deleted_ids(gateway, store):
    view = _view(gateway, store)
    assert asyncio.run(view.delete_many([10, 11])) == [10, 11]
    assert _names(view.current_view_items) == ["Budget", "Orphan"]
