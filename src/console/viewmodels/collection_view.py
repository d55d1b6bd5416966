"""Collection view composer.

One `CollectionView` is constructed per entity type and passed to whatever
renders or acts on that list. It owns the loaded entities and all view
state: sort config (one per view mode), expanded groups, current page,
view mode and selection. It composes them into the view the UI consumes:

    entities -> sort -> group + expanded filter (group mode) -> page slice

Sort configs, expanded groups, the current page and the view mode are
persisted through the local store; the selection lives for the session.

Calls into the persistence collaborator are the only awaits. Bulk operations
process one id at a time:

- ``duplicate_many`` stops at the first failure (earlier copies remain);
- ``delete_many`` attempts every id and reports all failures together.

Both raise `BulkOperationError` once when anything failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from core.local_store import LocalStateStore
from domain.models import ENTITY_CLASSES, Entity, EntityType, entity_from_record
from console.errors import BulkOperationError, PersistenceError
from console.repositories.protocols import EntityId, PersistenceGateway, Record
from console.services.comparators import Comparator
from console.services.event_bus import EventBus, ViewEvent
from console.services.grouping import ExpandedGroupsService, group_items, visible_items
from console.services.pagination import PageStateService, page_count
from console.services.selection import Selection
from console.services.table_sort import ASC, SortConfig, TableSortService
from console.services.unique_identifiers import PendingValues, UniqueIdentifierGenerator

__all__ = ["LIST_MODE", "GROUP_MODE", "ViewStorageKeys", "CollectionView"]

log = logging.getLogger(__name__)

LIST_MODE = "list"
GROUP_MODE = "group"


@dataclass(frozen=True)
class ViewStorageKeys:
    list_sort: str
    group_sort: str
    view_mode: str
    expanded_groups: str
    current_page: str

    @classmethod
    def for_view(cls, name: str, **overrides: str) -> "ViewStorageKeys":
        keys = cls(
            list_sort=f"{name}-list-sort",
            group_sort=f"{name}-group-sort",
            view_mode=f"{name}-view-mode",
            expanded_groups=f"{name}-expanded-groups",
            current_page=f"{name}-current-page",
        )
        return replace(keys, **overrides)


class CollectionView:
    """View state and CRUD for one entity collection.

    Parameters
    ----------
    entity_type: EntityType
        Type of the managed entities.
    gateway: PersistenceGateway
        Collaborator used for create/update/delete/list.
    store: LocalStateStore | None
        Persistence for view state; ``None`` keeps everything in memory.
    name: str | None
        View name used for storage keys and event payloads (default: the
        collection name, e.g. ``"apps"``).
    sort_key / sort_direction:
        Default list-mode sort (defaults to the entity display field, asc).
    comparators:
        Custom comparators for list mode.
    group_resolver:
        item -> group label. Enables group mode when given.
    group_sort_key / group_comparators:
        Default sort key and comparators for group mode.
    """

    def __init__(
        self,
        entity_type: EntityType,
        gateway: PersistenceGateway,
        *,
        store: LocalStateStore | None = None,
        name: str | None = None,
        storage_keys: ViewStorageKeys | None = None,
        event_bus: EventBus | None = None,
        sort_key: str | None = None,
        sort_direction: str | None = ASC,
        comparators: Mapping[str, Comparator] | None = None,
        group_resolver: Callable[[Any], str] | None = None,
        group_sort_key: str | None = None,
        group_comparators: Mapping[str, Comparator] | None = None,
        page_size: int | None = None,
        generator: UniqueIdentifierGenerator | None = None,
    ):
        self.entity_type = EntityType(entity_type)
        self.entity_class = ENTITY_CLASSES[self.entity_type]
        self.name = name or self.entity_type.collection
        self.gateway = gateway
        self._bus = event_bus
        keys = storage_keys or ViewStorageKeys.for_view(self.name)
        self.storage_keys = keys
        self._store = store

        display_field = self.entity_class.DISPLAY_FIELD
        self._list_sort = TableSortService(
            store,
            keys.list_sort,
            default_key=sort_key or display_field,
            default_direction=sort_direction,
            comparators=comparators,
        )
        self._group_resolver = group_resolver
        self._group_sort: Optional[TableSortService] = None
        if group_resolver is not None:
            self._group_sort = TableSortService(
                store,
                keys.group_sort,
                default_key=group_sort_key or display_field,
                default_direction=ASC,
                comparators=group_comparators,
            )
        self._expanded = ExpandedGroupsService(store, keys.expanded_groups)
        self._pages = PageStateService(store, keys.current_page, page_size=page_size)
        self._view_mode = self._restore_view_mode()
        self._selection = Selection()
        self._items: List[Entity] = []
        self.version = 0
        self._change_listeners: List[Callable[["CollectionView"], None]] = []
        self.generator = generator or UniqueIdentifierGenerator(
            self.entity_type.value, name_field=display_field
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _restore_view_mode(self) -> str:
        mode = self._store.get(self.storage_keys.view_mode, LIST_MODE) if self._store else LIST_MODE
        if mode == GROUP_MODE and self._group_resolver is not None:
            return GROUP_MODE
        return LIST_MODE

    def _emit(self, event: ViewEvent, **payload: Any) -> None:
        if self._bus is not None:
            self._bus.publish(event, {"view": self.name, **payload})

    def _collection_changed(self) -> None:
        self.version += 1
        self._pages.clamp(len(self.current_view_items))
        self._emit(ViewEvent.COLLECTION_CHANGED, count=len(self._items))
        for listener in list(self._change_listeners):
            listener(self)

    def _to_entity(self, record: Record | Entity) -> Entity:
        if isinstance(record, Entity):
            return record
        return entity_from_record(self.entity_type, record)

    async def _call(self, operation: str, call: Callable[[], Any]) -> Any:
        try:
            return await call()
        except PersistenceError:
            log.error("%s %s failed", operation, self.entity_type.value, exc_info=True)
            raise
        except Exception as exc:
            log.error("%s %s failed", operation, self.entity_type.value, exc_info=True)
            raise PersistenceError(self.entity_type.value, operation, str(exc)) from exc

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    @property
    def items(self) -> List[Entity]:
        return list(self._items)

    def find(self, entity_id: EntityId) -> Optional[Entity]:
        for item in self._items:
            if item.id == entity_id:
                return item
        return None

    def add_change_listener(self, listener: Callable[["CollectionView"], None]) -> None:
        """Call ``listener(view)`` after every change to the loaded collection."""
        self._change_listeners.append(listener)

    def set_items(self, records: Iterable[Record | Entity]) -> None:
        self._items = [self._to_entity(r) for r in records]
        self._collection_changed()

    def label_lookup(self, field: str | None = None) -> Dict[EntityId, str]:
        """id -> label map, e.g. category id -> category name."""
        field = field or self.entity_class.DISPLAY_FIELD
        return {item.id: str(getattr(item, field, "") or "") for item in self._items}

    async def refresh(self) -> List[Entity]:
        records = await self._call("list", lambda: self.gateway.list(self.entity_type))
        self.set_items(records)
        log.debug("loaded %d %s", len(self._items), self.name)
        return self.items

    async def create(self, attributes: Mapping[str, Any]) -> Entity:
        record = await self._call(
            "create", lambda: self.gateway.create(self.entity_type, dict(attributes))
        )
        entity = self._to_entity(record)
        self._items.append(entity)
        self._collection_changed()
        return entity

    async def update(self, entity_id: EntityId, attributes: Mapping[str, Any]) -> Entity:
        record = await self._call(
            "update", lambda: self.gateway.update(self.entity_type, entity_id, dict(attributes))
        )
        entity = self._to_entity(record)
        self._items = [entity if item.id == entity_id else item for item in self._items]
        self._collection_changed()
        return entity

    async def delete(self, entity_id: EntityId) -> bool:
        deleted = await self._call("delete", lambda: self.gateway.delete(self.entity_type, entity_id))
        if deleted:
            self._forget([entity_id])
        return bool(deleted)

    def _forget(self, ids: List[EntityId]) -> None:
        gone = set(ids)
        self._items = [item for item in self._items if item.id not in gone]
        if any(i in self._selection for i in gone):
            self._selection = self._selection.toggle(list(gone), False)
            self._emit(ViewEvent.SELECTION_CHANGED, selected=len(self._selection))
        self._collection_changed()

    # ------------------------------------------------------------------
    # View mode and sorting
    # ------------------------------------------------------------------
    @property
    def view_mode(self) -> str:
        return self._view_mode

    @property
    def supports_grouping(self) -> bool:
        return self._group_resolver is not None

    def set_view_mode(self, mode: str) -> None:
        if mode not in (LIST_MODE, GROUP_MODE):
            raise ValueError(f"unknown view mode {mode!r}")
        if mode == GROUP_MODE and not self.supports_grouping:
            raise ValueError(f"view {self.name!r} has no grouping")
        self._view_mode = mode
        if self._store is not None:
            self._store.set(self.storage_keys.view_mode, mode)
        self._pages.clamp(len(self.current_view_items))
        self._emit(ViewEvent.VIEW_MODE_CHANGED, mode=mode)

    def _active_sort(self) -> TableSortService:
        if self._view_mode == GROUP_MODE and self._group_sort is not None:
            return self._group_sort
        return self._list_sort

    @property
    def sort_config(self) -> SortConfig:
        return self._active_sort().config

    def handle_sort(self, key: str) -> SortConfig:
        config = self._active_sort().handle_sort(key)
        self._emit(ViewEvent.SORT_CHANGED, key=config.key, direction=config.direction)
        return config

    def sorted_items(self) -> List[Entity]:
        return self._active_sort().sort(self._items)

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------
    def groups(self) -> Dict[str, List[Entity]]:
        """Label -> members for the group-mode ordering (empty without a resolver)."""
        if self._group_resolver is None or self._group_sort is None:
            return {}
        return group_items(self._group_sort.sort(self._items), self._group_resolver)

    @property
    def expanded_groups(self) -> frozenset[str]:
        return self._expanded.labels

    def toggle_group_expansion(self, labels: str | Iterable[str]) -> frozenset[str]:
        expanded = self._expanded.toggle(labels)
        self._pages.clamp(len(self.current_view_items))
        self._emit(ViewEvent.GROUPS_TOGGLED, expanded=sorted(expanded))
        return expanded

    # ------------------------------------------------------------------
    # Current view and paging
    # ------------------------------------------------------------------
    @property
    def current_view_items(self) -> List[Entity]:
        if self._view_mode == GROUP_MODE and self._group_resolver is not None:
            return visible_items(self.groups(), self._expanded.labels)
        return self.sorted_items()

    def position_of(self, entity_id: EntityId) -> Optional[int]:
        for index, item in enumerate(self.current_view_items, start=1):
            if item.id == entity_id:
                return index
        return None

    @property
    def page(self) -> int:
        return self._pages.page

    @property
    def page_size(self) -> int:
        return self._pages.page_size

    @property
    def page_count(self) -> int:
        return page_count(len(self.current_view_items), self._pages.page_size)

    def set_page(self, page: int) -> int:
        self._pages.set_page(page)
        self._pages.clamp(len(self.current_view_items))
        self._emit(ViewEvent.PAGE_CHANGED, page=self._pages.page)
        return self._pages.page

    def set_page_size(self, page_size: int) -> None:
        self._pages.set_page_size(page_size)
        self._pages.clamp(len(self.current_view_items))
        self._emit(ViewEvent.PAGE_CHANGED, page=self._pages.page, page_size=self._pages.page_size)

    def revalidate_page(self) -> bool:
        """Reset to page 1 if the current page no longer exists. True if reset."""
        reset = self._pages.clamp(len(self.current_view_items))
        if reset:
            self._emit(ViewEvent.PAGE_CHANGED, page=self._pages.page)
        return reset

    def current_page_items(self) -> List[Entity]:
        view = self.current_view_items
        self._pages.clamp(len(view))
        return self._pages.slice(view)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def selected_ids(self) -> frozenset:
        return self._selection.ids

    @property
    def selection(self) -> Selection:
        return self._selection

    def toggle_selection(self, ids: Any, force: Optional[bool] = None) -> Selection:
        self._selection = self._selection.toggle(ids, force)
        self._emit(ViewEvent.SELECTION_CHANGED, selected=len(self._selection))
        return self._selection

    def select_all_visible(self, force: Optional[bool] = None) -> Selection:
        """Header checkbox: toggle every item of the current view."""
        return self.toggle_selection([item.id for item in self.current_view_items], force)

    def clear_selection(self) -> None:
        self._selection = self._selection.clear()
        self._emit(ViewEvent.SELECTION_CHANGED, selected=0)

    # ------------------------------------------------------------------
    # Duplication and bulk operations
    # ------------------------------------------------------------------
    def _copy_attributes(self, entity: Entity, pending: PendingValues | None) -> Dict[str, Any]:
        attributes = entity.to_attributes()
        gen = self.generator
        name = gen.unique_name(entity.display_name, self._items, pending)
        attributes[gen.name_field] = name
        url = None
        if gen.url_field in attributes:
            url = gen.unique_url(str(attributes.get(gen.url_field) or ""), self._items, pending)
            attributes[gen.url_field] = url
        if pending is not None:
            pending.reserve(name, url)
        return attributes

    async def duplicate_one(
        self, entity: Entity, *, pending: PendingValues | None = None
    ) -> Entity:
        """Create a copy with a unique name (and url) and place it in the view.

        The returned entity's ``view_position`` is its 1-based position in the
        current view after creation, or ``None`` when it is not visible (e.g.
        its group is collapsed).
        """
        created = await self.create(self._copy_attributes(entity, pending))
        created.view_position = self.position_of(created.id)
        log.debug("duplicated %s %s as %s", self.entity_type.value, entity.id, created.id)
        return created

    async def duplicate_many(self, ids: Iterable[EntityId]) -> List[Entity]:
        pending = PendingValues()
        created: List[Entity] = []
        for entity_id in ids:
            source = self.find(entity_id)
            if source is None:
                log.debug("skip duplicate of unknown %s %s", self.entity_type.value, entity_id)
                continue
            try:
                created.append(await self.duplicate_one(source, pending=pending))
            except PersistenceError as exc:
                log.error(
                    "bulk duplicate of %s stopped at %s after %d copies",
                    self.name, entity_id, len(created),
                )
                self._emit(
                    ViewEvent.BULK_OPERATION_COMPLETED,
                    operation="duplicate", succeeded=len(created), failed=1,
                )
                raise BulkOperationError("duplicate", created, [(entity_id, exc)]) from exc
        log.info("bulk duplicate of %s created %d copies", self.name, len(created))
        self._emit(
            ViewEvent.BULK_OPERATION_COMPLETED,
            operation="duplicate", succeeded=len(created), failed=0,
        )
        return created

    async def delete_many(self, ids: Iterable[EntityId]) -> List[EntityId]:
        deleted: List[EntityId] = []
        failures: List[tuple[EntityId, BaseException]] = []
        for entity_id in ids:
            try:
                ok = await self._call(
                    "delete", lambda: self.gateway.delete(self.entity_type, entity_id)
                )
            except PersistenceError as exc:
                failures.append((entity_id, exc))
                continue
            if ok:
                deleted.append(entity_id)
            else:
                failures.append(
                    (entity_id, PersistenceError(self.entity_type.value, "delete", "not deleted"))
                )
        if deleted:
            self._forget(deleted)
        log.info(
            "bulk delete of %s: %d deleted, %d failed", self.name, len(deleted), len(failures)
        )
        self._emit(
            ViewEvent.BULK_OPERATION_COMPLETED,
            operation="delete", succeeded=len(deleted), failed=len(failures),
        )
        if failures:
            raise BulkOperationError("delete", deleted, failures) from failures[0][1]
        return deleted
