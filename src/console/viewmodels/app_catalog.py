"""App catalog: the apps list/group views plus the categories list.

Apps can be shown as a flat list (sorted by name by default) or grouped
under their category's name (sorted by category, then name). Both modes
keep their own persisted sort config. Category labels are looked up from
the categories view and cached until that collection changes.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

from core.local_store import LocalStateStore
from domain.models import EntityType
from console.repositories.protocols import PersistenceGateway
from console.services.comparators import field_value, lookup_comparator
from console.services.event_bus import EventBus
from console.services.grouping import resolve_ref
from .collection_view import CollectionView, ViewStorageKeys

__all__ = ["AppCatalog"]


class AppCatalog:
    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        store: LocalStateStore | None = None,
        event_bus: EventBus | None = None,
        page_size: int | None = None,
    ):
        self._labels_version = -1
        self._labels: Dict[Any, str] = {}
        self.categories = CollectionView(
            EntityType.CATEGORY,
            gateway,
            store=store,
            event_bus=event_bus,
            storage_keys=ViewStorageKeys.for_view("categories", list_sort="categories-sort"),
            page_size=page_size,
        )
        self.apps = CollectionView(
            EntityType.APP,
            gateway,
            store=store,
            event_bus=event_bus,
            storage_keys=ViewStorageKeys.for_view(
                "apps", expanded_groups="expanded-categories"
            ),
            sort_key="name",
            comparators={"category": lookup_comparator("category_id", self.category_name)},
            group_resolver=lambda app: self.category_name(field_value(app, "category_id")),
            group_sort_key="category",
            group_comparators={
                "category": lookup_comparator("category_id", self.category_name, then_by="name")
            },
            page_size=page_size,
        )
        # renamed or removed categories regroup the apps view
        self.categories.add_change_listener(lambda _view: self.apps.revalidate_page())

    def category_name(self, category_id: Any) -> str:
        if self._labels_version != self.categories.version:
            self._labels = self.categories.label_lookup("name")
            self._labels_version = self.categories.version
        return resolve_ref(self._labels, category_id)

    async def refresh(self) -> None:
        await self.categories.refresh()
        await self.apps.refresh()

    def apps_in_category(self, label: str) -> list:
        return list(self.apps.groups().get(label, []))

    def expand_all(self, labels: Iterable[str] | None = None) -> None:
        """Expand every category group (or the given labels) that is currently collapsed."""
        wanted = set(labels) if labels is not None else set(self.apps.groups())
        closed = wanted - set(self.apps.expanded_groups)
        if closed:
            self.apps.toggle_group_expansion(closed)
