"""Console bootstrap.

Builds everything a console session needs and hands it back in one context
object, wiring collaborators explicitly instead of through a global
registry:

 - the local state store (sort / expansion / page / view-mode persistence)
 - the persistence gateway (REST `ApiClient` unless one is injected)
 - a fresh EventBus and a LoggingService attached to the root logger
 - the app catalog plus one `CollectionView` per remaining entity type

The bootstrap performs no I/O besides reading the local state file; call
``await ctx.refresh_all()`` to load collections.
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from config import settings
from core.api_client import ApiClient
from core.local_store import LocalStateStore
from domain.models import EntityType
from console.repositories.protocols import PersistenceGateway
from console.services.comparators import numeric_comparator
from console.services.event_bus import EventBus
from console.services.logging_service import LoggingService
from console.viewmodels.app_catalog import AppCatalog
from console.viewmodels.collection_view import CollectionView

__all__ = ["ConsoleContext", "create_console", "parse_api_token"]

log = logging.getLogger(__name__)


@dataclass
class ConsoleContext:
    """References created during bootstrap.

    Attributes
    ----------
    store: Local key-value store shared by every view
    gateway: Persistence collaborator used by every view
    event_bus: Bus the views publish their change notifications on
    logging_service: Ring buffer of recent log records
    catalog: Apps (list / grouped by category) and categories
    views: Collection views keyed by entity type, catalog views included
    started_at / duration_s: Bootstrap timing
    """

    store: LocalStateStore
    gateway: PersistenceGateway
    event_bus: EventBus
    logging_service: LoggingService
    catalog: AppCatalog
    views: Dict[EntityType, CollectionView]
    started_at: float
    duration_s: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def view(self, entity_type: EntityType | str) -> CollectionView:
        return self.views[EntityType(entity_type)]

    async def refresh_all(self) -> None:
        # categories first: app grouping resolves through them
        await self.catalog.refresh()
        for entity_type, view in self.views.items():
            if entity_type in (EntityType.APP, EntityType.CATEGORY):
                continue
            await view.refresh()

    async def aclose(self) -> None:
        self.logging_service.detach_root()
        close = getattr(self.gateway, "aclose", None)
        if close is not None and self.metadata.get("owns_gateway"):
            await close()


def parse_api_token(argv: list[str] | None = None) -> Optional[str]:
    """Parse ``--token <value>`` (or ``--token=<value>``) from argv."""
    args = argv if argv is not None else sys.argv[1:]
    for i, arg in enumerate(args):
        if arg.startswith("--token="):
            return arg.split("=", 1)[1] or None
        if arg == "--token" and i + 1 < len(args):
            return args[i + 1]
    return None


def create_console(
    *,
    gateway: PersistenceGateway | None = None,
    data_dir: str | None = None,
    api_url: str | None = None,
    token: str | None = None,
    page_size: int | None = None,
    log_capacity: int = 500,
) -> ConsoleContext:
    """Create a console session context.

    Parameters
    ----------
    gateway: Persistence collaborator; defaults to an `ApiClient` for ``api_url``.
    data_dir: Directory of the local state file (default ``settings.DATA_DIR``).
    api_url / token: Passed to the default `ApiClient`.
    page_size: Page size for every view (default ``settings.DEFAULT_PAGE_SIZE``).
    log_capacity: Ring buffer size of the logging service.
    """
    started = time.perf_counter()
    store = LocalStateStore(data_dir)
    owns_gateway = gateway is None
    if gateway is None:
        gateway = ApiClient(api_url, token=token)
    bus = EventBus()
    logging_service = LoggingService(log_capacity, event_bus=bus)
    logging_service.attach_root()

    catalog = AppCatalog(gateway, store=store, event_bus=bus, page_size=page_size)
    views: Dict[EntityType, CollectionView] = {
        EntityType.APP: catalog.apps,
        EntityType.CATEGORY: catalog.categories,
    }

    def make(entity_type: EntityType, **kwargs: Any) -> None:
        views[entity_type] = CollectionView(
            entity_type, gateway, store=store, event_bus=bus, page_size=page_size, **kwargs
        )

    make(EntityType.CONTACT)
    make(EntityType.USER)
    make(
        EntityType.SUBSCRIPTION,
        comparators={"product_price": numeric_comparator("product_price")},
    )
    make(
        EntityType.PROFESSIONAL,
        comparators={
            "rating": numeric_comparator("rating"),
            "review_count": numeric_comparator("review_count"),
        },
    )
    make(
        EntityType.PROPERTY,
        comparators={
            "year_built": numeric_comparator("year_built"),
            "sq_ft_total": numeric_comparator("sq_ft_total"),
        },
    )

    duration = time.perf_counter() - started
    log.info("console bootstrapped with %d views in %.3fs", len(views), duration)
    return ConsoleContext(
        store=store,
        gateway=gateway,
        event_bus=bus,
        logging_service=logging_service,
        catalog=catalog,
        views=views,
        started_at=started,
        duration_s=duration,
        metadata={
            "owns_gateway": owns_gateway,
            "data_dir": store.base_dir,
            "page_size": page_size or settings.DEFAULT_PAGE_SIZE,
        },
    )
