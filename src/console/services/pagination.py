"""Pagination slicer and persisted page state.

Pages are 1-based. The slicer never raises for out-of-range pages and
returns an empty slice instead; `PageStateService.clamp` is where an
out-of-range page is detected and reset to page 1.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, TypeVar

from config import settings
from core.local_store import LocalStateStore

__all__ = ["paginate", "page_count", "PageStateService"]

log = logging.getLogger(__name__)

T = TypeVar("T")


def paginate(items: Sequence[T], page: int, page_size: int) -> List[T]:
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


def page_count(total: int, page_size: int) -> int:
    """Number of pages for ``total`` items; an empty list still has one page."""
    if page_size < 1:
        return 1
    return max(1, math.ceil(total / page_size))


class PageStateService:
    """Current page number and page size for one list, persisted under ``storage_key``."""

    def __init__(
        self,
        store: LocalStateStore | None = None,
        storage_key: str | None = None,
        *,
        page_size: int | None = None,
    ):
        self._store = store
        self._storage_key = storage_key
        self.page_size = page_size or settings.DEFAULT_PAGE_SIZE
        self._page = self._restore()

    def _restore(self) -> int:
        if self._store is None or not self._storage_key:
            return 1
        raw = self._store.get(self._storage_key, 1)
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
            return 1
        return raw

    def _persist(self) -> None:
        if self._store is not None and self._storage_key:
            self._store.set(self._storage_key, self._page)

    @property
    def page(self) -> int:
        return self._page

    def set_page(self, page: int) -> None:
        self._page = page if page >= 1 else 1
        self._persist()

    def set_page_size(self, page_size: int) -> None:
        """Change the page size; callers re-validate the page with ``clamp`` afterwards."""
        self.page_size = max(1, page_size)

    def clamp(self, total: int) -> bool:
        """Reset to page 1 when the current page lies beyond ``total`` items. True if reset."""
        if self._page > page_count(total, self.page_size):
            log.debug("page %s out of range for %s items; reset to 1", self._page, total)
            self.set_page(1)
            return True
        return False

    def slice(self, items: Sequence[T]) -> List[T]:
        return paginate(items, self._page, self.page_size)
