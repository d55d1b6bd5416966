"""Service layer exports.

Responsibilities:
 - Pure view engines (sorting, grouping, selection, pagination, unique names)
 - EventBus publish/subscribe core and the logging ring buffer
"""

from .event_bus import EventBus, ViewEvent  # noqa: F401
from .logging_service import LoggingService, LogEntry  # noqa: F401
from .selection import Selection  # noqa: F401
from .table_sort import ASC, DESC, SortConfig, TableSortService, sort_items  # noqa: F401
from .pagination import PageStateService, page_count, paginate  # noqa: F401
from .grouping import ExpandedGroupsService, group_items, visible_items  # noqa: F401
from .unique_identifiers import PendingValues, UniqueIdentifierGenerator  # noqa: F401

__all__ = [
    "EventBus",
    "ViewEvent",
    "LoggingService",
    "LogEntry",
    "Selection",
    "ASC",
    "DESC",
    "SortConfig",
    "TableSortService",
    "sort_items",
    "PageStateService",
    "page_count",
    "paginate",
    "ExpandedGroupsService",
    "group_items",
    "visible_items",
    "PendingValues",
    "UniqueIdentifierGenerator",
]
