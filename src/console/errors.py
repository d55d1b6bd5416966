"""Error types surfaced by the console view layer.

Pure engines (sorting, grouping, selection, unique identifiers) never raise
these for bad data; only operations that call into the persistence
collaborator do.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

__all__ = [
    "ConsoleError",
    "PersistenceError",
    "BulkOperationError",
    "UniqueSearchExhaustedError",
]


class ConsoleError(RuntimeError):
    """Base class for console errors."""


class PersistenceError(ConsoleError):
    """A create/update/delete/list call to the persistence collaborator failed."""

    def __init__(self, entity_type: str, operation: str, message: str):
        super().__init__(f"{operation} {entity_type} failed: {message}")
        self.entity_type = entity_type
        self.operation = operation
        self.message = message


class BulkOperationError(ConsoleError):
    """One or more items of a bulk operation failed.

    Attributes
    ----------
    operation: str
        ``"delete"`` or ``"duplicate"``.
    completed: list
        Deleted IDs, or created entities for duplicates. These are not rolled back.
    failures: list[tuple[id, BaseException]]
        Failing entity IDs with their exception, in processing order.
    """

    def __init__(
        self,
        operation: str,
        completed: Sequence[Any],
        failures: Sequence[Tuple[Any, BaseException]],
    ):
        ids = ", ".join(str(i) for i, _ in failures)
        super().__init__(
            f"bulk {operation}: {len(failures)} failed ({ids}), {len(completed)} succeeded"
        )
        self.operation = operation
        self.completed: List[Any] = list(completed)
        self.failures: List[Tuple[Any, BaseException]] = list(failures)

    @property
    def failed_ids(self) -> List[Any]:
        return [i for i, _ in self.failures]


class UniqueSearchExhaustedError(ConsoleError):
    """The bounded unique-value search ran out of candidates."""
