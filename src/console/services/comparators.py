"""Comparator library for table sorting.

Comparators follow the ``(a, b, direction) -> int`` shape and honour the
direction themselves, so the sort engine can use them without negating the
result. Field access works for both dataclass entities and plain mappings;
missing or ``None`` values compare as an empty string (or as the lowest
number for numeric comparators) and never raise.
"""

from __future__ import annotations

import unicodedata
from typing import Any, Callable, Mapping, Optional

__all__ = [
    "Comparator",
    "field_value",
    "text_key",
    "compare_text",
    "compare_numbers",
    "text_comparator",
    "numeric_comparator",
    "lookup_comparator",
]

Comparator = Callable[[Any, Any, str], int]


def field_value(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def text_key(value: Any) -> str:
    """Case-insensitive, accent-aware sort key for a display value."""
    if value is None:
        return ""
    return unicodedata.normalize("NFKD", str(value)).casefold()


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_text(a: Any, b: Any, direction: str = "asc") -> int:
    result = _cmp(text_key(a), text_key(b))
    return result if direction == "asc" else -result


def _as_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def compare_numbers(a: Any, b: Any, direction: str = "asc") -> int:
    na, nb = _as_number(a), _as_number(b)
    # non-numeric values sort before any number
    if na is None or nb is None:
        result = _cmp(na is not None, nb is not None)
    else:
        result = _cmp(na, nb)
    return result if direction == "asc" else -result


def text_comparator(key: str) -> Comparator:
    def compare(a: Any, b: Any, direction: str) -> int:
        return compare_text(field_value(a, key), field_value(b, key), direction)

    return compare


def numeric_comparator(key: str) -> Comparator:
    def compare(a: Any, b: Any, direction: str) -> int:
        return compare_numbers(field_value(a, key), field_value(b, key), direction)

    return compare


def lookup_comparator(
    key: str, resolve: Callable[[Any], str], *, then_by: Optional[str] = None
) -> Comparator:
    """Compare on a label resolved from a reference field (e.g. category id -> name).

    When ``then_by`` is given, items with equal labels are ordered by that text
    field in the same direction.
    """

    def compare(a: Any, b: Any, direction: str) -> int:
        result = compare_text(resolve(field_value(a, key)), resolve(field_value(b, key)), direction)
        if result == 0 and then_by is not None:
            return compare_text(field_value(a, then_by), field_value(b, then_by), direction)
        return result

    return compare
