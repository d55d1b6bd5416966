"""Unique name / url generation for duplicated entities.

Names get a parenthesised copy suffix: ``"Widget (Copy)"``, then
``"Widget (Copy 2)"``, ``"Widget (Copy 3)"`` ... Urls get a dashed suffix
(``"my-app-copy"``, ``"my-app-copy-2"`` ...) after any existing copy suffix
has been stripped, so duplicating a duplicate never stacks suffixes.

The search walks the counter upwards and stops at the first free value.
With N colliding values at most N + 1 candidates are tried; the loop is
additionally bounded by ``settings.UNIQUE_SEARCH_LIMIT``.

Bulk operations reserve each generated value in a `PendingValues` set and
pass it to the next generation, so siblings created in one batch never
collide with each other before they are persisted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Set

from config import settings
from console.errors import UniqueSearchExhaustedError
from .comparators import field_value

__all__ = [
    "PendingValues",
    "copy_name",
    "copy_url",
    "strip_copy_suffix",
    "generate_unique_name",
    "generate_unique_url",
    "UniqueIdentifierGenerator",
]


@dataclass
class PendingValues:
    """Names and urls reserved by an in-progress batch."""

    names: Set[str] = field(default_factory=set)
    urls: Set[str] = field(default_factory=set)

    def reserve(self, name: str | None = None, url: str | None = None) -> None:
        if name:
            self.names.add(name)
        if url:
            self.urls.add(url)


def copy_name(base_name: str, suffix: str, index: int) -> str:
    if index == 1:
        return f"{base_name} ({suffix})"
    return f"{base_name} ({suffix} {index})"


def copy_url(base_url: str, suffix: str, index: int) -> str:
    if index == 1:
        return f"{base_url}-{suffix}"
    return f"{base_url}-{suffix}-{index}"


def strip_copy_suffix(url: str, suffix: str = "copy") -> str:
    """Remove a trailing ``-<suffix>`` or ``-<suffix>-<n>`` from ``url``."""
    return re.sub(rf"-{re.escape(suffix)}(-\d+)?$", "", url or "")


def _search(candidate: Callable[[int], str], taken: Set[str], limit: int) -> str:
    value = ""
    for index in range(1, limit + 1):
        value = candidate(index)
        if value not in taken:
            return value
    raise UniqueSearchExhaustedError(f"no free value within {limit} candidates (last tried {value!r})")


def generate_unique_name(
    base_name: str,
    existing: Iterable[str],
    suffix: str = "Copy",
    *,
    pending: Iterable[str] = (),
    limit: int | None = None,
) -> str:
    taken = set(existing) | set(pending)
    return _search(
        lambda i: copy_name(base_name or "", suffix, i),
        taken,
        limit or settings.UNIQUE_SEARCH_LIMIT,
    )


def generate_unique_url(
    base_url: str,
    existing: Iterable[str],
    suffix: str = "copy",
    *,
    pending: Iterable[str] = (),
    limit: int | None = None,
) -> str:
    clean = strip_copy_suffix(base_url, suffix)
    taken = set(existing) | set(pending)
    return _search(lambda i: copy_url(clean, suffix, i), taken, limit or settings.UNIQUE_SEARCH_LIMIT)


class UniqueIdentifierGenerator:
    """Generates copy names/urls against a collection of items.

    ``name_field``/``url_field`` name the attributes holding the values on the
    items; suffixes come from ``settings.COPY_SUFFIXES`` unless given.
    """

    def __init__(
        self,
        entity_type: str = "app",
        *,
        name_field: str = "name",
        url_field: str = "url",
        name_suffix: str | None = None,
        url_suffix: str | None = None,
    ):
        default_name_suffix, default_url_suffix = settings.copy_suffixes(entity_type)
        self.name_field = name_field
        self.url_field = url_field
        self.name_suffix = name_suffix or default_name_suffix
        self.url_suffix = url_suffix or default_url_suffix

    def _values(self, items: Iterable[Any], key: str) -> Set[str]:
        out: Set[str] = set()
        for item in items:
            value = field_value(item, key)
            if value:
                out.add(str(value))
        return out

    def unique_name(
        self, base_name: str, items: Iterable[Any], pending: PendingValues | None = None
    ) -> str:
        return generate_unique_name(
            base_name,
            self._values(items, self.name_field),
            self.name_suffix,
            pending=pending.names if pending else (),
        )

    def unique_url(
        self, base_url: str, items: Iterable[Any], pending: PendingValues | None = None
    ) -> str:
        return generate_unique_url(
            base_url,
            self._values(items, self.url_field),
            self.url_suffix,
            pending=pending.urls if pending else (),
        )
