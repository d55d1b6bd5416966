"""System key helpers for custom property systems.

Custom systems are stored under a slug key (``"custom-pool-heater"``) that
must fit the database column (``settings.MAX_SYSTEM_KEY_LENGTH``) and be
unique within one save batch.

Uniqueness is probabilistic: a colliding key gets a single random
fixed-width numeric suffix and is not re-checked. With 90 000 five-digit
values a repeat collision inside a realistic batch is not expected, but it is
not ruled out either.
"""

from __future__ import annotations

import random
import re
from typing import Iterable, List, MutableSet, Optional

from config import settings

__all__ = [
    "slugify_custom_system_name",
    "ensure_unique_system_key",
    "display_names_with_counters",
]

_WS_PATTERN = re.compile(r"\s+")
_SLUG_STRIP_PATTERN = re.compile(r"[^a-z0-9-]")
_TRAILING_NUMBER_PATTERN = re.compile(r"\s+\d+$")


def slugify_custom_system_name(name: str | None, *, max_length: int | None = None) -> str:
    max_length = max_length or settings.MAX_SYSTEM_KEY_LENGTH
    if not name or not isinstance(name, str):
        return "custom-unknown"
    slug = _SLUG_STRIP_PATTERN.sub("", _WS_PATTERN.sub("-", name.lower()))
    return ("custom-" + slug)[:max_length]


def ensure_unique_system_key(
    key: str | None,
    used_keys: MutableSet[str],
    *,
    rng: Optional[random.Random] = None,
    max_length: int | None = None,
) -> str:
    """Truncate ``key`` and record it in ``used_keys``.

    A key already in ``used_keys`` gets one random numeric suffix. The suffixed
    key is not checked again, so a repeat collision is possible (if unlikely).
    """
    max_length = max_length or settings.MAX_SYSTEM_KEY_LENGTH
    if not key or not isinstance(key, str):
        return "unknown"
    result = key[:max_length]
    if result in used_keys:
        width = settings.SYSTEM_KEY_SUFFIX_WIDTH
        low = 10 ** (width - 1)
        suffix = (rng or random).randint(low, 10 * low - 1)
        reserved = width + 1  # "-" + digits
        base = result[: max_length - reserved].rstrip("-") or "custom-dup"
        result = f"{base[: max_length - reserved]}-{suffix}"[:max_length]
    used_keys.add(result)
    return result


def display_names_with_counters(names: Iterable[str | None]) -> List[str]:
    """Number repeated names for display: ``["Pool", "Pool"]`` -> ``["Pool", "Pool 2"]``.

    A trailing numeric suffix (e.g. a backend random suffix) is dropped first.
    """
    counts: dict[str, int] = {}
    out: List[str] = []
    for name in names:
        raw = name or ""
        base = _TRAILING_NUMBER_PATTERN.sub("", raw) or raw or "Unknown"
        counts[base] = counts.get(base, 0) + 1
        n = counts[base]
        out.append(base if n == 1 else f"{base} {n}")
    return out
