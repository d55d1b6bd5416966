"""Process-wide loader for resources that must be initialised once.

Some collaborators (an external places/maps SDK, a remote schema, ...) are
expensive to initialise and must only be loaded once per process. The loader
caches one in-flight task per key: concurrent callers await the same task,
later callers get the cached result, and a failed load is evicted so the
next caller retries.

Lifecycle: the shared instance is created on first use by
``get_resource_loader()`` and lives for the rest of the process. Tests may
drop it with ``reset_resource_loader()``.
"""

from __future__ import annotations

import asyncio
import logging
from threading import Lock
from typing import Any, Awaitable, Callable, Dict, Optional

__all__ = ["ResourceLoader", "get_resource_loader", "reset_resource_loader"]

log = logging.getLogger(__name__)


class ResourceLoader:
    def __init__(self) -> None:
        self._tasks: Dict[str, "asyncio.Future[Any]"] = {}

    async def load(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        task = self._tasks.get(key)
        if task is None:
            log.debug("loading resource %s", key)
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
        try:
            return await asyncio.shield(task)
        except Exception:
            # allow a later retry
            if self._tasks.get(key) is task:
                del self._tasks[key]
            log.exception("loading resource %s failed", key)
            raise

    def is_loaded(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and task.done() and not task.cancelled() and task.exception() is None

    def forget(self, key: str) -> None:
        self._tasks.pop(key, None)


_instance: Optional[ResourceLoader] = None
_instance_lock = Lock()


def get_resource_loader() -> ResourceLoader:
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = ResourceLoader()
        return _instance


def reset_resource_loader() -> None:
    global _instance
    with _instance_lock:
        _instance = None
