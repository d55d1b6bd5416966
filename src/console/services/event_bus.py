"""EventBus for view-state notifications.

Lightweight synchronous publish/subscribe used by the collection views to
announce sort, selection, expansion, paging and collection changes to
whatever renders them.

 - One failing handler does not break the publish cycle; the error is kept
   in ``errors``
 - ``once`` subscriptions are removed after their first successful call
 - Handlers run without the lock held, so they may (un)subscribe freely
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Dict, List, Protocol

__all__ = ["ViewEvent", "Event", "EventBus", "EventHandler", "Subscription"]


class ViewEvent(str, Enum):
    SORT_CHANGED = "sort_changed"
    SELECTION_CHANGED = "selection_changed"
    GROUPS_TOGGLED = "groups_toggled"
    PAGE_CHANGED = "page_changed"
    VIEW_MODE_CHANGED = "view_mode_changed"
    COLLECTION_CHANGED = "collection_changed"
    BULK_OPERATION_COMPLETED = "bulk_operation_completed"
    LOG_RECORD_ADDED = "log_record_added"


@dataclass
class Event:
    name: str
    payload: Any
    timestamp: float


class EventHandler(Protocol):
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


def _event_key(name: str | ViewEvent) -> str:
    return name.value if isinstance(name, ViewEvent) else name


class EventBus:
    def __init__(self) -> None:
        self._lock = RLock()
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, BaseException]] = []

    def subscribe(
        self, name: str | ViewEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_event_key(name), handler=handler, once=once)
        with self._lock:
            self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            bucket = self._subs.get(sub.event, [])
            self._subs[sub.event] = [s for s in bucket if s is not sub]
            if not self._subs[sub.event]:
                self._subs.pop(sub.event, None)
        sub.active = False

    def publish(self, name: str | ViewEvent, payload: Any = None) -> Event:
        key = _event_key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        with self._lock:
            subs = list(self._subs.get(key, ()))
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                with self._lock:
                    self._errors.append((evt, exc))
            else:
                if sub.once:
                    self.unsubscribe(sub)
        return evt

    def subscriber_count(self, name: str | ViewEvent) -> int:
        with self._lock:
            return len(self._subs.get(_event_key(name), ()))

    @property
    def errors(self) -> list[tuple[Event, BaseException]]:
        with self._lock:
            return list(self._errors)

    def clear(self) -> None:
        with self._lock:
            self._subs.clear()
            self._errors.clear()
