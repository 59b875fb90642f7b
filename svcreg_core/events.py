"""Synchronous event bus used to observe registry lifecycle changes."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict

__all__ = [
    "CLEARED_EVENT",
    "Event",
    "EventBus",
    "EventHandler",
    "POST_LOAD_EVENT",
    "POST_SCAN_EVENT",
    "PRE_LOAD_EVENT",
    "SERVICE_APPENDED_EVENT",
    "STANDARD_EVENTS",
]

logger = logging.getLogger(__name__)

PRE_LOAD_EVENT = "registry.pre_load"
POST_SCAN_EVENT = "registry.post_scan"
POST_LOAD_EVENT = "registry.post_load"
SERVICE_APPENDED_EVENT = "registry.service_appended"
CLEARED_EVENT = "registry.cleared"

STANDARD_EVENTS = (
    PRE_LOAD_EVENT,
    POST_SCAN_EVENT,
    POST_LOAD_EVENT,
    SERVICE_APPENDED_EVENT,
    CLEARED_EVENT,
)


@dataclass(frozen=True)
class Event:
    """Lightweight event descriptor."""

    name: str
    payload: dict[str, Any]


EventHandler = Callable[[Event], None]


@dataclass(frozen=True)
class _EventSubscription:
    priority: int
    order: int
    handler: EventHandler


class EventBus:
    """Delivers events to handlers by descending priority, then subscription order.

    Handlers run on the emitting thread. Subscriptions may change from any
    thread; an emit works on a snapshot taken when it starts.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[_EventSubscription]] = defaultdict(list)
        self._sequence = 0
        self._lock = threading.Lock()

    def on(self, event_name: str, handler: EventHandler, priority: int = 0) -> None:
        """Register ``handler`` for ``event_name``."""

        with self._lock:
            self._sequence += 1
            self._handlers[event_name].append(
                _EventSubscription(priority=priority, order=self._sequence, handler=handler)
            )

    def off(self, event_name: str, handler: EventHandler) -> bool:
        """Remove every subscription of ``handler``; False if none existed."""

        with self._lock:
            subscriptions = self._handlers.get(event_name, [])
            kept = [item for item in subscriptions if item.handler != handler]
            self._handlers[event_name] = kept
            return len(kept) != len(subscriptions)

    def emit(self, event_name: str, payload: dict[str, Any] | None = None) -> None:
        event = Event(event_name, dict(payload or {}))
        with self._lock:
            subscriptions = sorted(
                self._handlers.get(event_name, []),
                key=lambda item: (-item.priority, item.order),
            )
        if subscriptions:
            logger.debug("emitting %s to %d handler(s)", event_name, len(subscriptions))
        for subscription in subscriptions:
            subscription.handler(event)
