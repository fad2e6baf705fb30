"""Chart event bus.

Synchronous publish/subscribe that lets the chart core tell the host UI what
happened (inputs replaced, render finished, hover moved, log lines) without
either side importing the other. No Qt dependency, so it runs headless.

A handler that raises does not stop delivery to the remaining handlers; the
failure is recorded in :attr:`EventBus.failures`. The bus also remembers the
last event per name so late subscribers (a panel opened after the first
render) can read the current state without waiting for the next publish.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from itertools import count
from threading import RLock
from time import perf_counter
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

__all__ = ["ChartEvent", "Event", "EventBus", "HandlerFailure", "Subscription"]


class ChartEvent(str, Enum):
    DATASET_REPLACED = "dataset_replaced"
    AXIS_KEYS_CHANGED = "axis_keys_changed"
    CHART_KIND_CHANGED = "chart_kind_changed"
    ENABLED_KINDS_CHANGED = "enabled_kinds_changed"
    RENDER_COMPLETED = "render_completed"
    HOVER_CHANGED = "hover_changed"
    LOG_RECORD_ADDED = "log_record_added"


@dataclass(frozen=True)
class Event:
    name: str
    payload: Any
    seq: int
    timestamp: float


Handler = Callable[[Event], None]


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`.

    ``cancel()`` stops delivery immediately, even during a publish in progress.
    """

    name: str
    handler: Handler
    once: bool = False
    active: bool = True

    def cancel(self) -> None:
        self.active = False


@dataclass(frozen=True)
class HandlerFailure:
    event: Event
    handler: str
    error: Exception


def _event_key(name: str | ChartEvent) -> str:
    return name.value if isinstance(name, ChartEvent) else str(name)


class EventBus:
    def __init__(self, *, trace_size: int = 50) -> None:
        self._lock = RLock()
        self._routes: Dict[str, List[Subscription]] = {}
        self._last: Dict[str, Event] = {}
        self._trace: Deque[Event] = deque(maxlen=trace_size)
        self._failures: List[HandlerFailure] = []
        self._seq = count(1)

    # Subscriptions ---------------------------------------------------
    def subscribe(self, name: str | ChartEvent, handler: Handler, *, once: bool = False) -> Subscription:
        sub = Subscription(_event_key(name), handler, once)
        with self._lock:
            self._routes.setdefault(sub.name, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        sub.cancel()
        with self._lock:
            routes = self._routes.get(sub.name, [])
            if sub in routes:
                routes.remove(sub)

    def subscriber_count(self, name: str | ChartEvent) -> int:
        with self._lock:
            return sum(1 for s in self._routes.get(_event_key(name), ()) if s.active)

    # Delivery --------------------------------------------------------
    def publish(self, name: str | ChartEvent, payload: Any = None) -> Event:
        key = _event_key(name)
        with self._lock:
            event = Event(key, payload, next(self._seq), perf_counter())
            self._last[key] = event
            self._trace.append(event)
            targets = tuple(self._routes.get(key, ()))
        for sub in targets:
            if not sub.active:
                continue
            if sub.once:
                self.unsubscribe(sub)
            try:
                sub.handler(event)
            except Exception as exc:  # noqa: BLE001 - one bad handler must not starve the rest
                with self._lock:
                    self._failures.append(HandlerFailure(event, repr(sub.handler), exc))
        return event

    # Readouts --------------------------------------------------------
    def last(self, name: str | ChartEvent) -> Optional[Event]:
        with self._lock:
            return self._last.get(_event_key(name))

    def trace(self) -> Tuple[Event, ...]:
        """Most recent events, oldest first."""
        with self._lock:
            return tuple(self._trace)

    @property
    def failures(self) -> Tuple[HandlerFailure, ...]:
        with self._lock:
            return tuple(self._failures)
