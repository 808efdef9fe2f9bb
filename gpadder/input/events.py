"""
Arbiter events and the observer registry that delivers them.

Subscribers are called synchronously, in registration order, in the order
events are published. A failing subscriber is logged and skipped so it can
never break the tick that published the event.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List

from ..core.logging import get_logger


class ArbiterEventType(Enum):
    """Kinds of events the arbiter publishes."""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    SELECTION_CHANGED = "selection_changed"


@dataclass(frozen=True)
class ArbiterEvent:
    """One published event about a device index."""
    event_type: ArbiterEventType
    index: int
    timestamp: float = field(default_factory=time.time)


EventCallback = Callable[[ArbiterEvent], None]


class EventBus:
    """
    Observer registry keyed by event type.

    ``subscribe_all`` listeners receive every event after the type-specific
    ones.
    """

    def __init__(self):
        self.logger = get_logger("event_bus")
        self._subscribers: Dict[ArbiterEventType, List[EventCallback]] = {
            event_type: [] for event_type in ArbiterEventType
        }
        self._wildcard: List[EventCallback] = []

    def subscribe(self, event_type: ArbiterEventType, callback: EventCallback) -> None:
        self._subscribers[event_type].append(callback)
        self.logger.debug("Subscriber added", extra={
            "event_type": event_type.value,
            "total_subscribers": len(self._subscribers[event_type])
        })

    def unsubscribe(self, event_type: ArbiterEventType, callback: EventCallback) -> None:
        if callback in self._subscribers[event_type]:
            self._subscribers[event_type].remove(callback)

    def subscribe_all(self, callback: EventCallback) -> None:
        self._wildcard.append(callback)

    def unsubscribe_all(self, callback: EventCallback) -> None:
        if callback in self._wildcard:
            self._wildcard.remove(callback)

    def subscriber_count(self, event_type: ArbiterEventType) -> int:
        return len(self._subscribers[event_type])

    def publish(self, event: ArbiterEvent) -> None:
        """
        Deliver ``event`` to its subscribers.

        Args:
            event: Event to deliver
        """
        # Copy so callbacks may unsubscribe while being notified
        callbacks = list(self._subscribers[event.event_type]) + list(self._wildcard)
        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                self.logger.error("Error in event callback", extra={
                    "event_type": event.event_type.value,
                    "device_index": event.index,
                    "error": str(e),
                    "error_type": type(e).__name__
                })

    def clear(self) -> None:
        for callbacks in self._subscribers.values():
            callbacks.clear()
        self._wildcard.clear()
