"""Synchronous event manager.

Listeners are called in registration order. A failing listener is logged
and does not prevent the others from running, nor does it fail the
operation which published the event.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List

from ..common.logger import get_logger

logger = get_logger("security.events")

EventListener = Callable[[str, Dict[str, Any]], None]


class EventManager:
    """In-process publish/subscribe registry keyed by event name."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[EventListener]] = defaultdict(list)

    def register(self, event_name: str, listener: EventListener) -> None:
        """Register a listener for an event.

        Args:
            event_name: Name of the event
            listener: Callable receiving the event name and the payload
        """
        self._listeners[event_name].append(listener)

    def unregister(self, event_name: str, listener: EventListener) -> None:
        listeners = self._listeners.get(event_name)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def has_listeners(self, event_name: str) -> bool:
        return bool(self._listeners.get(event_name))

    def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        """Call every listener of the event with the payload."""
        for listener in list(self._listeners.get(event_name, ())):
            try:
                listener(event_name, payload)
            except Exception:
                logger.exception(f"Listener {listener!r} failed for event {event_name}")
