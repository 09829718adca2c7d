"""Document-level pointer listener registry used by the media viewer."""
from collections import defaultdict
from typing import Callable, Dict, List

from quizmedia.models import PointerEvent

Handler = Callable[[PointerEvent], None]


class PointerEvents:
    """
    Stand-in for the browser's document.addEventListener / removeEventListener.
    Handlers for one event type run in the order they were added.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Handler]] = defaultdict(list)

    def add_listener(self, event_type: str, handler: Handler) -> None:
        self._listeners[event_type].append(handler)

    def remove_listener(self, event_type: str, handler: Handler) -> None:
        handlers = self._listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch(self, event: PointerEvent) -> None:
        # Copy first: a handler may unsubscribe (e.g. a click outside closes the viewer)
        for handler in list(self._listeners.get(event.type, [])):
            handler(event)

    def subscribe(self, handlers: Dict[str, Handler]) -> "Subscription":
        for event_type, handler in handlers.items():
            self.add_listener(event_type, handler)
        return Subscription(self, handlers)


class Subscription:
    """A set of listeners that is released as one; safe to release twice."""

    def __init__(self, source: PointerEvents, handlers: Dict[str, Handler]):
        self._source = source
        self._handlers = handlers
        self.active = True

    def release(self) -> None:
        if not self.active:
            return
        for event_type, handler in self._handlers.items():
            self._source.remove_listener(event_type, handler)
        self.active = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
