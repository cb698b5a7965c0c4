"""Event emitter implementation using Observer Pattern."""
from typing import Dict, List, Callable, Optional


class EventEmitter:
    """
    Event emitter using Observer Pattern.

    Used by the session controller and the catalog view-model to publish
    immutable snapshots after every state change.
    """

    def __init__(self):
        """Initializes event emitter."""
        self._events: Dict[str, List[Callable]] = {}

    def on(self, event: str, callback: Callable) -> 'EventEmitter':
        """Registers an event handler."""
        self._events.setdefault(event, []).append(callback)
        return self

    def emit(self, event: str, *args, **kwargs):
        """Emits an event to every handler, in registration order."""
        for callback in list(self._events.get(event, ())):
            callback(*args, **kwargs)

    def off(self, event: str, callback: Optional[Callable] = None) -> 'EventEmitter':
        """Removes one handler, or all handlers of an event."""
        if event not in self._events:
            return self

        if callback is None:
            del self._events[event]
        else:
            self._events[event] = [cb for cb in self._events[event] if cb != callback]

        return self

    def listener_count(self, event: str) -> int:
        """Number of handlers registered for an event."""
        return len(self._events.get(event, ()))
