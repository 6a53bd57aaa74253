"""
In-process publish/subscribe registry for per-session change events.

One ``EventBus`` instance lives on the application state and is injected
into every handler that publishes and into the change stream endpoint.
It only reaches listeners inside this process: events are not persisted
and not shared between instances. A multi-instance deployment needs a
distributed pub/sub client exposing the same ``subscribe``/``publish``
interface.

All methods are meant to be called from the event loop thread.
"""

import enum
import itertools
import logging
import time
from typing import Any, Callable, Dict

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EventType(str, enum.Enum):
    connected = "connected"
    item_added = "item:added"
    item_updated = "item:updated"
    item_deleted = "item:deleted"
    vote_added = "vote:added"
    vote_removed = "vote:removed"
    session_updated = "session:updated"
    action_added = "action:added"
    action_updated = "action:updated"
    action_deleted = "action:deleted"


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionEvent(BaseModel):
    """One change notification as it goes over the wire."""
    type: EventType
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: int = Field(default_factory=_now_ms)

    def to_sse(self) -> str:
        """Encode as a single Server-Sent-Events ``data:`` frame."""
        return f"data: {self.model_dump_json()}\n\n"


Listener = Callable[[SessionEvent], None]


class EventBus:
    """Fan out events to the listeners currently subscribed to a session."""

    def __init__(self):
        # session_id -> {listener_id: listener}, insertion ordered
        self._listeners: Dict[str, Dict[int, Listener]] = {}
        self._ids = itertools.count(1)

    def subscribe(self, session_id: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for future events of ``session_id``.

        Returns a callable that removes exactly this registration. Calling it
        more than once is harmless.
        """
        listener_id = next(self._ids)
        self._listeners.setdefault(session_id, {})[listener_id] = listener

        def unsubscribe() -> None:
            listeners = self._listeners.get(session_id)
            if listeners is None:
                return
            listeners.pop(listener_id, None)
            if not listeners:
                del self._listeners[session_id]

        return unsubscribe

    def publish(self, session_id: str, event: SessionEvent) -> None:
        """Deliver ``event`` to every listener registered right now.

        A failing listener is logged and skipped; this never raises.
        """
        listeners = self._listeners.get(session_id)
        if not listeners:
            return
        # Snapshot: listeners may unsubscribe while being called.
        for listener_id, listener in list(listeners.items()):
            try:
                listener(event)
            except Exception:
                logger.warning(
                    f"Listener {listener_id} failed on {event.type.value} for session {session_id}",
                    exc_info=True,
                )

    def emit(self, session_id: str, event_type: EventType, data: Dict[str, Any]) -> None:
        """Shorthand for publishing a freshly stamped event."""
        self.publish(session_id, SessionEvent(type=event_type, data=data))

    def listener_count(self, session_id: str) -> int:
        return len(self._listeners.get(session_id, ()))

    def session_count(self) -> int:
        return len(self._listeners)
