"""
Per-connection state for the Server-Sent-Events change stream.

A ``StreamConnection`` moves ``connecting -> open -> closed``. Every exit
path (client disconnect, transport write failure, a full delivery queue,
server shutdown) ends in ``close()``, which may run any number of times.
"""

import asyncio
import contextlib
import enum
import logging
import uuid
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Optional, Set

from scrumkit.errors import StreamDeliveryFailure
from scrumkit.services.event_bus import EventBus, EventType, SessionEvent

logger = logging.getLogger(__name__)

HEARTBEAT_FRAME = ": heartbeat\n\n"


class ConnectionState(str, enum.Enum):
    connecting = "connecting"
    open = "open"
    closed = "closed"


class StreamConnection:
    """One client's open change stream for one session."""

    def __init__(
        self,
        bus: EventBus,
        session_id: str,
        heartbeat_interval: float = 30.0,
        max_pending: int = 256,
        on_close: Optional[Callable[["StreamConnection"], None]] = None,
    ):
        self.bus = bus
        self.session_id = session_id
        self.listener_id = uuid.uuid4().hex
        self.heartbeat_interval = heartbeat_interval
        self.state = ConnectionState.connecting

        # None is the wake-up sentinel pushed by close().
        self._queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue(maxsize=max_pending)
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._heartbeat_task: Optional[asyncio.Task] = None
        self._on_close = on_close

    @property
    def closed(self) -> bool:
        return self.state is ConnectionState.closed

    def _start(self) -> str:
        """Subscribe, start the heartbeat and return the ``connected`` frame."""
        connected = SessionEvent(
            type=EventType.connected,
            data={
                "session_id": self.session_id,
                "server_time": datetime.now(timezone.utc).isoformat(),
            },
        )
        self._unsubscribe = self.bus.subscribe(self.session_id, self._deliver)
        self._heartbeat_task = asyncio.create_task(self._heartbeat())
        logger.debug(f"Stream {self.listener_id} subscribed to session {self.session_id}")
        return connected.to_sse()

    def _deliver(self, event: SessionEvent) -> None:
        """Bus listener: queue the encoded event for the writer."""
        if self.closed:
            return
        try:
            self._queue.put_nowait(event.to_sse())
        except asyncio.QueueFull:
            self.close()
            raise StreamDeliveryFailure(
                f"Stream {self.listener_id} fell behind by {self._queue.maxsize} events"
            )

    async def _heartbeat(self) -> None:
        while not self.closed:
            await asyncio.sleep(self.heartbeat_interval)
            if self.closed:
                break
            try:
                self._queue.put_nowait(HEARTBEAT_FRAME)
            except asyncio.QueueFull:
                # The writer is stuck; real events already fill the queue.
                continue

    async def frames(self) -> AsyncIterator[str]:
        """Yield wire frames until the connection closes.

        Cancellation of the consuming response (client gone) and exceptions
        thrown in at ``yield`` (write failure) both land in ``close()``.
        """
        if self.closed:
            return
        try:
            yield self._start()
            if not self.closed:
                self.state = ConnectionState.open
            while not self.closed:
                frame = await self._queue.get()
                if frame is None or self.closed:
                    break
                yield frame
        finally:
            self.close()

    def close(self) -> None:
        """Tear the connection down. Idempotent."""
        if self.closed:
            return
        self.state = ConnectionState.closed

        if self._unsubscribe is not None:
            self._unsubscribe()
        if self._heartbeat_task is not None and self._heartbeat_task is not asyncio.current_task():
            self._heartbeat_task.cancel()

        with contextlib.suppress(asyncio.QueueFull):
            self._queue.put_nowait(None)

        if self._on_close is not None:
            self._on_close(self)
        logger.debug(f"Stream {self.listener_id} for session {self.session_id} closed")


class StreamRegistry:
    """Open connections of this process, so shutdown can close them."""

    def __init__(self, bus: EventBus, heartbeat_interval: float = 30.0, max_pending: int = 256):
        self.bus = bus
        self.heartbeat_interval = heartbeat_interval
        self.max_pending = max_pending
        self._connections: Set[StreamConnection] = set()

    def open(self, session_id: str) -> StreamConnection:
        connection = StreamConnection(
            self.bus,
            session_id,
            heartbeat_interval=self.heartbeat_interval,
            max_pending=self.max_pending,
            on_close=self._connections.discard,
        )
        self._connections.add(connection)
        return connection

    def __len__(self) -> int:
        return len(self._connections)

    async def close_all(self) -> None:
        """Close every open connection and wait for their heartbeat tasks to finish."""
        connections = list(self._connections)
        for connection in connections:
            connection.close()

        heartbeats = [c._heartbeat_task for c in connections if c._heartbeat_task is not None]
        await asyncio.gather(*heartbeats, return_exceptions=True)
        logger.info(f"{len(connections)} change stream(s) closed")
