"""Events router — the per-session Server-Sent-Events change stream."""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit import store
from scrumkit.database import get_db
from scrumkit.dependencies import get_event_bus, get_stream_registry
from scrumkit.services.event_bus import EventBus
from scrumkit.services.event_stream import StreamConnection, StreamRegistry

router = APIRouter(prefix="/api/sessions", tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # nginx must not buffer the stream
}


class EventStreamResponse(StreamingResponse):
    """Streaming response that always closes its connection on the way out.

    Covers client disconnect (the response task is cancelled), a failing
    ``send`` and a normal end of stream alike.
    """

    def __init__(self, connection: StreamConnection):
        super().__init__(connection.frames(), media_type="text/event-stream", headers=SSE_HEADERS)
        self.connection = connection

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.connection.close()


@router.get("/{session_id}/events")
async def stream_events(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    streams: StreamRegistry = Depends(get_stream_registry),
):
    """Push this session's change events until the client goes away."""
    await store.get_session(db, session_id)
    # Hand the pooled connection back; the stream may stay open for hours.
    await db.commit()
    return EventStreamResponse(streams.open(session_id))


@router.get("/{session_id}/events/connections")
async def stream_connections(session_id: str, bus: EventBus = Depends(get_event_bus)):
    """Diagnostic: listeners currently attached to the session in this process."""
    return {"session_id": session_id, "connections": bus.listener_count(session_id)}
