"""Sessions router — create, read, update and delete retrospectives."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit import store
from scrumkit.config import settings
from scrumkit.database import get_db
from scrumkit.dependencies import get_event_bus
from scrumkit.schemas.session import SessionCreate, SessionCreated, SessionOut, SessionUpdate
from scrumkit.services.event_bus import EventBus, EventType

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def share_url(session_id: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/retrospective/{session_id}"


# ═══════════════════════════════════════════════════════════════
#  POST /api/sessions → open a new retrospective
# ═══════════════════════════════════════════════════════════════

@router.post("", response_model=SessionCreated, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: SessionCreate,
    db: AsyncSession = Depends(get_db),
):
    session = await store.create_session(db, payload.model_dump())
    await db.commit()
    return SessionCreated(
        **SessionOut.model_validate(session).model_dump(),
        share_url=share_url(session.id),
    )


@router.get("", response_model=List[SessionOut])
async def list_sessions(db: AsyncSession = Depends(get_db)):
    """All sessions, newest first."""
    return await store.list_sessions(db)


@router.get("/{session_id}", response_model=SessionOut)
async def get_session(session_id: str, db: AsyncSession = Depends(get_db)):
    return await store.get_session(db, session_id)


# ═══════════════════════════════════════════════════════════════
#  PATCH /api/sessions/{id} → phase, budget, visibility, labels
# ═══════════════════════════════════════════════════════════════

@router.patch("/{session_id}", response_model=SessionOut)
async def update_session(
    session_id: str,
    payload: SessionUpdate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    session = await store.update_session(db, session_id, payload.model_dump(exclude_unset=True))
    await db.commit()

    out = SessionOut.model_validate(session)
    bus.emit(session_id, EventType.session_updated, out.model_dump(mode="json"))
    return out


@router.delete("/{session_id}", response_model=SessionOut)
async def delete_session(session_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a session together with everything it owns."""
    session = await store.delete_session(db, session_id)
    out = SessionOut.model_validate(session)
    await db.commit()
    return out
