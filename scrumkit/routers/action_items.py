"""Action items router — follow-up tasks agreed in the retrospective."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit import store
from scrumkit.database import get_db
from scrumkit.dependencies import get_event_bus
from scrumkit.schemas.action_item import ActionItemCreate, ActionItemOut, ActionItemUpdate
from scrumkit.services.event_bus import EventBus, EventType

router = APIRouter(prefix="/api/sessions", tags=["action items"])


@router.get("/{session_id}/action-items", response_model=List[ActionItemOut])
async def list_action_items(session_id: str, db: AsyncSession = Depends(get_db)):
    return await store.list_action_items(db, session_id)


@router.post(
    "/{session_id}/action-items",
    response_model=ActionItemOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_action_item(
    session_id: str,
    payload: ActionItemCreate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    action = await store.create_action_item(db, session_id, payload.model_dump())
    await db.commit()

    out = ActionItemOut.model_validate(action)
    bus.emit(session_id, EventType.action_added, out.model_dump(mode="json"))
    return out


@router.patch("/{session_id}/action-items/{action_id}", response_model=ActionItemOut)
async def update_action_item(
    session_id: str,
    action_id: str,
    payload: ActionItemUpdate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    action = await store.update_action_item(
        db, session_id, action_id, payload.model_dump(exclude_unset=True)
    )
    await db.commit()

    out = ActionItemOut.model_validate(action)
    bus.emit(session_id, EventType.action_updated, out.model_dump(mode="json"))
    return out


@router.delete("/{session_id}/action-items/{action_id}", response_model=ActionItemOut)
async def delete_action_item(
    session_id: str,
    action_id: str,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    action = await store.delete_action_item(db, session_id, action_id)
    out = ActionItemOut.model_validate(action)
    await db.commit()

    bus.emit(session_id, EventType.action_deleted, {"id": action_id, "session_id": session_id})
    return out
