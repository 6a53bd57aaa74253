"""Items router — cards submitted into a session's categories."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit import store
from scrumkit.database import get_db
from scrumkit.dependencies import get_event_bus
from scrumkit.schemas.item import ItemCreate, ItemOut, ItemUpdate, item_out
from scrumkit.services.event_bus import EventBus, EventType

router = APIRouter(prefix="/api/sessions", tags=["items"])


@router.get("/{session_id}/items", response_model=List[ItemOut])
async def list_items(session_id: str, db: AsyncSession = Depends(get_db)):
    """Items in creation order with their vote counts."""
    rows = await store.list_items(db, session_id)
    return [item_out(item, vote_count) for item, vote_count in rows]


@router.post("/{session_id}/items", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
async def create_item(
    session_id: str,
    payload: ItemCreate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    item = await store.create_item(db, session_id, payload.model_dump())
    await db.commit()

    out = item_out(item)
    bus.emit(session_id, EventType.item_added, out.model_dump(mode="json"))
    return out


@router.patch("/{session_id}/items/{item_id}", response_model=ItemOut)
async def update_item(
    session_id: str,
    item_id: str,
    payload: ItemUpdate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    item = await store.update_item(db, session_id, item_id, payload.model_dump(exclude_unset=True))
    await db.commit()

    out = item_out(item, await store.count_item_votes(db, item_id))
    bus.emit(session_id, EventType.item_updated, out.model_dump(mode="json"))
    return out


@router.delete("/{session_id}/items/{item_id}", response_model=ItemOut)
async def delete_item(
    session_id: str,
    item_id: str,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    item = await store.delete_item(db, session_id, item_id)
    out = item_out(item)
    await db.commit()

    bus.emit(session_id, EventType.item_deleted, {"id": item_id, "session_id": session_id})
    return out
