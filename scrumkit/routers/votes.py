"""Votes router — cast and withdraw votes within the session budget."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit.database import get_db
from scrumkit.dependencies import get_event_bus
from scrumkit.schemas.vote import ParticipantVotes, VoteCreate, VoteOut
from scrumkit.services import voting
from scrumkit.services.event_bus import EventBus

router = APIRouter(prefix="/api/sessions", tags=["votes"])


@router.post("/{session_id}/votes", response_model=VoteOut, status_code=status.HTTP_201_CREATED)
async def cast_vote(
    session_id: str,
    payload: VoteCreate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    return await voting.cast_vote(db, bus, session_id, payload.item_id, payload.participant_id)


@router.get("/{session_id}/votes", response_model=ParticipantVotes)
async def get_participant_votes(
    session_id: str,
    participant_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """A participant's votes in the session and the budget left."""
    budget, votes = await voting.participant_votes(db, session_id, participant_id)
    return ParticipantVotes(
        participant_id=participant_id,
        budget=budget,
        remaining=max(budget - len(votes), 0),
        votes=[VoteOut.model_validate(v) for v in votes],
    )


@router.delete("/{session_id}/votes/{item_id}", response_model=VoteOut)
async def remove_vote(
    session_id: str,
    item_id: str,
    participant_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    """Withdraw one of the participant's votes on the item."""
    return await voting.remove_vote(db, bus, session_id, item_id, participant_id)
