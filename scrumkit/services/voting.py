"""
Vote accounting — the per-participant, session-wide vote budget.

The budget check is a read followed by an insert without a lock or a
uniqueness constraint. Two concurrent casts from the same participant at
``budget - 1`` can both pass and overshoot the budget by one; sequential
casts never exceed it. Closing that gap means serialising the check and
insert per (session, participant), e.g. a row lock on the session inside
one transaction.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit import store
from scrumkit.errors import BudgetExceeded
from scrumkit.models.vote import Vote
from scrumkit.services.event_bus import EventBus, EventType

logger = logging.getLogger(__name__)


def _vote_event(session_id: str, vote: Vote) -> dict:
    return {
        "item_id": vote.item_id,
        "participant_id": vote.participant_id,
        "session_id": session_id,
    }


async def cast_vote(
    db: AsyncSession,
    bus: EventBus,
    session_id: str,
    item_id: str,
    participant_id: str,
) -> Vote:
    """Record one vote and publish ``vote:added`` once it is committed.

    Raises ``NotFound`` for an unknown session or an item outside it and
    ``BudgetExceeded`` when the participant has no votes left.
    """
    session = await store.get_session(db, session_id)
    await store.get_item(db, session_id, item_id)

    used = await store.count_votes_for_participant(db, session_id, participant_id)
    if used >= session.votes_per_user:
        logger.info(
            f"Vote rejected: participant {participant_id} used {used}/{session.votes_per_user} "
            f"in session {session_id}"
        )
        raise BudgetExceeded(session.votes_per_user)

    vote = await store.insert_vote(db, item_id, participant_id)
    await db.commit()

    bus.emit(session_id, EventType.vote_added, _vote_event(session_id, vote))
    return vote


async def remove_vote(
    db: AsyncSession,
    bus: EventBus,
    session_id: str,
    item_id: str,
    participant_id: str,
) -> Vote:
    """Remove a single vote of the participant on the item and publish ``vote:removed``."""
    vote = await store.delete_one_vote(db, session_id, item_id, participant_id)
    await db.commit()

    bus.emit(session_id, EventType.vote_removed, _vote_event(session_id, vote))
    return vote


async def participant_votes(db: AsyncSession, session_id: str, participant_id: str):
    """Return ``(budget, votes)`` for one participant in a session."""
    session = await store.get_session(db, session_id)
    votes: List[Vote] = await store.list_votes_for_participant(db, session_id, participant_id)
    return session.votes_per_user, votes
