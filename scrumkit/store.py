"""
Scrumkit – query/command functions over the relational store.

Every function takes the request-scoped ``AsyncSession`` and only flushes;
callers commit, and publish change events only after the commit succeeded.
Missing rows raise ``NotFound``; nothing here returns ``None`` for "absent".
"""

from typing import Any, Dict, Iterable, List, Tuple

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit.config import settings
from scrumkit.errors import InvalidArgument, NotFound
from scrumkit.models._common import utcnow
from scrumkit.models.action_item import ActionItem
from scrumkit.models.item import Item
from scrumkit.models.report import Report
from scrumkit.models.session import RetroSession, SessionPhase
from scrumkit.models.vote import Vote


def _apply(obj: Any, fields: Dict[str, Any], required: Iterable[str] = ()) -> None:
    """Copy a partial update onto a row, refusing explicit nulls for required columns."""
    for key, value in fields.items():
        if value is None and key in required:
            raise InvalidArgument(f"{key} cannot be null")
        setattr(obj, key, value)


# ═══════════════════════════════════════════════════════════════
#  Sessions
# ═══════════════════════════════════════════════════════════════

async def get_session(db: AsyncSession, session_id: str) -> RetroSession:
    result = await db.execute(select(RetroSession).where(RetroSession.id == session_id))
    session = result.scalar_one_or_none()
    if not session:
        raise NotFound("Session not found")
    return session


async def list_sessions(db: AsyncSession) -> List[RetroSession]:
    result = await db.execute(select(RetroSession).order_by(desc(RetroSession.created_at)))
    return list(result.scalars().all())


async def create_session(db: AsyncSession, fields: Dict[str, Any]) -> RetroSession:
    fields = dict(fields)
    if fields.get("votes_per_user") is None:
        fields["votes_per_user"] = settings.DEFAULT_VOTES_PER_USER
    session = RetroSession(**fields)
    db.add(session)
    await db.flush()
    return session


async def update_session(db: AsyncSession, session_id: str, fields: Dict[str, Any]) -> RetroSession:
    """Apply a partial update.

    Phase changes are not checked against the nominal
    input → voting → discussion → completed order; the host may move freely.
    """
    session = await get_session(db, session_id)
    _apply(session, fields, required=("name", "phase", "votes_per_user", "hide_votes_until_complete"))

    if "phase" in fields:
        if session.phase == SessionPhase.completed:
            session.completed_at = session.completed_at or utcnow()
        else:
            session.completed_at = None

    await db.flush()
    return session


async def delete_session(db: AsyncSession, session_id: str) -> RetroSession:
    """Delete a session with its items, votes, action items and report."""
    session = await get_session(db, session_id)
    item_ids = select(Item.id).where(Item.session_id == session_id)

    await db.execute(
        delete(Vote).where(Vote.item_id.in_(item_ids)).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(ActionItem).where(ActionItem.session_id == session_id).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Item).where(Item.session_id == session_id).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Report).where(Report.session_id == session_id).execution_options(synchronize_session=False)
    )
    await db.delete(session)
    await db.flush()
    return session


# ═══════════════════════════════════════════════════════════════
#  Items
# ═══════════════════════════════════════════════════════════════

def _vote_counts():
    return (
        select(Vote.item_id, func.count(Vote.id).label("vote_count"))
        .group_by(Vote.item_id)
        .subquery()
    )


async def get_item(db: AsyncSession, session_id: str, item_id: str) -> Item:
    """Return the item only if it belongs to the given session."""
    result = await db.execute(
        select(Item).where(Item.id == item_id, Item.session_id == session_id)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise NotFound("Item not found")
    return item


async def list_items(db: AsyncSession, session_id: str) -> List[Tuple[Item, int]]:
    """Items of a session in creation order, each paired with its vote count."""
    await get_session(db, session_id)
    counts = _vote_counts()
    result = await db.execute(
        select(Item, func.coalesce(counts.c.vote_count, 0))
        .outerjoin(counts, counts.c.item_id == Item.id)
        .where(Item.session_id == session_id)
        .order_by(Item.created_at, Item.id)
    )
    return [(item, int(count)) for item, count in result.all()]


async def count_item_votes(db: AsyncSession, item_id: str) -> int:
    result = await db.execute(select(func.count(Vote.id)).where(Vote.item_id == item_id))
    return result.scalar() or 0


async def create_item(db: AsyncSession, session_id: str, fields: Dict[str, Any]) -> Item:
    await get_session(db, session_id)
    fields = dict(fields)
    if fields.get("is_anonymous"):
        fields["author_name"] = None
    item = Item(session_id=session_id, **fields)
    db.add(item)
    await db.flush()
    return item


async def update_item(db: AsyncSession, session_id: str, item_id: str, fields: Dict[str, Any]) -> Item:
    item = await get_item(db, session_id, item_id)
    _apply(item, fields, required=("category", "content", "is_discussed"))
    await db.flush()
    return item


async def delete_item(db: AsyncSession, session_id: str, item_id: str) -> Item:
    """Delete an item and its votes; action items created from it are kept but unlinked."""
    item = await get_item(db, session_id, item_id)
    await db.execute(
        delete(Vote).where(Vote.item_id == item_id).execution_options(synchronize_session=False)
    )
    await db.execute(
        update(ActionItem)
        .where(ActionItem.source_item_id == item_id)
        .values(source_item_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.delete(item)
    await db.flush()
    return item


# ═══════════════════════════════════════════════════════════════
#  Votes
# ═══════════════════════════════════════════════════════════════

async def insert_vote(db: AsyncSession, item_id: str, participant_id: str) -> Vote:
    vote = Vote(item_id=item_id, participant_id=participant_id)
    db.add(vote)
    await db.flush()
    return vote


async def delete_one_vote(db: AsyncSession, session_id: str, item_id: str, participant_id: str) -> Vote:
    """Delete a single matching vote, the most recent one, even when duplicates exist."""
    result = await db.execute(
        select(Vote)
        .join(Item, Item.id == Vote.item_id)
        .where(
            Vote.item_id == item_id,
            Vote.participant_id == participant_id,
            Item.session_id == session_id,
        )
        .order_by(desc(Vote.created_at))
        .limit(1)
    )
    vote = result.scalar_one_or_none()
    if not vote:
        raise NotFound("Vote not found")
    await db.delete(vote)
    await db.flush()
    return vote


async def count_votes_for_participant(db: AsyncSession, session_id: str, participant_id: str) -> int:
    """Votes cast by one participant across every item of the session."""
    result = await db.execute(
        select(func.count(Vote.id))
        .join(Item, Item.id == Vote.item_id)
        .where(Vote.participant_id == participant_id, Item.session_id == session_id)
    )
    return result.scalar() or 0


async def list_votes_for_participant(db: AsyncSession, session_id: str, participant_id: str) -> List[Vote]:
    result = await db.execute(
        select(Vote)
        .join(Item, Item.id == Vote.item_id)
        .where(Vote.participant_id == participant_id, Item.session_id == session_id)
        .order_by(Vote.created_at)
    )
    return list(result.scalars().all())


# ═══════════════════════════════════════════════════════════════
#  Action items
# ═══════════════════════════════════════════════════════════════

async def get_action_item(db: AsyncSession, session_id: str, action_id: str) -> ActionItem:
    result = await db.execute(
        select(ActionItem).where(ActionItem.id == action_id, ActionItem.session_id == session_id)
    )
    action = result.scalar_one_or_none()
    if not action:
        raise NotFound("Action item not found")
    return action


async def list_action_items(db: AsyncSession, session_id: str) -> List[ActionItem]:
    await get_session(db, session_id)
    result = await db.execute(
        select(ActionItem)
        .where(ActionItem.session_id == session_id)
        .order_by(ActionItem.created_at, ActionItem.id)
    )
    return list(result.scalars().all())


async def create_action_item(db: AsyncSession, session_id: str, fields: Dict[str, Any]) -> ActionItem:
    await get_session(db, session_id)
    source_item_id = fields.get("source_item_id")
    if source_item_id is not None:
        try:
            await get_item(db, session_id, source_item_id)
        except NotFound:
            raise InvalidArgument("source_item_id does not refer to an item of this session")
    action = ActionItem(session_id=session_id, **fields)
    db.add(action)
    await db.flush()
    return action


async def update_action_item(
    db: AsyncSession, session_id: str, action_id: str, fields: Dict[str, Any]
) -> ActionItem:
    action = await get_action_item(db, session_id, action_id)
    _apply(action, fields, required=("description", "priority", "status"))
    await db.flush()
    return action


async def delete_action_item(db: AsyncSession, session_id: str, action_id: str) -> ActionItem:
    action = await get_action_item(db, session_id, action_id)
    await db.delete(action)
    await db.flush()
    return action


# ═══════════════════════════════════════════════════════════════
#  Reports
# ═══════════════════════════════════════════════════════════════

async def get_report(db: AsyncSession, session_id: str) -> Report:
    result = await db.execute(select(Report).where(Report.session_id == session_id))
    report = result.scalar_one_or_none()
    if not report:
        raise NotFound("Report not found")
    return report


async def upsert_report(db: AsyncSession, session_id: str, content: str, generated_by: str = None) -> Report:
    """Store the report for a session, replacing any earlier one."""
    result = await db.execute(select(Report).where(Report.session_id == session_id))
    report = result.scalar_one_or_none()
    if report:
        report.content = content
        report.generated_at = utcnow()
        report.generated_by = generated_by
    else:
        report = Report(session_id=session_id, content=content, generated_by=generated_by)
        db.add(report)
    await db.flush()
    return report
