import asyncio
import random
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

import scrumkit.models  # noqa: F401
from scrumkit import store
from scrumkit.database import Base, async_session, engine
from scrumkit.models.item import ItemCategory
from scrumkit.models.session import RetroSession
from scrumkit.routers.sessions import share_url

# (content, author_name, is_anonymous)
DEMO_CARDS = {
    ItemCategory.went_well: [
        ("Daily standups were much more efficient this sprint", "Jan", False),
        ("Good collaboration between the frontend and backend teams", "Pieter", False),
        ("We hit every sprint goal!", "Marieke", False),
        ("Code reviews were quick and constructive", None, True),
        ("The new CI/CD pipeline works great", "Sophie", False),
    ],
    ItemCategory.to_improve: [
        ("Too much context switching from ad-hoc requests", "Jan", False),
        ("Documentation is lagging behind the code", "Pieter", False),
        ("Sprint planning took far too long (3 hours!)", None, True),
        ("Not enough time for technical debt", "Marieke", False),
        ("Communication with stakeholders could be better", "Sophie", False),
    ],
    ItemCategory.action_item: [
        ("Time-box sprint planning to 2 hours", "Jan", False),
        ("Schedule a documentation hour every Friday", "Pieter", False),
        ("Route ad-hoc requests through the issue tracker", "Marieke", False),
    ],
}

DEMO_PARTICIPANTS = ["jan", "pieter", "marieke", "sophie", "tom"]


async def seed_demo_session(db: AsyncSession, rng: Optional[random.Random] = None) -> RetroSession:
    """Create a retrospective with cards and random votes; every participant stays within budget."""
    rng = rng or random.Random()
    session = await store.create_session(
        db, {"name": "Test Retrospective", "sprint_name": "Sprint 42 - Test", "votes_per_user": 5}
    )

    item_ids: List[str] = []
    for category, cards in DEMO_CARDS.items():
        for content, author_name, is_anonymous in cards:
            item = await store.create_item(
                db,
                session.id,
                {
                    "category": category,
                    "content": content,
                    "author_id": (author_name or "anonymous").lower(),
                    "author_name": author_name,
                    "is_anonymous": is_anonymous,
                },
            )
            item_ids.append(item.id)

    used: Dict[str, int] = {participant: 0 for participant in DEMO_PARTICIPANTS}
    for item_id in item_ids:
        # 0-3 distinct voters per card
        voters = rng.sample(DEMO_PARTICIPANTS, rng.randint(0, 3))
        for participant in voters:
            if used[participant] >= session.votes_per_user:
                continue
            await store.insert_vote(db, item_id, participant)
            used[participant] += 1

    await db.commit()
    return session


async def async_main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        session = await seed_demo_session(db)
        rows = await store.list_items(db, session.id)

    total_votes = sum(count for _, count in rows)
    print(f"Created session '{session.name}' ({session.id})")
    print(f"  {len(rows)} cards, {total_votes} votes")
    print(f"  Open it at {share_url(session.id)}")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(async_main())
