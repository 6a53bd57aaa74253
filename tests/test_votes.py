"""Tests for vote accounting: the session-wide budget and single-vote removal."""

import pytest

from scrumkit import store
from scrumkit.errors import BudgetExceeded, NotFound
from scrumkit.services import voting
from tests.conftest import Recorder


async def _make_session(db, budget: int = 5):
    session = await store.create_session(db, {"name": "Retro", "votes_per_user": budget})
    await db.commit()
    return session


async def _make_item(db, session_id: str, content: str = "Pairing worked"):
    item = await store.create_item(db, session_id, {"category": "went_well", "content": content})
    await db.commit()
    return item


class TestCastVote:

    @pytest.mark.asyncio
    async def test_budget_is_never_exceeded_sequentially(self, db, bus) -> None:
        session = await _make_session(db, budget=3)
        items = [await _make_item(db, session.id, f"card {n}") for n in range(2)]

        for n in range(3):
            await voting.cast_vote(db, bus, session.id, items[n % 2].id, "alice")

        with pytest.raises(BudgetExceeded) as exc:
            await voting.cast_vote(db, bus, session.id, items[0].id, "alice")

        assert exc.value.budget == 3
        assert "3" in exc.value.message
        assert await store.count_votes_for_participant(db, session.id, "alice") == 3

    @pytest.mark.asyncio
    async def test_budget_is_per_participant(self, db, bus) -> None:
        session = await _make_session(db, budget=1)
        item = await _make_item(db, session.id)

        await voting.cast_vote(db, bus, session.id, item.id, "alice")
        await voting.cast_vote(db, bus, session.id, item.id, "bob")

        assert await store.count_item_votes(db, item.id) == 2

    @pytest.mark.asyncio
    async def test_budget_is_per_session(self, db, bus) -> None:
        first = await _make_session(db, budget=1)
        second = await _make_session(db, budget=1)
        item_a = await _make_item(db, first.id)
        item_b = await _make_item(db, second.id)

        await voting.cast_vote(db, bus, first.id, item_a.id, "alice")
        await voting.cast_vote(db, bus, second.id, item_b.id, "alice")

        assert await store.count_votes_for_participant(db, first.id, "alice") == 1
        assert await store.count_votes_for_participant(db, second.id, "alice") == 1

    @pytest.mark.asyncio
    async def test_unknown_session_or_foreign_item_is_not_found(self, db, bus) -> None:
        session = await _make_session(db)
        other = await _make_session(db)
        foreign = await _make_item(db, other.id)

        with pytest.raises(NotFound):
            await voting.cast_vote(db, bus, "missing", foreign.id, "alice")
        with pytest.raises(NotFound):
            await voting.cast_vote(db, bus, session.id, foreign.id, "alice")
        assert await store.count_item_votes(db, foreign.id) == 0

    @pytest.mark.asyncio
    async def test_rejected_vote_publishes_nothing(self, db, bus) -> None:
        session = await _make_session(db, budget=0)
        item = await _make_item(db, session.id)
        rec = Recorder()
        bus.subscribe(session.id, rec)

        with pytest.raises(BudgetExceeded):
            await voting.cast_vote(db, bus, session.id, item.id, "alice")

        assert rec.events == []


class TestRemoveVote:

    @pytest.mark.asyncio
    async def test_removes_exactly_one_of_duplicate_votes(self, db, bus) -> None:
        session = await _make_session(db)
        item = await _make_item(db, session.id)
        await voting.cast_vote(db, bus, session.id, item.id, "alice")
        await voting.cast_vote(db, bus, session.id, item.id, "alice")
        rec = Recorder()
        bus.subscribe(session.id, rec)

        await voting.remove_vote(db, bus, session.id, item.id, "alice")

        assert await store.count_item_votes(db, item.id) == 1
        assert rec.types == ["vote:removed"]

    @pytest.mark.asyncio
    async def test_missing_vote_is_not_found(self, db, bus) -> None:
        session = await _make_session(db)
        item = await _make_item(db, session.id)

        with pytest.raises(NotFound):
            await voting.remove_vote(db, bus, session.id, item.id, "alice")


@pytest.mark.asyncio
async def test_budget_scenario_event_sequence(client, bus) -> None:
    resp = await client.post("/api/sessions", json={"name": "Budget", "votes_per_user": 2})
    session_id = resp.json()["id"]
    x = (await client.post(f"/api/sessions/{session_id}/items",
                           json={"category": "went_well", "content": "X"})).json()
    y = (await client.post(f"/api/sessions/{session_id}/items",
                           json={"category": "to_improve", "content": "Y"})).json()

    rec = Recorder()
    bus.subscribe(session_id, rec)
    votes_url = f"/api/sessions/{session_id}/votes"

    assert (await client.post(votes_url, json={"item_id": x["id"], "participant_id": "alice"})).status_code == 201
    assert (await client.post(votes_url, json={"item_id": x["id"], "participant_id": "alice"})).status_code == 201

    rejected = await client.post(votes_url, json={"item_id": y["id"], "participant_id": "alice"})
    assert rejected.status_code == 400
    assert "maximum of 2 votes" in rejected.json()["detail"]

    removed = await client.delete(f"{votes_url}/{x['id']}", params={"participant_id": "alice"})
    assert removed.status_code == 200
    assert removed.json()["item_id"] == x["id"]

    assert (await client.post(votes_url, json={"item_id": y["id"], "participant_id": "alice"})).status_code == 201

    mine = (await client.get(votes_url, params={"participant_id": "alice"})).json()
    assert mine["budget"] == 2
    assert mine["remaining"] == 0
    assert sorted(v["item_id"] for v in mine["votes"]) == sorted([x["id"], y["id"]])

    assert rec.types == ["vote:added", "vote:added", "vote:removed", "vote:added"]
    assert [e.data["item_id"] for e in rec.events] == [x["id"], x["id"], x["id"], y["id"]]
    assert all(e.data["participant_id"] == "alice" for e in rec.events)
    assert all(e.data["session_id"] == session_id for e in rec.events)


@pytest.mark.asyncio
async def test_vote_endpoints_validate_input(client, retro) -> None:
    votes_url = f"/api/sessions/{retro['id']}/votes"

    missing = await client.post(votes_url, json={"item_id": "abc"})
    assert missing.status_code == 400
    assert "participant_id" in missing.json()["detail"]

    no_participant = await client.delete(f"{votes_url}/abc")
    assert no_participant.status_code == 400

    unknown_item = await client.post(votes_url, json={"item_id": "nope", "participant_id": "alice"})
    assert unknown_item.status_code == 404
