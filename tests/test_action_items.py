"""API tests for action items."""

import pytest

from scrumkit import store
from scrumkit.errors import InvalidArgument
from tests.conftest import Recorder


@pytest.mark.asyncio
async def test_create_defaults_and_event(client, bus, retro) -> None:
    rec = Recorder()
    bus.subscribe(retro["id"], rec)

    resp = await client.post(f"/api/sessions/{retro['id']}/action-items",
                             json={"description": " Fix flaky tests ", "assignee_name": "Kim"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["description"] == "Fix flaky tests"
    assert body["priority"] == "medium"
    assert body["status"] == "open"
    assert rec.types == ["action:added"]


@pytest.mark.asyncio
async def test_update_status_and_clear_due_date(client, bus, retro) -> None:
    url = f"/api/sessions/{retro['id']}/action-items"
    action = (await client.post(url, json={
        "description": "Write runbook",
        "priority": "high",
        "due_date": "2026-11-01T00:00:00Z",
    })).json()
    assert action["due_date"] is not None

    moved = await client.patch(f"{url}/{action['id']}", json={"status": "in_progress"})
    assert moved.json()["status"] == "in_progress"
    assert moved.json()["priority"] == "high"

    cleared = await client.patch(f"{url}/{action['id']}", json={"due_date": None})
    assert cleared.json()["due_date"] is None


@pytest.mark.asyncio
async def test_invalid_values_are_rejected(client, retro) -> None:
    url = f"/api/sessions/{retro['id']}/action-items"
    assert (await client.post(url, json={"description": ""})).status_code == 400
    assert (await client.post(url, json={"description": "x", "priority": "urgent"})).status_code == 400

    action = (await client.post(url, json={"description": "ok"})).json()
    assert (await client.patch(f"{url}/{action['id']}", json={"status": "blocked"})).status_code == 400


@pytest.mark.asyncio
async def test_source_item_must_belong_to_session(client, retro) -> None:
    other = (await client.post("/api/sessions", json={"name": "Other"})).json()
    foreign = (await client.post(f"/api/sessions/{other['id']}/items",
                                 json={"category": "to_improve", "content": "Theirs"})).json()

    resp = await client.post(f"/api/sessions/{retro['id']}/action-items",
                             json={"description": "Borrowed", "source_item_id": foreign["id"]})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_blank_source_item_is_rejected(client, retro) -> None:
    url = f"/api/sessions/{retro['id']}/action-items"
    for blank in ("", "   "):
        resp = await client.post(url, json={"description": "x", "source_item_id": blank})
        assert resp.status_code == 400
        assert "source_item_id" in resp.json()["detail"]

    assert (await client.get(url)).json() == []


@pytest.mark.asyncio
async def test_store_rejects_empty_source_item(db) -> None:
    session = await store.create_session(db, {"name": "Retro"})

    with pytest.raises(InvalidArgument):
        await store.create_action_item(db, session.id, {"description": "x", "source_item_id": ""})


@pytest.mark.asyncio
async def test_deleting_source_item_unlinks_action(client, retro) -> None:
    sid = retro["id"]
    item = (await client.post(f"/api/sessions/{sid}/items",
                              json={"category": "to_improve", "content": "Slow reviews"})).json()
    await client.post(f"/api/sessions/{sid}/action-items",
                      json={"description": "Review within a day", "source_item_id": item["id"]})

    await client.delete(f"/api/sessions/{sid}/items/{item['id']}")

    actions = (await client.get(f"/api/sessions/{sid}/action-items")).json()
    assert len(actions) == 1
    assert actions[0]["source_item_id"] is None


@pytest.mark.asyncio
async def test_delete(client, bus, retro) -> None:
    url = f"/api/sessions/{retro['id']}/action-items"
    action = (await client.post(url, json={"description": "Retire old CI"})).json()
    rec = Recorder()
    bus.subscribe(retro["id"], rec)

    resp = await client.delete(f"{url}/{action['id']}")

    assert resp.status_code == 200
    assert resp.json()["id"] == action["id"]
    assert (await client.get(url)).json() == []
    assert rec.types == ["action:deleted"]
    assert (await client.delete(f"{url}/{action['id']}")).status_code == 404
