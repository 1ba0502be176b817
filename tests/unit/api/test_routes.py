import httpx
import pytest
import pytest_asyncio

from partnerhub.main import create_app


PEER = {
    "preferred_partner_type": "p2p",
    "support_style": ["daily_checkin"],
    "available_categories": ["fitness"],
    "time_commitment": "daily",
    "experience_level": "beginner",
}


def as_user(user_id):
    return {"X-User-Id": user_id}


@pytest_asyncio.fixture
async def client(settings, database):
    app = create_app(settings=settings, database=database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def partnered(client):
    """alice and bob, matched with each other."""
    for user in ("alice", "bob"):
        response = await client.put("/api/v1/preferences/me", json=PEER, headers=as_user(user))
        assert response.status_code == 200
    response = await client.post("/api/v1/matching/find", headers=as_user("alice"))
    assert response.status_code == 200
    return response.json()["partnership"]


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_user_header_is_required(client):
    response = await client.get("/api/v1/preferences/me")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_preferences_roundtrip(client):
    assert (await client.get("/api/v1/preferences/me", headers=as_user("alice"))).status_code == 404

    saved = await client.put("/api/v1/preferences/me", json=PEER, headers=as_user("alice"))
    assert saved.status_code == 200
    assert saved.json()["is_available_for_matching"] is True

    response = await client.put(
        "/api/v1/preferences/me/availability",
        json={"available": False},
        headers=as_user("alice"),
    )
    assert response.json()["is_available_for_matching"] is False


@pytest.mark.asyncio
async def test_match_and_conflict(client, partnered):
    assert partnered["status"] == "active"
    assert {partnered["user1_id"], partnered["user2_id"]} == {"alice", "bob"}

    again = await client.post("/api/v1/matching/find", headers=as_user("bob"))
    assert again.status_code == 409
    assert again.json()["detail"]["error_code"] == "ALREADY_PARTNERED"

    mine = await client.get("/api/v1/partnerships/me", headers=as_user("bob"))
    assert mine.json()["id"] == partnered["id"]


@pytest.mark.asyncio
async def test_match_without_preferences(client):
    response = await client.post("/api/v1/matching/find", headers=as_user("ghost"))

    assert response.status_code == 409
    assert response.json()["detail"]["error_code"] == "NO_PREFERENCES"


@pytest.mark.asyncio
async def test_partnership_transitions_and_guards(client, partnered):
    url = f"/api/v1/partnerships/{partnered['id']}"

    assert (await client.post(f"{url}/pause", headers=as_user("mallory"))).status_code == 403
    assert (await client.post(f"{url}/accept", headers=as_user("bob"))).status_code == 409
    assert (await client.post("/api/v1/partnerships/missing/end", headers=as_user("bob"))).status_code == 404

    paused = await client.post(f"{url}/pause", headers=as_user("bob"))
    assert paused.json()["status"] == "paused"

    ended = await client.post(f"{url}/end", json={"reason": "done"}, headers=as_user("alice"))
    assert ended.json()["status"] == "ended"
    assert ended.json()["end_reason"] == "done"

    prefs = await client.get("/api/v1/preferences/me", headers=as_user("bob"))
    assert prefs.json()["is_available_for_matching"] is True


@pytest.mark.asyncio
async def test_goal_and_task_flow(client, partnered):
    goal = await client.post(
        "/api/v1/goals",
        json={"partnership_id": partnered["id"], "title": "Marathon", "category": "fitness"},
        headers=as_user("alice"),
    )
    assert goal.status_code == 201
    goal_id = goal.json()["id"]
    assert goal.json()["partner_id"] == "bob"

    task = await client.post(f"/api/v1/goals/{goal_id}/tasks", json={"title": "Run 5k"}, headers=as_user("alice"))
    assert task.status_code == 201
    task_id = task.json()["id"]

    done = await client.post(f"/api/v1/tasks/{task_id}/done", json={"comment": "sweaty"}, headers=as_user("alice"))
    assert done.json()["status"] == "marked_done"

    pending = await client.get("/api/v1/tasks/pending-verification", headers=as_user("bob"))
    assert [t["id"] for t in pending.json()] == [task_id]

    forbidden = await client.post(f"/api/v1/tasks/{task_id}/verify", json={"action": "approve"}, headers=as_user("alice"))
    assert forbidden.status_code == 403

    verified = await client.post(f"/api/v1/tasks/{task_id}/verify", json={"action": "approve"}, headers=as_user("bob"))
    assert verified.json()["status"] == "verified"
    assert [h["action"] for h in verified.json()["verification_history"]] == ["marked_done", "verified"]

    stats = await client.get(f"/api/v1/partnerships/{partnered['id']}/stats")
    assert stats.json()["completion_rate"] == 100

    progress = (await client.get(f"/api/v1/goals/{goal_id}")).json()["progress"]
    assert progress["verified_tasks"] == 1


@pytest.mark.asyncio
async def test_notifications_inbox(client, partnered):
    inbox = await client.get("/api/v1/notifications", headers=as_user("bob"))
    assert inbox.status_code == 200
    notification = inbox.json()[0]
    assert notification["type"] == "partner_assigned"

    denied = await client.post(f"/api/v1/notifications/{notification['id']}/read", headers=as_user("alice"))
    assert denied.status_code == 403
    assert denied.json()["detail"]["error_code"] == "NOT_AUTHORIZED"

    read = await client.post(f"/api/v1/notifications/{notification['id']}/read", headers=as_user("bob"))
    assert read.json()["is_read"] is True


@pytest.mark.asyncio
async def test_expert_profile_crud(client):
    created = await client.post(
        "/api/v1/experts/me",
        json={"expertise_areas": ["fitness"], "years_of_experience": 12},
        headers=as_user("coach"),
    )
    assert created.status_code == 201
    assert created.json()["availability"]["max_clients"] == 5

    updated = await client.patch(
        "/api/v1/experts/me",
        json={"availability": {"max_clients": 3}, "rating": 5.0},
        headers=as_user("coach"),
    )
    assert updated.json()["availability"]["max_clients"] == 3
    assert updated.json()["rating"] == 0.0

    listed = await client.get("/api/v1/experts", params={"category": "fitness"})
    assert [e["user_id"] for e in listed.json()] == ["coach"]

    assert (await client.delete("/api/v1/experts/me", headers=as_user("coach"))).status_code == 200
    assert (await client.get("/api/v1/experts/coach")).status_code == 404
