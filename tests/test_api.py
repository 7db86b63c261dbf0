"""HTTP surface: status codes, payload shapes, identity."""
from datetime import datetime, timedelta, timezone
from typing import Annotated

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import OTHER_USER_ID, USER_ID, auth_headers
from drill_engine.db.session import get_db
from drill_engine.main import app
from drill_engine.routers.api import get_skill_rating_aggregator, get_submission_handler
from drill_engine.schemas.drill import DrillSubmitSchema
from drill_engine.services.queue import DrillQueueRepository
from drill_engine.services.skill_rating import SqlSkillRatingAggregator
from drill_engine.services.submission import SubmissionHandler


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def real_now():
    return datetime.now(timezone.utc)


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_missing_or_bad_token_is_401(client):
    response = await client.get("/api/drills/due")
    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"

    response = await client.get("/api/drills/due", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "invalid_user_jwt"


@pytest.mark.asyncio
async def test_due_drills_lists_only_ready_rows(client, make_entry, real_now):
    ready = await make_entry(due_at=real_now - timedelta(minutes=30))
    await make_entry(leak_tag="passive_play", due_at=real_now + timedelta(days=2))
    await make_entry(user_id=OTHER_USER_ID, due_at=real_now - timedelta(days=1))

    response = await client.get("/api/drills/due", headers=auth_headers())

    assert response.status_code == 200
    body = response.json()
    assert [row["id"] for row in body] == [ready.id]
    assert body[0]["leak_tag"] == "position_awareness"
    assert body[0]["repetition"] == 0


@pytest.mark.asyncio
async def test_due_drills_empty_list(client):
    response = await client.get("/api/drills/due", headers=auth_headers())
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, 51])
async def test_due_drills_limit_out_of_range_is_400(client, limit):
    response = await client.get(f"/api/drills/due?limit={limit}", headers=auth_headers())
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_submit_and_read_back_event(client, make_entry, action_scenario):
    entry = await make_entry(repetition=0)

    response = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "raise", "raise_size_bb": 9},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["correct"] is True
    assert body["repetition"] == 1
    assert body["skill_rating"]["rating"] == 54
    assert body["explanation"] == action_scenario["explanation"]

    event = await client.get(f"/api/training-events/{body['training_event_id']}", headers=auth_headers())
    assert event.status_code == 200
    assert event.json()["scenario"] == action_scenario
    assert event.json()["mistake_reason"] is None

    foreign = await client.get(
        f"/api/training-events/{body['training_event_id']}", headers=auth_headers(OTHER_USER_ID)
    )
    assert foreign.status_code == 404


@pytest.mark.asyncio
async def test_submit_invalid_answer_is_400(client, make_entry, action_scenario):
    entry = await make_entry()

    response = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "drill_type": "action_decision",
              "user_answer": "xyz"},
        headers=auth_headers(),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_submit_malformed_body_is_400(client):
    response = await client.post("/api/drills/submit", json={"user_action": "call"}, headers=auth_headers())
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_submit_for_foreign_entry_is_404(client, make_entry, action_scenario):
    entry = await make_entry(user_id=OTHER_USER_ID)

    response = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "call"},
        headers=auth_headers(),
    )

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_submit_without_identity_is_401(client, make_entry, action_scenario):
    entry = await make_entry()

    response = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "call"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_reason_always_ok(client, make_entry, action_scenario):
    entry = await make_entry()
    submitted = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "fold"},
        headers=auth_headers(),
    )
    event_id = submitted.json()["training_event_id"]
    assert "skill_rating" in submitted.json()

    for reason in ("range", "position"):
        response = await client.post(
            "/api/drills/reason",
            json={"training_event_id": event_id, "mistake_reason": reason},
            headers=auth_headers(),
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    unknown = await client.post(
        "/api/drills/reason", json={"training_event_id": "missing"}, headers=auth_headers()
    )
    assert unknown.status_code == 200
    assert unknown.json() == {"ok": True}

    event = await client.get(f"/api/training-events/{event_id}", headers=auth_headers())
    assert event.json()["mistake_reason"] == "position"


@pytest.mark.asyncio
async def test_bootstrap_then_skill_ratings(client, action_scenario):
    response = await client.post(
        "/api/drills/bootstrap",
        json={"leak_tags": ["Chasing Draws", "passive-play"]},
        headers=auth_headers(),
    )
    assert response.status_code == 200
    assert response.json() == {"ok": True, "created": 2, "leak_tags": ["chasing_draws", "passive_play"]}

    again = await client.post("/api/drills/bootstrap", json={"leak_tags": ["bluff catching"]}, headers=auth_headers())
    assert again.json()["created"] == 0

    due = (await client.get("/api/drills/due", headers=auth_headers())).json()
    assert {row["leak_tag"] for row in due} == {"chasing_draws", "passive_play"}

    await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": due[0]["id"], "scenario": action_scenario, "user_action": "call"},
        headers=auth_headers(),
    )
    ratings = await client.get("/api/skill-ratings", headers=auth_headers())
    assert ratings.status_code == 200
    assert [r["leak_tag"] for r in ratings.json()] == [due[0]["leak_tag"]]
    assert ratings.json()[0]["rating"] == 44


@pytest.mark.asyncio
async def test_update_reason_without_value_keeps_stored_reason(client, make_entry, action_scenario):
    entry = await make_entry()
    submitted = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "fold"},
        headers=auth_headers(),
    )
    event_id = submitted.json()["training_event_id"]

    await client.post(
        "/api/drills/reason", json={"training_event_id": event_id, "mistake_reason": "range"}, headers=auth_headers()
    )
    response = await client.post("/api/drills/reason", json={"training_event_id": event_id}, headers=auth_headers())

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    event = await client.get(f"/api/training-events/{event_id}", headers=auth_headers())
    assert event.json()["mistake_reason"] == "range"


@pytest.mark.asyncio
async def test_skill_rating_keeps_its_shape_before_any_mistake(client, make_entry, action_scenario):
    entry = await make_entry()

    response = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "raise"},
        headers=auth_headers(),
    )

    skill_rating = response.json()["skill_rating"]
    assert "last_mistake_at" in skill_rating
    assert skill_rating["last_mistake_at"] is None
    assert skill_rating["last_practice_at"] is not None


@pytest.mark.asyncio
async def test_skill_rating_is_omitted_when_aggregation_fails(client, make_entry, action_scenario):
    class FailingAggregator:
        async def record_outcome(self, user_id, leak_tag, is_correct, practiced_at):
            raise RuntimeError("rating service unavailable")

    app.dependency_overrides[get_skill_rating_aggregator] = lambda: FailingAggregator()
    entry = await make_entry()

    response = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "raise"},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["repetition"] == 1
    assert "skill_rating" not in body


@pytest.mark.asyncio
async def test_submit_conflict_is_409(client, session_factory, make_entry, action_scenario):
    entry = await make_entry(repetition=0)
    payload = {"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "raise"}

    class RacingQueue(DrillQueueRepository):
        """Lets a second request finish between this request's read and write."""

        async def get_owned(self, entry_id, user_id):
            loaded = await super().get_owned(entry_id, user_id)
            async with session_factory() as other:
                await SubmissionHandler(other, SqlSkillRatingAggregator(other)).submit(
                    user_id, DrillSubmitSchema(**payload)
                )
            return loaded

    def racing_handler(db: Annotated[AsyncSession, Depends(get_db)]):
        handler = SubmissionHandler(db, SqlSkillRatingAggregator(db))
        handler.queue = RacingQueue(db)
        return handler

    app.dependency_overrides[get_submission_handler] = racing_handler

    response = await client.post("/api/drills/submit", json=payload, headers=auth_headers())

    assert response.status_code == 409
    assert response.json()["error"] == "conflict"
    assert "detail" in response.json()


@pytest.mark.asyncio
async def test_submit_commit_failure_is_500(client, session_factory, make_entry, action_scenario):
    entry = await make_entry(repetition=2)

    async def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    def failing_handler(db: Annotated[AsyncSession, Depends(get_db)]):
        db.commit = broken_commit
        return SubmissionHandler(db, SqlSkillRatingAggregator(db))

    app.dependency_overrides[get_submission_handler] = failing_handler

    response = await client.post(
        "/api/drills/submit",
        json={"drill_queue_id": entry.id, "scenario": action_scenario, "user_action": "raise"},
        headers=auth_headers(),
    )

    assert response.status_code == 500
    assert response.json() == {"error": "persistence_error", "detail": "failed to save training result"}
    async with session_factory() as s:
        stored = await DrillQueueRepository(s).get_owned(entry.id, USER_ID)
    assert stored.repetition == 2
    assert stored.version == 0
