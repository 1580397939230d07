"""
Tests for score recording, leaderboards and level promotion.
"""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from schoolhub.models.performance import Performance


def score_payload(event_id: int, roll_number: str, score: float, level: str = "Class", class_name: str = "8") -> dict:
    return {
        "event_id": event_id,
        "roll_number": roll_number,
        "student_name": f"Student {roll_number}",
        "class_name": class_name,
        "score": score,
        "level": level,
    }


async def record_scores(client: AsyncClient, headers: dict, event_id: int, scores: dict, level: str = "Class"):
    for roll_number, score in scores.items():
        response = await client.post(
            "/api/v1/performance/", json=score_payload(event_id, roll_number, score, level), headers=headers
        )
        assert response.status_code == 201


async def records_for(db_session, event_id: int, level: str) -> list[Performance]:
    result = await db_session.execute(
        select(Performance)
        .where(Performance.event_id == event_id, Performance.level == level)
        .order_by(Performance.roll_number)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_record_score(client: AsyncClient, admin_headers, test_event):
    response = await client.post(
        "/api/v1/performance/", json=score_payload(test_event.id, "801", 42), headers=admin_headers
    )
    assert response.status_code == 201
    data = response.json()
    assert data["score"] == 42
    assert data["level"] == "Class"
    assert data["status"] == "Participated"
    assert data["metric_type"] == "Score"


@pytest.mark.asyncio
async def test_record_score_copies_metric_label(client: AsyncClient, admin_headers, timed_event):
    response = await client.post(
        "/api/v1/performance/", json=score_payload(timed_event.id, "801", 754.2), headers=admin_headers
    )
    assert response.json()["metric_type"] == "Time"


@pytest.mark.asyncio
async def test_record_score_is_idempotent(client: AsyncClient, admin_headers, db_session, test_event):
    """Same (event, student, level) twice leaves one record with the last score."""
    event_id = test_event.id
    first = await client.post("/api/v1/performance/", json=score_payload(event_id, "801", 10), headers=admin_headers)
    second = await client.post("/api/v1/performance/", json=score_payload(event_id, "801", 20), headers=admin_headers)

    assert first.json()["id"] == second.json()["id"]
    records = await records_for(db_session, event_id, "Class")
    assert len(records) == 1
    assert records[0].score == 20
    assert records[0].status == "Participated"


@pytest.mark.asyncio
async def test_record_score_per_level(client: AsyncClient, admin_headers, db_session, test_event):
    event_id = test_event.id
    await record_scores(client, admin_headers, event_id, {"801": 10})
    await record_scores(client, admin_headers, event_id, {"801": 15}, level="School")

    assert len(await records_for(db_session, event_id, "Class")) == 1
    assert len(await records_for(db_session, event_id, "School")) == 1


@pytest.mark.asyncio
async def test_record_score_unknown_event(client: AsyncClient, admin_headers):
    response = await client.post("/api/v1/performance/", json=score_payload(99999, "801", 10), headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_record_score_requires_admin(client: AsyncClient, test_event):
    response = await client.post("/api/v1/performance/", json=score_payload(test_event.id, "801", 10))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_record_score_publishes_leaderboard_update(client: AsyncClient, admin_headers, relay, test_event):
    async with relay.subscribe() as subscription:
        await client.post(
            "/api/v1/performance/", json=score_payload(test_event.id, "801", 10, "School"), headers=admin_headers
        )
        message = subscription.queue.get_nowait()

    assert message == {"event": "leaderboard_update", "data": {"event_id": test_event.id, "level": "School"}}


@pytest.mark.asyncio
async def test_leaderboard_descending(client: AsyncClient, admin_headers, test_event):
    """Points: highest score ranks first."""
    event_id = test_event.id
    await record_scores(client, admin_headers, event_id, {"1": 50, "2": 90, "3": 70})

    response = await client.get("/api/v1/performance/leaderboard", params={"event_id": event_id})
    assert response.status_code == 200
    assert [p["roll_number"] for p in response.json()] == ["2", "3", "1"]


@pytest.mark.asyncio
async def test_leaderboard_ascending(client: AsyncClient, admin_headers, timed_event):
    """Elapsed time: lowest score ranks first."""
    event_id = timed_event.id
    await record_scores(client, admin_headers, event_id, {"1": 61.5, "2": 58.2, "3": 64.0})

    response = await client.get("/api/v1/performance/leaderboard", params={"event_id": event_id})
    assert [p["roll_number"] for p in response.json()] == ["2", "1", "3"]


@pytest.mark.asyncio
async def test_leaderboard_class_filter(client: AsyncClient, admin_headers, test_event):
    event_id = test_event.id
    for roll_number, class_name in (("1", "8"), ("2", "9"), ("3", "8")):
        await client.post(
            "/api/v1/performance/",
            json=score_payload(event_id, roll_number, int(roll_number), class_name=class_name),
            headers=admin_headers,
        )

    response = await client.get(
        "/api/v1/performance/leaderboard", params={"event_id": event_id, "level": "Class", "class_name": "8"}
    )
    assert [p["roll_number"] for p in response.json()] == ["3", "1"]


@pytest.mark.asyncio
async def test_leaderboard_class_filter_ignored_above_class_level(client: AsyncClient, admin_headers, test_event):
    event_id = test_event.id
    await client.post(
        "/api/v1/performance/", json=score_payload(event_id, "1", 5, "School", class_name="8"), headers=admin_headers
    )
    await client.post(
        "/api/v1/performance/", json=score_payload(event_id, "2", 6, "School", class_name="9"), headers=admin_headers
    )

    response = await client.get(
        "/api/v1/performance/leaderboard", params={"event_id": event_id, "level": "School", "class_name": "8"}
    )
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_leaderboard_empty(client: AsyncClient, test_event):
    response = await client.get("/api/v1/performance/leaderboard", params={"event_id": test_event.id})
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_leaderboard_capped(client: AsyncClient, db_session, test_event):
    event_id = test_event.id
    db_session.add_all([
        Performance(event_id=event_id, student_name=f"S{i}", roll_number=str(i), class_name="8",
                    level="Class", score=i, metric_type="Score", status="Participated")
        for i in range(120)
    ])
    await db_session.commit()

    response = await client.get("/api/v1/performance/leaderboard", params={"event_id": event_id})
    data = response.json()
    assert len(data) == 100
    assert data[0]["score"] == 119


@pytest.mark.asyncio
async def test_promote_school_to_zonal(client: AsyncClient, admin_headers, db_session, test_event):
    event_id = test_event.id
    await record_scores(client, admin_headers, event_id, {"1": 40, "2": 95, "3": 80, "4": 60}, level="School")

    response = await client.post(
        "/api/v1/performance/promote",
        json={"event_id": event_id, "current_level": "School", "next_level": "Zonal", "limit": 2},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Promotion executed", "promoted": 2}

    zonal = await records_for(db_session, event_id, "Zonal")
    assert [(p.roll_number, p.score, p.status) for p in zonal] == [("2", 0, "Qualified"), ("3", 0, "Qualified")]
    assert all(p.metric_type == "Score" for p in zonal)

    school = {p.roll_number: p.status for p in await records_for(db_session, event_id, "School")}
    assert school == {"1": "Participated", "2": "Promoted", "3": "Promoted", "4": "Participated"}


@pytest.mark.asyncio
async def test_promote_twice_promotes_nobody(client: AsyncClient, admin_headers, db_session, test_event):
    event_id = test_event.id
    await record_scores(client, admin_headers, event_id, {"1": 40, "2": 95, "3": 80}, level="School")
    request = {"event_id": event_id, "current_level": "School", "next_level": "Zonal", "limit": 3}

    first = await client.post("/api/v1/performance/promote", json=request, headers=admin_headers)
    second = await client.post("/api/v1/performance/promote", json=request, headers=admin_headers)

    assert first.json()["promoted"] == 3
    assert second.json()["promoted"] == 0
    assert len(await records_for(db_session, event_id, "Zonal")) == 3


@pytest.mark.asyncio
async def test_promote_skips_students_already_at_next_level(client: AsyncClient, admin_headers, db_session, test_event):
    event_id = test_event.id
    await record_scores(client, admin_headers, event_id, {"1": 40, "2": 95}, level="School")
    await record_scores(client, admin_headers, event_id, {"2": 12}, level="Zonal")

    response = await client.post(
        "/api/v1/performance/promote",
        json={"event_id": event_id, "current_level": "School", "next_level": "Zonal", "limit": 2},
        headers=admin_headers,
    )
    assert response.json()["promoted"] == 1

    zonal = {p.roll_number: p.score for p in await records_for(db_session, event_id, "Zonal")}
    assert zonal == {"1": 0, "2": 12}


@pytest.mark.asyncio
async def test_promote_respects_ascending_metric(client: AsyncClient, admin_headers, db_session, timed_event):
    event_id = timed_event.id
    await record_scores(client, admin_headers, event_id, {"1": 61.5, "2": 58.2, "3": 64.0}, level="School")

    await client.post(
        "/api/v1/performance/promote",
        json={"event_id": event_id, "current_level": "School", "next_level": "Zonal", "limit": 1},
        headers=admin_headers,
    )
    zonal = await records_for(db_session, event_id, "Zonal")
    assert [(p.roll_number, p.metric_type) for p in zonal] == [("2", "Time")]


@pytest.mark.asyncio
async def test_promote_without_candidates(client: AsyncClient, admin_headers, test_event):
    response = await client.post(
        "/api/v1/performance/promote",
        json={"event_id": test_event.id, "current_level": "School", "next_level": "Zonal"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"message": "No candidates found", "promoted": 0}


@pytest.mark.asyncio
async def test_promote_from_class_unsupported(client: AsyncClient, admin_headers, test_event):
    response = await client.post(
        "/api/v1/performance/promote",
        json={"event_id": test_event.id, "current_level": "Class", "next_level": "School"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Use School->Zonal promotion for this endpoint currently."


@pytest.mark.asyncio
async def test_promote_downwards_rejected(client: AsyncClient, admin_headers, test_event):
    response = await client.post(
        "/api/v1/performance/promote",
        json={"event_id": test_event.id, "current_level": "Zonal", "next_level": "School"},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_promote_unknown_event(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/performance/promote",
        json={"event_id": 99999, "current_level": "School", "next_level": "Zonal"},
        headers=admin_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_rerecording_promoted_score_resets_status(client: AsyncClient, admin_headers, db_session, test_event):
    event_id = test_event.id
    await record_scores(client, admin_headers, event_id, {"1": 90}, level="School")
    await client.post(
        "/api/v1/performance/promote",
        json={"event_id": event_id, "current_level": "School", "next_level": "Zonal", "limit": 1},
        headers=admin_headers,
    )
    await record_scores(client, admin_headers, event_id, {"1": 91}, level="School")

    school = await records_for(db_session, event_id, "School")
    assert [(p.score, p.status) for p in school] == [(91, "Participated")]


@pytest.mark.asyncio
@pytest.mark.parametrize("score", [float("nan"), float("inf")])
async def test_record_score_rejects_non_finite(client: AsyncClient, admin_headers, db_session, test_event, score):
    event_id = test_event.id
    # The stdlib encoder writes NaN / Infinity literals, which the JSON parser accepts
    body = json.dumps(score_payload(event_id, "801", score))
    response = await client.post(
        "/api/v1/performance/",
        content=body,
        headers={**admin_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert await records_for(db_session, event_id, "Class") == []
