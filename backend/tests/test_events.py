"""
Tests for event CRUD, listing, availability and date-derived status.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from schoolhub.models.application import Application
from schoolhub.models.event import derive_status
from schoolhub.models.performance import Performance

from conftest import build_event, days_from_today, application_payload


def event_payload(**overrides) -> dict:
    payload = {
        "event_name": "Science Fair",
        "category": "Academics",
        "start_date": days_from_today(10),
        "end_date": days_from_today(12),
        "time": "10:00 AM",
        "venue": "Auditorium",
        "sub_activities": ["Model Display", "Poster"],
    }
    payload.update(overrides)
    return payload


def test_derive_status():
    assert derive_status("2026-03-01", "2026-03-05", today="2026-03-03") == "present"
    assert derive_status("2026-03-01", "2026-03-05", today="2026-03-05") == "present"
    assert derive_status("2026-03-01", "2026-03-05", today="2026-03-06") == "past"
    assert derive_status("2026-03-01", "2026-03-05", today="2026-02-28") == "upcoming"


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, admin_headers):
    """Admin can create an event; defaults are filled in."""
    response = await client.post("/api/v1/events/", json=event_payload(capacity=50), headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["event_name"] == "Science Fair"
    assert data["status"] == "upcoming"
    assert data["date"] == data["start_date"]
    assert data["event_type"] == "individual"
    assert data["capacity"] == 50
    assert data["participation_config"]["min_players"] == 1
    assert data["metric_config"]["sort_by"] == "desc"


@pytest.mark.asyncio
async def test_create_event_requires_admin(client: AsyncClient):
    response = await client.post("/api/v1/events/", json=event_payload())
    assert response.status_code == 401

    response = await client.post("/api/v1/events/", json=event_payload(), headers={"X-Admin-Token": "wrong"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_event_end_before_start(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/events/",
        json=event_payload(start_date=days_from_today(5), end_date=days_from_today(4)),
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_event_bad_date_format(client: AsyncClient, admin_headers):
    response = await client.post("/api/v1/events/", json=event_payload(start_date="12/05/2026"), headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_team_event_invalid_player_range(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/events/",
        json=event_payload(event_type="team", participation_config={"min_players": 6, "max_players": 4}),
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_events_by_status(client: AsyncClient, db_session):
    db_session.add_all([
        build_event(event_name="Ongoing", start_date=days_from_today(-1), end_date=days_from_today(1)),
        build_event(event_name="Finished", start_date=days_from_today(-10), end_date=days_from_today(-8)),
        build_event(event_name="Later", start_date=days_from_today(20), end_date=days_from_today(20)),
        build_event(event_name="Soon", start_date=days_from_today(3), end_date=days_from_today(4)),
    ])
    await db_session.commit()

    response = await client.get("/api/v1/events/")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 4
    assert data["cached"] is False
    # Nearest start date first
    assert [e["event_name"] for e in data["data"]] == ["Finished", "Ongoing", "Soon", "Later"]
    assert [e["status"] for e in data["data"]] == ["past", "present", "upcoming", "upcoming"]

    response = await client.get("/api/v1/events/", params={"status": "present"})
    assert [e["event_name"] for e in response.json()["data"]] == ["Ongoing"]

    response = await client.get("/api/v1/events/", params={"status": "upcoming"})
    assert [e["event_name"] for e in response.json()["data"]] == ["Soon", "Later"]


@pytest.mark.asyncio
async def test_list_events_pagination(client: AsyncClient, db_session):
    db_session.add_all([build_event(event_name=f"Event {i}", start_date=days_from_today(i + 1),
                                    end_date=days_from_today(i + 1)) for i in range(5)])
    await db_session.commit()

    response = await client.get("/api/v1/events/", params={"page": 2, "limit": 2})
    data = response.json()
    assert data["page"] == 2
    assert data["pages"] == 3
    assert data["total"] == 5
    assert [e["event_name"] for e in data["data"]] == ["Event 2", "Event 3"]


@pytest.mark.asyncio
async def test_list_events_rejects_unknown_status(client: AsyncClient):
    response = await client.get("/api/v1/events/", params={"status": "archived"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_event_counts(client: AsyncClient, db_session):
    db_session.add_all([
        build_event(start_date=days_from_today(0), end_date=days_from_today(0)),
        build_event(start_date=days_from_today(-3), end_date=days_from_today(-2)),
        build_event(start_date=days_from_today(7), end_date=days_from_today(8)),
    ])
    await db_session.commit()

    response = await client.get("/api/v1/events/counts")
    assert response.status_code == 200
    assert response.json() == {"present_count": 1, "upcoming_count": 1, "total_events": 3}


@pytest.mark.asyncio
async def test_get_event(client: AsyncClient, test_event):
    response = await client.get(f"/api/v1/events/{test_event.id}")
    assert response.status_code == 200
    assert response.json()["event_name"] == "Annual Sports Meet"


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    response = await client.get("/api/v1/events/99999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found"


@pytest.mark.asyncio
async def test_availability_unlimited(client: AsyncClient, test_event):
    response = await client.get(f"/api/v1/events/{test_event.id}/availability")
    assert response.status_code == 200
    assert response.json() == {"available": True, "remaining": None, "total": None}


@pytest.mark.asyncio
async def test_availability_counts_applications(client: AsyncClient, limited_event):
    event_id = limited_event.id
    await client.post("/api/v1/applications/", json=application_payload(event_id, roll_number="1"))

    response = await client.get(f"/api/v1/events/{event_id}/availability")
    assert response.json() == {"available": True, "remaining": 1, "total": 2}

    await client.post("/api/v1/applications/", json=application_payload(event_id, roll_number="2"))
    response = await client.get(f"/api/v1/events/{event_id}/availability")
    assert response.json() == {"available": False, "remaining": 0, "total": 2}


@pytest.mark.asyncio
async def test_availability_not_found(client: AsyncClient):
    response = await client.get("/api/v1/events/424242/availability")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_event_keeps_blank_fields(client: AsyncClient, admin_headers, test_event):
    """Empty strings do not overwrite stored text fields."""
    response = await client.put(
        f"/api/v1/events/{test_event.id}",
        json={"event_name": "", "venue": "Indoor Hall"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["event_name"] == "Annual Sports Meet"
    assert data["venue"] == "Indoor Hall"


@pytest.mark.asyncio
async def test_update_event_merges_configs(client: AsyncClient, admin_headers, team_event):
    response = await client.put(
        f"/api/v1/events/{team_event.id}",
        json={"participation_config": {"max_substitutes": 2}, "metric_config": {"sort_by": "asc"}},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["participation_config"] == {"min_players": 3, "max_players": 5, "max_substitutes": 2, "team_size": 5}
    assert data["metric_config"]["sort_by"] == "asc"
    assert data["metric_config"]["metric_label"] == "Score"


@pytest.mark.asyncio
async def test_update_event_capacity_can_be_lifted(client: AsyncClient, admin_headers, limited_event):
    event_id = limited_event.id
    response = await client.put(f"/api/v1/events/{event_id}", json={"capacity": None}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["capacity"] is None

    # Omitting capacity leaves it alone
    await client.put(f"/api/v1/events/{event_id}", json={"capacity": 10}, headers=admin_headers)
    response = await client.put(f"/api/v1/events/{event_id}", json={"venue": "Library"}, headers=admin_headers)
    assert response.json()["capacity"] == 10


@pytest.mark.asyncio
async def test_update_event_rejects_invalid_merge(client: AsyncClient, admin_headers, team_event):
    event_id = team_event.id
    response = await client.put(
        f"/api/v1/events/{event_id}",
        json={"participation_config": {"min_players": 9}},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "min_players cannot exceed max_players"

    response = await client.put(
        f"/api/v1/events/{event_id}",
        json={"end_date": "2000-01-01"},
        headers=admin_headers,
    )
    assert response.status_code == 400

    response = await client.get(f"/api/v1/events/{event_id}")
    assert response.json()["participation_config"]["min_players"] == 3


@pytest.mark.asyncio
async def test_update_event_not_found(client: AsyncClient, admin_headers):
    response = await client.put("/api/v1/events/99999", json={"venue": "Nowhere"}, headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_event_cascades(client: AsyncClient, admin_headers, db_session, test_event):
    event_id = test_event.id
    await client.post(
        "/api/v1/applications/",
        json=application_payload(event_id, team_members=[{"name": "Ravi", "roll_number": "802"}]),
    )
    await client.post(
        "/api/v1/performance/",
        json={"event_id": event_id, "roll_number": "801", "student_name": "Asha Verma",
              "class_name": "8", "score": 12.5},
        headers=admin_headers,
    )

    response = await client.delete(f"/api/v1/events/{event_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Event removed"}

    response = await client.get(f"/api/v1/events/{event_id}")
    assert response.status_code == 404
    assert await db_session.scalar(select(func.count()).select_from(Application)) == 0
    assert await db_session.scalar(select(func.count()).select_from(Performance)) == 0


@pytest.mark.asyncio
async def test_delete_event_requires_admin(client: AsyncClient, test_event):
    response = await client.delete(f"/api/v1/events/{test_event.id}")
    assert response.status_code == 401
