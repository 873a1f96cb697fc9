import logging

import httpx
import pytest
import pytest_asyncio

from trainer_service.adapters.hour_memory_repository import MemoryHourRepository
from trainer_service.application import build_application
from trainer_service.config import Settings
from trainer_service.main import create_app

from conftest import JWT_SECRET, auth_headers, hour_at

TRAINER = auth_headers("trainer-1", "trainer", "Tom")
ATTENDEE = auth_headers("attendee-1", "attendee", "Ann")


@pytest_asyncio.fixture
async def client(hour_factory):
    repo = MemoryHourRepository(hour_factory)
    settings = Settings(database_url="sqlite+aiosqlite://", jwt_secret=JWT_SECRET)
    app = create_app(settings, build_application(repo, logging.getLogger("test.trainer")))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://trainer") as c:
        yield c


async def make_available(client, *hours):
    resp = await client.put(
        "/trainer/calendar/make-hours-available",
        json={"hours": [h.isoformat() for h in hours]},
        headers=TRAINER,
    )
    assert resp.status_code == 204, resp.text


@pytest.mark.asyncio
async def test_calendar_requires_token(client):
    resp = await client.get("/trainer/calendar", params={"date_from": "2025-11-25", "date_to": "2025-11-25"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_only_trainer_edits_calendar(client):
    resp = await client.put(
        "/trainer/calendar/make-hours-available",
        json={"hours": [hour_at(1, 13).isoformat()]},
        headers=ATTENDEE,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_calendar_roundtrip(client):
    await make_available(client, hour_at(1, 13), hour_at(1, 14))

    resp = await client.put(
        "/trainer/calendar/make-hours-unavailable",
        json={"hours": [hour_at(1, 14).isoformat()]},
        headers=TRAINER,
    )
    assert resp.status_code == 204

    resp = await client.get(
        "/trainer/calendar",
        params={"date_from": hour_at(1, 0).isoformat(), "date_to": hour_at(1, 0).isoformat()},
        headers=ATTENDEE,
    )
    assert resp.status_code == 200
    dates = resp.json()
    assert len(dates) == 1
    assert dates[0]["has_free_hours"] is True
    available = [h for h in dates[0]["hours"] if h["available"]]
    assert len(available) == 1
    assert len(dates[0]["hours"]) == 9


@pytest.mark.asyncio
async def test_calendar_rejects_inverted_range(client):
    resp = await client.get(
        "/trainer/calendar",
        params={"date_from": hour_at(2, 0).isoformat(), "date_to": hour_at(1, 0).isoformat()},
        headers=TRAINER,
    )
    assert resp.status_code == 400
    assert resp.json()["slug"] == "date-from-after-date-to"


@pytest.mark.asyncio
async def test_calendar_rejects_garbage_dates(client):
    resp = await client.get(
        "/trainer/calendar", params={"date_from": "soon", "date_to": "later"}, headers=TRAINER
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_invalid_hour_is_validation_error(client):
    resp = await client.put(
        "/trainer/calendar/make-hours-available",
        json={"hours": [hour_at(1, 5).isoformat()]},
        headers=TRAINER,
    )
    assert resp.status_code == 400
    assert resp.json()["slug"] == "too-early-hour"


@pytest.mark.asyncio
async def test_internal_schedule_cancel_and_move(client):
    h1, h2 = hour_at(1, 13), hour_at(2, 15)
    await make_available(client, h1, h2)

    resp = await client.post("/internal/hours/schedule-training", json={"hour": h1.isoformat()})
    assert resp.status_code == 204

    resp = await client.post("/internal/hours/schedule-training", json={"hour": h1.isoformat()})
    assert resp.status_code == 409
    assert resp.json()["slug"] == "hour-not-available"

    resp = await client.get("/internal/hours/availability", params={"hour": h1.isoformat()})
    assert resp.json()["is_available"] is False

    resp = await client.post(
        "/internal/hours/move-training",
        json={"new_time": h2.isoformat(), "original_time": h1.isoformat()},
    )
    assert resp.status_code == 204

    resp = await client.get("/internal/hours/availability", params={"hour": h1.isoformat()})
    assert resp.json()["is_available"] is True

    resp = await client.post("/internal/hours/cancel-training", json={"hour": h2.isoformat()})
    assert resp.status_code == 204
    resp = await client.post("/internal/hours/cancel-training", json={"hour": h2.isoformat()})
    assert resp.status_code == 409
    assert resp.json()["slug"] == "no-training-scheduled"


@pytest.mark.asyncio
async def test_move_to_unavailable_hour_keeps_original(client):
    h1, h2 = hour_at(1, 13), hour_at(2, 15)
    await make_available(client, h1)
    await client.post("/internal/hours/schedule-training", json={"hour": h1.isoformat()})

    resp = await client.post(
        "/internal/hours/move-training",
        json={"new_time": h2.isoformat(), "original_time": h1.isoformat()},
    )
    assert resp.status_code == 409

    resp = await client.get("/internal/hours/availability", params={"hour": h1.isoformat()})
    assert resp.json()["is_available"] is False


@pytest.mark.asyncio
async def test_delete_hour(client):
    await make_available(client, hour_at(1, 13))

    resp = await client.delete("/trainer/calendar/hours", params={"hour": hour_at(1, 13).isoformat()}, headers=TRAINER)
    assert resp.status_code == 204

    resp = await client.delete("/trainer/calendar/hours", params={"hour": hour_at(1, 13).isoformat()}, headers=TRAINER)
    assert resp.status_code == 404
    assert resp.json()["slug"] == "hour-not-found"


@pytest.mark.asyncio
async def test_health_and_request_id(client):
    resp = await client.get("/health", headers={"X-Request-Id": "req-1"})
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Request-Id"] == "req-1"
