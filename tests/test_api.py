from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from squat_coach.api.main import app
from squat_coach.api.routers import session as session_router
from squat_coach.api.routers.posture import analyzer
from squat_coach.vision.landmarks import LEFT_KNEE, RIGHT_KNEE


@pytest.fixture(autouse=True)
def fresh_state():
    analyzer.reset_session()
    session_router._state.update({"started_at": None, "status": "idle", "last_summary": None})
    yield


def client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_health():
    async with client() as ac:
        r = await ac.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_posture(landmarks_factory):
    async with client() as ac:
        r = await ac.post("/posture", json={"landmarks": landmarks_factory(170), "timestamp_ms": 0})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["analyzable"] is True
    assert data["rep_count"] == 0
    assert data["knee_angle"] == 170
    assert data["phase"] == "UP"
    assert data["feedback_code"] == "ready"
    assert data["metrics"]["knee_angle_deg"] == pytest.approx(170.0, abs=0.1)


@pytest.mark.asyncio
async def test_posture_rejects_wrong_landmark_count(landmarks_factory):
    async with client() as ac:
        r = await ac.post("/posture", json={"landmarks": landmarks_factory()[:32]})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_posture_accepts_missing_landmarks(landmarks_factory):
    points = landmarks_factory(170)
    points[0] = None
    async with client() as ac:
        r = await ac.post("/posture", json={"landmarks": points})
    assert r.status_code == 200
    assert r.json()["data"]["analyzable"] is True


@pytest.mark.asyncio
async def test_posture_keypoints_without_coordinates_are_gated(landmarks_factory):
    points = landmarks_factory(120)
    points[LEFT_KNEE] = {"visibility": 0.9}
    points[RIGHT_KNEE] = {"x": None, "y": 0.6, "visibility": 0.9}
    async with client() as ac:
        r = await ac.post("/posture", json={"landmarks": points, "timestamp_ms": 0})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["analyzable"] is False
    assert data["feedback_code"] == "low_visibility"
    assert data["rep_count"] == 0


@pytest.mark.asyncio
async def test_posture_low_visibility(landmarks_factory):
    async with client() as ac:
        r = await ac.post("/posture", json={"landmarks": landmarks_factory(170, visibility=0.1)})
    data = r.json()["data"]
    assert data["analyzable"] is False
    assert data["feedback_code"] == "low_visibility"


@pytest.mark.asyncio
async def test_session_lifecycle(landmarks_factory):
    async with client() as ac:
        r = await ac.post("/session/start")
        assert r.json()["data"]["status"] == "active"

        for i, angle in enumerate([170, 125, 90, 165]):
            r = await ac.post("/posture", json={"landmarks": landmarks_factory(angle), "timestamp_ms": i * 33})
            assert r.status_code == 200
        assert r.json()["data"]["rep"]["good_form"] is True

        r = await ac.get("/session/status")
        status = r.json()["data"]
        assert status["status"] == "active"
        assert status["rep_count"] == 1
        assert status["frames_processed"] == 4

        r = await ac.post("/session/stop")
        summary = r.json()["data"]
        assert summary["total_reps"] == 1
        assert summary["form_score"] == 100
        assert summary["best_depth"] == 90
        assert summary["main_issue"] == "None"
        assert summary["voice_prompt"].startswith("Session complete!")

        r = await ac.get("/session/summary")
        assert r.json()["data"] == summary

        r = await ac.get("/session/status")
        assert r.json()["data"]["status"] == "idle"
        assert r.json()["data"]["session_summary"] == summary


@pytest.mark.asyncio
async def test_stop_without_session():
    async with client() as ac:
        r = await ac.post("/session/stop")
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "no_active_session"


@pytest.mark.asyncio
async def test_summary_without_session():
    async with client() as ac:
        r = await ac.get("/session/summary")
    assert r.json()["error"] == "no_active_session"


@pytest.mark.asyncio
async def test_tool_get_squat_analysis(landmarks_factory):
    async with client() as ac:
        await ac.post("/session/start")
        await ac.post("/posture", json={"landmarks": landmarks_factory(170)})
        await ac.post("/posture", json={"landmarks": landmarks_factory(110)})
        r = await ac.post("/tools/get_squat_analysis")
    data = r.json()["data"]
    assert data["squat_count"] == 0
    assert data["current_knee_angle"] == 110
    assert data["movement_stage"] == "DOWN"
    assert data["is_form_good"] is True
    assert data["feedback_string"]


@pytest.mark.asyncio
async def test_tool_get_session_summary():
    async with client() as ac:
        await ac.post("/session/start")
        r = await ac.post("/tools/get_session_summary")
    body = r.json()
    assert body["success"] is True
    assert body["data"]["total_reps"] == 0
    assert body["data"]["form_score"] == 0


@pytest.mark.asyncio
async def test_config():
    async with client() as ac:
        r = await ac.get("/config")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["squat_threshold"] < data["stand_threshold"]
    assert "error_cooldown_ms" in data
