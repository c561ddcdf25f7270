from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from monday_poll.api import get_clock
from monday_poll.errors import AppError, StorageFailure
from monday_poll.server import create_app
from monday_poll.settings import Settings


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(scope="function")
def clock():
    return FakeClock(datetime(2020, 1, 10, tzinfo=timezone.utc))


@pytest.fixture(scope="function")
def client(tmp_path, clock):
    config = Settings(
        DATABASE_PATH=str(tmp_path / "test_monday.db"),
        CLEAN_BEFORE=5 * 3600,
        CLEAN_TIMEOUT=0,
        ALLOW_ORIGINS="http://example.com http://localhost:5173",
    )
    app = create_app(config)
    app.dependency_overrides[get_clock] = lambda: clock

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "submissions": 0}


def test_empty_summary(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {
        "last_24_hours": {"yes": 0, "no": 0},
        "last_12_hours": {"yes": 0, "no": 0},
        "last_6_hours": {"yes": 0, "no": 0},
        "last_3_hours": {"yes": 0, "no": 0},
        "last_hour": {"yes": 0, "no": 0},
    }


def test_submit_then_summary(client, clock):
    start = clock.now
    for hours in range(-30, 1):
        clock.now = start + timedelta(hours=hours)
        assert client.post("/", json=True).status_code == 200
        assert client.post("/", json=False).status_code == 200

    clock.now = start
    data = client.get("/").json()

    assert data["last_24_hours"] == {"yes": 6, "no": 6}
    assert data["last_6_hours"] == {"yes": 6, "no": 6}
    assert data["last_3_hours"] == {"yes": 4, "no": 4}
    assert data["last_hour"] == {"yes": 2, "no": 2}


def test_submit_rejects_non_boolean(client):
    resp = client.post("/", json={"answer": "maybe"})
    assert resp.status_code == 422


@pytest.mark.parametrize("body", ["true", 1, 0, "yes", None])
def test_submit_requires_json_boolean(client, body):
    assert client.post("/", json=body).status_code == 422
    assert client.get("/health").json()["submissions"] == 0


def test_app_error_maps_to_500(client):
    poll_app = client.app.state.poll_app

    async def failing_summary(now):
        raise AppError("surveyor", StorageFailure("summary query failed"))

    poll_app.summary = failing_summary
    resp = client.get("/")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal Server Error"}


def test_cors_allows_configured_origin(client):
    resp = client.options(
        "/",
        headers={
            "Origin": "http://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://example.com"


def test_cors_rejects_unknown_origin(client):
    resp = client.get("/", headers={"Origin": "http://evil.example"})
    assert "access-control-allow-origin" not in resp.headers
