from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.main import app
from app.models.job import Job

UTC = timezone.utc


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def job_body(job_id: str = "j1", **overrides) -> dict:
    body = {
        "id": job_id,
        "name": "Night shift",
        "startTime": "2024-01-01T00:00:00Z",
        "segments": [{"duration": 30}, {"duration": 30}],
        "delays": [{"minutes": 10}],
    }
    body.update(overrides)
    return body


def test_create_then_list_and_get(store):
    client = TestClient(app)

    response = client.post("/api/jobs", json=job_body(notes="bring badge"))
    assert response.status_code == 201
    created = response.json()
    assert created["id"] == "j1"
    assert created["lastUpdated"] is not None
    assert created["notes"] == "bring badge"

    listing = client.get("/api/jobs")
    assert listing.status_code == 200
    assert list(listing.json()) == ["j1"]

    fetched = client.get("/api/jobs/j1").json()
    assert fetched["name"] == "Night shift"
    assert parse_ts(fetched["startTime"]) == datetime(2024, 1, 1, tzinfo=UTC)
    assert store.path.exists()


def test_create_update_get_round_trip(store, monkeypatch):
    times = iter(
        [
            datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
            datetime(2024, 1, 1, 9, 5, tzinfo=UTC),
        ]
    )
    monkeypatch.setattr(store, "clock", lambda: next(times))
    client = TestClient(app)

    created = client.post("/api/jobs", json=job_body()).json()
    response = client.put(
        "/api/jobs/j1",
        json=job_body(
            job_id="ignored",
            name="Renamed",
            segments=[{"duration": 45}],
            lastUpdated="1999-01-01T00:00:00Z",
        ),
    )
    assert response.status_code == 200

    fetched = client.get("/api/jobs/j1").json()
    assert fetched["id"] == "j1"
    assert fetched["name"] == "Renamed"
    assert fetched["segments"] == [{"duration": 45}]
    assert parse_ts(fetched["lastUpdated"]) > parse_ts(created["lastUpdated"])
    assert client.get("/api/jobs/ignored").status_code == 404


def test_put_may_omit_id(store):
    client = TestClient(app)
    client.post("/api/jobs", json=job_body())

    response = client.put("/api/jobs/j1", json={"name": "No id in body"})

    assert response.status_code == 200
    assert response.json()["id"] == "j1"
    assert response.json()["segments"] == []


def test_unknown_job_returns_404(store):
    client = TestClient(app)

    for response in (
        client.get("/api/jobs/nope"),
        client.put("/api/jobs/nope", json=job_body("nope")),
        client.delete("/api/jobs/nope"),
    ):
        assert response.status_code == 404
        assert response.json() == {"error": "Job not found"}


def test_delete_job(store):
    client = TestClient(app)
    client.post("/api/jobs", json=job_body())

    response = client.delete("/api/jobs/j1")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert store.get_job("j1") is None


def test_invalid_json_is_rejected(store):
    client = TestClient(app)

    response = client.post(
        "/api/jobs",
        content="{ not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON"
    assert store.count() == 0


def test_missing_id_is_rejected(store):
    client = TestClient(app)
    body = job_body()
    del body["id"]

    response = client.post("/api/jobs", json=body)

    assert response.status_code == 400
    assert store.count() == 0


def test_wrong_field_type_is_rejected(store):
    client = TestClient(app)

    response = client.post("/api/jobs", json=job_body(segments=[{"duration": "long"}]))

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid job payload"


def test_duplicate_id_is_rejected(store):
    client = TestClient(app)
    client.post("/api/jobs", json=job_body(name="first"))

    response = client.post("/api/jobs", json=job_body(name="second"))

    assert response.status_code == 409
    assert store.get_job("j1").name == "first"


def test_manual_cleanup_endpoint(store):
    now = datetime.now(UTC)
    store.reset(
        [
            Job(id="old", start_time=now - timedelta(days=3), segments=[{"duration": 60}]),
            Job(id="new", start_time=now - timedelta(hours=1), segments=[{"duration": 60}]),
            Job(id="idle", segments=[{"duration": 60}]),
        ]
    )
    client = TestClient(app)

    response = client.post("/api/cleanup")

    assert response.status_code == 200
    assert response.json() == {"deleted": 1}
    assert sorted(store.list_jobs()) == ["idle", "new"]
    assert client.post("/api/cleanup").json() == {"deleted": 0}


def test_startup_runs_initial_cleanup(store):
    now = datetime.now(UTC)
    store.reset(
        [
            Job(id="old", start_time=now - timedelta(days=2), segments=[{"duration": 5}]),
            Job(id="new", start_time=now, segments=[{"duration": 5}]),
        ]
    )

    with TestClient(app) as client:
        assert sorted(client.get("/api/jobs").json()) == ["new"]
        assert client.get("/health").json() == {"status": "ok", "jobs": 1}


def test_cors_preflight(store):
    client = TestClient(app)

    response = client.options(
        "/api/jobs",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_unknown_route_uses_error_shape(store):
    client = TestClient(app)

    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert "error" in response.json()
