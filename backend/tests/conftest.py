import pytest

from app.services.job_store import job_service


@pytest.fixture
def store(tmp_path, monkeypatch):
    """Global store pointed at a temporary file and emptied for the test."""
    monkeypatch.setattr(job_service, "path", tmp_path / "jobs.json")
    job_service.reset()
    yield job_service
    job_service.reset()
