from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.core.errors import JobAlreadyExistsError
from app.models.job import Job, JobPayload
from app.services.job_store import cleanup_scheduler, job_service

router = APIRouter(prefix="/jobs", tags=["jobs"])
cleanup_router = APIRouter(tags=["cleanup"])

# Rutas síncronas: FastAPI las ejecuta en su pool de hilos y el almacén
# se protege con un lock de threading.


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Job not found",
    )


@router.get("", summary="Get all jobs")
def list_jobs() -> dict:
    return {job_id: job.to_record() for job_id, job in job_service.list_jobs().items()}


@router.get("/{job_id}", summary="Get a specific job")
def get_job(job_id: str) -> dict:
    job = job_service.get_job(job_id)
    if job is None:
        raise _not_found()
    return job.to_record()


@router.post("", summary="Create a new job", status_code=status.HTTP_201_CREATED)
def create_job(payload: JobPayload) -> dict:
    if not payload.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Job id is required",
        )

    try:
        created = job_service.create_job(Job.from_payload(payload))
    except JobAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Job already exists",
        ) from e
    return created.to_record()


@router.put("/{job_id}", summary="Update a job")
def update_job(job_id: str, payload: JobPayload) -> dict:
    updated = job_service.update_job(job_id, Job.from_payload(payload, job_id=job_id))
    if updated is None:
        raise _not_found()
    return updated.to_record()


@router.delete("/{job_id}", summary="Delete a job")
def delete_job(job_id: str) -> dict:
    if not job_service.delete_job(job_id):
        raise _not_found()
    return {"success": True}


@cleanup_router.post("/cleanup", summary="Run the retention cleanup now")
def run_cleanup() -> dict:
    return {"deleted": cleanup_scheduler.trigger()}
