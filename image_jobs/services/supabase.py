from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from supabase import Client, create_client

from image_jobs.config import get_settings
from image_jobs.errors import JobNotFoundError, JobStoreError
from image_jobs.jobs.models import Job, JobStatus
from image_jobs.utils.time import utc_now_iso

# Lazily-initialized Supabase client
_client: Optional[Client] = None


def _get_client() -> Client:
    """
    Create the service-role client on first use so importing this module
    does not need credentials (e.g. during local tests).
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    return _client


def _jobs_table():
    return _get_client().table(get_settings().jobs_table)


# ================================
# READ
# ================================
def fetch_job(job_id: str | int) -> Job:
    """
    Load one job row by id.

    Raises:
        JobNotFoundError if no row has this id.
        JobStoreError if the query itself fails.
    """
    try:
        response = _jobs_table().select("*").eq("id", job_id).limit(1).execute()
    except Exception as e:  # noqa: BLE001
        logging.error("[SUPABASE ERROR fetch %s] %s", job_id, e)
        raise JobStoreError(f"Failed to fetch job from Supabase: {e}") from e

    rows = response.data or []
    if not rows:
        raise JobNotFoundError(f"Job {job_id} not found")
    return Job.from_record(rows[0])


# ================================
# UPDATES
# ================================
def update_job(job_id: str | int, values: Dict[str, Any]) -> None:
    """
    Update one job row by id.

    Raises:
        JobStoreError on any client/API error.
    """
    try:
        _jobs_table().update(values).eq("id", job_id).execute()
    except Exception as e:  # noqa: BLE001
        logging.error("[SUPABASE ERROR update %s] %s", job_id, e)
        raise JobStoreError(f"Failed to update job in Supabase: {e}") from e
    logging.info("[SUPABASE] job %s updated: %s", job_id, values.get("status"))


def mark_processing(job_id: str | int) -> None:
    """
    Best-effort claim: pending -> processing.

    This MUST NEVER interrupt the pipeline and is not a lock. Two deliveries
    for the same job can both get here; errors are logged and dropped.
    """
    try:
        update_job(job_id, {"status": JobStatus.PROCESSING.value})
    except JobStoreError as e:
        logging.warning("[SUPABASE] claim of job %s not recorded: %s", job_id, e)


def mark_complete(job_id: str | int, result_image_url: str) -> None:
    update_job(
        job_id,
        {
            "status": JobStatus.COMPLETE.value,
            "result_image_url": result_image_url,
            "processed_at": utc_now_iso(),
        },
    )


def mark_failed(job_id: str | int, error_message: str) -> None:
    update_job(
        job_id,
        {
            "status": JobStatus.FAILED.value,
            "error_message": error_message,
            "result_image_url": None,
            "processed_at": utc_now_iso(),
        },
    )
