from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from image_jobs.errors import InvalidPayloadError, JobProcessingError, JobStoreError
from image_jobs.jobs.models import Job, JobStatus
from image_jobs.jobs.validator import validate_notification
from image_jobs.media import source
from image_jobs.services import openai_images
from image_jobs.services import supabase as job_store


@dataclass
class WebhookResult:
    """
    Request-level outcome: what goes back to the webhook caller.
    """
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **extra: Any) -> "WebhookResult":
        return cls(200, {"message": message, **extra})

    @classmethod
    def error(cls, status_code: int, error: str, details: Any = None, **extra: Any) -> "WebhookResult":
        body: Dict[str, Any] = {"error": error, **extra}
        if details is not None:
            body["details"] = details
        return cls(status_code, body)

    @classmethod
    def internal_error(cls, exc: BaseException) -> "WebhookResult":
        return cls.error(500, "Internal server error", details=str(exc))


@dataclass
class PipelineOutcome:
    """
    Result of acquire -> submit -> store. Exactly one field is set.
    """
    result_image_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result_image_url is not None


def handle_notification(payload: Any) -> WebhookResult:
    """
    Process one row-insert notification for the jobs table.

    Flow:
    1. Validate the record (400 on missing fields, nothing written).
    2. Ignore anything not pending (200, nothing written).
    3. Load the row (500 if absent or the read fails, nothing written).
    4. Claim it (best-effort update to processing).
    5. Run the pipeline; it always ends in complete or failed.

    Anything not handled by a step ends up in the outer guard as a
    generic 500 without touching the row.
    """
    try:
        return _handle(payload)
    except Exception as e:  # noqa: BLE001
        logging.exception("[WEBHOOK ERROR] %s", e)
        return WebhookResult.internal_error(e)


def _handle(payload: Any) -> WebhookResult:
    try:
        record = validate_notification(payload)
    except InvalidPayloadError as e:
        logging.warning("[WEBHOOK] rejected payload, missing: %s", e.missing)
        return WebhookResult.error(400, str(e), missing=e.missing)

    job_id = record["id"]
    if record["status"] != JobStatus.PENDING.value:
        logging.info("[JOB %s] status %r, skipping", job_id, record["status"])
        return WebhookResult.ok("Job is not in pending status; no action taken.")

    try:
        job = job_store.fetch_job(job_id)
    except (JobStoreError, InvalidPayloadError) as e:
        return WebhookResult.error(500, "Failed to fetch job from Supabase", details=str(e))

    # A redelivery can arrive after an earlier one already claimed the row.
    if job.status != JobStatus.PENDING:
        logging.info("[JOB %s] row is already %s, skipping", job_id, job.status.value)
        return WebhookResult.ok("Job is not in pending status; no action taken.")

    # Not a lock: concurrent deliveries that both read "pending" both proceed.
    job_store.mark_processing(job_id)
    _advance(job, JobStatus.PROCESSING)

    # The notification is the source of truth for the input, like the status check.
    job.input_image_url = record["input_image_url"]

    outcome = run_pipeline(job)
    if outcome.succeeded:
        return WebhookResult.ok(
            "Job processed successfully",
            result_image_url=outcome.result_image_url,
        )
    return WebhookResult.error(500, "Job processing failed", details=outcome.error)


def run_pipeline(job: Job) -> PipelineOutcome:
    """
    Acquire the image, get a variation, store the result.

    Every failure in here is written back as status=failed before returning.
    If that write fails too, the JobStoreError propagates to the caller.
    """
    try:
        image = source.acquire_image(job.input_image_url)
        result_image_url = openai_images.create_variation(image)
        job_store.mark_complete(job.id, result_image_url)
    except Exception as e:  # noqa: BLE001
        if isinstance(e, JobProcessingError):
            logging.error("[JOB %s] processing failed: %s", job.id, e)
        else:
            logging.exception("[JOB %s] unexpected processing error", job.id)
        message = str(e) or e.__class__.__name__
        job_store.mark_failed(job.id, message)
        _advance(job, JobStatus.FAILED)
        job.error_message = message
        return PipelineOutcome(error=message)

    _advance(job, JobStatus.COMPLETE)
    job.result_image_url = result_image_url
    logging.info("[JOB %s] complete", job.id)
    return PipelineOutcome(result_image_url=result_image_url)


def _advance(job: Job, target: JobStatus) -> None:
    if not job.status.can_transition_to(target):
        raise RuntimeError(f"Illegal job transition {job.status.value} -> {target.value}")
    job.status = target
