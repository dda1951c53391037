from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from image_jobs.errors import InvalidPayloadError


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"

    def can_transition_to(self, target: "JobStatus") -> bool:
        return target in _TRANSITIONS[self]


# pending -> processing -> complete | failed. Nothing leaves a terminal state.
_TRANSITIONS = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETE, JobStatus.FAILED}),
    JobStatus.COMPLETE: frozenset(),
    JobStatus.FAILED: frozenset(),
}


@dataclass
class Job:
    """
    Transient copy of one row of the jobs table.

    Fields:
        id: Row id, whatever type the table uses.
        input_image_url: http(s) URL or an inline "data:" payload.
        status: Current JobStatus.
        result_image_url: Set only once the job is complete.
        error_message: Set only once the job has failed.
        processed_at: ISO timestamp of the terminal transition.
    """

    id: str | int
    input_image_url: str
    status: JobStatus = JobStatus.PENDING

    result_image_url: Optional[str] = None
    error_message: Optional[str] = None
    processed_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Job":
        """
        Build from a store row or a webhook "record". Extra columns are ignored.
        """
        raw_status = record.get("status")
        try:
            status = JobStatus(raw_status)
        except ValueError as e:
            raise InvalidPayloadError(f"Unknown job status: {raw_status!r}") from e

        return cls(
            id=record["id"],
            input_image_url=str(record.get("input_image_url") or ""),
            status=status,
            result_image_url=record.get("result_image_url"),
            error_message=record.get("error_message"),
            processed_at=record.get("processed_at"),
        )
