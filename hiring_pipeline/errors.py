"""Structured error helpers for API responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.payload = build_error_payload(code, message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


class TransitionError(AppError):
    """Base class for failures of a single status transition."""


class CandidateNotFoundError(TransitionError):
    def __init__(self, pipeline_candidate_id: Any):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "candidate_not_found",
            f"Pipeline candidate {pipeline_candidate_id} not found for this tenant",
            {"pipeline_candidate_id": str(pipeline_candidate_id)},
        )


class InvalidStageError(TransitionError):
    def __init__(self, value: Any):
        super().__init__(
            422,
            "invalid_stage",
            f"Unknown pipeline stage: {value!r}",
            {"stage": str(value)},
        )


class PersistenceError(TransitionError):
    """Append or read failed; nothing was applied and the whole request may be retried."""

    def __init__(self, message: str = "Failed to persist status change"):
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, "persistence_error", message)


class ConcurrencyTimeoutError(TransitionError):
    def __init__(self, pipeline_candidate_id: Any, timeout: float):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "concurrency_timeout",
            f"Another status change for {pipeline_candidate_id} is in progress; retry the request",
            {"pipeline_candidate_id": str(pipeline_candidate_id), "timeout_seconds": timeout},
        )


class DuplicatePipelineEntryError(AppError):
    def __init__(self, job_id: Any, candidate_id: Any):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "duplicate_pipeline_entry",
            f"Candidate {candidate_id} is already in the pipeline for job {job_id}",
            {"job_id": str(job_id), "candidate_id": str(candidate_id)},
        )


class InvalidIdempotencyKeyError(TransitionError):
    def __init__(self, max_length: int):
        super().__init__(
            422,
            "invalid_idempotency_key",
            f"Idempotency-Key must be at most {max_length} characters",
            {"max_length": max_length},
        )


class IdempotencyKeyConflictError(TransitionError):
    """The key was already used for a transition to a different stage."""

    def __init__(self, request_id: str, recorded_stage: Any, requested_stage: Any):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "idempotency_key_conflict",
            f"Idempotency-Key {request_id!r} was already used to move this candidate to {recorded_stage.value}",
            {
                "recorded_stage": recorded_stage.value,
                "requested_stage": requested_stage.value,
            },
        )
