"""
Pipeline candidate router - status transitions, history and scores.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header

from hiring_pipeline.core.config import settings
from hiring_pipeline.core.dependencies import (
    get_pipeline_service,
    get_tenant_id,
    get_transition_service,
)
from hiring_pipeline.errors import AppError
from hiring_pipeline.schemas.pipeline import (
    BulkStatusTransitionRequest,
    BulkTransitionResult,
    PipelineCandidateRead,
    ScoreUpdateRequest,
    StatusEventRead,
    StatusTransitionRequest,
    TransitionResult,
)
from hiring_pipeline.services.pipeline_service import PipelineService
from hiring_pipeline.services.status_transition_service import StatusTransitionService

router = APIRouter(prefix="/pipeline-candidates", tags=["pipeline-candidates"])


@router.post("/bulk-status", response_model=BulkTransitionResult)
async def bulk_update_status(
    request: BulkStatusTransitionRequest,
    tenant_id: UUID = Depends(get_tenant_id),
    service: StatusTransitionService = Depends(get_transition_service),
):
    """
    Move several candidates to the same stage.

    Each candidate is processed independently; the response reports
    success or the error code per candidate.
    """
    if len(request.pipeline_candidate_ids) > settings.BULK_TRANSITION_MAX_ITEMS:
        raise AppError(
            422,
            "bulk_limit_exceeded",
            f"At most {settings.BULK_TRANSITION_MAX_ITEMS} candidates per bulk status change",
        )

    return await service.bulk_transition(
        tenant_id,
        request.pipeline_candidate_ids,
        request.status,
        note=request.note,
        changed_by=request.changed_by,
        rejected_reason=request.rejected_reason,
    )


@router.get("/{pipeline_candidate_id}", response_model=PipelineCandidateRead)
async def get_pipeline_candidate(
    pipeline_candidate_id: UUID,
    tenant_id: UUID = Depends(get_tenant_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """Get a pipeline candidate with its status history."""
    return await service.get_candidate(tenant_id, pipeline_candidate_id)


@router.get("/{pipeline_candidate_id}/history", response_model=List[StatusEventRead])
async def get_status_history(
    pipeline_candidate_id: UUID,
    tenant_id: UUID = Depends(get_tenant_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """Status history, oldest first."""
    return await service.get_history(tenant_id, pipeline_candidate_id)


@router.patch("/{pipeline_candidate_id}/status", response_model=TransitionResult)
async def update_status(
    pipeline_candidate_id: UUID,
    request: StatusTransitionRequest,
    tenant_id: UUID = Depends(get_tenant_id),
    service: StatusTransitionService = Depends(get_transition_service),
    idempotency_key: Optional[str] = Header(default=None),
):
    """
    Move a candidate to another stage.

    Appends one status event. Send the same Idempotency-Key when retrying a
    request so a retry that reaches the server twice is applied once.
    """
    return await service.request_transition(
        tenant_id,
        pipeline_candidate_id,
        request.status,
        note=request.note,
        changed_by=request.changed_by,
        rejected_reason=request.rejected_reason,
        request_id=idempotency_key,
    )


@router.patch("/{pipeline_candidate_id}/score", response_model=PipelineCandidateRead)
async def update_score(
    pipeline_candidate_id: UUID,
    request: ScoreUpdateRequest,
    tenant_id: UUID = Depends(get_tenant_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """Set the candidate's latest match score."""
    return await service.update_score(tenant_id, pipeline_candidate_id, request.last_score)
