"""
Job pipeline router - API endpoints for a job's candidate pipeline.
"""

import io
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from hiring_pipeline.core.config import settings
from hiring_pipeline.core.dependencies import get_pipeline_service, get_tenant_id
from hiring_pipeline.errors import AppError
from hiring_pipeline.schemas.funnel import FunnelResponse
from hiring_pipeline.schemas.pipeline import (
    BulkAddCandidatesRequest,
    BulkAddResult,
    PipelineCandidateCreate,
    PipelineCandidateRead,
)
from hiring_pipeline.services.pipeline_export_service import export_pipeline_csv
from hiring_pipeline.services.pipeline_service import PipelineService

router = APIRouter(prefix="/jobs/{job_id}/pipeline", tags=["pipeline"])


@router.post("", response_model=PipelineCandidateRead, status_code=status.HTTP_201_CREATED)
async def add_candidate(
    job_id: UUID,
    data: PipelineCandidateCreate,
    tenant_id: UUID = Depends(get_tenant_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """
    Add a candidate to the job's pipeline.

    The candidate starts at `sourced` with an empty status history.
    """
    return await service.add_candidate(
        tenant_id,
        job_id,
        data.candidate_id,
        last_score=data.last_score,
    )


@router.post("/bulk", response_model=BulkAddResult)
async def add_candidates(
    job_id: UUID,
    data: BulkAddCandidatesRequest,
    tenant_id: UUID = Depends(get_tenant_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """
    Add several candidates to the job's pipeline.

    Each id is reported as `created` or `duplicate`; candidates already in
    the pipeline do not fail the request.
    """
    if len(data.candidate_ids) > settings.BULK_ADD_MAX_ITEMS:
        raise AppError(
            422,
            "bulk_limit_exceeded",
            f"At most {settings.BULK_ADD_MAX_ITEMS} candidates per bulk add",
        )

    return await service.add_candidates(tenant_id, job_id, data.candidate_ids)


@router.get("", response_model=List[PipelineCandidateRead])
async def list_candidates(
    job_id: UUID,
    tenant_id: UUID = Depends(get_tenant_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """List the job's pipeline candidates with their status history."""
    return await service.list_candidates(tenant_id, job_id)


@router.get("/funnel", response_model=FunnelResponse)
async def get_funnel(
    job_id: UUID,
    tenant_id: UUID = Depends(get_tenant_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """
    Funnel analytics for the job.

    Per-stage counts, scores, dwell time and conversion rates, overall
    aggregates and the bottleneck stage (or `insufficient_data`).
    """
    return await service.get_funnel(tenant_id, job_id)


@router.get("/export.csv")
async def export_pipeline(
    job_id: UUID,
    tenant_id: UUID = Depends(get_tenant_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """Export the job's pipeline as CSV."""
    candidates = await service.list_candidates(tenant_id, job_id)
    content = export_pipeline_csv(candidates, now=service.clock())

    stream = io.BytesIO(content.encode("utf-8"))
    headers = {"Content-Disposition": f"attachment; filename=pipeline_{job_id}.csv"}
    return StreamingResponse(stream, media_type="text/csv", headers=headers)
