"""
Pydantic schemas for pipeline candidates and status transitions.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from hiring_pipeline.domain.stages import PipelineStage


class StatusEventRead(BaseModel):
    """One entry of a candidate's status history."""

    stage: PipelineStage
    timestamp: datetime
    sequence: int
    note: Optional[str] = None
    changed_by: Optional[str] = None
    rejected_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PipelineCandidateCreate(BaseModel):
    """Add a candidate to a job's pipeline."""

    candidate_id: UUID
    last_score: Optional[float] = Field(default=None, ge=0, le=100)


class PipelineCandidateRead(BaseModel):
    id: UUID
    job_id: UUID
    candidate_id: UUID
    current_stage: PipelineStage
    created_at: datetime
    last_score: Optional[float] = None
    rejected_reason: Optional[str] = None
    history: List[StatusEventRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class StatusTransitionRequest(BaseModel):
    """
    Request to move a candidate to another stage.

    `status` is validated by the transition service so unknown stages
    surface as `invalid_stage` rather than a generic validation error.
    """

    status: str
    note: Optional[str] = None
    changed_by: Optional[str] = None
    rejected_reason: Optional[str] = None


class TransitionResult(BaseModel):
    """Confirmed state after a transition."""

    pipeline_candidate_id: UUID
    previous_stage: PipelineStage
    current_stage: PipelineStage
    appended_event: StatusEventRead
    # True when the Idempotency-Key matched an already appended event
    replayed: bool = False


class BulkStatusTransitionRequest(BaseModel):
    pipeline_candidate_ids: List[UUID] = Field(min_length=1)
    status: str
    note: Optional[str] = None
    changed_by: Optional[str] = None
    rejected_reason: Optional[str] = None


class BulkTransitionError(BaseModel):
    code: str
    message: str


class BulkTransitionItem(BaseModel):
    pipeline_candidate_id: UUID
    ok: bool
    current_stage: Optional[PipelineStage] = None
    error: Optional[BulkTransitionError] = None


class BulkTransitionResult(BaseModel):
    succeeded: int
    failed: int
    results: List[BulkTransitionItem]


class ScoreUpdateRequest(BaseModel):
    last_score: Optional[float] = Field(default=None, ge=0, le=100)


class BulkAddCandidatesRequest(BaseModel):
    candidate_ids: List[UUID] = Field(min_length=1)


class BulkAddOutcome(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"


class BulkAddItem(BaseModel):
    candidate_id: UUID
    outcome: BulkAddOutcome
    # Entry that was created, or the one already in the pipeline when known
    pipeline_candidate_id: Optional[UUID] = None


class BulkAddResult(BaseModel):
    created: int
    duplicates: int
    results: List[BulkAddItem]
