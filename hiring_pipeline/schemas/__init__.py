"""
Schemas package.

Pydantic models for request validation and response serialization.
"""

from hiring_pipeline.schemas.funnel import (
    BottleneckResult,
    BottleneckStatus,
    FunnelReport,
    FunnelResponse,
    OverallMetrics,
    StageMetrics,
)
from hiring_pipeline.schemas.pipeline import (
    BulkAddCandidatesRequest,
    BulkAddItem,
    BulkAddOutcome,
    BulkAddResult,
    BulkStatusTransitionRequest,
    BulkTransitionError,
    BulkTransitionItem,
    BulkTransitionResult,
    PipelineCandidateCreate,
    PipelineCandidateRead,
    ScoreUpdateRequest,
    StatusEventRead,
    StatusTransitionRequest,
    TransitionResult,
)

__all__ = [
    "BottleneckResult",
    "BottleneckStatus",
    "FunnelReport",
    "FunnelResponse",
    "OverallMetrics",
    "StageMetrics",
    "BulkAddCandidatesRequest",
    "BulkAddItem",
    "BulkAddOutcome",
    "BulkAddResult",
    "BulkStatusTransitionRequest",
    "BulkTransitionError",
    "BulkTransitionItem",
    "BulkTransitionResult",
    "PipelineCandidateCreate",
    "PipelineCandidateRead",
    "ScoreUpdateRequest",
    "StatusEventRead",
    "StatusTransitionRequest",
    "TransitionResult",
]
