"""
Funnel report schemas.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from hiring_pipeline.domain.stages import PipelineStage


class StageMetrics(BaseModel):
    """Occupancy, aggregates and conversion for one ordered stage."""

    stage: PipelineStage
    label: str
    position: int
    count: int
    percentage_of_pipeline: float
    avg_score: float
    avg_dwell_seconds: float
    avg_dwell_display: str
    historical_reach: int
    next_stage: Optional[PipelineStage] = None
    transition_count: int
    stage_conversion_rate: float


class OverallMetrics(BaseModel):
    total_candidates: int
    active_count: int
    placed_count: int
    rejected_count: int
    overall_conversion_rate: float


class FunnelReport(BaseModel):
    generated_at: datetime
    stages: List[StageMetrics]
    overall: OverallMetrics


class BottleneckStatus(str, Enum):
    DETECTED = "detected"
    INSUFFICIENT_DATA = "insufficient_data"


class BottleneckResult(BaseModel):
    """
    Weakest stage-to-stage conversion in the funnel.

    With status `insufficient_data` the stage is only the default first
    stage and must not be read as a real bottleneck.
    """

    status: BottleneckStatus
    stage: PipelineStage
    conversion_rate: float


class FunnelResponse(FunnelReport):
    job_id: UUID
    bottleneck: BottleneckResult
