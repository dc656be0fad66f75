"""Pipeline stage taxonomy.

Candidates move through an ordered sequence of hiring stages for a job.
`rejected` is terminal and sits outside the ordered sequence, so it has no
position and no successor.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from hiring_pipeline.errors import InvalidStageError


class PipelineStage(str, Enum):
    """Stage of a candidate in a job's pipeline."""

    SOURCED = "sourced"
    RECOMMENDED = "recommended"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    PRESENTED = "presented"
    INTERVIEW = "interview"
    OFFER = "offer"
    PLACED = "placed"

    # Terminal, not part of the forward flow
    REJECTED = "rejected"


ORDERED_STAGES: Tuple[PipelineStage, ...] = (
    PipelineStage.SOURCED,
    PipelineStage.RECOMMENDED,
    PipelineStage.REVIEWED,
    PipelineStage.SHORTLISTED,
    PipelineStage.PRESENTED,
    PipelineStage.INTERVIEW,
    PipelineStage.OFFER,
    PipelineStage.PLACED,
)

INITIAL_STAGE = PipelineStage.SOURCED

_POSITIONS: Dict[PipelineStage, int] = {stage: index for index, stage in enumerate(ORDERED_STAGES)}

_LABELS: Dict[PipelineStage, str] = {stage: stage.value.capitalize() for stage in PipelineStage}


def stage_position(stage: PipelineStage) -> Optional[int]:
    """Ordinal index of a stage, or None for `rejected`."""
    return _POSITIONS.get(stage)


def next_stage(stage: PipelineStage) -> Optional[PipelineStage]:
    """The following ordered stage, or None for the last stage and `rejected`."""
    position = stage_position(stage)
    if position is None or position + 1 >= len(ORDERED_STAGES):
        return None
    return ORDERED_STAGES[position + 1]


def stage_label(stage: PipelineStage) -> str:
    return _LABELS[stage]


def parse_stage(value: Any) -> PipelineStage:
    """
    Resolve a user supplied value to a PipelineStage.

    Accepts stage members and case-insensitive stage names with surrounding
    whitespace. Raises InvalidStageError for anything else.
    """
    if isinstance(value, PipelineStage):
        return value
    if isinstance(value, str):
        try:
            return PipelineStage(value.strip().lower())
        except ValueError:
            pass
    raise InvalidStageError(value)
