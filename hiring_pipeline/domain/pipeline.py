"""Candidate pipeline aggregate.

A CandidatePipeline is one candidate's position in one job's pipeline plus
the append-only log of every confirmed stage change. The current stage is a
projection of the log: `append` is the only way to produce a new state and it
moves both together.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional, Tuple

from hiring_pipeline.domain.stages import INITIAL_STAGE, PipelineStage

# Width of the stored Idempotency-Key column
REQUEST_ID_MAX_LENGTH = 128


@dataclass(frozen=True)
class StatusEvent:
    """One confirmed stage change. Never modified once appended."""

    stage: PipelineStage
    # datetime for events written by this service; legacy imports may carry strings
    timestamp: Any
    sequence: int = 0
    note: Optional[str] = None
    changed_by: Optional[str] = None
    rejected_reason: Optional[str] = None
    request_id: Optional[str] = None


@dataclass(frozen=True)
class CandidatePipeline:
    id: uuid.UUID
    job_id: uuid.UUID
    candidate_id: uuid.UUID
    current_stage: PipelineStage
    created_at: Any
    history: Tuple[StatusEvent, ...] = field(default_factory=tuple)
    last_score: Optional[float] = None
    rejected_reason: Optional[str] = None

    @classmethod
    def new(
        cls,
        job_id: uuid.UUID,
        candidate_id: uuid.UUID,
        created_at: datetime,
        last_score: Optional[float] = None,
        pipeline_candidate_id: Optional[uuid.UUID] = None,
    ) -> "CandidatePipeline":
        """A freshly added candidate: initial stage, empty history."""
        return cls(
            id=pipeline_candidate_id or uuid.uuid4(),
            job_id=job_id,
            candidate_id=candidate_id,
            current_stage=INITIAL_STAGE,
            created_at=created_at,
            last_score=last_score,
        )

    @property
    def last_event(self) -> Optional[StatusEvent]:
        return self.history[-1] if self.history else None

    @property
    def next_sequence(self) -> int:
        last = self.last_event
        return last.sequence + 1 if last is not None else 1

    def find_request(self, request_id: str) -> Optional[StatusEvent]:
        """The event appended by a given request attempt, if any."""
        for event in self.history:
            if event.request_id == request_id:
                return event
        return None

    def append(self, event: StatusEvent) -> "CandidatePipeline":
        """Return the state after `event`: history extended, current stage projected from it."""
        if event.sequence != self.next_sequence:
            raise ValueError(
                f"Event sequence {event.sequence} does not follow {self.next_sequence - 1}"
            )

        if event.stage == PipelineStage.REJECTED:
            rejected_reason = event.rejected_reason
        else:
            rejected_reason = None

        return replace(
            self,
            current_stage=event.stage,
            history=self.history + (event,),
            rejected_reason=rejected_reason,
        )

    def record_transition(
        self,
        target_stage: PipelineStage,
        at: datetime,
        note: Optional[str] = None,
        changed_by: Optional[str] = None,
        rejected_reason: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Tuple["CandidatePipeline", StatusEvent]:
        """Build the next event for `target_stage` and apply it."""
        event = StatusEvent(
            stage=target_stage,
            timestamp=at,
            sequence=self.next_sequence,
            note=note,
            changed_by=changed_by,
            rejected_reason=rejected_reason if target_stage == PipelineStage.REJECTED else None,
            request_id=request_id,
        )
        return self.append(event), event
