"""
Status transition business logic.

The only code path that appends to a candidate's status history.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence
from uuid import UUID

from hiring_pipeline.domain.pipeline import REQUEST_ID_MAX_LENGTH, CandidatePipeline, StatusEvent
from hiring_pipeline.domain.stages import PipelineStage, parse_stage
from hiring_pipeline.errors import (
    CandidateNotFoundError,
    IdempotencyKeyConflictError,
    InvalidIdempotencyKeyError,
    TransitionError,
)
from hiring_pipeline.repositories.pipeline_store import PipelineStore
from hiring_pipeline.schemas.pipeline import (
    BulkTransitionError,
    BulkTransitionItem,
    BulkTransitionResult,
    StatusEventRead,
    TransitionResult,
)
from hiring_pipeline.services.candidate_locks import CandidateLockRegistry
from hiring_pipeline.utils.time import utc_now

logger = logging.getLogger(__name__)


def _previous_stage(pipeline: CandidatePipeline, event: StatusEvent) -> PipelineStage:
    """Stage the candidate was at just before `event` was appended."""
    earlier = [entry for entry in pipeline.history if entry.sequence < event.sequence]
    # Candidates start at sourced with an empty history
    return earlier[-1].stage if earlier else PipelineStage.SOURCED


def normalize_request_id(request_id: Optional[str]) -> Optional[str]:
    """Blank keys mean no key; keys wider than the stored column are rejected."""
    if request_id is None:
        return None
    request_id = request_id.strip()
    if not request_id:
        return None
    if len(request_id) > REQUEST_ID_MAX_LENGTH:
        raise InvalidIdempotencyKeyError(REQUEST_ID_MAX_LENGTH)
    return request_id


class StatusTransitionService:
    """
    Validates and applies stage changes.

    Any stage may move to any other stage, including backwards. For one
    candidate the read, append and current-stage update run under that
    candidate's lock, so concurrent requests are applied one after the other.
    """

    def __init__(
        self,
        store: PipelineStore,
        locks: CandidateLockRegistry,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.locks = locks
        self.clock = clock

    async def request_transition(
        self,
        tenant_id: UUID,
        pipeline_candidate_id: UUID,
        target_stage: str,
        note: Optional[str] = None,
        changed_by: Optional[str] = None,
        rejected_reason: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> TransitionResult:
        """
        Move a candidate to `target_stage` and append one status event.

        A repeated `request_id` for the same stage returns the earlier
        confirmation instead of appending again. A blank `request_id` is the
        same as none.

        Raises:
            InvalidStageError: target is not a known stage (checked before any locking)
            InvalidIdempotencyKeyError: request_id is longer than the stored key
            IdempotencyKeyConflictError: request_id was already used for another stage
            CandidateNotFoundError: no such pipeline candidate for the tenant
            ConcurrencyTimeoutError: the candidate's lock was not acquired in time
            PersistenceError: storage failed; nothing was applied
        """
        stage = parse_stage(target_stage)
        request_id = normalize_request_id(request_id)

        async with self.locks.hold(pipeline_candidate_id):
            pipeline = await self.store.get(tenant_id, pipeline_candidate_id)
            if pipeline is None:
                raise CandidateNotFoundError(pipeline_candidate_id)

            if request_id:
                existing = pipeline.find_request(request_id)
                if existing is not None:
                    if existing.stage != stage:
                        raise IdempotencyKeyConflictError(request_id, existing.stage, stage)
                    logger.warning(
                        "Replaying transition request %s for %s (event %s)",
                        request_id,
                        pipeline_candidate_id,
                        existing.sequence,
                    )
                    return TransitionResult(
                        pipeline_candidate_id=pipeline.id,
                        previous_stage=_previous_stage(pipeline, existing),
                        current_stage=pipeline.current_stage,
                        appended_event=StatusEventRead.model_validate(existing),
                        replayed=True,
                    )

            previous = pipeline.current_stage
            updated, event = pipeline.record_transition(
                stage,
                at=self.clock(),
                note=note,
                changed_by=changed_by,
                rejected_reason=rejected_reason,
                request_id=request_id,
            )
            await self.store.append_event(tenant_id, updated, event)

        logger.info(
            "Candidate %s moved %s -> %s (event %s)",
            pipeline_candidate_id,
            previous.value,
            stage.value,
            event.sequence,
        )
        return TransitionResult(
            pipeline_candidate_id=updated.id,
            previous_stage=previous,
            current_stage=updated.current_stage,
            appended_event=StatusEventRead.model_validate(event),
        )

    async def bulk_transition(
        self,
        tenant_id: UUID,
        pipeline_candidate_ids: Sequence[UUID],
        target_stage: str,
        note: Optional[str] = None,
        changed_by: Optional[str] = None,
        rejected_reason: Optional[str] = None,
    ) -> BulkTransitionResult:
        """Move several candidates to the same stage; each one succeeds or fails on its own."""
        parse_stage(target_stage)

        results: List[BulkTransitionItem] = []
        for pipeline_candidate_id in dict.fromkeys(pipeline_candidate_ids):
            try:
                outcome = await self.request_transition(
                    tenant_id,
                    pipeline_candidate_id,
                    target_stage,
                    note=note,
                    changed_by=changed_by,
                    rejected_reason=rejected_reason,
                )
            except TransitionError as exc:
                results.append(
                    BulkTransitionItem(
                        pipeline_candidate_id=pipeline_candidate_id,
                        ok=False,
                        error=BulkTransitionError(code=exc.code, message=exc.message),
                    )
                )
                continue

            results.append(
                BulkTransitionItem(
                    pipeline_candidate_id=pipeline_candidate_id,
                    ok=True,
                    current_stage=outcome.current_stage,
                )
            )

        succeeded = sum(1 for item in results if item.ok)
        return BulkTransitionResult(
            succeeded=succeeded,
            failed=len(results) - succeeded,
            results=results,
        )
