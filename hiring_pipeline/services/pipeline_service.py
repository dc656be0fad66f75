"""
Pipeline business logic service.

Read side of the pipeline (snapshots, history, funnel) plus adding candidates
and updating scores. Stage changes go through StatusTransitionService.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence
from uuid import UUID

from hiring_pipeline.domain.pipeline import CandidatePipeline, StatusEvent
from hiring_pipeline.errors import CandidateNotFoundError, DuplicatePipelineEntryError
from hiring_pipeline.repositories.pipeline_store import PipelineStore
from hiring_pipeline.schemas.funnel import FunnelResponse
from hiring_pipeline.schemas.pipeline import BulkAddItem, BulkAddOutcome, BulkAddResult
from hiring_pipeline.services.bottleneck_detector import detect_bottleneck
from hiring_pipeline.services.funnel_metrics_service import compute_funnel
from hiring_pipeline.utils.time import utc_now

logger = logging.getLogger(__name__)


class PipelineService:
    """Service for pipeline reads, candidate intake and funnel reports."""

    def __init__(self, store: PipelineStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    async def add_candidate(
        self,
        tenant_id: UUID,
        job_id: UUID,
        candidate_id: UUID,
        last_score: Optional[float] = None,
    ) -> CandidatePipeline:
        """Add a candidate to a job's pipeline at the initial stage with an empty history."""
        pipeline = CandidatePipeline.new(
            job_id=job_id,
            candidate_id=candidate_id,
            created_at=self.clock(),
            last_score=last_score,
        )
        created = await self.store.add(tenant_id, pipeline)
        logger.info("Candidate %s added to pipeline of job %s as %s", candidate_id, job_id, created.id)
        return created

    async def add_candidates(
        self,
        tenant_id: UUID,
        job_id: UUID,
        candidate_ids: Sequence[UUID],
    ) -> BulkAddResult:
        """
        Add several candidates to a job's pipeline.

        Candidates already in the pipeline are reported as duplicates instead
        of failing the whole request. Repeated ids are handled once.
        """
        existing = {p.candidate_id: p.id for p in await self.store.list_for_job(tenant_id, job_id)}

        results: List[BulkAddItem] = []
        for candidate_id in dict.fromkeys(candidate_ids):
            if candidate_id in existing:
                results.append(
                    BulkAddItem(
                        candidate_id=candidate_id,
                        outcome=BulkAddOutcome.DUPLICATE,
                        pipeline_candidate_id=existing[candidate_id],
                    )
                )
                continue

            try:
                created = await self.add_candidate(tenant_id, job_id, candidate_id)
            except DuplicatePipelineEntryError:
                # Added by a concurrent request after the snapshot was read
                results.append(BulkAddItem(candidate_id=candidate_id, outcome=BulkAddOutcome.DUPLICATE))
                continue

            results.append(
                BulkAddItem(
                    candidate_id=candidate_id,
                    outcome=BulkAddOutcome.CREATED,
                    pipeline_candidate_id=created.id,
                )
            )

        created_count = sum(1 for item in results if item.outcome == BulkAddOutcome.CREATED)
        return BulkAddResult(
            created=created_count,
            duplicates=len(results) - created_count,
            results=results,
        )

    async def list_candidates(self, tenant_id: UUID, job_id: UUID) -> List[CandidatePipeline]:
        return await self.store.list_for_job(tenant_id, job_id)

    async def get_candidate(self, tenant_id: UUID, pipeline_candidate_id: UUID) -> CandidatePipeline:
        pipeline = await self.store.get(tenant_id, pipeline_candidate_id)
        if pipeline is None:
            raise CandidateNotFoundError(pipeline_candidate_id)
        return pipeline

    async def get_history(self, tenant_id: UUID, pipeline_candidate_id: UUID) -> List[StatusEvent]:
        pipeline = await self.get_candidate(tenant_id, pipeline_candidate_id)
        return list(pipeline.history)

    async def update_score(
        self,
        tenant_id: UUID,
        pipeline_candidate_id: UUID,
        last_score: Optional[float],
    ) -> CandidatePipeline:
        pipeline = await self.store.set_score(tenant_id, pipeline_candidate_id, last_score)
        if pipeline is None:
            raise CandidateNotFoundError(pipeline_candidate_id)
        return pipeline

    async def get_funnel(self, tenant_id: UUID, job_id: UUID) -> FunnelResponse:
        """Funnel report and bottleneck for the job's current snapshot."""
        snapshot = await self.store.list_for_job(tenant_id, job_id)
        report = compute_funnel(snapshot, now=self.clock())
        bottleneck = detect_bottleneck(report)
        logger.debug(
            "Funnel for job %s: %s candidates, bottleneck %s (%s)",
            job_id,
            report.overall.total_candidates,
            bottleneck.stage.value,
            bottleneck.status.value,
        )
        return FunnelResponse(job_id=job_id, bottleneck=bottleneck, **report.model_dump())
