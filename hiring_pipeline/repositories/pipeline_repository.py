"""
Pipeline repository - database operations for pipeline candidates and their status events.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from hiring_pipeline.domain.pipeline import CandidatePipeline, StatusEvent
from hiring_pipeline.domain.stages import PipelineStage
from hiring_pipeline.errors import DuplicatePipelineEntryError, PersistenceError
from hiring_pipeline.models.pipeline_candidate import PipelineCandidate
from hiring_pipeline.models.status_event import PipelineStatusEvent

logger = logging.getLogger(__name__)


def to_domain(row: PipelineCandidate) -> CandidatePipeline:
    """Build the aggregate from an ORM row with its events loaded."""
    history = tuple(
        StatusEvent(
            stage=PipelineStage(event.stage),
            timestamp=event.occurred_at,
            sequence=event.sequence,
            note=event.note,
            changed_by=event.changed_by,
            rejected_reason=event.rejected_reason,
            request_id=event.request_id,
        )
        for event in row.events
    )
    return CandidatePipeline(
        id=row.id,
        job_id=row.job_id,
        candidate_id=row.candidate_id,
        current_stage=PipelineStage(row.current_stage),
        created_at=row.created_at,
        history=history,
        last_score=row.last_score,
        rejected_reason=row.rejected_reason,
    )


class PipelineRepository:
    """Repository for PipelineCandidate / PipelineStatusEvent database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self, tenant_id: UUID, pipeline_candidate_id: UUID) -> Optional[PipelineCandidate]:
        result = await self.db.execute(
            select(PipelineCandidate)
            .where(
                PipelineCandidate.id == pipeline_candidate_id,
                PipelineCandidate.tenant_id == tenant_id,
            )
            # Events may have been appended by another request since this session cached the row
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get(self, tenant_id: UUID, pipeline_candidate_id: UUID) -> Optional[CandidatePipeline]:
        """Get a pipeline candidate by ID for a specific tenant."""
        try:
            row = await self._get_row(tenant_id, pipeline_candidate_id)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to load pipeline candidate") from exc
        return to_domain(row) if row else None

    async def list_for_job(self, tenant_id: UUID, job_id: UUID) -> List[CandidatePipeline]:
        """Get every pipeline candidate for a job."""
        try:
            result = await self.db.execute(
                select(PipelineCandidate)
                .where(
                    PipelineCandidate.tenant_id == tenant_id,
                    PipelineCandidate.job_id == job_id,
                )
                .order_by(PipelineCandidate.created_at.asc(), PipelineCandidate.id.asc())
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to load pipeline snapshot") from exc
        return [to_domain(row) for row in result.scalars().all()]

    async def add(self, tenant_id: UUID, pipeline: CandidatePipeline) -> CandidatePipeline:
        """Create a new pipeline candidate."""
        row = PipelineCandidate(
            id=pipeline.id,
            tenant_id=tenant_id,
            job_id=pipeline.job_id,
            candidate_id=pipeline.candidate_id,
            current_stage=pipeline.current_stage.value,
            last_score=pipeline.last_score,
            created_at=pipeline.created_at,
            events=[],
        )
        # Savepoint so a duplicate only undoes this row, not earlier adds in the session
        try:
            async with self.db.begin_nested():
                self.db.add(row)
        except IntegrityError as exc:
            raise DuplicatePipelineEntryError(pipeline.job_id, pipeline.candidate_id) from exc
        return to_domain(row)

    async def append_event(self, tenant_id: UUID, pipeline: CandidatePipeline, event: StatusEvent) -> None:
        """Insert the event row and move current_stage in one committed transaction."""
        try:
            self.db.add(
                PipelineStatusEvent(
                    tenant_id=tenant_id,
                    pipeline_candidate_id=pipeline.id,
                    sequence=event.sequence,
                    stage=event.stage.value,
                    occurred_at=event.timestamp,
                    note=event.note,
                    changed_by=event.changed_by,
                    rejected_reason=event.rejected_reason,
                    request_id=event.request_id,
                )
            )
            await self.db.execute(
                update(PipelineCandidate)
                .where(
                    PipelineCandidate.id == pipeline.id,
                    PipelineCandidate.tenant_id == tenant_id,
                )
                .values(
                    current_stage=pipeline.current_stage.value,
                    rejected_reason=pipeline.rejected_reason,
                    updated_at=func.now(),
                )
            )
            await self.db.commit()
        except SQLAlchemyError as exc:
            logger.error("Append of event %s for %s failed", event.sequence, pipeline.id, exc_info=True)
            await self.db.rollback()
            raise PersistenceError() from exc

    async def set_score(
        self,
        tenant_id: UUID,
        pipeline_candidate_id: UUID,
        last_score: Optional[float],
    ) -> Optional[CandidatePipeline]:
        """Update last_score; the status history is untouched."""
        row = await self._get_row(tenant_id, pipeline_candidate_id)
        if not row:
            return None

        row.last_score = last_score
        row.updated_at = func.now()
        await self.db.flush()
        return to_domain(row)
