"""
Storage contract the pipeline services depend on.

The services read pipeline snapshots and append status events through this
interface; PipelineRepository is the SQLAlchemy implementation.
"""

from typing import List, Optional, Protocol
from uuid import UUID

from hiring_pipeline.domain.pipeline import CandidatePipeline, StatusEvent


class PipelineStore(Protocol):
    async def get(self, tenant_id: UUID, pipeline_candidate_id: UUID) -> Optional[CandidatePipeline]:
        """Load one pipeline candidate with its full history."""
        ...

    async def list_for_job(self, tenant_id: UUID, job_id: UUID) -> List[CandidatePipeline]:
        """Snapshot of every pipeline candidate for a job, oldest first."""
        ...

    async def add(self, tenant_id: UUID, pipeline: CandidatePipeline) -> CandidatePipeline:
        """Persist a new pipeline candidate. Raises DuplicatePipelineEntryError."""
        ...

    async def append_event(self, tenant_id: UUID, pipeline: CandidatePipeline, event: StatusEvent) -> None:
        """
        Atomically store `event` and the projected current stage of `pipeline`.

        Raises PersistenceError with nothing applied on failure.
        """
        ...

    async def set_score(
        self,
        tenant_id: UUID,
        pipeline_candidate_id: UUID,
        last_score: Optional[float],
    ) -> Optional[CandidatePipeline]:
        ...
