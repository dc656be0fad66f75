"""
Seed a demo job pipeline for exploring the funnel endpoints.

Run after migrations. Creates one job's worth of candidates and walks them
through the stages so every funnel column has data.

Usage:
    python scripts/seed_demo_pipeline.py [TENANT_ID]
"""

import asyncio
import sys
from pathlib import Path
from uuid import UUID, uuid4

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from hiring_pipeline.core.config import settings
from hiring_pipeline.db.session import get_async_session_context
from hiring_pipeline.domain.stages import ORDERED_STAGES, PipelineStage
from hiring_pipeline.repositories.pipeline_repository import PipelineRepository
from hiring_pipeline.services.candidate_locks import CandidateLockRegistry
from hiring_pipeline.services.pipeline_service import PipelineService
from hiring_pipeline.services.status_transition_service import StatusTransitionService

# How far each demo candidate gets; index into ORDERED_STAGES
DEMO_PROGRESS = [0, 0, 1, 1, 2, 2, 3, 4, 5, 6, 7]
DEMO_SCORES = [42, 55, 61, 70, 73, 78, 81, 85, 88, 91, 95]


async def seed_demo_pipeline(tenant_id: UUID) -> UUID:
    job_id = uuid4()
    locks = CandidateLockRegistry(timeout=settings.TRANSITION_LOCK_TIMEOUT_SECONDS)

    async with get_async_session_context() as db:
        store = PipelineRepository(db)
        pipeline_service = PipelineService(store)
        transitions = StatusTransitionService(store, locks)

        for reach, score in zip(DEMO_PROGRESS, DEMO_SCORES):
            created = await pipeline_service.add_candidate(
                tenant_id, job_id, uuid4(), last_score=score
            )
            for stage in ORDERED_STAGES[1 : reach + 1]:
                await transitions.request_transition(
                    tenant_id, created.id, stage.value, changed_by="seed"
                )
            print(f"  [OK] {created.id} -> {ORDERED_STAGES[reach].value}")

        rejected = await pipeline_service.add_candidate(tenant_id, job_id, uuid4(), last_score=30)
        await transitions.request_transition(
            tenant_id,
            rejected.id,
            PipelineStage.REJECTED.value,
            changed_by="seed",
            rejected_reason="Not enough experience",
        )
        print(f"  [OK] {rejected.id} -> rejected")

    return job_id


if __name__ == "__main__":
    tenant = UUID(sys.argv[1]) if len(sys.argv) > 1 else uuid4()
    print(f"Seeding demo pipeline for tenant {tenant}...\n")
    job = asyncio.run(seed_demo_pipeline(tenant))
    print(f"\n[OK] Done. Job id: {job}")
