"""
Repository tests against a migrated database (RUN_DB_TESTS=1).
"""

import uuid

import pytest

from hiring_pipeline.db.session import AsyncSessionLocal
from hiring_pipeline.domain.pipeline import CandidatePipeline
from hiring_pipeline.domain.stages import PipelineStage
from hiring_pipeline.errors import DuplicatePipelineEntryError, PersistenceError
from hiring_pipeline.repositories.pipeline_repository import PipelineRepository
from hiring_pipeline.utils.time import utc_now


@pytest.mark.db
@pytest.mark.asyncio
async def test_append_event_round_trip():
    tenant_id = uuid.uuid4()
    job_id = uuid.uuid4()

    async with AsyncSessionLocal() as db:
        repo = PipelineRepository(db)
        created = await repo.add(
            tenant_id,
            CandidatePipeline.new(job_id=job_id, candidate_id=uuid.uuid4(), created_at=utc_now()),
        )
        await db.commit()

        moved, event = created.record_transition(PipelineStage.REVIEWED, at=utc_now(), request_id="db-1")
        await repo.append_event(tenant_id, moved, event)

    async with AsyncSessionLocal() as db:
        loaded = await PipelineRepository(db).get(tenant_id, created.id)

    assert loaded.current_stage == PipelineStage.REVIEWED
    assert [e.stage for e in loaded.history] == [PipelineStage.REVIEWED]
    assert loaded.find_request("db-1") is not None


@pytest.mark.db
@pytest.mark.asyncio
async def test_sequence_conflict_is_persistence_error():
    tenant_id = uuid.uuid4()

    async with AsyncSessionLocal() as db:
        repo = PipelineRepository(db)
        created = await repo.add(
            tenant_id,
            CandidatePipeline.new(job_id=uuid.uuid4(), candidate_id=uuid.uuid4(), created_at=utc_now()),
        )
        await db.commit()

        moved, event = created.record_transition(PipelineStage.REVIEWED, at=utc_now())
        await repo.append_event(tenant_id, moved, event)

        # A second writer working from the same stale snapshot
        stale, stale_event = created.record_transition(PipelineStage.OFFER, at=utc_now())
        with pytest.raises(PersistenceError):
            await repo.append_event(tenant_id, stale, stale_event)

        loaded = await repo.get(tenant_id, created.id)

    assert loaded.current_stage == PipelineStage.REVIEWED
    assert len(loaded.history) == 1


@pytest.mark.db
@pytest.mark.asyncio
async def test_duplicate_entry_for_job():
    tenant_id = uuid.uuid4()
    job_id = uuid.uuid4()
    candidate_id = uuid.uuid4()

    async with AsyncSessionLocal() as db:
        repo = PipelineRepository(db)
        await repo.add(tenant_id, CandidatePipeline.new(job_id=job_id, candidate_id=candidate_id, created_at=utc_now()))
        await db.commit()

        with pytest.raises(DuplicatePipelineEntryError):
            await repo.add(
                tenant_id,
                CandidatePipeline.new(job_id=job_id, candidate_id=candidate_id, created_at=utc_now()),
            )


@pytest.mark.db
@pytest.mark.asyncio
async def test_duplicate_keeps_earlier_adds_in_the_session():
    tenant_id = uuid.uuid4()
    job_id = uuid.uuid4()
    first = uuid.uuid4()

    async with AsyncSessionLocal() as db:
        repo = PipelineRepository(db)
        await repo.add(tenant_id, CandidatePipeline.new(job_id=job_id, candidate_id=first, created_at=utc_now()))
        second = await repo.add(
            tenant_id, CandidatePipeline.new(job_id=job_id, candidate_id=uuid.uuid4(), created_at=utc_now())
        )

        with pytest.raises(DuplicatePipelineEntryError):
            await repo.add(tenant_id, CandidatePipeline.new(job_id=job_id, candidate_id=first, created_at=utc_now()))

        await db.commit()
        listed = await repo.list_for_job(tenant_id, job_id)

    assert {p.id for p in listed} >= {second.id}
    assert len(listed) == 2
