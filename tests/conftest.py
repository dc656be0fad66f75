"""
Pytest configuration and shared fixtures.
"""

import asyncio
import os
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient

from hiring_pipeline.core.dependencies import get_pipeline_store, get_transition_locks
from hiring_pipeline.domain.pipeline import CandidatePipeline, StatusEvent
from hiring_pipeline.domain.stages import PipelineStage
from hiring_pipeline.errors import DuplicatePipelineEntryError, PersistenceError
from hiring_pipeline.main import app
from hiring_pipeline.services.candidate_locks import CandidateLockRegistry


TEST_TENANT_ID = uuid.UUID("33333333-3333-3333-3333-333333333333")
OTHER_TENANT_ID = uuid.UUID("44444444-4444-4444-4444-444444444444")
TEST_JOB_ID = uuid.UUID("55555555-5555-5555-5555-555555555555")

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)


def make_candidate(
    stage: PipelineStage,
    history: Sequence[Tuple[PipelineStage, object]] = (),
    created_at: object = NOW - timedelta(days=10),
    last_score: Optional[float] = None,
    job_id: uuid.UUID = TEST_JOB_ID,
) -> CandidatePipeline:
    """Build a snapshot candidate; history is a list of (stage, timestamp) pairs."""
    events = tuple(
        StatusEvent(stage=event_stage, timestamp=timestamp, sequence=index)
        for index, (event_stage, timestamp) in enumerate(history, start=1)
    )
    return CandidatePipeline(
        id=uuid.uuid4(),
        job_id=job_id,
        candidate_id=uuid.uuid4(),
        current_stage=stage,
        created_at=created_at,
        history=events,
        last_score=last_score,
    )


def stage_record(report, stage: PipelineStage):
    """The report's metrics for one ordered stage."""
    for record in report.stages:
        if record.stage == stage:
            return record
    raise KeyError(stage)


class InMemoryPipelineStore:
    """PipelineStore kept in a dict; every call yields to the event loop like real I/O."""

    def __init__(self) -> None:
        self._rows: Dict[uuid.UUID, Tuple[uuid.UUID, CandidatePipeline]] = {}
        self.append_calls = 0

    def seed(self, tenant_id: uuid.UUID, pipeline: CandidatePipeline) -> CandidatePipeline:
        self._rows[pipeline.id] = (tenant_id, pipeline)
        return pipeline

    def peek(self, pipeline_candidate_id: uuid.UUID) -> CandidatePipeline:
        return self._rows[pipeline_candidate_id][1]

    async def get(self, tenant_id, pipeline_candidate_id):
        await asyncio.sleep(0)
        row = self._rows.get(pipeline_candidate_id)
        if row is None or row[0] != tenant_id:
            return None
        return row[1]

    async def list_for_job(self, tenant_id, job_id) -> List[CandidatePipeline]:
        await asyncio.sleep(0)
        return [p for t, p in self._rows.values() if t == tenant_id and p.job_id == job_id]

    async def add(self, tenant_id, pipeline):
        await asyncio.sleep(0)
        for t, existing in self._rows.values():
            if t == tenant_id and existing.job_id == pipeline.job_id and existing.candidate_id == pipeline.candidate_id:
                raise DuplicatePipelineEntryError(pipeline.job_id, pipeline.candidate_id)
        return self.seed(tenant_id, pipeline)

    async def append_event(self, tenant_id, pipeline, event):
        await asyncio.sleep(0)
        self.append_calls += 1
        stored = self._rows[pipeline.id][1]
        # Same guarantee as the unique (pipeline_candidate_id, sequence) index
        if event.sequence != stored.next_sequence:
            raise PersistenceError("Sequence conflict")
        # Same guarantee as the unique (pipeline_candidate_id, request_id) index
        if event.request_id is not None and stored.find_request(event.request_id) is not None:
            raise PersistenceError("Request id conflict")
        self._rows[pipeline.id] = (tenant_id, pipeline)

    async def set_score(self, tenant_id, pipeline_candidate_id, last_score):
        pipeline = await self.get(tenant_id, pipeline_candidate_id)
        if pipeline is None:
            return None

        return self.seed(tenant_id, replace(pipeline, last_score=last_score))


class FailingPipelineStore(InMemoryPipelineStore):
    """Store whose appends always fail."""

    async def append_event(self, tenant_id, pipeline, event):
        await asyncio.sleep(0)
        self.append_calls += 1
        raise PersistenceError("database unavailable")


@pytest.fixture
def store() -> InMemoryPipelineStore:
    return InMemoryPipelineStore()


@pytest.fixture
def locks() -> CandidateLockRegistry:
    return CandidateLockRegistry(timeout=1.0)


@pytest.fixture
def client(store, locks):
    app.dependency_overrides[get_pipeline_store] = lambda: store
    app.dependency_overrides[get_transition_locks] = lambda: locks
    with TestClient(app) as test_client:
        test_client.headers.update({"X-Tenant-ID": str(TEST_TENANT_ID)})
        yield test_client
    app.dependency_overrides.clear()
