import asyncio

import pytest

from hiring_pipeline.domain.stages import PipelineStage
from hiring_pipeline.errors import PersistenceError
from hiring_pipeline.services.optimistic_stage_tracker import OptimisticStageTracker
from tests.conftest import make_candidate

S = PipelineStage


@pytest.mark.unit
def test_display_falls_back_to_confirmed_stage():
    tracker = OptimisticStageTracker()
    assert tracker.display_stage("c1", S.REVIEWED) == S.REVIEWED


@pytest.mark.unit
def test_newer_intent_replaces_older_one():
    tracker = OptimisticStageTracker()
    first = tracker.begin("c1", S.SHORTLISTED)
    second = tracker.begin("c1", S.INTERVIEW)

    assert len(tracker) == 1
    assert tracker.display_stage("c1", S.REVIEWED) == S.INTERVIEW

    # The older request resolving must not clear the newer intent
    assert tracker.settle("c1", first) is False
    assert tracker.display_stage("c1", S.REVIEWED) == S.INTERVIEW

    assert tracker.settle("c1", second) is True
    assert tracker.display_stage("c1", S.INTERVIEW) == S.INTERVIEW
    assert len(tracker) == 0


@pytest.mark.unit
def test_overlay_only_affects_tracked_candidates():
    tracker = OptimisticStageTracker()
    moving = make_candidate(S.REVIEWED)
    still = make_candidate(S.OFFER)
    tracker.begin(moving.id, S.PRESENTED)

    assert tracker.overlay([moving, still]) == [(moving, S.PRESENTED), (still, S.OFFER)]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_track_reverts_on_failure():
    tracker = OptimisticStageTracker()
    seen = []

    async def failing():
        seen.append(tracker.display_stage("c1", S.REVIEWED))
        raise PersistenceError()

    with pytest.raises(PersistenceError):
        await tracker.track("c1", S.OFFER, failing)

    assert seen == [S.OFFER]
    assert tracker.display_stage("c1", S.REVIEWED) == S.REVIEWED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_track_with_overlapping_requests_shows_latest_intent():
    tracker = OptimisticStageTracker()
    release_first = asyncio.Event()

    async def slow():
        await release_first.wait()
        return "first"

    async def fast():
        return "second"

    first_task = asyncio.create_task(tracker.track("c1", S.SHORTLISTED, slow))
    await asyncio.sleep(0)
    assert tracker.speculative_stage("c1") == S.SHORTLISTED

    second_token = tracker.begin("c1", S.INTERVIEW)
    release_first.set()
    assert await first_task == "first"

    # First request finished but the newer intent is still displayed
    assert tracker.speculative_stage("c1") == S.INTERVIEW
    tracker.settle("c1", second_token)
    assert await tracker.track("c1", S.OFFER, fast) == "second"
    assert tracker.speculative_stage("c1") is None
