"""Optimistic stage display for pipeline boards.

A board shows the stage a recruiter just picked before the server confirms
it. Only the latest intent per candidate is kept; when a request resolves it
clears the speculative value only if no newer request replaced it, so the
board reverts to the confirmed stage on failure and never flickers back to
an older intent.
"""

from __future__ import annotations

import itertools
from typing import Awaitable, Callable, Dict, Hashable, Iterable, List, Optional, Tuple, TypeVar

from hiring_pipeline.domain.pipeline import CandidatePipeline
from hiring_pipeline.domain.stages import PipelineStage

T = TypeVar("T")


class OptimisticStageTracker:
    def __init__(self) -> None:
        self._pending: Dict[Hashable, Tuple[int, PipelineStage]] = {}
        self._tokens = itertools.count(1)

    def begin(self, key: Hashable, stage: PipelineStage) -> int:
        """Record `stage` as the speculative stage for `key`, replacing any earlier one."""
        token = next(self._tokens)
        self._pending[key] = (token, stage)
        return token

    def settle(self, key: Hashable, token: int) -> bool:
        """Drop the speculative stage if `token` is still the latest for `key`."""
        pending = self._pending.get(key)
        if pending is None or pending[0] != token:
            return False
        del self._pending[key]
        return True

    def speculative_stage(self, key: Hashable) -> Optional[PipelineStage]:
        pending = self._pending.get(key)
        return pending[1] if pending else None

    def display_stage(self, key: Hashable, confirmed: PipelineStage) -> PipelineStage:
        return self.speculative_stage(key) or confirmed

    def overlay(self, candidates: Iterable[CandidatePipeline]) -> List[Tuple[CandidatePipeline, PipelineStage]]:
        """Pair every candidate with the stage a board should show for it."""
        return [(candidate, self.display_stage(candidate.id, candidate.current_stage)) for candidate in candidates]

    async def track(
        self,
        key: Hashable,
        stage: PipelineStage,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Show `stage` while `operation` runs.

        On success the confirmed state takes over; on failure the display
        reverts to the confirmed stage and the error propagates.
        """
        token = self.begin(key, stage)
        try:
            return await operation()
        finally:
            self.settle(key, token)

    def __len__(self) -> int:
        return len(self._pending)
