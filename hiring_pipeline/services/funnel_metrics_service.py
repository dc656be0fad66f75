"""
Funnel metrics over a pipeline snapshot.

Pure read-side computation: given the candidates of one job (each with its
status history) it derives per-stage occupancy, score and dwell averages,
historical reach and stage-to-stage conversion. Nothing here mutates its
input or touches storage, so reports can be computed concurrently and
recomputed on demand.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from hiring_pipeline.domain.pipeline import CandidatePipeline
from hiring_pipeline.domain.stages import (
    ORDERED_STAGES,
    PipelineStage,
    next_stage,
    stage_label,
    stage_position,
)
from hiring_pipeline.schemas.funnel import FunnelReport, OverallMetrics, StageMetrics
from hiring_pipeline.utils.time import format_duration, parse_instant, utc_now


def _percentage(part: int, whole: int) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def reference_instant(candidate: CandidatePipeline) -> Optional[datetime]:
    """
    When the candidate's current stage began.

    The last history entry's timestamp if it parses, else created_at if it
    parses, else None.
    """
    last = candidate.last_event
    if last is not None:
        instant = parse_instant(last.timestamp)
        if instant is not None:
            return instant
    return parse_instant(candidate.created_at)


def dwell_seconds(candidate: CandidatePipeline, now: datetime) -> Optional[float]:
    """Seconds since the candidate's last stage change; None when there is no usable sample."""
    instant = reference_instant(candidate)
    if instant is None:
        return None
    elapsed = (now - instant).total_seconds()
    # Timestamps ahead of `now` are clock skew, not dwell
    if elapsed < 0:
        return None
    return elapsed


def average_dwell_seconds(candidates: Iterable[CandidatePipeline], now: datetime) -> float:
    samples = [sample for sample in (dwell_seconds(c, now) for c in candidates) if sample is not None]
    if not samples:
        return 0.0
    return sum(samples) / len(samples)


def average_score(candidates: Iterable[CandidatePipeline]) -> float:
    scores = [c.last_score for c in candidates if c.last_score is not None]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def historical_reach(candidates: Iterable[CandidatePipeline], stage: PipelineStage) -> int:
    """Candidates currently at `stage` or with any history entry at `stage`."""
    return sum(
        1
        for c in candidates
        if c.current_stage == stage or any(entry.stage == stage for entry in c.history)
    )


def has_transition(candidate: CandidatePipeline, from_stage: PipelineStage, to_stage: PipelineStage) -> bool:
    """
    Whether the candidate's history shows a move from `from_stage` to `to_stage`.

    Adjacent history entries count, and so does a history that ends at
    `from_stage` while the live stage is already `to_stage`. A candidate
    with no history never counts.
    """
    history = candidate.history
    for index, entry in enumerate(history):
        if entry.stage != from_stage:
            continue
        if index + 1 < len(history):
            if history[index + 1].stage == to_stage:
                return True
        elif candidate.current_stage == to_stage:
            return True
    return False


def transition_count(
    candidates: Iterable[CandidatePipeline],
    from_stage: PipelineStage,
    to_stage: PipelineStage,
) -> int:
    """Number of candidates with at least one `from_stage -> to_stage` move (one per candidate)."""
    return sum(1 for c in candidates if has_transition(c, from_stage, to_stage))


def stage_metrics(
    candidates: Sequence[CandidatePipeline],
    stage: PipelineStage,
    now: datetime,
) -> StageMetrics:
    occupants = [c for c in candidates if c.current_stage == stage]
    reach = historical_reach(candidates, stage)
    successor = next_stage(stage)

    transitions = transition_count(candidates, stage, successor) if successor is not None else 0
    conversion = _percentage(transitions, reach) if successor is not None else 0.0
    dwell = average_dwell_seconds(occupants, now)

    return StageMetrics(
        stage=stage,
        label=stage_label(stage),
        position=stage_position(stage),
        count=len(occupants),
        percentage_of_pipeline=_percentage(len(occupants), len(candidates)),
        avg_score=average_score(occupants),
        avg_dwell_seconds=dwell,
        avg_dwell_display=format_duration(dwell),
        historical_reach=reach,
        next_stage=successor,
        transition_count=transitions,
        stage_conversion_rate=conversion,
    )


def stage_counts(candidates: Iterable[CandidatePipeline]) -> Dict[PipelineStage, int]:
    """Occupancy of every stage, `rejected` included."""
    counts = {stage: 0 for stage in PipelineStage}
    for c in candidates:
        counts[c.current_stage] += 1
    return counts


def overall_metrics(candidates: Sequence[CandidatePipeline]) -> OverallMetrics:
    counts = stage_counts(candidates)
    total = len(candidates)
    placed = counts[PipelineStage.PLACED]
    rejected = counts[PipelineStage.REJECTED]
    return OverallMetrics(
        total_candidates=total,
        active_count=total - rejected,
        placed_count=placed,
        rejected_count=rejected,
        overall_conversion_rate=_percentage(placed, total),
    )


def compute_funnel(
    candidates: Iterable[CandidatePipeline],
    now: Optional[datetime] = None,
) -> FunnelReport:
    """
    Build the funnel report for a snapshot of one job's candidates.

    `now` anchors dwell times; pass the same value to get identical reports
    for the same snapshot. Malformed timestamps never fail the report, they
    just contribute no dwell sample.
    """
    snapshot: List[CandidatePipeline] = list(candidates)
    reference = parse_instant(now) if now is not None else utc_now()
    if reference is None:
        raise ValueError(f"Invalid reference time: {now!r}")

    return FunnelReport(
        generated_at=reference,
        stages=[stage_metrics(snapshot, stage, reference) for stage in ORDERED_STAGES],
        overall=overall_metrics(snapshot),
    )
