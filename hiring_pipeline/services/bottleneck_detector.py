"""Bottleneck detection over a funnel report."""

from hiring_pipeline.domain.stages import ORDERED_STAGES
from hiring_pipeline.schemas.funnel import BottleneckResult, BottleneckStatus, FunnelReport


def detect_bottleneck(report: FunnelReport) -> BottleneckResult:
    """
    Pick the stage with the lowest positive conversion to its successor.

    Stages are scanned in funnel order. The first stage with a positive rate
    becomes the pick and only a strictly lower positive rate replaces it, so
    ties go to the earliest stage. When no stage has a positive rate the
    result is `insufficient_data` at the first stage.
    """
    pick = None
    for record in report.stages:
        rate = record.stage_conversion_rate
        if rate > 0 and (pick is None or rate < pick.stage_conversion_rate):
            pick = record

    if pick is None:
        first = report.stages[0].stage if report.stages else ORDERED_STAGES[0]
        return BottleneckResult(
            status=BottleneckStatus.INSUFFICIENT_DATA,
            stage=first,
            conversion_rate=0.0,
        )

    return BottleneckResult(
        status=BottleneckStatus.DETECTED,
        stage=pick.stage,
        conversion_rate=pick.stage_conversion_rate,
    )
