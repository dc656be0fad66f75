"""
CSV export of a job's pipeline.
"""

import csv
import io
from datetime import datetime
from typing import Iterable

from hiring_pipeline.domain.pipeline import CandidatePipeline
from hiring_pipeline.domain.stages import stage_label
from hiring_pipeline.services.funnel_metrics_service import dwell_seconds
from hiring_pipeline.utils.time import format_duration, parse_instant

EXPORT_HEADERS = [
    "pipeline_candidate_id",
    "candidate_id",
    "stage",
    "stage_label",
    "score",
    "time_in_stage",
    "added_at",
    "last_stage_change",
    "stage_path",
]


def _format_minute(value) -> str:
    instant = parse_instant(value)
    return instant.strftime("%Y-%m-%d %H:%M") if instant else ""


def export_row(candidate: CandidatePipeline, now: datetime) -> list:
    elapsed = dwell_seconds(candidate, now)
    last_change = candidate.last_event.timestamp if candidate.last_event else None
    return [
        str(candidate.id),
        str(candidate.candidate_id),
        candidate.current_stage.value,
        stage_label(candidate.current_stage),
        f"{candidate.last_score:g}%" if candidate.last_score is not None else "",
        format_duration(elapsed) if elapsed is not None else "Unknown",
        _format_minute(candidate.created_at),
        _format_minute(last_change),
        " → ".join(entry.stage.value for entry in candidate.history),
    ]


def export_pipeline_csv(candidates: Iterable[CandidatePipeline], now: datetime) -> str:
    """Render the pipeline snapshot as CSV text with a header row."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADERS)
    for candidate in candidates:
        writer.writerow(export_row(candidate, now))
    return output.getvalue()
