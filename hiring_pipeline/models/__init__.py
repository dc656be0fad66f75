"""
Models package.

Import all models here so they are registered with SQLAlchemy.
"""

from hiring_pipeline.models.pipeline_candidate import PipelineCandidate
from hiring_pipeline.models.status_event import PipelineStatusEvent

# Export all models
__all__ = [
    "PipelineCandidate",
    "PipelineStatusEvent",
]
