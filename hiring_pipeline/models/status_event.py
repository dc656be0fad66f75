"""
PipelineStatusEvent model.

Append-only log of confirmed stage changes for a pipeline candidate.
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hiring_pipeline.domain.pipeline import REQUEST_ID_MAX_LENGTH
from hiring_pipeline.models.base_model import TenantScopedModel

if TYPE_CHECKING:
    from hiring_pipeline.models.pipeline_candidate import PipelineCandidate


class PipelineStatusEvent(TenantScopedModel):
    """
    PipelineStatusEvent table - one row per confirmed transition.

    Rows are inserted, never updated or deleted.
    """

    __tablename__ = "pipeline_status_event"

    pipeline_candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pipeline_candidate.id", ondelete="CASCADE"),
        nullable=False,
    )

    # 1-based position in the candidate's history
    sequence: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    stage: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    note: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    changed_by: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    rejected_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Idempotency-Key of the request that appended this row
    request_id: Mapped[Optional[str]] = mapped_column(
        String(REQUEST_ID_MAX_LENGTH),
        nullable=True,
    )

    pipeline_candidate: Mapped["PipelineCandidate"] = relationship(
        "PipelineCandidate",
        back_populates="events",
    )

    __table_args__ = (
        Index("uq_pipeline_status_event_sequence", "pipeline_candidate_id", "sequence", unique=True),
        Index("uq_pipeline_status_event_request", "pipeline_candidate_id", "request_id", unique=True),
    )
