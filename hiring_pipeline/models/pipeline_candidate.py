"""
PipelineCandidate model.

Represents a candidate's entry in one job's hiring pipeline.
"""

import uuid
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import CheckConstraint, Float, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hiring_pipeline.models.base_model import TenantScopedModel

if TYPE_CHECKING:
    from hiring_pipeline.models.status_event import PipelineStatusEvent


class PipelineCandidate(TenantScopedModel):
    """
    PipelineCandidate table - one candidate in one job's pipeline.

    current_stage is only written together with a new status event row.
    """

    __tablename__ = "pipeline_candidate"

    job_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
    )

    candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
    )

    # sourced, recommended, reviewed, shortlisted, presented, interview, offer, placed, rejected
    current_stage: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="sourced",
    )

    # 0-100 match score from the latest evaluation
    last_score: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )

    rejected_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Status history, oldest first
    events: Mapped[List["PipelineStatusEvent"]] = relationship(
        "PipelineStatusEvent",
        back_populates="pipeline_candidate",
        order_by="PipelineStatusEvent.sequence",
        lazy="selectin",
    )

    __table_args__ = (
        Index("uq_pipeline_candidate_job_candidate", "tenant_id", "job_id", "candidate_id", unique=True),
        Index("ix_pipeline_candidate_job_stage", "tenant_id", "job_id", "current_stage"),
        CheckConstraint(
            "current_stage IN ('sourced', 'recommended', 'reviewed', 'shortlisted', "
            "'presented', 'interview', 'offer', 'placed', 'rejected')",
            name="ck_pipeline_candidate_stage",
        ),
    )
