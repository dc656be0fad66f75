"""Pipeline candidates and status event log

Revision ID: 3c1e9a7b52d4
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c1e9a7b52d4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "pipeline_candidate",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("job_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("candidate_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("current_stage", sa.String(length=30), nullable=False, server_default="sourced"),
        sa.Column("last_score", sa.Float(), nullable=True),
        sa.Column("rejected_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
        sa.CheckConstraint(
            "current_stage IN ('sourced', 'recommended', 'reviewed', 'shortlisted', "
            "'presented', 'interview', 'offer', 'placed', 'rejected')",
            name="ck_pipeline_candidate_stage",
        ),
    )
    op.create_index(
        "uq_pipeline_candidate_job_candidate",
        "pipeline_candidate",
        ["tenant_id", "job_id", "candidate_id"],
        unique=True,
    )
    op.create_index(
        "ix_pipeline_candidate_job_stage",
        "pipeline_candidate",
        ["tenant_id", "job_id", "current_stage"],
    )

    op.create_table(
        "pipeline_status_event",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column(
            "pipeline_candidate_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pipeline_candidate.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("stage", sa.String(length=30), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("changed_by", sa.String(length=255), nullable=True),
        sa.Column("rejected_reason", sa.Text(), nullable=True),
        sa.Column("request_id", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "uq_pipeline_status_event_sequence",
        "pipeline_status_event",
        ["pipeline_candidate_id", "sequence"],
        unique=True,
    )
    op.create_index(
        "uq_pipeline_status_event_request",
        "pipeline_status_event",
        ["pipeline_candidate_id", "request_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("uq_pipeline_status_event_request", table_name="pipeline_status_event")
    op.drop_index("uq_pipeline_status_event_sequence", table_name="pipeline_status_event")
    op.drop_table("pipeline_status_event")
    op.drop_index("ix_pipeline_candidate_job_stage", table_name="pipeline_candidate")
    op.drop_index("uq_pipeline_candidate_job_candidate", table_name="pipeline_candidate")
    op.drop_table("pipeline_candidate")
